from fastapi import APIRouter, Body, HTTPException, Response, status
from pydantic import ValidationError
from fastapi.exceptions import RequestValidationError
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from .. import schemas, crud
from ..dependencies import DatabaseDep, CurrentUserDep, PolicyDep, authorize
from ..policy import AccessPolicy, Principal

router = APIRouter(prefix="/products", tags=["products"])

NOT_FOUND = {"description": "Not Found", "content": {"application/json": {"example": {"detail": "Product not found"}}}}


@router.post(
    "/",
    status_code=status.HTTP_201_CREATED,
    response_model=schemas.Product,
    responses={
        201: {
            "description": "Product created",
            "content": {"application/json": {"example": schemas.Product.model_config["json_schema_extra"]["example"]}},
        },
        409: {"description": "Conflict - name exists", "content": {"application/json": {"example": {"detail": "product name already exists"}}}},
    },
)
def create_product(
    product: schemas.ProductCreate,
    response: Response,
    db: Session = DatabaseDep,
    user: Principal = CurrentUserDep,
    policy: AccessPolicy = PolicyDep,
):
    """Create a new product.

    - Passing `stock` also creates the product's stock record.
    - Returns 201 and a Location header on success.
    - Returns 409 if the `name` already exists.
    """
    authorize(policy.can_create_products(user), "Not allowed to create products")
    try:
        db_product = crud.create_product(db, product)
    except IntegrityError:
        raise HTTPException(status_code=409, detail="product name already exists")
    response.headers["Location"] = f"/products/{db_product.id}"
    return db_product


@router.get(
    "/",
    response_model=schemas.ProductList,
    responses={
        200: {
            "description": "Paged list of products",
            "content": {"application/json": {"example": schemas.ProductList.model_config["json_schema_extra"]["example"]}},
        },
        400: {"description": "Bad Request", "content": {"application/json": {"example": {"detail": "page and size must be >= 1"}}}},
    },
)
def read_products(
    page: int = 1,
    size: int = 10,
    db: Session = DatabaseDep,
    user: Principal = CurrentUserDep,
    policy: AccessPolicy = PolicyDep,
):
    authorize(policy.can_view_products(user), "Not allowed to view products")
    if page < 1 or size < 1:
        raise HTTPException(status_code=400, detail="page and size must be >= 1")
    skip = (page - 1) * size
    items = crud.get_products(db, skip=skip, limit=size)
    total = crud.count_products(db)
    return {"items": items, "page": page, "size": size, "total": total}


@router.get("/{product_id}", response_model=schemas.Product, responses={404: NOT_FOUND})
def read_product(
    product_id: int,
    db: Session = DatabaseDep,
    user: Principal = CurrentUserDep,
    policy: AccessPolicy = PolicyDep,
):
    """Retrieve a product by id, including its available quantity. Returns 404 if not found."""
    authorize(policy.can_view_products(user), "Not allowed to view products")
    db_product = crud.get_product(db, product_id)
    if not db_product:
        raise HTTPException(status_code=404, detail="Product not found")
    return db_product


@router.put(
    "/{product_id}",
    response_model=schemas.Product,
    responses={
        200: {"description": "Updated product", "content": {"application/json": {"example": schemas.Product.model_config["json_schema_extra"]["example"]}}},
        404: NOT_FOUND,
        409: {"description": "Conflict - name exists", "content": {"application/json": {"example": {"detail": "product name already exists"}}}},
    },
)
def update_product(
    product_id: int,
    partial: bool = False,
    db: Session = DatabaseDep,
    user: Principal = CurrentUserDep,
    policy: AccessPolicy = PolicyDep,
    product_data: dict = Body(...),
):
    """Update a product. Pass `?partial=true` to perform a partial update (only provided fields are changed); otherwise a full update is expected.

    Stock is never changed here; use the `/stock` endpoints.
    """
    authorize(policy.can_edit_products(user), "Not allowed to edit products")
    try:
        if partial:
            product_obj = schemas.ProductUpdate(**product_data)
        else:
            product_obj = schemas.ProductBase(**product_data)
    except ValidationError as e:
        raise RequestValidationError(e.errors())
    try:
        if partial:
            db_product = crud.update_product_partial(db, product_id, product_obj)
        else:
            db_product = crud.update_product(db, product_id, product_obj)
    except IntegrityError:
        raise HTTPException(status_code=409, detail="product name already exists")
    if not db_product:
        raise HTTPException(status_code=404, detail="Product not found")
    return db_product


@router.delete(
    "/{product_id}",
    status_code=status.HTTP_204_NO_CONTENT,
    responses={
        404: NOT_FOUND,
        409: {"description": "Product is referenced by orders", "content": {"application/json": {"example": {"detail": "product is referenced by existing orders"}}}},
    },
)
def delete_product(
    product_id: int,
    db: Session = DatabaseDep,
    user: Principal = CurrentUserDep,
    policy: AccessPolicy = PolicyDep,
):
    """Delete a product and its stock record. Returns 204 No Content on success or 404 if not found."""
    authorize(policy.can_delete_products(user), "Not allowed to delete products")
    try:
        db_product = crud.delete_product(db, product_id)
    except IntegrityError:
        raise HTTPException(status_code=409, detail="product is referenced by existing orders")
    if not db_product:
        raise HTTPException(status_code=404, detail="Product not found")
    return Response(status_code=status.HTTP_204_NO_CONTENT)
