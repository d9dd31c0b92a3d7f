from fastapi import APIRouter, HTTPException, Response, status
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from .. import schemas, crud
from ..crud import ledger
from ..dependencies import DatabaseDep, CurrentUserDep, PolicyDep, authorize
from ..policy import AccessPolicy, Principal

router = APIRouter(prefix="/stock", tags=["stock"])

NOT_FOUND = {"description": "Not Found", "content": {"application/json": {"example": {"detail": "Stock for product 1 not found"}}}}


@router.post(
    "/",
    status_code=status.HTTP_201_CREATED,
    response_model=schemas.Stock,
    responses={
        404: {"description": "Product not found", "content": {"application/json": {"example": {"detail": "Product 1 not found"}}}},
        409: {"description": "Conflict - product already has stock", "content": {"application/json": {"example": {"detail": "product already has a stock record"}}}},
    },
)
def create_stock(
    stock: schemas.StockCreate,
    response: Response,
    db: Session = DatabaseDep,
    user: Principal = CurrentUserDep,
    policy: AccessPolicy = PolicyDep,
):
    """Create the stock record of a product that does not have one yet."""
    authorize(policy.can_create_stock(user), "Not allowed to create stock records")
    try:
        db_stock = crud.create_stock(db, stock)
    except IntegrityError:
        raise HTTPException(status_code=409, detail="product already has a stock record")
    response.headers["Location"] = f"/stock/{db_stock.product_id}"
    return db_stock


@router.get("/", response_model=list[schemas.Stock])
def read_stocks(
    skip: int = 0,
    limit: int = 100,
    db: Session = DatabaseDep,
    user: Principal = CurrentUserDep,
    policy: AccessPolicy = PolicyDep,
):
    authorize(policy.can_view_stock(user), "Not allowed to view stock")
    if skip < 0 or limit < 1:
        raise HTTPException(status_code=400, detail="skip must be >= 0 and limit >= 1")
    return crud.get_stocks(db, skip=skip, limit=limit)


@router.get("/{product_id}", response_model=schemas.Stock, responses={404: NOT_FOUND})
def read_stock(
    product_id: int,
    db: Session = DatabaseDep,
    user: Principal = CurrentUserDep,
    policy: AccessPolicy = PolicyDep,
):
    authorize(policy.can_view_stock(user), "Not allowed to view stock")
    db_stock = crud.get_stock(db, product_id)
    if not db_stock:
        raise crud.StockNotFoundError(product_id)
    return db_stock


@router.put("/{product_id}", response_model=schemas.Stock, responses={404: NOT_FOUND})
def update_stock(
    product_id: int,
    stock: schemas.StockUpdate,
    db: Session = DatabaseDep,
    user: Principal = CurrentUserDep,
    policy: AccessPolicy = PolicyDep,
):
    """Set the available quantity (restock or correction). The row is locked like during order creation."""
    authorize(policy.can_adjust_stock(user), "Not allowed to adjust stock")
    return ledger.set_quantity(db, product_id, stock.quantity)


@router.delete("/{product_id}", status_code=status.HTTP_204_NO_CONTENT, responses={404: NOT_FOUND})
def delete_stock(
    product_id: int,
    db: Session = DatabaseDep,
    user: Principal = CurrentUserDep,
    policy: AccessPolicy = PolicyDep,
):
    authorize(policy.can_delete_stock(user), "Not allowed to delete stock records")
    if not crud.delete_stock(db, product_id):
        raise crud.StockNotFoundError(product_id)
    return Response(status_code=status.HTTP_204_NO_CONTENT)
