import logging
import random
import time

from fastapi import APIRouter, HTTPException, Response, status
from sqlalchemy.exc import OperationalError
from sqlalchemy.orm import Session

from .. import schemas, crud
from ..dependencies import DatabaseDep, CurrentUserDep, PolicyDep, authorize
from ..policy import AccessPolicy, Principal

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/orders", tags=["orders"])

ORDER_EXAMPLE = schemas.Order.model_config["json_schema_extra"]["example"]
NOT_FOUND = {"description": "Not Found", "content": {"application/json": {"example": {"detail": "Order 1 not found"}}}}
FORBIDDEN = {"description": "Forbidden", "content": {"application/json": {"example": {"detail": "Not allowed to perform this action"}}}}
FINALIZED = {
    "description": "Order already delivered or cancelled",
    "content": {"application/json": {"example": {"detail": "Order 1 is delivered and can no longer be modified"}}},
}

MAX_RETRIES = 3
BASE_DELAY = 0.01  # 10ms base delay


def _load_order(db: Session, order_id: int):
    db_order = crud.get_order(db, order_id)
    if not db_order:
        raise crud.OrderNotFoundError(order_id)
    return db_order


@router.post(
    "/",
    response_model=schemas.Order,
    status_code=status.HTTP_201_CREATED,
    responses={
        201: {"description": "Order created", "content": {"application/json": {"example": ORDER_EXAMPLE}}},
        403: FORBIDDEN,
        404: {"description": "Product or stock not found", "content": {"application/json": {"example": {"detail": "Product 1 not found"}}}},
        409: {
            "description": "Insufficient stock",
            "content": {
                "application/json": {
                    "example": {
                        "detail": "Insufficient stock for product 1: requested 10, available 5",
                        "product_id": 1,
                        "requested": 10,
                        "available": 5,
                    }
                }
            },
        },
        503: {"description": "Database busy", "content": {"application/json": {"example": {"detail": "Service temporarily unavailable, please try again"}}}},
    },
)
def create_order(
    order: schemas.OrderCreate,
    response: Response,
    db: Session = DatabaseDep,
    user: Principal = CurrentUserDep,
    policy: AccessPolicy = PolicyDep,
):
    """Create an order for the caller, taking every line's quantity out of stock atomically.

    Returns 201 with a Location header. When any line cannot be served the whole
    order is rejected with 409 and the body reports the quantity available.
    Transient lock conflicts are retried with exponential backoff.
    """
    authorize(policy.can_create_order(user), "Not allowed to create orders")

    for attempt in range(MAX_RETRIES):
        try:
            db_order = crud.create_order(db, user.id, order)
            response.headers["Location"] = f"/orders/{db_order.id}"
            return db_order
        except OperationalError as e:
            # create_order already rolled back; stock checks are business errors and are not retried
            if attempt < MAX_RETRIES - 1:
                # Exponential backoff with jitter to prevent thundering herd
                delay = BASE_DELAY * (2 ** attempt) + random.uniform(0, 0.01)
                logger.warning("Order creation hit a lock conflict (attempt %d): %s", attempt + 1, e)
                time.sleep(delay)
                continue
            logger.error("Order creation failed after %d attempts: %s", MAX_RETRIES, e)
            raise HTTPException(status_code=503, detail="Service temporarily unavailable, please try again")


@router.get("/", response_model=schemas.OrderList)
def read_orders(
    page: int = 1,
    size: int = 10,
    db: Session = DatabaseDep,
    user: Principal = CurrentUserDep,
    policy: AccessPolicy = PolicyDep,
):
    """Paged orders, newest first. Callers allowed to list all orders see everyone's, others only their own."""
    if page < 1 or size < 1:
        raise HTTPException(status_code=400, detail="page and size must be >= 1")
    owner_id = None if policy.can_list_all_orders(user) else user.id
    skip = (page - 1) * size
    items = crud.list_orders(db, owner_id=owner_id, skip=skip, limit=size)
    total = crud.count_orders(db, owner_id=owner_id)
    return {"items": items, "page": page, "size": size, "total": total}


@router.get("/{order_id}", response_model=schemas.Order, responses={403: FORBIDDEN, 404: NOT_FOUND})
def read_order(
    order_id: int,
    db: Session = DatabaseDep,
    user: Principal = CurrentUserDep,
    policy: AccessPolicy = PolicyDep,
):
    db_order = _load_order(db, order_id)
    authorize(policy.can_view_order(user, db_order), "Not allowed to view this order")
    return db_order


@router.put(
    "/{order_id}",
    response_model=schemas.Order,
    responses={
        200: {"description": "Order updated", "content": {"application/json": {"example": ORDER_EXAMPLE}}},
        400: {"description": "Invalid state transition", "content": {"application/json": {"example": {"detail": "Invalid transition from pending to delivered"}}}},
        403: FORBIDDEN,
        404: NOT_FOUND,
        423: FINALIZED,
    },
)
def update_order(
    order_id: int,
    update: schemas.OrderStatusUpdate,
    db: Session = DatabaseDep,
    user: Principal = CurrentUserDep,
    policy: AccessPolicy = PolicyDep,
):
    """Update the order's status. Only status changes are accepted here.

    Allowed transitions:
    - pending -> shipped | cancelled
    - shipped -> delivered | cancelled
    - delivered, cancelled -> (no transitions)

    Moving to cancelled restores stock and needs the cancel permission.
    """
    db_order = _load_order(db, order_id)
    if update.status == schemas.OrderStatus.CANCELLED:
        authorize(policy.can_cancel_order(user, db_order), "Not allowed to cancel this order")
    else:
        authorize(policy.can_update_order(user, db_order), "Not allowed to update this order")
    return crud.update_order_status(db, db_order, update.status)


@router.put(
    "/{order_id}/cancel",
    response_model=schemas.Order,
    responses={403: FORBIDDEN, 404: NOT_FOUND, 423: FINALIZED},
)
def cancel_order(
    order_id: int,
    db: Session = DatabaseDep,
    user: Principal = CurrentUserDep,
    policy: AccessPolicy = PolicyDep,
):
    """Cancel an order and put its stock back. The lines are kept."""
    db_order = _load_order(db, order_id)
    authorize(policy.can_cancel_order(user, db_order), "Not allowed to cancel this order")
    return crud.cancel_order(db, db_order)


@router.delete(
    "/{order_id}",
    status_code=status.HTTP_204_NO_CONTENT,
    responses={204: {"description": "Order deleted, stock restored"}, 403: FORBIDDEN, 404: NOT_FOUND, 423: FINALIZED},
)
def delete_order(
    order_id: int,
    db: Session = DatabaseDep,
    user: Principal = CurrentUserDep,
    policy: AccessPolicy = PolicyDep,
):
    """Delete an order that is neither delivered nor cancelled, restoring its stock."""
    db_order = _load_order(db, order_id)
    authorize(policy.can_delete_order(user, db_order), "Not allowed to delete this order")
    crud.delete_order(db, db_order)
    return Response(status_code=status.HTTP_204_NO_CONTENT)
