"""Order lifecycle: create, cancel, status update and delete.

Each mutating function runs in the session's current transaction and either
commits everything or rolls everything back before re-raising. Stock rows are
always locked in ascending product id order so that concurrent orders touching
the same products cannot deadlock each other.
"""
import logging
from decimal import Decimal
from typing import Optional

from sqlalchemy.orm import Session, selectinload

from .. import models, schemas
from . import ledger
from .exceptions import (
    InsufficientStockError,
    InvalidInputError,
    InvalidTransitionError,
    OrderFinalizedError,
    OrderNotFoundError,
    ProductNotFoundError,
    StockNotFoundError,
)

logger = logging.getLogger(__name__)


def get_order(db: Session, order_id: int):
    return (
        db.query(models.Order)
        .options(selectinload(models.Order.lines))
        .filter(models.Order.id == order_id)
        .first()
    )


def _orders_query(db: Session, owner_id: Optional[int]):
    query = db.query(models.Order)
    if owner_id is not None:
        query = query.filter(models.Order.owner_id == owner_id)
    return query


def list_orders(db: Session, owner_id: Optional[int] = None, skip: int = 0, limit: int = 100):
    """Newest first. `owner_id=None` lists every order."""
    return (
        _orders_query(db, owner_id)
        .options(selectinload(models.Order.lines))
        .order_by(models.Order.id.desc())
        .offset(skip)
        .limit(limit)
        .all()
    )


def count_orders(db: Session, owner_id: Optional[int] = None):
    return _orders_query(db, owner_id).count()


def _lock_order(db: Session, order_id: int) -> models.Order:
    db_order = (
        db.query(models.Order)
        .filter(models.Order.id == order_id)
        .with_for_update(nowait=False)
        .populate_existing()
        .first()
    )
    if db_order is None:
        raise OrderNotFoundError(order_id)
    return db_order


def _ensure_not_final(db_order: models.Order):
    if db_order.is_final:
        raise OrderFinalizedError(db_order.id, db_order.status)


def _restore_stock(db: Session, db_order: models.Order):
    """Give every line's quantity back to its product's stock row.

    A missing stock row is logged and skipped, so an order is never stuck
    because inventory data was removed after it was placed.
    """
    for line in sorted(db_order.lines, key=lambda l: l.product_id):
        stock = ledger.find_locked(db, line.product_id)
        if stock is None:
            logger.warning(
                "Stock not found while reverting order %s, product %s (%s units not restored)",
                db_order.id,
                line.product_id,
                line.quantity,
            )
            continue
        ledger.adjust(db, stock, line.quantity)


def create_order(db: Session, owner_id: int, order: schemas.OrderCreate):
    """Create an order and take its quantities out of stock in one transaction.

    Raises ProductNotFoundError / StockNotFoundError for unknown products or
    products without stock, and InsufficientStockError (carrying the quantity
    actually available) when any line cannot be served. In every error case
    nothing is written.
    """
    status = order.status or models.OrderStatus.PENDING
    if status in models.TERMINAL_STATUSES:
        raise InvalidInputError(f"Orders cannot be created with status {status.value}")

    try:
        db_order = models.Order(owner_id=owner_id, status=status, total=Decimal("0"))
        db.add(db_order)

        staged = [None] * len(order.lines)
        total = Decimal("0")
        # sorted() is stable, so repeated products keep their request order
        for index, line in sorted(enumerate(order.lines), key=lambda item: item[1].product_id):
            stock = ledger.find_locked(db, line.product_id)
            if stock is None:
                if db.get(models.Product, line.product_id) is None:
                    raise ProductNotFoundError(line.product_id)
                raise StockNotFoundError(line.product_id)
            if stock.quantity < line.quantity:
                raise InsufficientStockError(line.product_id, line.quantity, stock.quantity)

            ledger.adjust(db, stock, -line.quantity)
            db_line = models.OrderLine(
                product_id=line.product_id,
                quantity=line.quantity,
                unit_price=stock.product.price,
            )
            staged[index] = db_line
            total += db_line.subtotal

        db_order.lines = staged
        db_order.total = total
        db.commit()
    except Exception:
        db.rollback()
        raise
    db.refresh(db_order)
    logger.info("Order %s created for owner %s, total %s", db_order.id, owner_id, db_order.total)
    return db_order


def cancel_order(db: Session, db_order: models.Order):
    """Cancel a pending or shipped order and put its stock back.

    Raises OrderFinalizedError if the order is already cancelled or delivered.
    Lines are kept as the historical record.
    """
    try:
        db_order = _lock_order(db, db_order.id)
        _ensure_not_final(db_order)
        _restore_stock(db, db_order)
        db_order.status = models.OrderStatus.CANCELLED
        db.commit()
    except Exception:
        db.rollback()
        raise
    db.refresh(db_order)
    logger.info("Order %s cancelled, stock restored", db_order.id)
    return db_order


def update_order_status(db: Session, db_order: models.Order, new_status: models.OrderStatus):
    if new_status == models.OrderStatus.CANCELLED:
        return cancel_order(db, db_order)

    try:
        db_order = _lock_order(db, db_order.id)
        _ensure_not_final(db_order)
        current = db_order.status
        if new_status == current:
            db.rollback()
            return db_order
        if not db_order.can_transition_to(new_status):
            raise InvalidTransitionError(current, new_status)
        db_order.status = new_status
        db.commit()
    except Exception:
        db.rollback()
        raise
    db.refresh(db_order)
    logger.info("Order %s moved from %s to %s", db_order.id, current.value, new_status.value)
    return db_order


def delete_order(db: Session, db_order: models.Order):
    """Remove an order and its lines, restoring stock exactly like a cancellation.

    Cancelled orders already gave their stock back and delivered ones are
    history, so both raise OrderFinalizedError.
    """
    order_id = db_order.id
    try:
        db_order = _lock_order(db, order_id)
        _ensure_not_final(db_order)
        _restore_stock(db, db_order)
        db.delete(db_order)
        db.commit()
    except Exception:
        db.rollback()
        raise
    logger.info("Order %s deleted, stock restored", order_id)
