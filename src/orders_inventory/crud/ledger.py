"""Stock ledger: the only code path that changes `Stock.quantity`.

Every read here takes an exclusive row lock (SELECT ... FOR UPDATE), so the
callers must be inside the transaction that will write the row. Locks are
released when that transaction commits or rolls back.
"""
from typing import Optional

from sqlalchemy.orm import Session

from .. import models
from .exceptions import StockNotFoundError


def find_locked(db: Session, product_id: int) -> Optional[models.Stock]:
    """Lock the stock row of `product_id` and return it, or None if the product has no stock record."""
    return (
        db.query(models.Stock)
        .filter(models.Stock.product_id == product_id)
        .with_for_update(nowait=False)  # Wait for lock, don't fail immediately
        .populate_existing()  # An identity-mapped copy may be stale
        .first()
    )


def lock_and_get(db: Session, product_id: int) -> models.Stock:
    stock = find_locked(db, product_id)
    if stock is None:
        raise StockNotFoundError(product_id)
    return stock


def adjust(db: Session, stock: models.Stock, delta: int) -> models.Stock:
    """Apply `delta` to a row obtained from `lock_and_get`/`find_locked` in this transaction."""
    new_quantity = stock.quantity + delta
    if new_quantity < 0:
        raise ValueError(
            f"stock for product {stock.product_id} cannot go below zero "
            f"(quantity {stock.quantity}, delta {delta})"
        )
    stock.quantity = new_quantity
    db.add(stock)
    # Write it now; the next find_locked on this row reloads from the database
    db.flush()
    return stock


def set_quantity(db: Session, product_id: int, quantity: int) -> models.Stock:
    """Overwrite the available quantity (restock or correction) under the row lock."""
    try:
        stock = lock_and_get(db, product_id)
        adjust(db, stock, quantity - stock.quantity)
        db.commit()
    except Exception:
        db.rollback()
        raise
    db.refresh(stock)
    return stock
