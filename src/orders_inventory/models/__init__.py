"""Models package re-exports for easy imports from `orders_inventory.models`."""
from .models import (
    Base,
    Product,
    Stock,
    Order,
    OrderLine,
    OrderStatus,
    TERMINAL_STATUSES,
    ALLOWED_TRANSITIONS,
)

__all__ = [
    "Base",
    "Product",
    "Stock",
    "Order",
    "OrderLine",
    "OrderStatus",
    "TERMINAL_STATUSES",
    "ALLOWED_TRANSITIONS",
]
