"""CRUD package re-exports for easy imports from `orders_inventory.crud`."""
from .crud import (
    get_product,
    get_products,
    count_products,
    create_product,
    update_product,
    update_product_partial,
    delete_product,
    get_stock,
    get_stocks,
    create_stock,
    delete_stock,
)
from .orders import (
    get_order,
    list_orders,
    count_orders,
    create_order,
    cancel_order,
    update_order_status,
    delete_order,
)
from . import ledger

__all__ = [
    "get_product",
    "get_products",
    "count_products",
    "create_product",
    "update_product",
    "update_product_partial",
    "delete_product",
    "get_stock",
    "get_stocks",
    "create_stock",
    "delete_stock",
    "get_order",
    "list_orders",
    "count_orders",
    "create_order",
    "cancel_order",
    "update_order_status",
    "delete_order",
    "ledger",
]

# re-export exceptions
from .exceptions import (
    ServiceError,
    InvalidInputError,
    NotFoundError,
    ProductNotFoundError,
    StockNotFoundError,
    OrderNotFoundError,
    InsufficientStockError,
    OrderFinalizedError,
    InvalidTransitionError,
    ForbiddenError,
)
__all__.extend([
    "ServiceError",
    "InvalidInputError",
    "NotFoundError",
    "ProductNotFoundError",
    "StockNotFoundError",
    "OrderNotFoundError",
    "InsufficientStockError",
    "OrderFinalizedError",
    "InvalidTransitionError",
    "ForbiddenError",
])
