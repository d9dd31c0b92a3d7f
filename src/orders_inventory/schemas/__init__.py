"""Schemas package re-exports for easy imports from `orders_inventory.schemas`."""
from .schemas import (
    Product,
    ProductCreate,
    ProductBase,
    ProductUpdate,
    ProductList,
    Stock,
    StockCreate,
    StockUpdate,
    Order,
    OrderCreate,
    OrderLine,
    OrderLineCreate,
    OrderList,
    OrderStatus,
    OrderStatusUpdate,
)

__all__ = [
    "Product",
    "ProductCreate",
    "ProductBase",
    "ProductUpdate",
    "ProductList",
    "Stock",
    "StockCreate",
    "StockUpdate",
    "Order",
    "OrderCreate",
    "OrderLine",
    "OrderLineCreate",
    "OrderList",
    "OrderStatus",
    "OrderStatusUpdate",
]
