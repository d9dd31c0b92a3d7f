"""Domain exceptions raised by the CRUD and order lifecycle functions.

They carry no HTTP knowledge; `orders_inventory.main` maps each kind to a
response status.
"""


class ServiceError(Exception):
    pass


class InvalidInputError(ServiceError):
    """The request is well formed but not acceptable (e.g. creating an order as delivered)."""


class NotFoundError(ServiceError):
    pass


class ProductNotFoundError(NotFoundError):
    def __init__(self, product_id: int):
        super().__init__(f"Product {product_id} not found")
        self.product_id = product_id


class StockNotFoundError(NotFoundError):
    def __init__(self, product_id: int):
        super().__init__(f"Stock for product {product_id} not found")
        self.product_id = product_id


class OrderNotFoundError(NotFoundError):
    def __init__(self, order_id: int):
        super().__init__(f"Order {order_id} not found")
        self.order_id = order_id


class InsufficientStockError(ServiceError):
    def __init__(self, product_id: int, requested: int, available: int):
        super().__init__(
            f"Insufficient stock for product {product_id}: requested {requested}, available {available}"
        )
        self.product_id = product_id
        self.requested = requested
        self.available = available


class OrderFinalizedError(ServiceError):
    def __init__(self, order_id: int, status):
        super().__init__(f"Order {order_id} is {status.value} and can no longer be modified")
        self.order_id = order_id
        self.status = status


class InvalidTransitionError(ServiceError):
    def __init__(self, current, new_status):
        super().__init__(f"Invalid transition from {current.value} to {new_status.value}")
        self.current = current
        self.new_status = new_status


class ForbiddenError(ServiceError):
    def __init__(self, message: str = "Not allowed to perform this action"):
        super().__init__(message)
