from pydantic import BaseModel, ConfigDict, Field
from typing import Optional
from datetime import datetime
from decimal import Decimal
from ..models import OrderStatus  # Import from models, not define locally


class ProductBase(BaseModel):
    name: str = Field(..., min_length=1, max_length=255)
    flavor: str = Field(..., min_length=1, max_length=255)
    size: str = Field(..., min_length=1, max_length=255)
    price: Decimal = Field(..., gt=0, max_digits=10, decimal_places=2)


class ProductCreate(ProductBase):
    stock: Optional[int] = Field(None, ge=0, description="Initial quantity; creates the stock record when given")

    model_config = ConfigDict(
        json_schema_extra={
            "example": {
                "name": "Gummy Bears",
                "flavor": "strawberry",
                "size": "200g",
                "price": "10.00",
                "stock": 50,
            }
        }
    )


class ProductUpdate(BaseModel):
    name: Optional[str] = Field(None, min_length=1, max_length=255)
    flavor: Optional[str] = Field(None, min_length=1, max_length=255)
    size: Optional[str] = Field(None, min_length=1, max_length=255)
    price: Optional[Decimal] = Field(None, gt=0, max_digits=10, decimal_places=2)

    model_config = ConfigDict(json_schema_extra={"example": {"price": "12.50"}})


class Product(ProductBase):
    id: int
    available_quantity: Optional[int] = None

    model_config = ConfigDict(
        from_attributes=True,
        json_schema_extra={
            "example": {
                "id": 1,
                "name": "Gummy Bears",
                "flavor": "strawberry",
                "size": "200g",
                "price": "10.00",
                "available_quantity": 50,
            }
        },
    )


class ProductList(BaseModel):
    items: list[Product]
    page: int
    size: int
    total: int

    model_config = ConfigDict(
        json_schema_extra={
            "example": {
                "items": [
                    {
                        "id": 1,
                        "name": "Gummy Bears",
                        "flavor": "strawberry",
                        "size": "200g",
                        "price": "10.00",
                        "available_quantity": 50,
                    }
                ],
                "page": 1,
                "size": 10,
                "total": 1,
            }
        }
    )


class StockCreate(BaseModel):
    product_id: int
    quantity: int = Field(..., ge=0)

    model_config = ConfigDict(json_schema_extra={"example": {"product_id": 1, "quantity": 50}})


class StockUpdate(BaseModel):
    quantity: int = Field(..., ge=0)

    model_config = ConfigDict(json_schema_extra={"example": {"quantity": 75}})


class Stock(BaseModel):
    id: int
    product_id: int
    quantity: int
    updated_at: datetime

    model_config = ConfigDict(
        from_attributes=True,
        json_schema_extra={
            "example": {"id": 1, "product_id": 1, "quantity": 50, "updated_at": "2025-11-13T12:00:00Z"}
        },
    )


class OrderLineCreate(BaseModel):
    product_id: int
    quantity: int = Field(..., ge=1)


class OrderCreate(BaseModel):
    status: Optional[OrderStatus] = None
    lines: list[OrderLineCreate] = Field(..., min_length=1)

    model_config = ConfigDict(
        json_schema_extra={"example": {"lines": [{"product_id": 1, "quantity": 5}]}}
    )


class OrderStatusUpdate(BaseModel):
    status: OrderStatus

    model_config = ConfigDict(json_schema_extra={"example": {"status": "shipped"}})


class OrderLine(BaseModel):
    id: int
    product_id: int
    quantity: int
    unit_price: Decimal
    subtotal: Decimal

    model_config = ConfigDict(from_attributes=True)


class Order(BaseModel):
    id: int
    owner_id: int
    status: OrderStatus
    total: Decimal
    created_at: datetime
    lines: list[OrderLine] = []

    model_config = ConfigDict(
        from_attributes=True,
        json_schema_extra={
            "example": {
                "id": 1,
                "owner_id": 7,
                "status": "pending",
                "total": "50.00",
                "created_at": "2025-11-13T12:00:00Z",
                "lines": [
                    {"id": 1, "product_id": 1, "quantity": 5, "unit_price": "10.00", "subtotal": "50.00"}
                ],
            }
        },
    )


class OrderList(BaseModel):
    items: list[Order]
    page: int
    size: int
    total: int
