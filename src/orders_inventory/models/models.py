from sqlalchemy import (
    Column,
    Integer,
    String,
    Numeric,
    CheckConstraint,
    UniqueConstraint,
    ForeignKey,
    Enum as SAEnum,
    DateTime,
)
from sqlalchemy.orm import declarative_base, relationship, validates
from datetime import datetime
from decimal import Decimal
import enum

Base = declarative_base()


class OrderStatus(enum.Enum):
    PENDING = "pending"
    SHIPPED = "shipped"
    CANCELLED = "cancelled"
    DELIVERED = "delivered"


TERMINAL_STATUSES = frozenset({OrderStatus.DELIVERED, OrderStatus.CANCELLED})

ALLOWED_TRANSITIONS = {
    OrderStatus.PENDING: frozenset({OrderStatus.SHIPPED, OrderStatus.CANCELLED}),
    OrderStatus.SHIPPED: frozenset({OrderStatus.DELIVERED, OrderStatus.CANCELLED}),
    OrderStatus.DELIVERED: frozenset(),
    OrderStatus.CANCELLED: frozenset(),
}


class Product(Base):
    __tablename__ = "products"
    id = Column(Integer, primary_key=True, index=True)
    name = Column(String(255), nullable=False)
    flavor = Column(String(255), nullable=False)
    size = Column(String(255), nullable=False)
    price = Column(Numeric(10, 2), nullable=False)

    stock = relationship(
        "Stock",
        back_populates="product",
        uselist=False,
        cascade="all, delete-orphan",
        passive_deletes=True,
    )

    __table_args__ = (
        UniqueConstraint("name", name="uq_product_name"),
        CheckConstraint("price > 0", name="ck_product_price_positive"),
    )

    @property
    def available_quantity(self):
        """Units on hand, or None when the product has no stock record."""
        return self.stock.quantity if self.stock is not None else None


class Stock(Base):
    __tablename__ = "stock"
    id = Column(Integer, primary_key=True, index=True)
    product_id = Column(Integer, ForeignKey("products.id", ondelete="CASCADE"), nullable=False)
    quantity = Column(Integer, nullable=False, default=0)
    updated_at = Column(DateTime, default=datetime.now, onupdate=datetime.now, nullable=False)

    product = relationship("Product", back_populates="stock")

    __table_args__ = (
        UniqueConstraint("product_id", name="uq_stock_product"),
        CheckConstraint("quantity >= 0", name="ck_stock_quantity_non_negative"),
    )


class Order(Base):
    __tablename__ = "orders"
    id = Column(Integer, primary_key=True, index=True)
    owner_id = Column(Integer, nullable=False, index=True)
    status = Column(SAEnum(OrderStatus), nullable=False, default=OrderStatus.PENDING)
    total = Column(Numeric(12, 2), nullable=False, default=Decimal("0"))
    created_at = Column(DateTime, default=datetime.now, nullable=False)

    lines = relationship(
        "OrderLine",
        back_populates="order",
        cascade="all, delete-orphan",
        order_by="OrderLine.id",
    )

    __table_args__ = (
        CheckConstraint("total >= 0", name="ck_order_total_non_negative"),
    )

    @property
    def is_final(self) -> bool:
        return self.status in TERMINAL_STATUSES

    def can_transition_to(self, new_status: OrderStatus) -> bool:
        return new_status in ALLOWED_TRANSITIONS[self.status]

    def compute_total(self) -> Decimal:
        return sum((line.subtotal for line in self.lines), Decimal("0"))


class OrderLine(Base):
    __tablename__ = "order_lines"
    id = Column(Integer, primary_key=True, index=True)
    order_id = Column(Integer, ForeignKey("orders.id", ondelete="CASCADE"), nullable=False, index=True)
    product_id = Column(Integer, ForeignKey("products.id"), nullable=False, index=True)
    quantity = Column(Integer, nullable=False)
    unit_price = Column(Numeric(10, 2), nullable=False)

    order = relationship("Order", back_populates="lines")
    product = relationship("Product")

    __table_args__ = (
        CheckConstraint("quantity > 0", name="ck_order_line_quantity_positive"),
    )

    @validates("unit_price")
    def validate_unit_price(self, key, value):
        # The snapshot is taken once, when the line is created.
        if self.unit_price is not None and Decimal(value) != self.unit_price:
            raise ValueError("unit_price is a snapshot and cannot be changed")
        return value

    @property
    def subtotal(self) -> Decimal:
        return self.quantity * Decimal(self.unit_price)
