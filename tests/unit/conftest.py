"""Pytest fixtures for unit tests."""
from decimal import Decimal

import pytest
from sqlalchemy.orm import sessionmaker

from orders_inventory import schemas, crud
from orders_inventory.database import build_engine
from orders_inventory.models import Base


@pytest.fixture(scope="function")
def db():
    """Create an in-memory SQLite database for unit testing."""
    engine = build_engine("sqlite:///:memory:")
    Base.metadata.create_all(bind=engine)
    SessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)
    session = SessionLocal()
    yield session
    session.close()
    engine.dispose()


@pytest.fixture
def make_product(db):
    """Factory creating a product (with stock unless stock=None)."""
    counter = {"n": 0}

    def _make(price="10.00", stock=50, name=None):
        counter["n"] += 1
        product_data = schemas.ProductCreate(
            name=name or f"Gummy {counter['n']}",
            flavor="strawberry",
            size="200g",
            price=Decimal(price),
            stock=stock,
        )
        return crud.create_product(db, product_data)

    return _make


@pytest.fixture
def stock_of(db):
    """Current stock quantity of a product as stored in the database (None without a record)."""

    def _stock_of(product_id):
        db.expire_all()
        stock = crud.get_stock(db, product_id)
        return stock.quantity if stock is not None else None

    return _stock_of
