"""Pytest fixtures for integration tests."""
import pytest
from sqlalchemy.orm import sessionmaker
from fastapi.testclient import TestClient

from orders_inventory.database import build_engine
from orders_inventory.models import Base
from orders_inventory.main import app

ADMIN = {"X-User-Id": "1", "X-User-Role": "administrator"}
EDITOR = {"X-User-Id": "2", "X-User-Role": "editor"}
CUSTOMER = {"X-User-Id": "3", "X-User-Role": "user"}
OTHER_CUSTOMER = {"X-User-Id": "4", "X-User-Role": "user"}


@pytest.fixture(scope="function")
def db():
    """Create an in-memory SQLite database for integration testing."""
    engine = build_engine("sqlite:///:memory:")
    Base.metadata.create_all(bind=engine)
    SessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)
    session = SessionLocal()
    yield session
    session.close()
    engine.dispose()


@pytest.fixture(scope="function")
def client(db):
    """Create a test client with a test database session."""
    def override_get_db():
        yield db

    from orders_inventory import database
    app.dependency_overrides[database.get_db] = override_get_db
    test_client = TestClient(app)
    yield test_client
    app.dependency_overrides.clear()


@pytest.fixture
def admin_headers():
    return dict(ADMIN)


@pytest.fixture
def editor_headers():
    return dict(EDITOR)


@pytest.fixture
def customer_headers():
    return dict(CUSTOMER)


@pytest.fixture
def other_customer_headers():
    return dict(OTHER_CUSTOMER)


@pytest.fixture
def create_product(client, admin_headers):
    """Create a product through the API and return its JSON."""
    counter = {"n": 0}

    def _create(price="10.00", stock=50, **fields):
        counter["n"] += 1
        payload = {
            "name": f"Gummy {counter['n']}",
            "flavor": "strawberry",
            "size": "200g",
            "price": price,
        }
        if stock is not None:
            payload["stock"] = stock
        payload.update(fields)
        response = client.post("/products/", json=payload, headers=admin_headers)
        assert response.status_code == 201, response.text
        return response.json()

    return _create
