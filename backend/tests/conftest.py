"""
Pytest configuration and fixtures for backend tests.
"""

import importlib
import os

# The app's own engine is built at import time; keep it off PostgreSQL
os.environ.setdefault("DATABASE_URL", "sqlite://")
os.environ.setdefault("RESEND_API_KEY", "")

from unittest.mock import AsyncMock, MagicMock

import pytest
from fastapi.testclient import TestClient
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

from rest_api.main import app
from rest_api.models import Base, DiningTable, InventoryItem, MenuItem, User
from rest_api.services.domain import OrderService
from shared.config.constants import MenuCategory, PreparationType, Roles
from shared.infrastructure.db import get_db
from shared.security.auth import sign_jwt
from shared.security.password import hash_password
from shared.security.rate_limit import limiter
from shared.utils.schemas import OrderItemInput


# SQLite in-memory database for testing
SQLALCHEMY_DATABASE_URL = "sqlite:///:memory:"

engine = create_engine(
    SQLALCHEMY_DATABASE_URL,
    connect_args={"check_same_thread": False},
    poolclass=StaticPool,
)
TestingSessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)

TEST_PASSWORD = "testpass123"
# bcrypt is slow on purpose; hash once per run
TEST_PASSWORD_HASH = hash_password(TEST_PASSWORD)


@pytest.fixture(scope="function")
def db_session():
    """
    Create a fresh database session for each test.
    Uses SQLite in-memory for isolation.
    """
    Base.metadata.create_all(bind=engine)

    session = TestingSessionLocal()
    try:
        yield session
    finally:
        session.close()
        Base.metadata.drop_all(bind=engine)


@pytest.fixture(scope="function")
def client(db_session, monkeypatch):
    """
    Create a test client with database session override.
    Startup seeding is skipped; tests build the rows they need.
    """
    def override_get_db():
        try:
            yield db_session
        finally:
            pass

    # rest_api.core re-exports a function named lifespan over the module
    lifespan_module = importlib.import_module("rest_api.core.lifespan")
    monkeypatch.setattr(lifespan_module, "seed", lambda db: None)
    app.dependency_overrides[get_db] = override_get_db

    with TestClient(app) as test_client:
        yield test_client

    app.dependency_overrides.clear()


@pytest.fixture(autouse=True)
def reset_rate_limiter():
    """Login is rate limited per IP; every TestClient shares one."""
    limiter.reset()
    yield


@pytest.fixture(autouse=True)
def mock_redis(monkeypatch):
    """Redis client used by the change feed publisher."""
    redis_client = MagicMock()
    redis_client.publish = AsyncMock(return_value=1)
    redis_client.ping = AsyncMock(return_value=True)
    monkeypatch.setattr(
        "rest_api.services.events.change_events.get_redis_pool",
        AsyncMock(return_value=redis_client),
    )
    return redis_client


@pytest.fixture(autouse=True)
def mock_resend(monkeypatch):
    """Never reach the mail provider from tests."""
    send = MagicMock(return_value={"id": "email-test-id"})
    monkeypatch.setattr("resend.Emails.send", send)
    return send


# =============================================================================
# Staff
# =============================================================================


def make_user(db_session, name: str, email: str, role: str, is_active: bool = True) -> User:
    user = User(name=name, email=email, password=TEST_PASSWORD_HASH, role=role, is_active=is_active)
    db_session.add(user)
    db_session.commit()
    db_session.refresh(user)
    return user


def headers_for(user: User) -> dict[str, str]:
    """Bearer headers for a user without going through the login endpoint."""
    token = sign_jwt({
        "sub": str(user.id),
        "role": user.role,
        "email": user.email,
        "name": user.name,
    })
    return {"Authorization": f"Bearer {token}"}


@pytest.fixture
def admin_user(db_session):
    return make_user(db_session, "Test Admin", "admin@test.com", Roles.ADMIN)


@pytest.fixture
def waiter_user(db_session):
    return make_user(db_session, "Test Waiter", "waiter@test.com", Roles.WAITER)


@pytest.fixture
def other_waiter(db_session):
    return make_user(db_session, "Other Waiter", "waiter2@test.com", Roles.WAITER)


@pytest.fixture
def kitchen_user(db_session):
    return make_user(db_session, "Test Cook", "kitchen@test.com", Roles.KITCHEN)


@pytest.fixture
def barman_user(db_session):
    return make_user(db_session, "Test Barman", "bar@test.com", Roles.BARMAN)


@pytest.fixture
def accountant_user(db_session):
    return make_user(db_session, "Test Accountant", "accounts@test.com", Roles.ACCOUNTANT)


@pytest.fixture
def auth_headers(client, admin_user):
    """Admin headers obtained through the real login endpoint."""
    response = client.post(
        "/api/auth/login",
        json={"email": "admin@test.com", "password": TEST_PASSWORD},
    )
    assert response.status_code == 200, f"Login failed: {response.json()}"
    token = response.json()["access_token"]
    return {"Authorization": f"Bearer {token}"}


@pytest.fixture
def waiter_headers(waiter_user):
    return headers_for(waiter_user)


@pytest.fixture
def kitchen_headers(kitchen_user):
    return headers_for(kitchen_user)


@pytest.fixture
def barman_headers(barman_user):
    return headers_for(barman_user)


@pytest.fixture
def accountant_headers(accountant_user):
    return headers_for(accountant_user)


# =============================================================================
# Floor and Catalog
# =============================================================================


@pytest.fixture
def dining_table(db_session):
    table = DiningTable(number=1, capacity=4)
    db_session.add(table)
    db_session.commit()
    db_session.refresh(table)
    return table


@pytest.fixture
def beer_stock(db_session):
    stock = InventoryItem(
        name="Bottled Beer",
        category="drinks",
        quantity=10,
        unit="bottle",
        min_stock=3,
        price_cents=1000,
    )
    db_session.add(stock)
    db_session.commit()
    db_session.refresh(stock)
    return stock


@pytest.fixture
def menu(db_session, beer_stock):
    """
    A small menu: two kitchen dishes and two bar drinks.
    Bottled Beer is stock-tracked.
    """
    items = {
        "jollof": MenuItem(
            name="Jollof Rice",
            category=MenuCategory.FOOD,
            price_cents=2500,
            preparation_type=PreparationType.KITCHEN,
        ),
        "suya": MenuItem(
            name="Suya Platter",
            category=MenuCategory.FOOD,
            price_cents=3000,
            preparation_type=PreparationType.KITCHEN,
        ),
        "beer": MenuItem(
            name="Bottled Beer",
            category=MenuCategory.DRINK,
            price_cents=1500,
            preparation_type=PreparationType.BAR,
            inventory_item_id=beer_stock.id,
        ),
        "chapman": MenuItem(
            name="Chapman",
            category=MenuCategory.DRINK,
            price_cents=1200,
            preparation_type=PreparationType.BAR,
        ),
    }
    db_session.add_all(items.values())
    db_session.commit()
    for item in items.values():
        db_session.refresh(item)
    return items


def place_order(db_session, waiter: User, lines: list[tuple[MenuItem, int]], table: DiningTable | None = None):
    """Create an order through the service; returns its OrderOutput."""
    order, _ = OrderService(db_session).create_order(
        waiter_id=waiter.id,
        items=[OrderItemInput(menu_item_id=item.id, qty=qty) for item, qty in lines],
        table_id=table.id if table else None,
    )
    return order


def items_of(order, preparation_type: str) -> list[int]:
    return [item.id for item in order.items if item.preparation_type == preparation_type]
