"""Pytest configuration and fixtures."""

import os

# The background monitor would otherwise open its own database sessions
os.environ.setdefault("INVENTORY_MONITOR_ENABLED", "false")

from itertools import count
from unittest.mock import AsyncMock, MagicMock

import pytest
from fastapi.testclient import TestClient
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker

import pizzeria.services.realtime as realtime_module
from pizzeria.api.dependencies import (
    get_email_service,
    get_inventory_monitor,
    get_payment_gateway,
)
from pizzeria.config import Settings
from pizzeria.database import Base, get_db
from pizzeria.main import app
from pizzeria.models import PizzaBase, PizzaCheese, PizzaMeat, PizzaSauce, PizzaVeggie
from pizzeria.models.enums import UserRole
from pizzeria.services.auth import create_access_token, create_user
from pizzeria.services.email_service import EmailService
from pizzeria.services.inventory_monitor import InventoryMonitor
from pizzeria.services.payment_gateway import PaymentGateway


class AuthHeaders(dict):
    """Dict subclass that also stores user_id and email."""

    def __init__(self, *args, user_id: int | None = None, email: str | None = None, **kwargs):
        super().__init__(*args, **kwargs)
        self.user_id = user_id
        self.email = email


# Use test database - PostgreSQL in Docker, SQLite locally
if os.getenv("DATABASE_URL"):
    # Running in Docker - use PostgreSQL test database
    SQLALCHEMY_DATABASE_URL = os.getenv("DATABASE_URL").replace("/pizzeria", "/pizzeria_test")
else:
    # Running locally - use SQLite
    SQLALCHEMY_DATABASE_URL = "sqlite:///./test.db"

connect_args = {"check_same_thread": False} if "sqlite" in SQLALCHEMY_DATABASE_URL else {}
engine = create_engine(SQLALCHEMY_DATABASE_URL, connect_args=connect_args)
TestingSessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)

TEST_KEY_SECRET = "test_key_secret"  # noqa: S105
TEST_WEBHOOK_SECRET = "test_webhook_secret"  # noqa: S105


@pytest.fixture(scope="session", autouse=True)
def setup_test_database():
    """Create test database schema once at the start of the test session."""
    if "postgresql" in SQLALCHEMY_DATABASE_URL:
        # For PostgreSQL, create the test database
        from sqlalchemy_utils import create_database, database_exists

        # Create test database if it doesn't exist
        if not database_exists(SQLALCHEMY_DATABASE_URL):
            create_database(SQLALCHEMY_DATABASE_URL)

    Base.metadata.create_all(bind=engine)
    yield
    # Don't drop database - just leave it for next run (each test cleans up after itself)


@pytest.fixture(scope="function", autouse=True)
def db():
    """Create a fresh database session for each test with cleanup."""
    session = TestingSessionLocal()

    yield session

    # Clean up all data after test
    session.rollback()
    for table in reversed(Base.metadata.sorted_tables):
        session.execute(table.delete())
    session.commit()
    session.close()


@pytest.fixture(autouse=True)
def redis_publisher():
    """Replace the pub/sub client so no test needs a Redis server."""
    mock_redis = MagicMock()
    realtime_module._publisher = mock_redis
    yield mock_redis
    realtime_module._publisher = None


@pytest.fixture
def test_settings():
    return Settings(
        payment_key_id="rzp_test_key",
        payment_key_secret=TEST_KEY_SECRET,
        payment_webhook_secret=TEST_WEBHOOK_SECRET,
    )


@pytest.fixture
def email_service():
    """Email service double recording every send."""
    return MagicMock(spec=EmailService)


@pytest.fixture
def gateway(test_settings):
    """Real signature logic, canned intent creation."""
    gateway = PaymentGateway(test_settings)
    intent_ids = count(1)

    async def fake_create_intent(amount_minor, receipt, notes=None, currency=None):
        return {
            "id": f"order_test{next(intent_ids):04d}",
            "amount": amount_minor,
            "currency": currency or "INR",
            "receipt": receipt,
        }

    gateway.create_intent = AsyncMock(side_effect=fake_create_intent)
    return gateway


@pytest.fixture
def monitor(email_service):
    return InventoryMonitor(TestingSessionLocal, email_service, interval_minutes=30)


@pytest.fixture(scope="function")
def client(db, email_service, gateway, monitor):
    """Create a test client with database and service overrides."""

    def override_get_db():
        try:
            yield db
        finally:
            pass

    app.dependency_overrides[get_db] = override_get_db
    app.dependency_overrides[get_email_service] = lambda: email_service
    app.dependency_overrides[get_payment_gateway] = lambda: gateway
    app.dependency_overrides[get_inventory_monitor] = lambda: monitor
    with TestClient(app) as test_client:
        yield test_client
    app.dependency_overrides.clear()


@pytest.fixture
def auth_headers(client):
    """Create a user and return auth headers with user info."""
    response = client.post(
        "/api/v1/auth/register",
        json={"email": "test@example.com", "password": "testpass123", "name": "Test User"},
    )
    assert response.status_code == 201
    data = response.json()["data"]
    token = data["access_token"]
    user_id = data["user"]["id"]

    return AuthHeaders(
        {"Authorization": f"Bearer {token}"}, user_id=user_id, email="test@example.com"
    )


@pytest.fixture
def admin_user(db):
    return create_user(db, "admin@example.com", "adminpass123", "Admin User", role=UserRole.ADMIN)


@pytest.fixture
def admin_headers(admin_user):
    """Auth headers for an administrator."""
    token = create_access_token(admin_user.id, admin_user.email, admin_user.role.value)
    return AuthHeaders(
        {"Authorization": f"Bearer {token}"}, user_id=admin_user.id, email=admin_user.email
    )


@pytest.fixture
def catalog(db):
    """One ingredient per category, priced for easy arithmetic."""
    items = {
        "base": PizzaBase(name="Thin Crust", description="Crispy", price=150, stock=20, threshold=5),
        "sauce": PizzaSauce(name="Marinara", description="Tomato", price=80, stock=20, threshold=5),
        "cheese": PizzaCheese(name="Mozzarella", description="Fresh", price=120, stock=20, threshold=5),
        "veggie": PizzaVeggie(name="Mushrooms", description="Sliced", price=60, stock=20, threshold=5),
        "meat": PizzaMeat(name="Pepperoni", description="Cured", price=90, stock=20, threshold=5),
    }
    db.add_all(items.values())
    db.commit()
    for item in items.values():
        db.refresh(item)
    return items


@pytest.fixture
def delivery_address():
    return {"street": "12 MG Road", "city": "Bengaluru", "state": "Karnataka", "zip_code": "560001"}


@pytest.fixture
def second_session():
    """An independent session, as a concurrent request would hold."""
    session = TestingSessionLocal()
    yield session
    session.close()
