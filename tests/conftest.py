import os

# Must be set before bakery.config is imported
os.environ["DATABASE_URL"] = "sqlite://"
os.environ["EVENTS_ENABLED"] = "false"
os.environ["ENVIRONMENT"] = "test"

from datetime import timedelta
from typing import Dict, Optional

import pytest
from fastapi.testclient import TestClient
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

from bakery.api import deps
from bakery.database import Base, get_db
from bakery.main import app
from bakery.models import catalog, order, profile  # noqa: F401
from bakery.models.profile import Profile
from bakery.services.auth_client import AuthSession, AuthUser
from bakery.services.catalog_editor import EditorSessionRegistry
from bakery.services.rate_limiter import InMemoryRateLimitStore, RateLimiter
from bakery.services.view_cache import ViewCache
from bakery.utils.delivery import today_local

CUSTOMER = AuthUser(id="customer-1", email="dana@example.com", full_name="Dana Levi")
OTHER_CUSTOMER = AuthUser(id="customer-2", email="yossi@example.com")
ADMIN = AuthUser(id="admin-1", email="admin@example.com")

TOKENS = {
    "customer-token": CUSTOMER,
    "other-token": OTHER_CUSTOMER,
    "admin-token": ADMIN,
}

PASSWORDS = {
    "admin@example.com": ("secret", ADMIN, "admin-token"),
    "dana@example.com": ("secret", CUSTOMER, "customer-token"),
}


def auth_header(token: str) -> Dict[str, str]:
    return {"Authorization": f"Bearer {token}"}


class FakeAuthClient:
    """Stands in for the hosted auth provider"""

    def __init__(self):
        self.signed_out = []

    async def get_user(self, access_token: str) -> Optional[AuthUser]:
        return TOKENS.get(access_token)

    async def sign_in_with_password(self, email: str, password: str) -> Optional[AuthSession]:
        entry = PASSWORDS.get(email)
        if entry is None or entry[0] != password:
            return None
        _, user, token = entry
        return AuthSession(access_token=token, refresh_token="refresh", user=user)

    async def sign_out(self, access_token: str) -> bool:
        self.signed_out.append(access_token)
        return True


class FakePublisher:
    """Records events instead of sending them to RabbitMQ"""

    def __init__(self):
        self.events = []

    def _record(self, event_type, data):
        self.events.append((event_type, data))
        return True

    def publish_order_created(self, data):
        return self._record("OrderCreated", data)

    def publish_order_cancelled(self, data):
        return self._record("OrderCancelled", data)

    def publish_order_status_changed(self, data):
        return self._record("OrderStatusChanged", data)

    def publish_order_archived(self, data):
        return self._record("OrderArchived", data)

    def publish_catalog_updated(self, data):
        return self._record("CatalogUpdated", data)

    def types(self):
        return [event_type for event_type, _ in self.events]


class FakeClock:
    def __init__(self, start: float = 1_000_000.0):
        self.now = start

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now += seconds


@pytest.fixture
def engine():
    engine = create_engine(
        "sqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    Base.metadata.create_all(bind=engine)
    yield engine
    Base.metadata.drop_all(bind=engine)


@pytest.fixture
def db_session(engine):
    TestingSession = sessionmaker(autocommit=False, autoflush=False, bind=engine)
    session = TestingSession()
    try:
        yield session
    finally:
        session.close()


@pytest.fixture
def admin_profile(db_session):
    profile = Profile(id=ADMIN.id, email=ADMIN.email, role="admin")
    db_session.add(profile)
    db_session.commit()
    return profile


@pytest.fixture
def clock():
    return FakeClock()


@pytest.fixture
def rate_limiter(clock):
    return RateLimiter(InMemoryRateLimitStore(), clock=clock)


@pytest.fixture
def history_cache():
    return ViewCache(ttl=300)


@pytest.fixture
def publisher():
    return FakePublisher()


@pytest.fixture
def auth_client():
    return FakeAuthClient()


@pytest.fixture
def client(db_session, rate_limiter, history_cache, publisher, auth_client):
    registry = EditorSessionRegistry()

    def override_get_db():
        yield db_session

    app.dependency_overrides[get_db] = override_get_db
    app.dependency_overrides[deps.get_rate_limiter] = lambda: rate_limiter
    app.dependency_overrides[deps.get_history_cache] = lambda: history_cache
    app.dependency_overrides[deps.get_event_publisher] = lambda: publisher
    app.dependency_overrides[deps.get_auth_client] = lambda: auth_client
    app.dependency_overrides[deps.get_editor_registry] = lambda: registry

    with TestClient(app) as c:
        yield c

    app.dependency_overrides.clear()


@pytest.fixture
def delivery_date():
    return today_local() + timedelta(days=3)


@pytest.fixture
def order_payload(delivery_date):
    return {
        "customer_name": "Dana Levi",
        "customer_phone": "050-1234567",
        "customer_address": "Herzl 1",
        "customer_city": "Tel Aviv",
        "delivery_date": delivery_date.isoformat(),
        "items": [{"product_id": 2, "name": "Whole Wheat – Sesame", "quantity": 2, "price": 24}],
        "total_price": 48,
    }
