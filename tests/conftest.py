import os

os.environ.setdefault("DATABASE_URL", "sqlite+aiosqlite://")
os.environ.setdefault("SUPABASE_JWT_SECRET", "test-jwt-secret")

import uuid
import httpx
import pytest
from unittest.mock import AsyncMock
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine
from sqlalchemy.pool import StaticPool

from app.main import app
from app.core.dependencies import get_db, get_payment_service
from app.models.base import Base
from app.modules.payment.provider import AbacatePayClient
from app.modules.payment.service import PaymentConfig, PaymentService
from app.utils.auth import create_access_token

PROVIDER_BASE_URL = "https://api.abacatepay.test/v1"


class FakeAbacatePay:
    """In-memory stand-in for the AbacatePay billing API."""

    def __init__(self):
        self.requests = []
        self.billings = []
        self.create_status = 200
        self.create_body = {
            "data": {"id": "bill_123", "url": "https://pay.abacatepay.com/bill_123", "status": "PENDING"},
            "error": None,
        }
        self.list_status = 200

    def handler(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        if request.url.path.endswith("/billing/create"):
            return httpx.Response(self.create_status, json=self.create_body)
        if request.url.path.endswith("/billing/list"):
            if self.list_status != 200:
                return httpx.Response(self.list_status, text="upstream failure")
            return httpx.Response(200, json={"data": self.billings, "error": None})
        return httpx.Response(404, json={"error": "not found"})

    def add_billing(self, billing_id: str, status: str):
        self.billings.append({"id": billing_id, "status": status, "amount": 2990})


@pytest.fixture
def mock_db_session():
    return AsyncMock(spec=AsyncSession)


@pytest.fixture
async def db_engine():
    engine = create_async_engine(
        "sqlite+aiosqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    yield engine
    await engine.dispose()


@pytest.fixture
def session_factory(db_engine):
    return async_sessionmaker(db_engine, expire_on_commit=False, class_=AsyncSession)


@pytest.fixture
async def db_session(session_factory):
    async with session_factory() as session:
        yield session


@pytest.fixture
def fake_provider():
    return FakeAbacatePay()


@pytest.fixture
async def provider_client(fake_provider):
    http_client = httpx.AsyncClient(transport=httpx.MockTransport(fake_provider.handler))
    yield AbacatePayClient(base_url=PROVIDER_BASE_URL, api_key="test-api-key", http_client=http_client)
    await http_client.aclose()


@pytest.fixture
def payment_config():
    return PaymentConfig(app_base_url="https://festiva.test", term_days=365)


@pytest.fixture
def payment_service(provider_client, payment_config):
    return PaymentService(provider=provider_client, config=payment_config)


@pytest.fixture
def user_id():
    return uuid.uuid4()


@pytest.fixture
def auth_headers(user_id):
    token = create_access_token(user_id, email="ana.souza@example.com", full_name="Ana Souza")
    return {"Authorization": f"Bearer {token}"}


@pytest.fixture
async def api_client(db_session, payment_service):
    """ASGI client sharing the test session and the fake provider with the app."""
    async def _override_get_db():
        yield db_session

    app.dependency_overrides[get_db] = _override_get_db
    app.dependency_overrides[get_payment_service] = lambda: payment_service
    async with httpx.AsyncClient(transport=httpx.ASGITransport(app=app), base_url="http://test") as client:
        yield client
    app.dependency_overrides.clear()
