"""Shared test fixtures: single test DB for all test modules."""
from __future__ import annotations

import json
from decimal import Decimal

import httpx
import pytest
import pytest_asyncio
from httpx import ASGITransport, AsyncClient
from sqlalchemy.ext.asyncio import create_async_engine, async_sessionmaker, AsyncSession

from config.settings import settings
from ekusey.db.tables import Base, BrandRow, MediaRow, ProductRow
from ekusey.db.engine import get_session

# Use a shared in-memory DB with check_same_thread=False and StaticPool
# This ensures all connections see the same in-memory database.
from sqlalchemy.pool import StaticPool

TEST_DB_URL = "sqlite+aiosqlite:///file:test?mode=memory&cache=shared&uri=true"

test_engine = create_async_engine(
    TEST_DB_URL,
    echo=False,
    connect_args={"check_same_thread": False},
    poolclass=StaticPool,
)
TestSession = async_sessionmaker(test_engine, expire_on_commit=False, class_=AsyncSession)

ADMIN_KEY = "test-admin-key"
ADMIN_HEADERS = {"X-Admin-Key": ADMIN_KEY}


async def override_get_session():
    async with TestSession() as session:
        yield session


# Import app and override BEFORE any test module imports app
from ekusey.api.main import app  # noqa: E402
from ekusey.api.deps import get_conversion_gateway  # noqa: E402
from ekusey.services.conversion_gateway import ConversionGateway  # noqa: E402

app.dependency_overrides[get_session] = override_get_session

import ekusey.db.engine as _engine_mod  # noqa: E402
_engine_mod.async_session = TestSession
_engine_mod.engine = test_engine


from contextlib import asynccontextmanager

@asynccontextmanager
async def get_test_session():
    """Context manager for seeding data in tests."""
    async with TestSession() as session:
        yield session


@pytest_asyncio.fixture(autouse=True)
async def setup_db():
    """Create tables before each test, drop after."""
    import ekusey.db.order_tables  # noqa: F401

    async with test_engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)

    yield

    async with test_engine.begin() as conn:
        await conn.run_sync(Base.metadata.drop_all)


@pytest.fixture(autouse=True)
def admin_key(monkeypatch):
    monkeypatch.setattr(settings, "ADMIN_API_KEY", ADMIN_KEY)
    return ADMIN_KEY


@pytest_asyncio.fixture
async def client():
    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as ac:
        yield ac


class FakeConversionAPI:
    """Stands in for the affiliate site's conversion endpoint."""

    def __init__(self, status_code: int = 200, body: str = '{"success": true, "conversion_id": 77}'):
        self.status_code = status_code
        self.body = body
        self.error: Exception | None = None
        self.requests: list[httpx.Request] = []

    def handler(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        if self.error is not None:
            raise self.error
        return httpx.Response(self.status_code, text=self.body)

    @property
    def payloads(self) -> list[dict]:
        return [json.loads(r.content) for r in self.requests]

    def gateway(self, api_key: str = "") -> ConversionGateway:
        return ConversionGateway(
            url="https://affiliate.test/wp-json/affiliate-bloom/v1/conversion",
            api_key=api_key,
            transport=httpx.MockTransport(self.handler),
        )


@pytest.fixture
def conversion_api():
    """Route every claim made through the app to a FakeConversionAPI."""
    api = FakeConversionAPI()
    app.dependency_overrides[get_conversion_gateway] = api.gateway
    yield api
    app.dependency_overrides.pop(get_conversion_gateway, None)


@pytest_asyncio.fixture
async def catalog():
    """Two simple products and a variable one with two variations."""
    async with get_test_session() as session:
        media = MediaRow(id=1, url="https://cdn.test/shirt.jpg", alt="Shirt")
        acme = BrandRow(id=1, name="Acme", slug="acme")
        session.add_all([media, acme])

        mug = ProductRow(
            id=10, name="Mug", slug="mug", price=Decimal("50.00"),
            regular_price=Decimal("50.00"), list_price=Decimal("50.00"),
            buy_price=Decimal("20.00"), brands=[acme],
        )
        pen = ProductRow(
            id=11, name="Pen", slug="pen", price=Decimal("30.00"),
            regular_price=Decimal("30.00"), list_price=Decimal("30.00"),
            buy_price=Decimal("10.00"),
        )
        shirt = ProductRow(
            id=20, type="variable", name="Shirt", slug="shirt", image_id=1,
            attributes=[{"name": "pa_size", "variation": True, "options": ["small", "large"]}],
        )
        shirt.variations = [
            ProductRow(
                id=21, type="variation", name="Shirt - small", slug="shirt-small",
                price=Decimal("40.00"), regular_price=Decimal("40.00"),
                buy_price=Decimal("15.00"), attributes={"attribute_pa_size": "small"},
            ),
            ProductRow(
                id=22, type="variation", name="Shirt - large", slug="shirt-large",
                price=Decimal("45.00"), regular_price=Decimal("45.00"),
                buy_price=Decimal("18.00"), attributes={"attribute_pa_size": "large"},
            ),
        ]
        session.add_all([mug, pen, shirt])
        await session.commit()
    yield
