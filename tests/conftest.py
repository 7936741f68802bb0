from datetime import date, datetime, timezone
from decimal import Decimal
from types import SimpleNamespace
from typing import TYPE_CHECKING, AsyncGenerator
from unittest.mock import AsyncMock
from uuid import uuid4

if TYPE_CHECKING:
    from travel_crm.core.cache import CacheService

import pytest
import pytest_asyncio
from httpx import ASGITransport, AsyncClient

from travel_crm.main import app
from travel_crm.schemas.common import Actor, UserRole


@pytest_asyncio.fixture
async def async_client() -> AsyncGenerator[AsyncClient, None]:
    """Yield an ``httpx.AsyncClient`` wired to the FastAPI app."""
    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as client:
        yield client
    app.dependency_overrides.clear()


@pytest.fixture
def mock_redis() -> AsyncMock:
    """Return an ``AsyncMock`` that behaves like ``redis.asyncio.Redis``."""
    redis = AsyncMock()
    redis.get = AsyncMock(return_value=None)
    redis.set = AsyncMock()
    redis.setex = AsyncMock()
    redis.delete = AsyncMock()
    redis.ping = AsyncMock()
    return redis


@pytest.fixture
def mock_cache(mock_redis) -> "CacheService":
    """Return a ``CacheService`` backed by the mock Redis client."""
    from travel_crm.core.cache import CacheService

    return CacheService(redis_client=mock_redis)


@pytest.fixture
def admin() -> Actor:
    return Actor(user_id=uuid4(), role=UserRole.admin)


@pytest.fixture
def agent() -> Actor:
    return Actor(user_id=uuid4(), role=UserRole.sales)


def make_lead(**overrides) -> SimpleNamespace:
    """A lead-shaped object with realistic defaults."""
    fields = dict(
        id=uuid4(),
        client_name="Priya Nair",
        country_code="+91",
        contact_number="9876543210",
        place="Bali",
        no_of_pax=2,
        expected_budget=Decimal("150000"),
        travel_date=None,
        travel_month="2026-12",
        lead_source="Instagram",
        lead_type="normal",
        status="allocated",
        call_count=0,
        remark=None,
        feedback_requested_at=None,
        assigned_to=uuid4(),
        assigned_by=uuid4(),
        created_at=datetime(2026, 10, 1, 10, 0, tzinfo=timezone.utc),
    )
    fields.update(overrides)
    return SimpleNamespace(**fields)


def make_user(**overrides) -> SimpleNamespace:
    fields = dict(
        id=uuid4(),
        full_name="Ananya Rao",
        email="ananya@example.com",
        phone=None,
        role="sales",
        status="active",
        last_assigned_at=None,
        created_at=datetime(2026, 1, 1, tzinfo=timezone.utc),
    )
    fields.update(overrides)
    return SimpleNamespace(**fields)


def echo_row(**defaults):
    """Side effect for ``repo.create`` mocks: return the row with an id."""

    async def _create(**kwargs):
        row = dict(defaults)
        row.update(kwargs)
        row.setdefault("id", uuid4())
        row.setdefault("created_at", datetime.now(timezone.utc))
        return SimpleNamespace(**row)

    return _create


@pytest.fixture
def future_date() -> date:
    return date(2027, 3, 20)
