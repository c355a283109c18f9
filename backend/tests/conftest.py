"""Pytest fixtures for ResQLink backend tests."""

import os

# Settings are read once at import time; keep tests offline and unthrottled.
os.environ.setdefault("RATE_LIMIT_ENABLED", "false")
os.environ.setdefault("GEOCODING_ENABLED", "false")

from collections.abc import AsyncGenerator, Awaitable, Callable  # noqa: E402
from datetime import UTC, datetime, timedelta  # noqa: E402
from typing import Any  # noqa: E402

import pytest  # noqa: E402
import pytest_asyncio  # noqa: E402
from httpx import ASGITransport, AsyncClient  # noqa: E402
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine  # noqa: E402
from sqlalchemy.pool import StaticPool  # noqa: E402

from resqlink.config import Settings  # noqa: E402
from resqlink.database import Base, get_db  # noqa: E402
from resqlink.errors import GeocodingError  # noqa: E402
from resqlink.main import app  # noqa: E402
from resqlink.models import Incident  # noqa: E402
from resqlink.services.geocoding import get_geocoder  # noqa: E402
from resqlink.services.incident_store import IncidentStore  # noqa: E402


# Test database URL - uses SQLite for isolation (no PostGIS features tested)
TEST_DATABASE_URL = "sqlite+aiosqlite:///:memory:"

# Kalyan, Maharashtra
KALYAN_LAT = 19.24
KALYAN_LNG = 73.13


class FakeGeocoder:
    """Reverse geocoder stand-in recording its calls."""

    def __init__(self, address: str | None = "Station Road, Kalyan, Maharashtra, India"):
        self.address = address
        self.calls: list[tuple[float, float]] = []

    async def reverse(self, lat: float, lng: float) -> str | None:
        self.calls.append((lat, lng))
        return self.address


class FailingGeocoder:
    """Reverse geocoder whose provider is always down."""

    async def reverse(self, lat: float, lng: float) -> str | None:
        raise GeocodingError("provider unreachable")


@pytest.fixture
def test_settings() -> Settings:
    """Test settings with safe defaults."""
    return Settings(
        database_url=TEST_DATABASE_URL,
        geocoding_enabled=False,
        rate_limit_enabled=False,
        debug=True,
    )


@pytest_asyncio.fixture
async def async_engine():
    """Create async engine for testing."""
    engine = create_async_engine(
        TEST_DATABASE_URL,
        echo=False,
        poolclass=StaticPool,
    )
    yield engine
    await engine.dispose()


@pytest_asyncio.fixture
async def db_session(async_engine) -> AsyncGenerator[AsyncSession, None]:
    """Create test database session with the incidents schema."""
    # The PostGIS spatial index is PostgreSQL-only and skipped here
    async with async_engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)

    async_session = async_sessionmaker(
        async_engine, class_=AsyncSession, expire_on_commit=False
    )

    async with async_session() as session:
        yield session
        await session.rollback()


@pytest.fixture
def fake_geocoder() -> FakeGeocoder:
    return FakeGeocoder()


@pytest.fixture
def failing_geocoder() -> FailingGeocoder:
    return FailingGeocoder()


@pytest_asyncio.fixture
async def client(
    db_session: AsyncSession, fake_geocoder: FakeGeocoder
) -> AsyncGenerator[AsyncClient, None]:
    """Create test HTTP client with database and geocoder overrides."""

    async def override_get_db():
        yield db_session

    app.dependency_overrides[get_db] = override_get_db
    app.dependency_overrides[get_geocoder] = lambda: fake_geocoder

    async with AsyncClient(
        transport=ASGITransport(app=app),
        base_url="http://test",
    ) as client:
        yield client

    app.dependency_overrides.clear()


@pytest.fixture
def sample_datetime() -> datetime:
    """Sample datetime for testing."""
    return datetime(2026, 1, 18, 10, 0, 0, tzinfo=UTC)


@pytest.fixture
def make_incident(
    db_session: AsyncSession, sample_datetime: datetime
) -> Callable[..., Awaitable[Incident]]:
    """Insert an incident directly through the store with sensible defaults."""
    store = IncidentStore(db_session)
    counter = {"n": 0}

    async def _make(**overrides: Any) -> Incident:
        counter["n"] += 1
        values: dict[str, Any] = {
            "title": f"Test incident {counter['n']:02d}",
            "category": "Other",
            "severity": "Medium",
            "latitude": KALYAN_LAT,
            "longitude": KALYAN_LNG,
            "address": "Kalyan",
            "status": "pending",
            "created_at": sample_datetime + timedelta(minutes=counter["n"]),
        }
        values.update(overrides)
        return await store.save(Incident(**values))

    return _make


@pytest.fixture
def report_payload() -> dict[str, Any]:
    """Citizen report as the web form submits it."""
    return {
        "title": "Fire at Market",
        "category": "Fire",
        "description": "Smoke coming out of the vegetable market sheds",
        "severity": "Critical",
        "location": "Kalyan Market, Kalyan",
        "lat": KALYAN_LAT,
        "lng": KALYAN_LNG,
        "reporterName": "Asha",
        "reporterPhone": "+91 98200 00000",
    }
