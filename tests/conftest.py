"""Shared test configuration and fixtures.

Each test gets a fresh in-memory SQLite database (aiosqlite) and a fresh
in-memory Redis double behind the real ``CacheClient``, so tests never share
state and need no running services.
"""

import fnmatch
import uuid
from collections.abc import AsyncGenerator, AsyncIterator
from decimal import Decimal

import pytest
import pytest_asyncio
from httpx import ASGITransport, AsyncClient
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine
from sqlalchemy.pool import StaticPool

import citystay.models  # noqa: F401  (register tables on Base.metadata)
from citystay.api.deps import get_cache, get_db
from citystay.cache.client import CacheClient
from citystay.cache.invalidation import CacheCoordinator
from citystay.database import Base
from citystay.main import app
from citystay.models.property import Property
from citystay.services.booking_service import BookingService
from citystay.stores.properties import SqlPropertyStore
from citystay.stores.reservations import SqlReservationStore

_TEST_DB_URL = "sqlite+aiosqlite:///:memory:"


# ---------------------------------------------------------------------------
# In-memory Redis double
# ---------------------------------------------------------------------------


class FakeRedis:
    """The subset of ``redis.asyncio.Redis`` that ``CacheClient`` uses."""

    def __init__(self) -> None:
        self.data: dict[str, str] = {}
        self.ttls: dict[str, int | None] = {}
        self.fail_with: Exception | None = None

    def _check(self) -> None:
        if self.fail_with is not None:
            raise self.fail_with

    async def ping(self) -> bool:
        self._check()
        return True

    async def get(self, key: str) -> str | None:
        self._check()
        return self.data.get(key)

    async def set(self, key: str, value: str, ex: int | None = None) -> bool:
        self._check()
        self.data[key] = value
        self.ttls[key] = ex
        return True

    async def scan_iter(self, match: str = "*", count: int | None = None) -> AsyncIterator[str]:
        self._check()
        for key in list(self.data):
            if fnmatch.fnmatchcase(key, match):
                yield key

    async def delete(self, *keys: str) -> int:
        self._check()
        removed = 0
        for key in keys:
            if self.data.pop(key, None) is not None:
                self.ttls.pop(key, None)
                removed += 1
        return removed

    async def aclose(self) -> None:
        return None


class RecordingCache:
    """Cache double that records pattern deletions and never stores anything."""

    def __init__(self) -> None:
        self.deleted_patterns: list[str] = []

    async def get(self, key):
        return None

    async def set(self, key, value, ttl_seconds=None) -> bool:
        return True

    async def delete_by_pattern(self, pattern: str) -> int:
        self.deleted_patterns.append(pattern)
        return 0

    async def get_or_compute(self, key, compute, ttl_seconds=None):
        return await compute()


# ---------------------------------------------------------------------------
# Database
# ---------------------------------------------------------------------------


@pytest_asyncio.fixture
async def test_engine():
    """Fresh in-memory database with every table created."""
    engine = create_async_engine(
        _TEST_DB_URL,
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    yield engine
    await engine.dispose()


@pytest_asyncio.fixture
async def db_session(test_engine) -> AsyncGenerator[AsyncSession, None]:
    factory = async_sessionmaker(test_engine, class_=AsyncSession, expire_on_commit=False)
    async with factory() as session:
        yield session


# ---------------------------------------------------------------------------
# Cache
# ---------------------------------------------------------------------------


@pytest.fixture
def fake_redis() -> FakeRedis:
    return FakeRedis()


@pytest_asyncio.fixture
async def cache(fake_redis: FakeRedis) -> AsyncGenerator[CacheClient, None]:
    """A connected ``CacheClient`` backed by ``FakeRedis``."""
    client = CacheClient("redis://test", client=fake_redis)
    await client.connect()
    yield client
    await client.close()


@pytest.fixture
def recording_cache() -> RecordingCache:
    return RecordingCache()


# ---------------------------------------------------------------------------
# Services
# ---------------------------------------------------------------------------


@pytest.fixture
def booking_service(db_session: AsyncSession, recording_cache: RecordingCache) -> BookingService:
    return BookingService(
        SqlReservationStore(db_session),
        SqlPropertyStore(db_session),
        CacheCoordinator(recording_cache),
    )


# ---------------------------------------------------------------------------
# HTTP client
# ---------------------------------------------------------------------------


@pytest_asyncio.fixture
async def client(db_session: AsyncSession, cache: CacheClient) -> AsyncGenerator[AsyncClient, None]:
    """Provide an httpx AsyncClient wired to the test database and cache."""

    async def override_get_db() -> AsyncGenerator[AsyncSession, None]:
        yield db_session

    app.dependency_overrides[get_db] = override_get_db
    app.dependency_overrides[get_cache] = lambda: cache

    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://testserver") as ac:
        yield ac

    app.dependency_overrides.clear()


# ---------------------------------------------------------------------------
# Data helpers
# ---------------------------------------------------------------------------


@pytest.fixture
def make_property(db_session: AsyncSession):
    """Factory inserting an active property with sensible booking policy defaults."""

    async def _make(**overrides) -> Property:
        values = {
            "city_id": uuid.uuid4(),
            "name": f"Loft {uuid.uuid4().hex[:6]}",
            "status": "active",
            "nightly_rate": Decimal("100.00"),
            "cleaning_fee": Decimal("20.00"),
            "security_deposit": Decimal("50.00"),
            "currency": "USD",
            "max_guests": 4,
            "min_nights": 2,
            "max_nights": 14,
            "instant_book": False,
            "blackout_dates": [],
        }
        values.update(overrides)
        values["blackout_dates"] = [d.isoformat() for d in values["blackout_dates"]]
        prop = Property(**values)
        db_session.add(prop)
        await db_session.commit()
        await db_session.refresh(prop)
        return prop

    return _make


@pytest_asyncio.fixture
async def test_property(make_property) -> Property:
    """An active property: 2-14 nights, up to 4 guests, 100/night + 20 cleaning + 50 deposit."""
    return await make_property()
