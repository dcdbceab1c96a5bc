"""
Pytest configuration and fixtures.

This file is automatically discovered by pytest and provides
shared fixtures for all test modules.

Every test gets its own in-memory SQLite database (aiosqlite) and its own
in-memory cache, so tests never see each other's feeds, events or cached
feed lists.

References:
-----------
- Pytest Fixtures: https://docs.pytest.org/en/stable/fixture.html
- FastAPI Testing: https://fastapi.tiangolo.com/advanced/async-tests/
"""

import os

# Must be set before reelit is imported: the engine is built at import time
os.environ["APP_ENV"] = "testing"
os.environ["SECRET_KEY"] = "reelit-test-suite-signing-key-0123456789"
os.environ["DATABASE_URL"] = "sqlite+aiosqlite:///:memory:"
os.environ["CACHE_BACKEND"] = "memory"
os.environ["RATE_LIMIT_ENABLED"] = "false"
os.environ["COMMERCE_ENABLED"] = "false"
os.environ["LOG_FORMAT"] = "text"
os.environ["LOG_LEVEL"] = "WARNING"

from datetime import datetime, timedelta, timezone
from decimal import Decimal
from typing import AsyncGenerator

import pytest
import pytest_asyncio
from httpx import ASGITransport, AsyncClient
from sqlalchemy import event
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine
from sqlalchemy.pool import StaticPool

from reelit.api.deps import get_cache_backend
from reelit.core.config import settings
from reelit.core.security import CAP_MANAGE_OPTIONS, CAP_UPLOAD_FILES, create_access_token
from reelit.db.base import Base
from reelit.db.deps import get_db, get_db_override
from reelit.main import app
from reelit.models import MediaAsset, Product
from reelit.services.cache import CachedView, InMemoryCacheBackend

ADMIN_ID = 1
EDITOR_ID = 7

# Fixed "now" for analytics tests
NOW = datetime(2026, 10, 19, 12, 0, 0, tzinfo=timezone.utc)


# ================================
# Database Fixtures
# ================================

@pytest_asyncio.fixture
async def test_engine():
    """
    Fresh in-memory SQLite database per test.

    StaticPool keeps the single connection alive so every session sees the
    same database; foreign keys are switched on so cascades behave like
    PostgreSQL.
    """
    engine = create_async_engine(
        "sqlite+aiosqlite://",
        poolclass=StaticPool,
        connect_args={"check_same_thread": False},
    )

    @event.listens_for(engine.sync_engine, "connect")
    def _enable_foreign_keys(dbapi_connection, connection_record):
        cursor = dbapi_connection.cursor()
        cursor.execute("PRAGMA foreign_keys=ON")
        cursor.close()

    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)

    yield engine

    await engine.dispose()


@pytest_asyncio.fixture
async def db_session(test_engine) -> AsyncGenerator[AsyncSession, None]:
    """Session bound to the per-test database."""
    session_factory = async_sessionmaker(
        bind=test_engine,
        class_=AsyncSession,
        expire_on_commit=False,
    )
    async with session_factory() as session:
        yield session


# ================================
# Cache Fixtures
# ================================

@pytest.fixture
def cache_backend() -> InMemoryCacheBackend:
    return InMemoryCacheBackend()


@pytest.fixture
def feed_cache(cache_backend: InMemoryCacheBackend) -> CachedView:
    return CachedView(
        cache_backend,
        key=settings.FEED_LIST_CACHE_KEY,
        ttl_seconds=settings.FEED_LIST_CACHE_TTL_SECONDS,
    )


# ================================
# Seed Data
# ================================

@pytest_asyncio.fixture
async def videos(db_session: AsyncSession) -> dict[int, MediaAsset]:
    """
    Seed the asset store.

    101-103 are videos (103 uploaded by the editor, without a thumbnail),
    200 is an image and must never be listed as a video.
    """
    base = NOW - timedelta(days=10)
    assets = [
        MediaAsset(
            id=101, title="Beach Day", description="Waves and sand",
            url="https://cdn.example.com/beach.mp4",
            thumbnail_url="https://cdn.example.com/beach-150.jpg", alt_text="Beach",
            mime_type="video/mp4", author_id=ADMIN_ID, created_at=base,
        ),
        MediaAsset(
            id=102, title="Mountain Hike", description="Summit at dawn",
            url="https://cdn.example.com/hike.webm",
            thumbnail_url="https://cdn.example.com/hike-150.jpg",
            mime_type="video/webm", author_id=ADMIN_ID, created_at=base + timedelta(days=1),
        ),
        MediaAsset(
            id=103, title="City Lights", description="Night time-lapse",
            url="https://cdn.example.com/city.mp4",
            mime_type="video/mp4", author_id=EDITOR_ID, created_at=base + timedelta(days=2),
        ),
        MediaAsset(
            id=200, title="Beach Poster", description="Still image",
            url="https://cdn.example.com/poster.jpg",
            mime_type="image/jpeg", author_id=ADMIN_ID, created_at=base + timedelta(days=3),
        ),
    ]
    db_session.add_all(assets)
    await db_session.commit()
    return {asset.id: asset for asset in assets}


@pytest_asyncio.fixture
async def products(db_session: AsyncSession) -> dict[int, Product]:
    items = [
        Product(id=501, name="Beach Towel", price=Decimal("19.99"),
                image_url="https://shop.example.com/towel.jpg",
                permalink="https://shop.example.com/towel"),
        Product(id=502, name="Beach Umbrella", price=Decimal("45.00"),
                permalink="https://shop.example.com/umbrella"),
        Product(id=503, name="Hiking Boots", price=Decimal("120.50")),
        Product(id=504, name="Beach Chair (draft)", price=Decimal("30.00"), status="draft"),
    ]
    db_session.add_all(items)
    await db_session.commit()
    return {item.id: item for item in items}


# ================================
# FastAPI Client Fixtures
# ================================

@pytest_asyncio.fixture
async def client(
    db_session: AsyncSession,
    cache_backend: InMemoryCacheBackend,
) -> AsyncGenerator[AsyncClient, None]:
    """
    Async HTTP client against the app, with the per-test database and cache.

    Usage:
        async def test_something(client: AsyncClient, admin_headers: dict):
            response = await client.get("/api/v1/feeds", headers=admin_headers)
            assert response.status_code == 200
    """
    app.dependency_overrides[get_db] = get_db_override(db_session)
    app.dependency_overrides[get_cache_backend] = lambda: cache_backend

    async with AsyncClient(transport=ASGITransport(app=app), base_url="http://test") as ac:
        yield ac

    app.dependency_overrides.clear()


# ================================
# Authentication Fixtures
# ================================

def _bearer(subject: int, *capabilities: str) -> dict[str, str]:
    token = create_access_token(subject, capabilities, expires_delta=timedelta(minutes=30))
    return {"Authorization": f"Bearer {token}"}


@pytest.fixture
def admin_headers() -> dict[str, str]:
    """Site admin: manages feeds, analytics and products, sees every upload."""
    return _bearer(ADMIN_ID, CAP_MANAGE_OPTIONS, CAP_UPLOAD_FILES)


@pytest.fixture
def editor_headers() -> dict[str, str]:
    """Editor: may upload and browse their own library only."""
    return _bearer(EDITOR_ID, CAP_UPLOAD_FILES)


@pytest.fixture
def expired_headers() -> dict[str, str]:
    token = create_access_token(ADMIN_ID, [CAP_MANAGE_OPTIONS], expires_delta=timedelta(hours=-1))
    return {"Authorization": f"Bearer {token}"}


@pytest.fixture
def now() -> datetime:
    """The fixed instant analytics tests treat as the present."""
    return NOW


@pytest.fixture
def commerce_enabled(monkeypatch):
    """Pretend the storefront is installed."""
    monkeypatch.setattr(settings, "COMMERCE_ENABLED", True)
