"""
Database Session Management

This module handles the database connection lifecycle and session management.

Architecture Flow:
------------------
Application Start → Create Engine → Connection Pool Ready
↓
API Request → Get Session → Execute Queries → Commit/Rollback → Close Session
↓
Application Shutdown → Dispose Engine → Close All Connections
"""

from collections.abc import AsyncGenerator
from typing import Any

from sqlalchemy import text
from sqlalchemy.ext.asyncio import (
    AsyncEngine,
    AsyncSession,
    async_sessionmaker,
    create_async_engine,
)
from sqlalchemy.pool import AsyncAdaptedQueuePool, NullPool

from reelit.core.config import settings
from reelit.core.logging import get_logger

logger = get_logger(__name__)


# ================================
# Database Engine Configuration
# ================================

def _is_sqlite(url: str) -> bool:
    return url.startswith("sqlite")


def get_engine_config() -> dict[str, Any]:
    """
    Configure the database engine based on environment.

    Pool Types:
    -----------
    1. AsyncAdaptedQueuePool (development/production):
       - Keeps pool_size connections open, up to max_overflow extra
    2. NullPool (testing/staging):
       - New connection per checkout, closed immediately after use
    """
    config: dict[str, Any] = {
        "echo": settings.DB_ECHO,
    }

    if _is_sqlite(settings.DATABASE_URL):
        # Local runs without PostgreSQL; pool settings do not apply
        logger.info("configuring_database_engine", driver="aiosqlite")
        config["poolclass"] = NullPool
        return config

    config.update({
        # Test connections before use (dead connections after DB restarts)
        "pool_pre_ping": True,
        # Recycle after 1 hour
        "pool_recycle": 3600,
        "pool_timeout": 30,
        "connect_args": {
            "server_settings": {
                "application_name": settings.APP_NAME,
                # Daily analytics bucket DATE(created_at) in UTC
                "timezone": "UTC",
            }
        },
    })

    if settings.is_development or settings.is_production:
        logger.info(
            "configuring_database_engine",
            environment=settings.APP_ENV,
            pool_size=settings.DB_POOL_SIZE,
            max_overflow=settings.DB_MAX_OVERFLOW,
        )
        config.update({
            "poolclass": AsyncAdaptedQueuePool,
            "pool_size": settings.DB_POOL_SIZE,
            "max_overflow": settings.DB_MAX_OVERFLOW,
        })
        if settings.is_production:
            config["pool_recycle"] = 7200  # 2 hours
    else:
        logger.info(
            "configuring_database_engine",
            environment=settings.APP_ENV,
            pool_type="NullPool",
        )
        config["poolclass"] = NullPool

    return config


def create_engine() -> AsyncEngine:
    """
    Create the async database engine.

    Returns:
        AsyncEngine: The database engine instance
    """
    engine_config = get_engine_config()

    engine = create_async_engine(
        settings.DATABASE_URL,
        **engine_config
    )

    logger.info(
        "database_engine_created",
        pool_size=engine_config.get("pool_size", "NullPool"),
    )

    return engine


# ================================
# Global Engine Instance
# ================================
engine: AsyncEngine = create_engine()


# ================================
# Session Factory
# ================================
AsyncSessionLocal = async_sessionmaker(
    bind=engine,
    class_=AsyncSession,
    autoflush=False,
    autocommit=False,
    # Keep loaded attributes usable after commit
    expire_on_commit=False,
)


# ================================
# Session Lifecycle Functions
# ================================

async def get_session() -> AsyncGenerator[AsyncSession, None]:
    """
    Get a database session for a single request.

    - If route succeeds: Session closed normally
    - If route raises exception: Session rolled back, then closed

    Yields:
        AsyncSession: A database session for this request
    """
    async with AsyncSessionLocal() as session:
        try:
            yield session
        except Exception as e:
            logger.error(
                "database_session_error",
                error=str(e),
                error_type=type(e).__name__,
            )
            await session.rollback()
            raise


async def init_db() -> None:
    """
    Initialize the database.

    - Verifies the connection
    - Creates tables in development (production uses Alembic migrations)

    Called from: reelit.main.lifespan() startup event
    """
    logger.info("initializing_database")

    try:
        async with engine.begin() as conn:
            await conn.execute(text("SELECT 1"))

        logger.info("database_connection_successful")

        if settings.is_development:
            # Import models so every table is registered on the metadata
            from reelit.db.base import Base
            import reelit.models  # noqa: F401

            async with engine.begin() as conn:
                await conn.run_sync(Base.metadata.create_all)

            logger.info("database_tables_created")

    except Exception as e:
        logger.error(
            "database_initialization_failed",
            error=str(e),
            error_type=type(e).__name__,
        )
        raise


async def close_db() -> None:
    """
    Close the database connection pool.

    Called from: reelit.main.lifespan() shutdown event
    """
    logger.info("closing_database_connections")

    try:
        await engine.dispose()
        logger.info("database_connections_closed")

    except Exception as e:
        logger.error(
            "database_closure_failed",
            error=str(e),
            error_type=type(e).__name__,
        )
        # Don't raise - we're shutting down anyway


# ================================
# Database Health Check
# ================================

async def check_db_health() -> bool:
    """
    Check if the database is healthy and responsive.

    Returns:
        bool: True if database is healthy, False otherwise
    """
    try:
        async with engine.connect() as conn:
            await conn.execute(text("SELECT 1"))
        return True

    except Exception as e:
        logger.error(
            "database_health_check_failed",
            error=str(e),
            error_type=type(e).__name__,
        )
        return False
