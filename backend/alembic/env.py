"""
Alembic Migration Environment

1. Load application settings (database URL)
2. Import all models so Base.metadata knows every table
3. Run migrations offline (emit SQL) or online (async engine)

Tables:
-------
feeds, feed_videos, analytics_events, plus the read models of the external
asset store (media_assets) and commerce catalog (products).
"""

import asyncio
import sys
from logging.config import fileConfig
from pathlib import Path

from sqlalchemy import pool
from sqlalchemy.engine import Connection
from sqlalchemy.ext.asyncio import async_engine_from_config

from alembic import context

# Add backend/ to the Python path so the reelit package imports
# when alembic runs from a source checkout
sys.path.insert(0, str(Path(__file__).resolve().parent.parent))

from reelit.core.config import settings
from reelit.db.base import Base

# Registers every table on Base.metadata
from reelit.models import (  # noqa: F401
    AnalyticsEvent,
    Feed,
    FeedVideo,
    MediaAsset,
    Product,
)

# ================================
# Alembic Config Object
# ================================

config = context.config

# DATABASE_URL from the environment wins over alembic.ini
config.set_main_option("sqlalchemy.url", settings.DATABASE_URL)

if config.config_file_name is not None:
    fileConfig(config.config_file_name)

target_metadata = Base.metadata


def run_migrations_offline() -> None:
    """
    Emit the migration SQL without connecting.

    Useful for reviewing a migration before a DBA applies it.
    """
    url = config.get_main_option("sqlalchemy.url")
    context.configure(
        url=url,
        target_metadata=target_metadata,
        literal_binds=True,
        dialect_opts={"paramstyle": "named"},
        compare_type=True,
        compare_server_default=True,
    )

    with context.begin_transaction():
        context.run_migrations()


def do_run_migrations(connection: Connection) -> None:
    context.configure(
        connection=connection,
        target_metadata=target_metadata,
        compare_type=True,  # Detect VARCHAR(50) → VARCHAR(100)
        compare_server_default=True,
        render_as_batch=True,  # SQLite needs batch mode for ALTER
    )

    with context.begin_transaction():
        context.run_migrations()


async def run_async_migrations() -> None:
    """
    Create an async engine and run migrations through run_sync.

    The application engine is async (asyncpg), so migrations use the same
    driver.
    """
    connectable = async_engine_from_config(
        config.get_section(config.config_ini_section, {}),
        prefix="sqlalchemy.",
        poolclass=pool.NullPool,  # One-off process; no pooling
    )

    async with connectable.connect() as connection:
        await connection.run_sync(do_run_migrations)

    await connectable.dispose()


def run_migrations_online() -> None:
    """Connect to the database and apply migrations."""
    asyncio.run(run_async_migrations())


# ================================
# Main Execution
# ================================

if context.is_offline_mode():
    run_migrations_offline()
else:
    run_migrations_online()
