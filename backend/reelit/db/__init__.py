"""Database utilities and session management."""

from reelit.db.base import (
    AppendOnlyModel,
    Base,
    BaseModel,
    String50,
    String64,
    String100,
    String255,
    String1000,
)
from reelit.db.deps import DBSession, get_db, get_db_override
from reelit.db.session import (
    AsyncSessionLocal,
    check_db_health,
    close_db,
    engine,
    get_session,
    init_db,
)

__all__ = [
    # Base classes
    "Base",
    "BaseModel",
    "AppendOnlyModel",
    # String types
    "String50",
    "String64",
    "String100",
    "String255",
    "String1000",
    # Session management
    "engine",
    "AsyncSessionLocal",
    "get_session",
    "init_db",
    "close_db",
    "check_db_health",
    # Dependencies
    "get_db",
    "DBSession",
    "get_db_override",
]
