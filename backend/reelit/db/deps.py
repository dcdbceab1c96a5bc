"""
Database Dependencies for FastAPI Routes

Routes declare what they need (a database session) and FastAPI provides it:

    @router.get("/feeds")
    async def list_feeds(db: DBSession):
        ...

Sessions are always closed after the request, even on errors.
"""

from collections.abc import AsyncGenerator
from typing import Annotated, Callable

from fastapi import Depends
from sqlalchemy.ext.asyncio import AsyncSession

from reelit.db.session import get_session


# ================================
# Database Session Dependency
# ================================

async def get_db() -> AsyncGenerator[AsyncSession, None]:
    """
    FastAPI dependency that provides a database session.

    Each request gets its own session/transaction. Services commit
    explicitly; rollback happens automatically on errors.

    Yields:
        AsyncSession: Database session for the current request
    """
    async for session in get_session():
        yield session


# Reusable type annotation for database dependencies
DBSession = Annotated[AsyncSession, Depends(get_db)]


# ================================
# Testing Helpers
# ================================

def get_db_override(session: AsyncSession) -> Callable:
    """
    Create a dependency override for testing.

    Usage in Tests:
    ---------------
        app.dependency_overrides[get_db] = get_db_override(test_session)

    Args:
        session: The session to use instead of the real one

    Returns:
        A function that yields the test session
    """
    async def _override() -> AsyncGenerator[AsyncSession, None]:
        yield session

    return _override


__all__ = [
    "get_db",
    "DBSession",
    "get_db_override",
]
