"""
Database Base Classes and Common Utilities

This module provides the foundation for all database models in the application.

Key Concepts:
--------------
1. DeclarativeBase: SQLAlchemy's base class that enables ORM functionality
2. Mixins: Shared columns used across models (id, created_at, updated_at)
3. orm_registry: Central registry that tracks all models and their metadata
"""

from datetime import datetime, timezone

from sqlalchemy import DateTime, MetaData, String
from sqlalchemy.orm import DeclarativeBase, Mapped, mapped_column, registry


def utcnow() -> datetime:
    """Timezone-aware current time in UTC."""
    return datetime.now(timezone.utc)


# ================================
# Naming Convention for Constraints
# ================================
# Consistent constraint names let Alembic track changes reliably.
#
# - ix_feeds_name: Index on 'feeds' table, 'name' column
# - fk_feed_videos_feed_id_feeds: Foreign key from 'feed_videos.feed_id' to 'feeds'
# - pk_feeds: Primary key on 'feeds' table
convention = {
    "ix": "ix_%(column_0_label)s",  # Index
    "uq": "uq_%(table_name)s_%(column_0_name)s",  # Unique constraint
    "ck": "ck_%(table_name)s_%(constraint_name)s",  # Check constraint
    "fk": "fk_%(table_name)s_%(column_0_name)s_%(referred_table_name)s",  # Foreign key
    "pk": "pk_%(table_name)s",  # Primary key
}

metadata = MetaData(naming_convention=convention)

orm_registry = registry(metadata=metadata)


# ================================
# Base DeclarativeBase Class
# ================================
class Base(DeclarativeBase):
    """
    Base class for all SQLAlchemy models.

    Usage:
        class Feed(Base):
            __tablename__ = "feeds"
            id: Mapped[int] = mapped_column(primary_key=True)
    """

    registry = orm_registry
    metadata = metadata

    __tablename__: str


# ================================
# Column Mixins
# ================================
class IdCreatedMixin:
    """
    Primary key plus creation timestamp.

    Used on its own by rows that are never modified after insert
    (feed memberships' identity, analytics events).
    """

    id: Mapped[int] = mapped_column(
        primary_key=True,
        autoincrement=True,
        comment="Auto-incrementing primary key"
    )

    # Timezone-aware UTC; set once on insert
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        default=utcnow,
        nullable=False,
        comment="Timestamp when record was created (UTC)"
    )

    def __repr__(self) -> str:
        return f"{self.__class__.__name__}(id={self.id})"


class CommonTableAttributes(IdCreatedMixin):
    """
    Mixin adding an updated_at timestamp that moves on every modification.
    """

    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        default=utcnow,
        onupdate=utcnow,
        nullable=False,
        comment="Timestamp when record was last updated (UTC)"
    )


# ================================
# Convenient Base Models
# ================================
class BaseModel(Base, CommonTableAttributes):
    """
    Ready-to-use base class for mutable entities.

    Every model automatically gets:
    - Primary key (id)
    - Creation timestamp (created_at)
    - Update timestamp (updated_at)
    """

    __abstract__ = True


class AppendOnlyModel(Base, IdCreatedMixin):
    """
    Base class for rows that carry no updated_at column.
    """

    __abstract__ = True


# ================================
# String Length Constraints
# ================================
String50 = String(50)  # Example: event types, statuses
String64 = String(64)  # Example: client session ids
String100 = String(100)  # Example: MIME types
String255 = String(255)  # Example: feed names, titles
String1000 = String(1000)  # Example: URLs
