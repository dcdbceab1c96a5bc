"""
Typed results returned by the core services.

Expected failures (duplicate names, missing rows, rejected events, an absent
commerce catalog) come back as values, never as exceptions, so the API layer
can turn them into user-facing messages.
"""

from dataclasses import dataclass, field
from typing import Any, Optional


@dataclass(frozen=True)
class MutationResult:
    """
    Outcome of an update or delete.

    Truthiness follows `success`. A successful call may still have touched
    zero rows (e.g. updating a feed that does not exist); strict callers
    check `rows_affected`.
    """

    success: bool
    rows_affected: int = 0
    reason: Optional[str] = None

    def __bool__(self) -> bool:
        return self.success

    @classmethod
    def ok(cls, rows_affected: int) -> "MutationResult":
        return cls(success=True, rows_affected=rows_affected)

    @classmethod
    def failed(cls, reason: str) -> "MutationResult":
        return cls(success=False, rows_affected=0, reason=reason)


@dataclass(frozen=True)
class TrackResult:
    """Outcome of a public tracking call."""

    ok: bool
    event_id: Optional[int] = None
    reason: Optional[str] = None

    def __bool__(self) -> bool:
        return self.ok


@dataclass(frozen=True)
class ProductLookup:
    """
    Products returned by the commerce catalog.

    available=False means the catalog is not installed; products is then empty.
    """

    available: bool
    products: list[Any] = field(default_factory=list)
    reason: Optional[str] = None

    @classmethod
    def unavailable(cls) -> "ProductLookup":
        return cls(available=False, reason=CATALOG_UNAVAILABLE)


# Reason strings
DUPLICATE_NAME = "duplicate_name"
INVALID_NAME = "invalid_name"
INVALID_DATA = "invalid_data"
INVALID_EVENT_TYPE = "invalid_event_type"
INVALID_VIDEO = "invalid_video"
RECORD_FAILED = "record_failed"
FEED_NOT_FOUND = "feed_not_found"
DUPLICATE_MEMBERSHIP = "duplicate_membership"
CATALOG_UNAVAILABLE = "catalog_unavailable"
