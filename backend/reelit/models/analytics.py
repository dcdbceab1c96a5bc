"""
Analytics event model.

One row per engagement signal emitted by the player. Rows are append-only:
the application inserts them and never updates or deletes individual events.

video_id has no foreign key: events outlive the assets they
describe and the aggregator reports such videos under a placeholder title.
"""

import enum
from typing import Optional

from sqlalchemy import Index, Integer
from sqlalchemy.orm import Mapped, mapped_column

from reelit.db.base import AppendOnlyModel, String50, String64


class EventType(str, enum.Enum):
    """The only recognised engagement signals."""

    PLAY = "play"
    COMPLETE = "complete"
    PRODUCT_CLICK = "product_click"

    def __str__(self) -> str:
        return self.value

    @classmethod
    def values(cls) -> frozenset[str]:
        return frozenset(member.value for member in cls)


class AnalyticsEvent(AppendOnlyModel):
    """A single play / complete / product_click event."""

    __tablename__ = "analytics_events"

    video_id: Mapped[int] = mapped_column(Integer, nullable=False, index=True)

    feed_id: Mapped[Optional[int]] = mapped_column(Integer, nullable=True)

    # Stored as the plain string value so ad hoc SQL stays readable
    event_type: Mapped[str] = mapped_column(String50, nullable=False, index=True)

    # Seconds watched; meaningful on complete events
    watch_time: Mapped[int] = mapped_column(
        Integer,
        nullable=False,
        default=0,
        server_default="0",
    )

    product_id: Mapped[Optional[int]] = mapped_column(Integer, nullable=True)

    # Pseudonymous per-browser id minted client side
    session_id: Mapped[str] = mapped_column(String64, nullable=False)

    # created_at comes from AppendOnlyModel; every dashboard query range-scans it
    __table_args__ = (
        Index("ix_analytics_events_created_at", "created_at"),
    )

    def __repr__(self) -> str:
        return (
            f"AnalyticsEvent(id={self.id}, video_id={self.video_id}, "
            f"event_type={self.event_type!r})"
        )

