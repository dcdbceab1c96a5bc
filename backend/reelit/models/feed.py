"""
Feed Models

Models Included:
----------------
1. Feed - An admin-curated, named gallery of videos
2. FeedVideo - Ordered membership of one video asset in one feed

Database Tables:
----------------
- feeds: One row per gallery; name is unique
- feed_videos: Join rows between feeds and media_assets

Relationships:
--------------
- Feed (1) ←→ (Many) FeedVideo
- MediaAsset (1) ←→ (Many) FeedVideo

Ordering:
---------
Members are read back ordered by (sort_order ASC, id ASC). Drag-and-drop
reordering writes sparse and sometimes colliding sort_order values, so the
insertion id is the tie breaker.

Uniqueness of (feed_id, video_id):
----------------------------------
Not enforced at the schema level. The same asset may be added to one feed
more than once unless FEED_ALLOW_DUPLICATE_VIDEOS is turned off, in which case
the repository refuses duplicates before inserting.
"""

from typing import TYPE_CHECKING, Optional

from sqlalchemy import ForeignKey, Integer, Text
from sqlalchemy.orm import Mapped, mapped_column, relationship

from reelit.db.base import AppendOnlyModel, BaseModel, String255

if TYPE_CHECKING:
    from reelit.models.asset import MediaAsset


class Feed(BaseModel):
    """
    Feed model - a named video gallery.

    Lifecycle: created → updated (any number of times) → deleted.
    There is no soft delete; deleting a feed removes its memberships.
    """

    __tablename__ = "feeds"

    name: Mapped[str] = mapped_column(
        String255,
        unique=True,
        nullable=False,
        comment="Gallery name shown to admins (unique)"
    )

    description: Mapped[Optional[str]] = mapped_column(
        Text,
        nullable=True,
        default="",
        comment="Free-form description"
    )

    videos: Mapped[list["FeedVideo"]] = relationship(
        "FeedVideo",
        back_populates="feed",
        cascade="all, delete-orphan",
        passive_deletes=True,
        order_by="(FeedVideo.sort_order, FeedVideo.id)",
    )

    def __repr__(self) -> str:
        return f"Feed(id={self.id}, name={self.name!r})"


class FeedVideo(AppendOnlyModel):
    """
    FeedVideo model - one video asset placed in one feed.

    Only sort_order changes after insert.
    """

    __tablename__ = "feed_videos"

    feed_id: Mapped[int] = mapped_column(
        Integer,
        ForeignKey("feeds.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
        comment="Feed this membership belongs to"
    )

    # Opaque reference into the asset store
    video_id: Mapped[int] = mapped_column(
        Integer,
        ForeignKey("media_assets.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
        comment="Video asset id"
    )

    sort_order: Mapped[int] = mapped_column(
        Integer,
        nullable=False,
        default=0,
        server_default="0",
        comment="Relative position inside the feed (ties broken by id)"
    )

    feed: Mapped["Feed"] = relationship("Feed", back_populates="videos")

    asset: Mapped["MediaAsset"] = relationship("MediaAsset", lazy="raise")

    def __repr__(self) -> str:
        return (
            f"FeedVideo(id={self.id}, feed_id={self.feed_id}, "
            f"video_id={self.video_id}, sort_order={self.sort_order})"
        )
