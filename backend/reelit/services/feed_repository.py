"""
Feed Repository

CRUD and ordering for feeds and their video memberships, plus the cached
"feeds with thumbnails" view.

Caching:
--------
The composite feed list (feed × membership count × first video thumbnail) is
held in an injected CachedView. Every successful mutation of a feed or a
membership deletes the cached value right after commit; the TTL only bounds
staleness for writes made outside this repository. Rebuilds are tagged with
the cache generation, so one that raced a write is never served.

Failures:
---------
Constraint violations come back as None / falsy MutationResult after a
rollback. Operations on missing rows succeed with rows_affected == 0.
"""

from typing import Any, Iterable, Optional

from sqlalchemy import delete, func, select, update
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from reelit.core.config import settings
from reelit.core.logging import get_logger
from reelit.models.asset import MediaAsset
from reelit.models.feed import Feed, FeedVideo
from reelit.services.asset_store import AssetStore, thumbnail_for
from reelit.services.cache import CachedView
from reelit.services.results import (
    DUPLICATE_MEMBERSHIP,
    DUPLICATE_NAME,
    FEED_NOT_FOUND,
    INVALID_NAME,
    INVALID_VIDEO,
    MutationResult,
)

logger = get_logger(__name__)


def _thumbnail_alt_fallback(feed_name: str) -> str:
    return f"Thumbnail for {feed_name}"


class FeedRepository:
    """Owns Feed and FeedVideo rows."""

    def __init__(
        self,
        db: AsyncSession,
        cache: CachedView,
        allow_duplicate_videos: Optional[bool] = None,
    ):
        self.db = db
        self.cache = cache
        self.assets = AssetStore(db)
        if allow_duplicate_videos is None:
            allow_duplicate_videos = settings.FEED_ALLOW_DUPLICATE_VIDEOS
        self.allow_duplicate_videos = allow_duplicate_videos

    # ========================================
    # Feed Reads
    # ========================================

    async def get_feeds(self) -> list[Feed]:
        """All feeds, alphabetical by name. Not cached."""
        result = await self.db.execute(
            select(Feed)
            .order_by(Feed.name.asc())
            .execution_options(populate_existing=True)
        )
        return list(result.scalars().all())

    async def get_feed(self, feed_id: int) -> Optional[Feed]:
        # Bulk UPDATE/DELETE bypass the identity map, so always reload
        return await self.db.get(Feed, feed_id, populate_existing=True)

    async def get_feeds_with_thumbnails(self) -> list[dict[str, Any]]:
        """
        Every feed with its membership count and first-video thumbnail.

        The first video is the member with the lowest video id. Served from
        the cache when present; otherwise rebuilt and stored under the
        generation read before the query, so a write that lands mid-rebuild
        leaves the rebuilt list unused.
        """
        generation = await self.cache.generation()
        cached = await self.cache.get()
        if cached is not None:
            return cached

        result = await self.db.execute(
            select(
                Feed,
                func.count(FeedVideo.id).label("video_count"),
                func.min(FeedVideo.video_id).label("first_video_id"),
            )
            .outerjoin(FeedVideo, FeedVideo.feed_id == Feed.id)
            .group_by(Feed.id)
            .order_by(Feed.name.asc())
            .execution_options(populate_existing=True)
        )
        rows = result.all()

        first_ids = [row.first_video_id for row in rows if row.first_video_id is not None]
        assets = await self.assets.get_many(first_ids)

        feeds = []
        for feed, video_count, first_video_id in rows:
            url, alt = thumbnail_for(
                assets.get(first_video_id),
                fallback_alt=_thumbnail_alt_fallback(feed.name),
            )
            feeds.append({
                "id": feed.id,
                "name": feed.name,
                "description": feed.description or "",
                "created_at": feed.created_at.isoformat(),
                "updated_at": feed.updated_at.isoformat(),
                "video_count": video_count,
                "first_video_id": first_video_id,
                "thumbnail_url": url,
                "thumbnail_alt": alt,
            })

        if generation is not None:
            await self.cache.set(feeds, generation)
        logger.debug("feed_list_rebuilt", feeds=len(feeds))
        return feeds

    async def get_feed_thumbnail_data(self, feed_id: int) -> Optional[dict[str, Any]]:
        """Single-card variant of get_feeds_with_thumbnails; never cached."""
        feed = await self.get_feed(feed_id)
        if feed is None:
            return None

        result = await self.db.execute(
            select(
                func.count(FeedVideo.id),
                func.min(FeedVideo.video_id),
            ).where(FeedVideo.feed_id == feed_id)
        )
        video_count, first_video_id = result.one()

        asset = await self.assets.get(first_video_id) if first_video_id is not None else None
        url, alt = thumbnail_for(asset, fallback_alt=_thumbnail_alt_fallback(feed.name))

        return {
            "feed_id": feed.id,
            "video_count": video_count,
            "first_video_id": first_video_id,
            "thumbnail_url": url,
            "thumbnail_alt": alt,
        }

    # ========================================
    # Feed Mutations
    # ========================================

    async def create_feed(self, name: str, description: Optional[str] = "") -> Optional[int]:
        """Insert a feed. Returns its id, or None when the name is taken or blank."""
        name = (name or "").strip()
        if not name:
            logger.warning("feed_create_rejected", reason=INVALID_NAME)
            return None

        feed = Feed(name=name, description=description or "")
        self.db.add(feed)
        try:
            await self.db.commit()
        except IntegrityError:
            await self.db.rollback()
            logger.warning("feed_create_rejected", name=name, reason=DUPLICATE_NAME)
            return None

        await self.cache.invalidate()
        logger.info("feed_created", feed_id=feed.id, name=name)
        return feed.id

    async def update_feed(
        self,
        feed_id: int,
        name: str,
        description: Optional[str] = "",
    ) -> MutationResult:
        """Replace name and description. A missing feed is ok() with 0 rows."""
        name = (name or "").strip()
        if not name:
            return MutationResult.failed(INVALID_NAME)

        try:
            result = await self.db.execute(
                update(Feed)
                .where(Feed.id == feed_id)
                .values(name=name, description=description or "")
                .execution_options(synchronize_session=False)
            )
            await self.db.commit()
        except IntegrityError:
            await self.db.rollback()
            logger.warning("feed_update_rejected", feed_id=feed_id, reason=DUPLICATE_NAME)
            return MutationResult.failed(DUPLICATE_NAME)

        await self.cache.invalidate()
        logger.info("feed_updated", feed_id=feed_id, rows_affected=result.rowcount)
        return MutationResult.ok(result.rowcount)

    async def delete_feed(self, feed_id: int) -> MutationResult:
        """Remove memberships, then the feed. Idempotent."""
        await self.db.execute(
            delete(FeedVideo)
            .where(FeedVideo.feed_id == feed_id)
            .execution_options(synchronize_session=False)
        )
        result = await self.db.execute(
            delete(Feed)
            .where(Feed.id == feed_id)
            .execution_options(synchronize_session=False)
        )
        await self.db.commit()

        await self.cache.invalidate()
        logger.info("feed_deleted", feed_id=feed_id, rows_affected=result.rowcount)
        return MutationResult.ok(result.rowcount)

    # ========================================
    # Memberships
    # ========================================

    async def get_feed_videos(self, feed_id: int) -> list[dict[str, Any]]:
        """
        Members joined with their assets, ordered by (sort_order, id).

        Members whose asset row is gone are skipped.
        """
        result = await self.db.execute(
            select(FeedVideo, MediaAsset)
            .join(MediaAsset, MediaAsset.id == FeedVideo.video_id)
            .where(FeedVideo.feed_id == feed_id)
            .order_by(FeedVideo.sort_order.asc(), FeedVideo.id.asc())
            .execution_options(populate_existing=True)
        )

        return [
            {
                "id": membership.id,
                "feed_id": membership.feed_id,
                "video_id": membership.video_id,
                "sort_order": membership.sort_order,
                "created_at": membership.created_at,
                "title": asset.title,
                "url": asset.url,
                "mime": asset.mime_type,
                "thumbnail": asset.thumbnail_url or "",
            }
            for membership, asset in result.all()
        ]

    async def has_video(self, feed_id: int, video_id: int) -> bool:
        result = await self.db.execute(
            select(FeedVideo.id)
            .where(FeedVideo.feed_id == feed_id, FeedVideo.video_id == video_id)
            .limit(1)
        )
        return result.scalar_one_or_none() is not None

    async def membership_refusal(self, feed_id: int, video_id: int) -> Optional[str]:
        """
        Why adding video_id to feed_id would be refused, or None if it would not.

        Reasons: feed_not_found, invalid_video, duplicate_membership (only when
        duplicates are disallowed).
        """
        if await self.get_feed(feed_id) is None:
            return FEED_NOT_FOUND
        if not await self.assets.exists(video_id):
            return INVALID_VIDEO
        if not self.allow_duplicate_videos and await self.has_video(feed_id, video_id):
            return DUPLICATE_MEMBERSHIP
        return None

    async def add_video_to_feed(
        self,
        feed_id: int,
        video_id: int,
        sort_order: int = 0,
    ) -> Optional[int]:
        """Insert a membership. Returns its id, or None if refused."""
        reason = await self.membership_refusal(feed_id, video_id)
        if reason is not None:
            logger.warning("feed_video_add_rejected", feed_id=feed_id, video_id=video_id, reason=reason)
            return None

        membership = FeedVideo(feed_id=feed_id, video_id=video_id, sort_order=sort_order)
        self.db.add(membership)
        try:
            await self.db.commit()
        except IntegrityError:
            # Feed or asset deleted between the checks and the insert
            await self.db.rollback()
            logger.warning("feed_video_add_rejected", feed_id=feed_id, video_id=video_id, error="integrity_error")
            return None

        await self.cache.invalidate()
        logger.info("feed_video_added", feed_id=feed_id, video_id=video_id, sort_order=sort_order)
        return membership.id

    async def remove_video_from_feed(self, feed_id: int, video_id: int) -> MutationResult:
        """Delete every membership of video_id in feed_id."""
        result = await self.db.execute(
            delete(FeedVideo)
            .where(FeedVideo.feed_id == feed_id, FeedVideo.video_id == video_id)
            .execution_options(synchronize_session=False)
        )
        await self.db.commit()

        await self.cache.invalidate()
        logger.info("feed_video_removed", feed_id=feed_id, video_id=video_id, rows_affected=result.rowcount)
        return MutationResult.ok(result.rowcount)

    async def update_video_sort_order(
        self,
        feed_id: int,
        video_id: int,
        sort_order: int,
    ) -> MutationResult:
        """Set sort_order on a membership. Last writer wins."""
        rows = await self._set_sort_order(feed_id, video_id, sort_order)
        await self.db.commit()

        await self.cache.invalidate()
        logger.info("feed_video_reordered", feed_id=feed_id, video_id=video_id, sort_order=sort_order)
        return MutationResult.ok(rows)

    async def reorder_feed_videos(
        self,
        feed_id: int,
        orders: Iterable[tuple[int, int]],
    ) -> MutationResult:
        """
        Apply a drag-and-drop reorder: (video_id, sort_order) pairs.

        One transaction and one cache invalidation for the whole batch.
        """
        rows = 0
        count = 0
        for video_id, sort_order in orders:
            rows += await self._set_sort_order(feed_id, video_id, sort_order)
            count += 1
        await self.db.commit()

        await self.cache.invalidate()
        logger.info("feed_videos_reordered", feed_id=feed_id, pairs=count, rows_affected=rows)
        return MutationResult.ok(rows)

    async def _set_sort_order(self, feed_id: int, video_id: int, sort_order: int) -> int:
        result = await self.db.execute(
            update(FeedVideo)
            .where(FeedVideo.feed_id == feed_id, FeedVideo.video_id == video_id)
            .values(sort_order=sort_order)
            .execution_options(synchronize_session=False)
        )
        return result.rowcount
