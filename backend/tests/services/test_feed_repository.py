"""
Tests for FeedRepository.

Tests for:
- Feed CRUD and name uniqueness
- Membership ordering by (sort_order, id)
- Cascade of memberships on delete
- The cached feeds-with-thumbnails view and its invalidation
"""

from datetime import datetime, timedelta

import pytest
from sqlalchemy import func, select, update
from sqlalchemy.ext.asyncio import AsyncSession

from reelit.models import Feed, FeedVideo
from reelit.services.cache import CachedView, InMemoryCacheBackend
from reelit.services.feed_repository import FeedRepository
from reelit.services.results import (
    DUPLICATE_MEMBERSHIP,
    DUPLICATE_NAME,
    FEED_NOT_FOUND,
    INVALID_NAME,
    INVALID_VIDEO,
)


@pytest.fixture
def repo(db_session: AsyncSession, feed_cache: CachedView) -> FeedRepository:
    return FeedRepository(db_session, feed_cache)


async def _membership_count(db: AsyncSession, feed_id: int) -> int:
    result = await db.execute(
        select(func.count()).select_from(FeedVideo).where(FeedVideo.feed_id == feed_id)
    )
    return result.scalar_one()


def _video_ids(rows: list[dict]) -> list[int]:
    return [row["video_id"] for row in rows]


# ================================
# Feed CRUD
# ================================

class TestFeedCrud:

    async def test_create_feed_returns_id(self, repo: FeedRepository):
        feed_id = await repo.create_feed("Summer", None)

        assert feed_id is not None
        feed = await repo.get_feed(feed_id)
        assert feed.name == "Summer"
        assert feed.description == ""

    async def test_create_feed_strips_name(self, repo: FeedRepository):
        feed_id = await repo.create_feed("  Summer  ", "Hot days")

        feed = await repo.get_feed(feed_id)
        assert feed.name == "Summer"
        assert feed.description == "Hot days"

    async def test_blank_name_is_rejected(self, repo: FeedRepository):
        assert await repo.create_feed("   ", "x") is None
        assert await repo.get_feeds() == []

    async def test_duplicate_name_fails_and_keeps_existing(self, repo: FeedRepository):
        first_id = await repo.create_feed("Summer", "original")

        assert await repo.create_feed("Summer", "impostor") is None

        feeds = await repo.get_feeds()
        assert len(feeds) == 1
        assert feeds[0].id == first_id
        assert feeds[0].description == "original"

    async def test_get_feeds_is_alphabetical(self, repo: FeedRepository):
        for name in ("Winter", "Autumn", "Summer"):
            await repo.create_feed(name)

        assert [feed.name for feed in await repo.get_feeds()] == ["Autumn", "Summer", "Winter"]

    async def test_get_missing_feed_is_none(self, repo: FeedRepository):
        assert await repo.get_feed(999) is None

    async def test_update_feed(self, repo: FeedRepository):
        feed_id = await repo.create_feed("Summer", "old")

        result = await repo.update_feed(feed_id, "Summer 2026", "new")

        assert result
        assert result.rows_affected == 1
        feed = await repo.get_feed(feed_id)
        assert feed.name == "Summer 2026"
        assert feed.description == "new"

    async def test_update_feed_touches_updated_at(self, repo: FeedRepository, db_session: AsyncSession):
        feed_id = await repo.create_feed("Summer")
        await db_session.execute(
            update(Feed).where(Feed.id == feed_id).values(updated_at=datetime(2020, 1, 1))
        )
        await db_session.commit()
        before = (await repo.get_feed(feed_id)).updated_at

        await repo.update_feed(feed_id, "Summer 2026", "")

        after = (await repo.get_feed(feed_id)).updated_at
        assert after > before
        assert after - before > timedelta(days=365)

    async def test_update_missing_feed_succeeds_with_zero_rows(self, repo: FeedRepository):
        result = await repo.update_feed(999, "Ghost", "")

        assert result.success is True
        assert result.rows_affected == 0

    async def test_update_to_taken_name_fails(self, repo: FeedRepository):
        await repo.create_feed("Summer")
        winter_id = await repo.create_feed("Winter")

        result = await repo.update_feed(winter_id, "Summer", "")

        assert not result
        assert result.reason == DUPLICATE_NAME
        assert (await repo.get_feed(winter_id)).name == "Winter"

    async def test_update_with_blank_name_fails(self, repo: FeedRepository):
        feed_id = await repo.create_feed("Summer")

        result = await repo.update_feed(feed_id, "  ", "")

        assert not result
        assert result.reason == INVALID_NAME

    async def test_delete_feed_removes_memberships(
        self, repo: FeedRepository, db_session: AsyncSession, videos
    ):
        feed_id = await repo.create_feed("Summer")
        other_id = await repo.create_feed("Winter")
        await repo.add_video_to_feed(feed_id, 101)
        await repo.add_video_to_feed(feed_id, 102)
        await repo.add_video_to_feed(other_id, 101)

        result = await repo.delete_feed(feed_id)

        assert result.rows_affected == 1
        assert await repo.get_feed(feed_id) is None
        assert await _membership_count(db_session, feed_id) == 0
        assert await _membership_count(db_session, other_id) == 1

    async def test_delete_is_idempotent(self, repo: FeedRepository):
        feed_id = await repo.create_feed("Summer")
        await repo.delete_feed(feed_id)

        result = await repo.delete_feed(feed_id)

        assert result.success is True
        assert result.rows_affected == 0


# ================================
# Memberships
# ================================

class TestMemberships:

    async def test_add_then_remove_round_trip(self, repo: FeedRepository, videos):
        feed_id = await repo.create_feed("Summer")

        membership_id = await repo.add_video_to_feed(feed_id, 101)
        assert membership_id is not None
        assert 101 in _video_ids(await repo.get_feed_videos(feed_id))

        result = await repo.remove_video_from_feed(feed_id, 101)
        assert result.rows_affected == 1
        assert 101 not in _video_ids(await repo.get_feed_videos(feed_id))

    async def test_feed_videos_carry_asset_fields(self, repo: FeedRepository, videos):
        feed_id = await repo.create_feed("Summer")
        await repo.add_video_to_feed(feed_id, 101)

        [row] = await repo.get_feed_videos(feed_id)

        assert row["title"] == "Beach Day"
        assert row["url"] == "https://cdn.example.com/beach.mp4"
        assert row["mime"] == "video/mp4"
        assert row["thumbnail"] == "https://cdn.example.com/beach-150.jpg"

    async def test_order_is_sort_order_then_insertion(self, repo: FeedRepository, videos):
        feed_id = await repo.create_feed("Summer")
        await repo.add_video_to_feed(feed_id, 101, sort_order=5)
        await repo.add_video_to_feed(feed_id, 102, sort_order=0)
        await repo.add_video_to_feed(feed_id, 103, sort_order=0)

        assert _video_ids(await repo.get_feed_videos(feed_id)) == [102, 103, 101]

        # Colliding value: ties fall back to insertion order
        await repo.update_video_sort_order(feed_id, 101, 0)
        assert _video_ids(await repo.get_feed_videos(feed_id)) == [101, 102, 103]

        await repo.update_video_sort_order(feed_id, 102, -1)
        assert _video_ids(await repo.get_feed_videos(feed_id)) == [102, 101, 103]

    async def test_reorder_feed_videos(self, repo: FeedRepository, videos):
        feed_id = await repo.create_feed("Summer")
        for position, video_id in enumerate((101, 102, 103)):
            await repo.add_video_to_feed(feed_id, video_id, sort_order=position)

        result = await repo.reorder_feed_videos(feed_id, [(103, 0), (101, 1), (102, 2)])

        assert result.rows_affected == 3
        assert _video_ids(await repo.get_feed_videos(feed_id)) == [103, 101, 102]

    async def test_update_sort_order_for_missing_membership(self, repo: FeedRepository, videos):
        feed_id = await repo.create_feed("Summer")

        result = await repo.update_video_sort_order(feed_id, 101, 3)

        assert result.success is True
        assert result.rows_affected == 0

    async def test_add_to_missing_feed_is_refused(self, repo: FeedRepository, videos):
        assert await repo.add_video_to_feed(999, 101) is None

    async def test_add_unknown_video_is_refused(self, repo: FeedRepository, videos):
        feed_id = await repo.create_feed("Summer")

        assert await repo.add_video_to_feed(feed_id, 9999) is None
        assert await repo.get_feed_videos(feed_id) == []

    async def test_refusal_reasons(self, db_session: AsyncSession, feed_cache: CachedView, videos):
        repo = FeedRepository(db_session, feed_cache, allow_duplicate_videos=False)
        feed_id = await repo.create_feed("Summer")
        await repo.add_video_to_feed(feed_id, 101)

        assert await repo.membership_refusal(999, 101) == FEED_NOT_FOUND
        assert await repo.membership_refusal(feed_id, 9999) == INVALID_VIDEO
        assert await repo.membership_refusal(feed_id, 101) == DUPLICATE_MEMBERSHIP
        assert await repo.membership_refusal(feed_id, 102) is None

    async def test_duplicates_allowed_by_default(self, repo: FeedRepository, videos):
        feed_id = await repo.create_feed("Summer")
        await repo.add_video_to_feed(feed_id, 101)

        assert await repo.add_video_to_feed(feed_id, 101) is not None
        assert _video_ids(await repo.get_feed_videos(feed_id)) == [101, 101]

        # Removal takes every copy
        result = await repo.remove_video_from_feed(feed_id, 101)
        assert result.rows_affected == 2

    async def test_duplicates_refused_when_disabled(
        self, db_session: AsyncSession, feed_cache: CachedView, videos
    ):
        repo = FeedRepository(db_session, feed_cache, allow_duplicate_videos=False)
        feed_id = await repo.create_feed("Summer")
        await repo.add_video_to_feed(feed_id, 101)

        assert await repo.add_video_to_feed(feed_id, 101) is None
        assert _video_ids(await repo.get_feed_videos(feed_id)) == [101]


# ================================
# Thumbnails and Cache
# ================================

class TestFeedsWithThumbnails:

    async def test_counts_and_first_video(self, repo: FeedRepository, videos):
        summer = await repo.create_feed("Summer")
        await repo.create_feed("Empty")
        await repo.add_video_to_feed(summer, 102, sort_order=0)
        await repo.add_video_to_feed(summer, 101, sort_order=1)

        empty_card, summer_card = await repo.get_feeds_with_thumbnails()

        assert summer_card["name"] == "Summer"
        assert summer_card["video_count"] == 2
        # Lowest video id, not lowest sort_order
        assert summer_card["first_video_id"] == 101
        assert summer_card["thumbnail_url"] == "https://cdn.example.com/beach-150.jpg"
        assert summer_card["thumbnail_alt"] == "Beach"

        assert empty_card["video_count"] == 0
        assert empty_card["first_video_id"] is None
        assert empty_card["thumbnail_url"] == ""
        assert empty_card["thumbnail_alt"] == ""

    async def test_alt_falls_back_to_feed_name(self, repo: FeedRepository, videos):
        feed_id = await repo.create_feed("Hikes")
        await repo.add_video_to_feed(feed_id, 102)

        [card] = await repo.get_feeds_with_thumbnails()

        assert card["thumbnail_alt"] == "Thumbnail for Hikes"

    async def test_result_is_cached(
        self, repo: FeedRepository, db_session: AsyncSession, cache_backend: InMemoryCacheBackend
    ):
        await repo.create_feed("Summer")
        first = await repo.get_feeds_with_thumbnails()
        assert await cache_backend.get(repo.cache.key) is not None

        # A write behind the repository's back is not seen until invalidation
        db_session.add(Feed(name="Sneaky", description=""))
        await db_session.commit()

        assert await repo.get_feeds_with_thumbnails() == first

    @pytest.mark.parametrize("mutation", ["create", "update", "delete", "add", "remove", "sort", "reorder"])
    async def test_mutations_invalidate_cache(
        self, repo: FeedRepository, cache_backend: InMemoryCacheBackend, videos, mutation
    ):
        feed_id = await repo.create_feed("Summer")
        await repo.add_video_to_feed(feed_id, 101)
        await repo.get_feeds_with_thumbnails()
        assert await cache_backend.get(repo.cache.key) is not None

        if mutation == "create":
            await repo.create_feed("Winter")
        elif mutation == "update":
            await repo.update_feed(feed_id, "Summer!", "")
        elif mutation == "delete":
            await repo.delete_feed(feed_id)
        elif mutation == "add":
            await repo.add_video_to_feed(feed_id, 102)
        elif mutation == "remove":
            await repo.remove_video_from_feed(feed_id, 101)
        elif mutation == "sort":
            await repo.update_video_sort_order(feed_id, 101, 4)
        else:
            await repo.reorder_feed_videos(feed_id, [(101, 2)])

        assert await cache_backend.get(repo.cache.key) is None

    async def test_rebuilt_after_membership_change(self, repo: FeedRepository, videos):
        feed_id = await repo.create_feed("Summer")
        await repo.add_video_to_feed(feed_id, 102)
        [card] = await repo.get_feeds_with_thumbnails()
        assert card["first_video_id"] == 102

        await repo.add_video_to_feed(feed_id, 101)

        [card] = await repo.get_feeds_with_thumbnails()
        assert card["video_count"] == 2
        assert card["first_video_id"] == 101

    async def test_single_feed_thumbnail(self, repo: FeedRepository, videos):
        feed_id = await repo.create_feed("City")
        await repo.add_video_to_feed(feed_id, 103)

        data = await repo.get_feed_thumbnail_data(feed_id)

        assert data["feed_id"] == feed_id
        assert data["video_count"] == 1
        assert data["first_video_id"] == 103
        # 103 has no thumbnail
        assert data["thumbnail_url"] == ""
        assert data["thumbnail_alt"] == ""

    async def test_single_feed_thumbnail_missing_feed(self, repo: FeedRepository):
        assert await repo.get_feed_thumbnail_data(999) is None

    async def test_write_during_rebuild_is_not_masked(
        self, repo: FeedRepository, db_session: AsyncSession, feed_cache: CachedView, videos, monkeypatch
    ):
        feed_id = await repo.create_feed("Alpha")
        await repo.add_video_to_feed(feed_id, 101)
        writer = FeedRepository(db_session, feed_cache)
        fetch_assets = repo.assets.get_many

        async def fetch_then_write(asset_ids):
            assets = await fetch_assets(asset_ids)
            # Another admin commits while the list is being built
            await writer.create_feed("Beta")
            return assets

        monkeypatch.setattr(repo.assets, "get_many", fetch_then_write)
        rebuilt = await repo.get_feeds_with_thumbnails()
        monkeypatch.undo()

        assert [card["name"] for card in rebuilt] == ["Alpha"]
        assert await feed_cache.get() is None
        assert [card["name"] for card in await repo.get_feeds_with_thumbnails()] == ["Alpha", "Beta"]
