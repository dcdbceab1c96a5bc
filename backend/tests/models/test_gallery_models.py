"""
Tests for the gallery models.

Tests for:
- Feed name uniqueness
- FeedVideo defaults and cascades (feed side and asset side)
- AnalyticsEvent tolerance of unknown video ids
"""

import pytest
from sqlalchemy import delete, func, select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from reelit.models import AnalyticsEvent, EventType, Feed, FeedVideo, MediaAsset


async def _memberships(db: AsyncSession) -> int:
    result = await db.execute(select(func.count()).select_from(FeedVideo))
    return result.scalar_one()


async def test_feed_defaults(db_session: AsyncSession):
    feed = Feed(name="Summer")
    db_session.add(feed)
    await db_session.commit()

    assert feed.id is not None
    assert feed.description == ""
    assert feed.created_at is not None
    assert feed.updated_at is not None


async def test_feed_name_is_unique(db_session: AsyncSession):
    db_session.add(Feed(name="Summer"))
    await db_session.commit()

    db_session.add(Feed(name="Summer"))
    with pytest.raises(IntegrityError):
        await db_session.commit()
    await db_session.rollback()


async def test_membership_sort_order_defaults_to_zero(db_session: AsyncSession, videos):
    feed = Feed(name="Summer")
    db_session.add(feed)
    await db_session.flush()

    membership = FeedVideo(feed_id=feed.id, video_id=101)
    db_session.add(membership)
    await db_session.commit()

    assert membership.sort_order == 0


async def test_same_video_twice_is_allowed_by_schema(db_session: AsyncSession, videos):
    feed = Feed(name="Summer")
    db_session.add(feed)
    await db_session.flush()

    db_session.add_all([
        FeedVideo(feed_id=feed.id, video_id=101),
        FeedVideo(feed_id=feed.id, video_id=101),
    ])
    await db_session.commit()

    assert await _memberships(db_session) == 2


async def test_deleting_asset_removes_its_memberships(db_session: AsyncSession, videos):
    feed = Feed(name="Summer")
    db_session.add(feed)
    await db_session.flush()
    db_session.add_all([
        FeedVideo(feed_id=feed.id, video_id=101),
        FeedVideo(feed_id=feed.id, video_id=102),
    ])
    await db_session.commit()

    await db_session.execute(delete(MediaAsset).where(MediaAsset.id == 101))
    await db_session.commit()

    result = await db_session.execute(select(FeedVideo.video_id))
    assert result.scalars().all() == [102]


async def test_feed_videos_relationship_is_ordered(db_session: AsyncSession, videos):
    feed = Feed(name="Summer")
    db_session.add(feed)
    await db_session.flush()
    db_session.add_all([
        FeedVideo(feed_id=feed.id, video_id=101, sort_order=2),
        FeedVideo(feed_id=feed.id, video_id=102, sort_order=1),
        FeedVideo(feed_id=feed.id, video_id=103, sort_order=1),
    ])
    await db_session.commit()

    await db_session.refresh(feed, ["videos"])

    assert [member.video_id for member in feed.videos] == [102, 103, 101]


async def test_event_for_unknown_video_is_stored(db_session: AsyncSession):
    event = AnalyticsEvent(video_id=999, event_type=EventType.PLAY.value, session_id="s1")
    db_session.add(event)
    await db_session.commit()

    assert event.id is not None
    assert event.watch_time == 0
    assert event.feed_id is None


def test_event_types():
    assert EventType.values() == {"play", "complete", "product_click"}
    assert str(EventType.PRODUCT_CLICK) == "product_click"
