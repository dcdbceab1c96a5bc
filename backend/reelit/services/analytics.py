"""
Analytics Aggregator

Dashboard statistics computed live from analytics_events on every call.
There is no rollup table: reads pay for the aggregation, writes stay a single
INSERT, and results are never stale.

Windows:
--------
- Summary and top videos: created_at >= now - days
- Daily series: whole calendar days, from the start of (today - days)

Deleted assets:
---------------
Top videos LEFT JOIN the asset store, so events for an asset that no longer
exists are still reported, under ANALYTICS_DELETED_VIDEO_TITLE.
"""

from datetime import date, datetime, time, timedelta, timezone
from typing import Any, Callable, Optional

from sqlalchemy import case, distinct, func, select
from sqlalchemy.ext.asyncio import AsyncSession

from reelit.core.config import settings
from reelit.core.logging import get_logger
from reelit.db.base import utcnow
from reelit.models.analytics import AnalyticsEvent, EventType
from reelit.models.asset import MediaAsset

logger = get_logger(__name__)


def completion_rate(plays: int, completions: int) -> float:
    """Percentage of plays that completed, 1 decimal; 0 when nothing played."""
    if plays > 0:
        return round(100 * completions / plays, 1)
    return 0.0


def _round_avg(value: Optional[Any]) -> float:
    if value is None:
        return 0.0
    return round(float(value), 1)


def _count_of(event_type: EventType):
    return func.coalesce(
        func.sum(case((AnalyticsEvent.event_type == event_type.value, 1), else_=0)),
        0,
    )


def _avg_completed_watch_time():
    return func.avg(
        case(
            (AnalyticsEvent.event_type == EventType.COMPLETE.value, AnalyticsEvent.watch_time),
            else_=None,
        )
    )


class AnalyticsAggregator:
    """Read-only aggregate queries over the event log."""

    def __init__(self, db: AsyncSession, clock: Callable[[], datetime] = utcnow):
        self.db = db
        self.clock = clock

    def _window_start(self, days: int) -> datetime:
        return self.clock() - timedelta(days=max(0, days))

    def _first_day(self, days: int) -> datetime:
        cutoff = self._window_start(days)
        return datetime.combine(cutoff.date(), time.min, tzinfo=cutoff.tzinfo or timezone.utc)

    # ========================================
    # Summary
    # ========================================

    async def get_summary_stats(self, days: int) -> dict[str, Any]:
        """
        Totals over the trailing window.

        Returns:
            {total_plays, total_completions, total_clicks, avg_watch_time,
             unique_visitors, completion_rate}
        """
        result = await self.db.execute(
            select(
                _count_of(EventType.PLAY).label("plays"),
                _count_of(EventType.COMPLETE).label("completions"),
                _count_of(EventType.PRODUCT_CLICK).label("clicks"),
                _avg_completed_watch_time().label("avg_watch_time"),
                func.count(distinct(AnalyticsEvent.session_id)).label("unique_visitors"),
            ).where(AnalyticsEvent.created_at >= self._window_start(days))
        )
        row = result.one()

        plays = int(row.plays)
        completions = int(row.completions)
        return {
            "total_plays": plays,
            "total_completions": completions,
            "total_clicks": int(row.clicks),
            "avg_watch_time": _round_avg(row.avg_watch_time),
            "unique_visitors": int(row.unique_visitors),
            "completion_rate": completion_rate(plays, completions),
        }

    # ========================================
    # Leaderboard
    # ========================================

    async def get_top_videos(self, days: int, limit: Optional[int] = None) -> list[dict[str, Any]]:
        """Per-video totals, most played first (video id breaks ties)."""
        if limit is None:
            limit = settings.ANALYTICS_TOP_VIDEOS_LIMIT

        plays = _count_of(EventType.PLAY).label("plays")
        result = await self.db.execute(
            select(
                AnalyticsEvent.video_id,
                plays,
                _count_of(EventType.COMPLETE).label("completions"),
                _count_of(EventType.PRODUCT_CLICK).label("clicks"),
                _avg_completed_watch_time().label("avg_watch_time"),
                MediaAsset.title,
            )
            .outerjoin(MediaAsset, MediaAsset.id == AnalyticsEvent.video_id)
            .where(AnalyticsEvent.created_at >= self._window_start(days))
            .group_by(AnalyticsEvent.video_id, MediaAsset.title)
            .order_by(plays.desc(), AnalyticsEvent.video_id.asc())
            .limit(max(0, limit))
        )

        videos = []
        for row in result.all():
            video_plays = int(row.plays)
            video_completions = int(row.completions)
            videos.append({
                "video_id": row.video_id,
                "plays": video_plays,
                "completions": video_completions,
                "clicks": int(row.clicks),
                "avg_watch_time": _round_avg(row.avg_watch_time),
                "title": row.title if row.title is not None else settings.ANALYTICS_DELETED_VIDEO_TITLE,
                "completion_rate": completion_rate(video_plays, video_completions),
            })
        return videos

    # ========================================
    # Time Series
    # ========================================

    async def get_daily_stats(self, days: int) -> list[dict[str, Any]]:
        """
        Per-day counts, oldest first.

        Sparse: days without events are absent, so charts must fill gaps.
        """
        day = func.date(AnalyticsEvent.created_at).label("date")
        result = await self.db.execute(
            select(
                day,
                _count_of(EventType.PLAY).label("plays"),
                _count_of(EventType.COMPLETE).label("completions"),
                _count_of(EventType.PRODUCT_CLICK).label("clicks"),
            )
            .where(AnalyticsEvent.created_at >= self._first_day(days))
            .group_by(day)
            .order_by(day.asc())
        )

        return [
            {
                # SQLite hands DATE() back as text
                "date": date.fromisoformat(row.date) if isinstance(row.date, str) else row.date,
                "plays": int(row.plays),
                "completions": int(row.completions),
                "clicks": int(row.clicks),
            }
            for row in result.all()
        ]

    async def get_dashboard(self, days: int) -> dict[str, Any]:
        """Summary, leaderboard and daily series for one window."""
        dashboard = {
            "stats": await self.get_summary_stats(days),
            "top_videos": await self.get_top_videos(days),
            "daily": await self.get_daily_stats(days),
        }
        logger.debug("analytics_dashboard_built", days=days)
        return dashboard
