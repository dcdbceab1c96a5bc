"""
Analytics API endpoints.

Dashboard reads require manage_options. POST /analytics/track is public
(site visitors emit events) and rate limited per client IP.
"""

from typing import Annotated, List, Optional

from fastapi import APIRouter, Depends, HTTPException, Query, status

from reelit.api.deps import Analytics, Events
from reelit.core.auth import require_capability
from reelit.core.config import settings
from reelit.core.rate_limit import limit_track_events
from reelit.core.security import CAP_MANAGE_OPTIONS
from reelit.schemas.analytics import (
    AnalyticsDashboard,
    DailyStat,
    SummaryStats,
    TopVideo,
    TrackEventRequest,
    TrackEventResponse,
)
from reelit.services.results import RECORD_FAILED

router = APIRouter(prefix="/analytics", tags=["Analytics"])

require_admin = require_capability(CAP_MANAGE_OPTIONS)

Days = Annotated[Optional[int], Query(ge=0, le=3650, description="Trailing window in days")]


def _days(days: Optional[int]) -> int:
    return settings.ANALYTICS_DEFAULT_DAYS if days is None else days


# ========================================
# Dashboard
# ========================================

@router.get("", response_model=AnalyticsDashboard, dependencies=[Depends(require_admin)])
async def dashboard(analytics: Analytics, days: Days = None):
    """Summary, top videos and daily series in one response."""
    return await analytics.get_dashboard(_days(days))


@router.get("/summary", response_model=SummaryStats, dependencies=[Depends(require_admin)])
async def summary(analytics: Analytics, days: Days = None):
    return await analytics.get_summary_stats(_days(days))


@router.get("/top-videos", response_model=List[TopVideo], dependencies=[Depends(require_admin)])
async def top_videos(
    analytics: Analytics,
    days: Days = None,
    limit: int = Query(settings.ANALYTICS_TOP_VIDEOS_LIMIT, ge=1, le=100),
):
    return await analytics.get_top_videos(_days(days), limit=limit)


@router.get("/daily", response_model=List[DailyStat], dependencies=[Depends(require_admin)])
async def daily(analytics: Analytics, days: Days = None):
    """Per-day counts; days without events are omitted."""
    return await analytics.get_daily_stats(_days(days))


# ========================================
# Public Tracking
# ========================================

@router.post(
    "/track",
    response_model=TrackEventResponse,
    status_code=status.HTTP_201_CREATED,
    dependencies=[Depends(limit_track_events)],
)
async def track_event(payload: TrackEventRequest, events: Events):
    """
    Record an engagement event from the gallery player.

    Rejected events return 400 with the reason (invalid_data,
    invalid_event_type, invalid_video); a failed insert returns 500.
    """
    result = await events.track_event(
        video_id=payload.video_id,
        event_type=payload.event_type,
        session_id=payload.session_id,
        feed_id=payload.feed_id,
        watch_time=payload.watch_time,
        product_id=payload.product_id,
    )
    if not result:
        if result.reason == RECORD_FAILED:
            raise HTTPException(
                status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
                detail=result.reason,
            )
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=result.reason)

    return TrackEventResponse(event_id=result.event_id)
