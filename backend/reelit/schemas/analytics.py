"""
Pydantic schemas for analytics endpoints.

The tracking request is loose: the public endpoint accepts
whatever the player sends and EventStore.track_event decides what is valid,
returning a reason string rather than a schema error.
"""

import datetime
from typing import Any, List, Optional

from pydantic import BaseModel, Field


# ========================================
# Tracking
# ========================================

class TrackEventRequest(BaseModel):
    """Engagement event sent by the gallery player."""

    event_type: Optional[str] = Field(None, examples=["play"])
    video_id: Optional[Any] = Field(None, examples=[101])
    feed_id: Optional[Any] = None
    watch_time: Optional[Any] = 0
    product_id: Optional[Any] = None
    session_id: Optional[str] = Field(None, examples=["s_9f2c1a"])


class TrackEventResponse(BaseModel):
    message: str = "Event tracked"
    event_id: int


# ========================================
# Dashboard
# ========================================

class SummaryStats(BaseModel):
    total_plays: int
    total_completions: int
    total_clicks: int
    avg_watch_time: float
    unique_visitors: int
    completion_rate: float


class TopVideo(BaseModel):
    video_id: int
    plays: int
    completions: int
    clicks: int
    avg_watch_time: float
    title: str
    completion_rate: float


class DailyStat(BaseModel):
    date: datetime.date
    plays: int
    completions: int
    clicks: int


class AnalyticsDashboard(BaseModel):
    stats: SummaryStats
    top_videos: List[TopVideo]
    daily: List[DailyStat]
