"""
Pydantic schemas for request/response validation.

Import all schemas here for easy access.
"""

from reelit.schemas.analytics import (
    AnalyticsDashboard,
    DailyStat,
    SummaryStats,
    TopVideo,
    TrackEventRequest,
    TrackEventResponse,
)
from reelit.schemas.feed import (
    FeedCard,
    FeedCreate,
    FeedCreatedResponse,
    FeedReorder,
    FeedResponse,
    FeedThumbnail,
    FeedUpdate,
    FeedVideoAdd,
    FeedVideoAddedResponse,
    FeedVideoResponse,
    MutationResponse,
    SortOrderUpdate,
    VideoOrder,
)
from reelit.schemas.video import (
    ProductList,
    ProductSummary,
    VideoItem,
    VideoPage,
    VideoProductsUpdate,
)

__all__ = [
    # Feeds
    "FeedCreate",
    "FeedUpdate",
    "FeedResponse",
    "FeedCard",
    "FeedThumbnail",
    "FeedVideoAdd",
    "FeedVideoResponse",
    "FeedVideoAddedResponse",
    "FeedCreatedResponse",
    "FeedReorder",
    "VideoOrder",
    "SortOrderUpdate",
    "MutationResponse",
    # Videos & products
    "VideoItem",
    "VideoPage",
    "ProductSummary",
    "ProductList",
    "VideoProductsUpdate",
    # Analytics
    "TrackEventRequest",
    "TrackEventResponse",
    "SummaryStats",
    "TopVideo",
    "DailyStat",
    "AnalyticsDashboard",
]
