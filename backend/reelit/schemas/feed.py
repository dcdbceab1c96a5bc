"""
Pydantic schemas for feed endpoints.

These schemas define the request/response structures for feeds and their
video memberships.
"""

from datetime import datetime
from typing import List, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator


# ========================================
# Request Schemas
# ========================================

class FeedCreate(BaseModel):
    """Request schema for creating a feed."""

    name: str = Field(
        ...,
        description="Unique gallery name",
        min_length=1,
        max_length=255,
        examples=["Summer Collection"]
    )

    description: Optional[str] = Field(
        "",
        description="Free-form description",
        max_length=5000,
    )

    @field_validator('name')
    @classmethod
    def validate_name(cls, v: str) -> str:
        v = v.strip()
        if not v:
            raise ValueError("Feed name cannot be empty")
        return v


class FeedUpdate(FeedCreate):
    """Request schema for replacing a feed's name and description."""


class FeedVideoAdd(BaseModel):
    """Request schema for adding a video to a feed."""

    video_id: int = Field(..., gt=0, description="Asset id of the video")

    sort_order: int = Field(0, description="Relative position (ties broken by insertion)")


class SortOrderUpdate(BaseModel):
    """Request schema for moving one video."""

    sort_order: int


class VideoOrder(BaseModel):
    video_id: int = Field(..., gt=0)
    sort_order: int


class FeedReorder(BaseModel):
    """Request schema for a drag-and-drop reorder of a whole feed."""

    video_orders: List[VideoOrder] = Field(..., description="New sort_order per video")


# ========================================
# Response Schemas
# ========================================

class FeedResponse(BaseModel):
    """A feed row."""

    model_config = ConfigDict(from_attributes=True)

    id: int
    name: str
    description: Optional[str] = ""
    created_at: datetime
    updated_at: datetime


class FeedCard(BaseModel):
    """A feed with its membership count and thumbnail (admin list view)."""

    id: int
    name: str
    description: str = ""
    created_at: datetime
    updated_at: datetime
    video_count: int
    first_video_id: Optional[int] = None
    thumbnail_url: str = ""
    thumbnail_alt: str = ""


class FeedThumbnail(BaseModel):
    """Thumbnail data for refreshing a single feed card."""

    feed_id: int
    video_count: int
    first_video_id: Optional[int] = None
    thumbnail_url: str = ""
    thumbnail_alt: str = ""


class FeedVideoResponse(BaseModel):
    """A membership joined with its asset."""

    id: int
    feed_id: int
    video_id: int
    sort_order: int
    created_at: datetime
    title: str
    url: str
    mime: str
    thumbnail: str = ""


class FeedCreatedResponse(BaseModel):
    feed_id: int
    message: str = "Feed created successfully"


class FeedVideoAddedResponse(BaseModel):
    id: int
    feed_id: int
    video_id: int
    message: str = "Video added to feed"


class MutationResponse(BaseModel):
    """Result of an update or delete; rows_affected is 0 for missing targets."""

    message: str
    rows_affected: int
