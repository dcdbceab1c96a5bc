"""
Feed API endpoints.

Admin-only CRUD for feeds and their ordered video memberships. Every route
requires the manage_options capability.
"""

from typing import List

from fastapi import APIRouter, Depends, HTTPException, status

from reelit.api.deps import Feeds
from reelit.core.auth import require_capability
from reelit.core.security import CAP_MANAGE_OPTIONS
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
)
from reelit.services.results import (
    DUPLICATE_MEMBERSHIP,
    DUPLICATE_NAME,
    FEED_NOT_FOUND,
    INVALID_VIDEO,
)

router = APIRouter(
    prefix="/feeds",
    tags=["Feeds"],
    dependencies=[Depends(require_capability(CAP_MANAGE_OPTIONS))],
)

_REFUSAL_STATUS = {
    FEED_NOT_FOUND: status.HTTP_404_NOT_FOUND,
    DUPLICATE_MEMBERSHIP: status.HTTP_409_CONFLICT,
    INVALID_VIDEO: status.HTTP_400_BAD_REQUEST,
}


# ========================================
# Helper Functions
# ========================================

async def _require_feed(feeds: Feeds, feed_id: int):
    feed = await feeds.get_feed(feed_id)
    if feed is None:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail="Feed not found",
        )
    return feed


# ========================================
# Feeds
# ========================================

@router.get("", response_model=List[FeedResponse])
async def list_feeds(feeds: Feeds):
    """All feeds, alphabetical."""
    return await feeds.get_feeds()


@router.get("/with-thumbnails", response_model=List[FeedCard])
async def list_feeds_with_thumbnails(feeds: Feeds):
    """Feeds with membership counts and first-video thumbnails (cached)."""
    return await feeds.get_feeds_with_thumbnails()


@router.post("", response_model=FeedCreatedResponse, status_code=status.HTTP_201_CREATED)
async def create_feed(payload: FeedCreate, feeds: Feeds):
    feed_id = await feeds.create_feed(payload.name, payload.description)
    if feed_id is None:
        raise HTTPException(
            status_code=status.HTTP_409_CONFLICT,
            detail="A feed with this name already exists",
        )
    return FeedCreatedResponse(feed_id=feed_id)


@router.get("/{feed_id}", response_model=FeedResponse)
async def get_feed(feed_id: int, feeds: Feeds):
    return await _require_feed(feeds, feed_id)


@router.put("/{feed_id}", response_model=MutationResponse)
async def update_feed(feed_id: int, payload: FeedUpdate, feeds: Feeds):
    """
    Replace a feed's name and description.

    Updating a feed that does not exist succeeds with rows_affected=0.
    """
    result = await feeds.update_feed(feed_id, payload.name, payload.description)
    if not result:
        if result.reason == DUPLICATE_NAME:
            raise HTTPException(
                status_code=status.HTTP_409_CONFLICT,
                detail="A feed with this name already exists",
            )
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=result.reason)
    return MutationResponse(message="Feed updated", rows_affected=result.rows_affected)


@router.delete("/{feed_id}", response_model=MutationResponse)
async def delete_feed(feed_id: int, feeds: Feeds):
    """Delete a feed and all its memberships. Idempotent."""
    result = await feeds.delete_feed(feed_id)
    return MutationResponse(message="Feed deleted", rows_affected=result.rows_affected)


@router.get("/{feed_id}/thumbnail", response_model=FeedThumbnail)
async def get_feed_thumbnail(feed_id: int, feeds: Feeds):
    data = await feeds.get_feed_thumbnail_data(feed_id)
    if data is None:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail="Feed not found",
        )
    return data


# ========================================
# Memberships
# ========================================

@router.get("/{feed_id}/videos", response_model=List[FeedVideoResponse])
async def list_feed_videos(feed_id: int, feeds: Feeds):
    """Videos in display order."""
    await _require_feed(feeds, feed_id)
    return await feeds.get_feed_videos(feed_id)


@router.post(
    "/{feed_id}/videos",
    response_model=FeedVideoAddedResponse,
    status_code=status.HTTP_201_CREATED,
)
async def add_video(feed_id: int, payload: FeedVideoAdd, feeds: Feeds):
    """
    Add a video to a feed.

    404 for a missing feed, 409 for a refused duplicate, 400 for an unknown
    video or a membership that could not be written.
    """
    reason = await feeds.membership_refusal(feed_id, payload.video_id)
    if reason is not None:
        raise HTTPException(status_code=_REFUSAL_STATUS[reason], detail=reason)

    membership_id = await feeds.add_video_to_feed(feed_id, payload.video_id, payload.sort_order)
    if membership_id is None:
        # Feed or video deleted since the check
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail=await feeds.membership_refusal(feed_id, payload.video_id) or INVALID_VIDEO,
        )
    return FeedVideoAddedResponse(id=membership_id, feed_id=feed_id, video_id=payload.video_id)


@router.delete("/{feed_id}/videos/{video_id}", response_model=MutationResponse)
async def remove_video(feed_id: int, video_id: int, feeds: Feeds):
    result = await feeds.remove_video_from_feed(feed_id, video_id)
    return MutationResponse(message="Video removed from feed", rows_affected=result.rows_affected)


@router.put("/{feed_id}/videos/order", response_model=MutationResponse)
async def reorder_videos(feed_id: int, payload: FeedReorder, feeds: Feeds):
    """Drag-and-drop reorder. Concurrent reorders are last-writer-wins."""
    result = await feeds.reorder_feed_videos(
        feed_id,
        [(item.video_id, item.sort_order) for item in payload.video_orders],
    )
    return MutationResponse(message="Order updated", rows_affected=result.rows_affected)


@router.patch("/{feed_id}/videos/{video_id}", response_model=MutationResponse)
async def update_sort_order(feed_id: int, video_id: int, payload: SortOrderUpdate, feeds: Feeds):
    result = await feeds.update_video_sort_order(feed_id, video_id, payload.sort_order)
    return MutationResponse(message="Order updated", rows_affected=result.rows_affected)
