"""
Video listing and product tagging endpoints.

- /videos/search: every video asset (admins building feeds)
- /videos/library: editors see only their own uploads, admins see all
- /videos/{id}/products, /products/search: commerce tagging; 503 when the
  storefront is not installed
"""

from typing import Optional

from fastapi import APIRouter, Depends, HTTPException, Query, status

from reelit.api.deps import Gallery, ProductTagging
from reelit.core.auth import Principal, require_capability
from reelit.core.config import settings
from reelit.core.security import CAP_MANAGE_OPTIONS, CAP_UPLOAD_FILES
from reelit.schemas.feed import MutationResponse
from reelit.schemas.video import ProductList, VideoPage, VideoProductsUpdate
from reelit.services.results import ProductLookup

router = APIRouter(tags=["Videos"])

require_admin = require_capability(CAP_MANAGE_OPTIONS)
require_uploader = require_capability(CAP_UPLOAD_FILES)


def _unwrap(lookup: ProductLookup) -> ProductList:
    if not lookup.available:
        raise HTTPException(
            status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
            detail=lookup.reason,
        )
    return ProductList(products=lookup.products)


# ========================================
# Video Listing
# ========================================

@router.get("/videos/search", response_model=VideoPage, dependencies=[Depends(require_admin)])
async def search_videos(
    gallery: Gallery,
    search: str = Query("", max_length=200),
    page: int = Query(1, ge=1),
    per_page: Optional[int] = Query(None, ge=1),
):
    """Search all video assets by title or description."""
    return await gallery.get_available_videos(search=search, page=page, per_page=per_page)


@router.get("/videos/library", response_model=VideoPage)
async def video_library(
    gallery: Gallery,
    principal: Principal = Depends(require_uploader),
    search: str = Query("", max_length=200),
    page: int = Query(1, ge=1),
    per_page: Optional[int] = Query(None, ge=1),
):
    """
    Media library listing.

    Non-admins are scoped to assets they uploaded.
    """
    author = None if principal.is_admin else principal.user_id
    return await gallery.get_available_videos(
        search=search,
        page=page,
        per_page=per_page or settings.DEFAULT_PAGINATION,
        author=author,
        fields="ids",
    )


# ========================================
# Product Tagging
# ========================================

@router.get(
    "/videos/{video_id}/products",
    response_model=ProductList,
    dependencies=[Depends(require_admin)],
)
async def get_video_products(video_id: int, tagging: ProductTagging):
    return _unwrap(await tagging.get_video_products(video_id))


@router.put(
    "/videos/{video_id}/products",
    response_model=MutationResponse,
    dependencies=[Depends(require_admin)],
)
async def save_video_products(video_id: int, payload: VideoProductsUpdate, tagging: ProductTagging):
    """Replace the products tagged on a video."""
    result = await tagging.save_video_products(video_id, payload.product_ids)
    if not result:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=result.reason)
    return MutationResponse(message="Products saved", rows_affected=result.rows_affected)


@router.get("/products/search", response_model=ProductList, dependencies=[Depends(require_admin)])
async def search_products(
    tagging: ProductTagging,
    q: str = Query("", max_length=200),
    limit: int = Query(20, ge=1, le=100),
):
    return _unwrap(await tagging.search_products(q, limit=limit))
