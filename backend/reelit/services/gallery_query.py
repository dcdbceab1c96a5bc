"""
Gallery Query Facade

Paginated, searchable listing of video assets used by the feed editor and the
media library. Results always come back hydrated as
{id, title, url, thumbnail, mime} records plus {total, pages}, whatever query
plan was used to find them.
"""

import math
from typing import Any, Literal, Optional

from sqlalchemy.ext.asyncio import AsyncSession

from reelit.core.config import settings
from reelit.core.logging import get_logger
from reelit.models.asset import MediaAsset
from reelit.services.asset_store import AssetStore

logger = get_logger(__name__)

Fields = Literal["all", "ids"]


def video_record(asset: MediaAsset) -> dict[str, Any]:
    return {
        "id": asset.id,
        "title": asset.title,
        "url": asset.url,
        "thumbnail": asset.thumbnail_url or "",
        "mime": asset.mime_type,
    }


class GalleryQueryFacade:
    """Read-only listing over the asset store."""

    def __init__(self, db: AsyncSession):
        self.assets = AssetStore(db)

    async def get_available_videos(
        self,
        search: str = "",
        page: int = 1,
        per_page: Optional[int] = None,
        author: Optional[int] = None,
        fields: Fields = "all",
    ) -> dict[str, Any]:
        """
        List video assets, newest first.

        Args:
            search: Substring matched against title and description
            page: 1-based page number (values below 1 read page 1)
            per_page: Page size, clamped to 1..MAX_PAGINATION
            author: Restrict to assets uploaded by this principal; None lists all
            fields: "ids" fetches ids first and hydrates them in one batch

        Returns:
            {"videos": [...], "total": int, "pages": int}
        """
        page = max(1, page)
        if per_page is None:
            per_page = settings.DEFAULT_PAGINATION
        per_page = min(max(1, per_page), settings.MAX_PAGINATION)
        offset = (page - 1) * per_page
        search = (search or "").strip()

        total = await self.assets.count_videos(search, author_id=author)

        if fields == "ids":
            ids = await self.assets.search_video_ids(search, offset, per_page, author_id=author)
            by_id = await self.assets.get_many(ids)
            # Preserve the listing order; drop ids deleted between the two queries
            assets = [by_id[asset_id] for asset_id in ids if asset_id in by_id]
        else:
            assets = await self.assets.search_videos(search, offset, per_page, author_id=author)

        logger.debug(
            "videos_listed",
            search=search,
            page=page,
            per_page=per_page,
            author=author,
            fields=fields,
            total=total,
        )

        return {
            "videos": [video_record(asset) for asset in assets],
            "total": total,
            "pages": math.ceil(total / per_page) if total else 0,
        }
