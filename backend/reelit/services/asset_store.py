"""
Asset Store Service

Read access to the media asset store plus the single write the gallery core
performs on it (the per-asset linked product list). Callers address assets by
opaque numeric id only.
"""

from typing import Optional, Sequence

from sqlalchemy import func, or_, select
from sqlalchemy.ext.asyncio import AsyncSession

from reelit.core.logging import get_logger
from reelit.models.asset import MediaAsset

logger = get_logger(__name__)

VIDEO_MIME_PREFIX = "video/"


class AssetStore:
    """Queries over media_assets."""

    def __init__(self, db: AsyncSession):
        self.db = db

    # ========================================
    # Point Lookups
    # ========================================

    async def get(self, asset_id: int) -> Optional[MediaAsset]:
        return await self.db.get(MediaAsset, asset_id)

    async def exists(self, asset_id: int) -> bool:
        result = await self.db.execute(
            select(MediaAsset.id).where(MediaAsset.id == asset_id)
        )
        return result.scalar_one_or_none() is not None

    async def get_many(self, asset_ids: Sequence[int]) -> dict[int, MediaAsset]:
        """Batch fetch keyed by id; unknown ids are simply absent."""
        if not asset_ids:
            return {}
        result = await self.db.execute(
            select(MediaAsset).where(MediaAsset.id.in_(set(asset_ids)))
        )
        return {asset.id: asset for asset in result.scalars().all()}

    # ========================================
    # Search
    # ========================================

    def _video_filter(self, search: str = "", author_id: Optional[int] = None):
        conditions = [MediaAsset.mime_type.like(f"{VIDEO_MIME_PREFIX}%")]
        if search:
            # Literal substring match: % and _ in the search text are escaped
            conditions.append(
                or_(
                    MediaAsset.title.icontains(search, autoescape=True),
                    MediaAsset.description.icontains(search, autoescape=True),
                )
            )
        if author_id is not None:
            conditions.append(MediaAsset.author_id == author_id)
        return conditions

    async def count_videos(self, search: str = "", author_id: Optional[int] = None) -> int:
        result = await self.db.execute(
            select(func.count(MediaAsset.id)).where(*self._video_filter(search, author_id))
        )
        return result.scalar_one()

    async def search_videos(
        self,
        search: str = "",
        offset: int = 0,
        limit: int = 20,
        author_id: Optional[int] = None,
    ) -> list[MediaAsset]:
        """Newest first; id breaks ties between uploads in the same instant."""
        result = await self.db.execute(
            select(MediaAsset)
            .where(*self._video_filter(search, author_id))
            .order_by(MediaAsset.created_at.desc(), MediaAsset.id.desc())
            .offset(offset)
            .limit(limit)
        )
        return list(result.scalars().all())

    async def search_video_ids(
        self,
        search: str = "",
        offset: int = 0,
        limit: int = 20,
        author_id: Optional[int] = None,
    ) -> list[int]:
        """Same query as search_videos, projecting ids only."""
        result = await self.db.execute(
            select(MediaAsset.id)
            .where(*self._video_filter(search, author_id))
            .order_by(MediaAsset.created_at.desc(), MediaAsset.id.desc())
            .offset(offset)
            .limit(limit)
        )
        return list(result.scalars().all())

    # ========================================
    # Linked Products
    # ========================================

    async def get_linked_products(self, asset_id: int) -> list[int]:
        asset = await self.get(asset_id)
        if asset is None:
            return []
        return [int(pid) for pid in (asset.linked_product_ids or [])]

    async def set_linked_products(self, asset_id: int, product_ids: Sequence[int]) -> bool:
        """Replace the tagged product list wholesale. False if the asset is gone."""
        asset = await self.get(asset_id)
        if asset is None:
            return False

        # New list object so the JSON column registers the change
        asset.linked_product_ids = list(product_ids)
        await self.db.commit()

        logger.info(
            "video_products_saved",
            video_id=asset_id,
            product_ids=list(product_ids),
        )
        return True


def thumbnail_for(asset: Optional[MediaAsset], fallback_alt: str = "") -> tuple[str, str]:
    """
    (url, alt) of an asset's thumbnail.

    Both are empty when the asset is missing or has no thumbnail; alt falls back
    to `fallback_alt` when the asset carries no alt text of its own.
    """
    if asset is None or not asset.thumbnail_url:
        return "", ""
    return asset.thumbnail_url, asset.alt_text or fallback_alt
