"""
Video-Product Tagging

Links commerce products to video assets. The tag list lives on the asset
(MediaAsset.linked_product_ids) and is replaced wholesale on save. Product
details are read from the commerce catalog, which is optional: when it is not
installed, reads return ProductLookup.unavailable() instead of failing.
"""

from abc import ABC, abstractmethod
from decimal import Decimal
from typing import Any, Optional, Sequence

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from reelit.core.config import settings
from reelit.core.logging import get_logger
from reelit.models.product import Product
from reelit.services.asset_store import AssetStore
from reelit.services.event_store import absint
from reelit.services.results import INVALID_VIDEO, MutationResult, ProductLookup

logger = get_logger(__name__)

PUBLISHED = "publish"


class ProductCatalog(ABC):
    """Read-only view of the storefront catalog."""

    @abstractmethod
    async def get_products(self, product_ids: Sequence[int]) -> dict[int, Product]:
        """Published products by id; unknown ids are absent."""

    @abstractmethod
    async def search(self, term: str, limit: int = 20) -> list[Product]:
        """Published products whose name contains `term`."""


class DatabaseProductCatalog(ProductCatalog):
    """Catalog backed by the products table."""

    def __init__(self, db: AsyncSession):
        self.db = db

    async def get_products(self, product_ids: Sequence[int]) -> dict[int, Product]:
        if not product_ids:
            return {}
        result = await self.db.execute(
            select(Product).where(
                Product.id.in_(set(product_ids)),
                Product.status == PUBLISHED,
            )
        )
        return {product.id: product for product in result.scalars().all()}

    async def search(self, term: str, limit: int = 20) -> list[Product]:
        result = await self.db.execute(
            select(Product)
            .where(Product.name.icontains(term, autoescape=True), Product.status == PUBLISHED)
            .order_by(Product.name.asc(), Product.id.asc())
            .limit(limit)
        )
        return list(result.scalars().all())


def format_price(price: Optional[Decimal]) -> Optional[str]:
    if price is None:
        return None
    return f"{settings.COMMERCE_CURRENCY_SYMBOL}{Decimal(price):.2f}"


def product_summary(product: Product) -> dict[str, Any]:
    """Picker entry: "Name ($12.00)" plus an image, falling back to the placeholder."""
    price = format_price(product.price)
    return {
        "id": product.id,
        "text": f"{product.name} ({price})" if price else product.name,
        "price": price,
        "image": product.image_url or settings.COMMERCE_PLACEHOLDER_IMAGE_URL or "",
        "permalink": product.permalink or "",
    }


def clean_product_ids(product_ids: Sequence[Any]) -> list[int]:
    """Positive ints, first occurrence wins."""
    cleaned: list[int] = []
    for value in product_ids or []:
        product_id = absint(value)
        if product_id and product_id not in cleaned:
            cleaned.append(product_id)
    return cleaned


class ProductTaggingService:
    """Save and read the products tagged on a video."""

    def __init__(self, db: AsyncSession, catalog: Optional[ProductCatalog]):
        self.assets = AssetStore(db)
        self.catalog = catalog

    async def save_video_products(self, video_id: int, product_ids: Sequence[Any]) -> MutationResult:
        """Replace the video's tag list. Does not consult the catalog."""
        saved = await self.assets.set_linked_products(video_id, clean_product_ids(product_ids))
        if not saved:
            logger.warning("video_products_rejected", video_id=video_id, reason=INVALID_VIDEO)
            return MutationResult.failed(INVALID_VIDEO)
        return MutationResult.ok(1)

    async def get_video_products(self, video_id: int) -> ProductLookup:
        """Tagged products in saved order; ids gone from the catalog are skipped."""
        if self.catalog is None:
            return ProductLookup.unavailable()

        product_ids = await self.assets.get_linked_products(video_id)
        products = await self.catalog.get_products(product_ids)
        return ProductLookup(
            available=True,
            products=[
                product_summary(products[product_id])
                for product_id in product_ids
                if product_id in products
            ],
        )

    async def search_products(self, term: str, limit: int = 20) -> ProductLookup:
        if self.catalog is None:
            return ProductLookup.unavailable()

        term = (term or "").strip()
        if not term:
            return ProductLookup(available=True, products=[])

        products = await self.catalog.search(term, limit=limit)
        return ProductLookup(
            available=True,
            products=[product_summary(product) for product in products],
        )
