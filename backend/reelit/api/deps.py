"""
Service dependencies for API routes.

Each request gets services bound to its own database session. The feed-list
cache backend is chosen once per process from CACHE_BACKEND; tests override
get_cache_backend to inject an isolated in-memory backend.
"""

from typing import Annotated, Optional

from fastapi import Depends

from reelit.core.config import settings
from reelit.db.deps import DBSession
from reelit.db.redis import get_redis
from reelit.services.analytics import AnalyticsAggregator
from reelit.services.cache import (
    CacheBackend,
    CachedView,
    InMemoryCacheBackend,
    RedisCacheBackend,
)
from reelit.services.event_store import EventStore
from reelit.services.feed_repository import FeedRepository
from reelit.services.gallery_query import GalleryQueryFacade
from reelit.services.product_tagging import (
    DatabaseProductCatalog,
    ProductCatalog,
    ProductTaggingService,
)

_memory_backend = InMemoryCacheBackend()


async def get_cache_backend() -> CacheBackend:
    if settings.CACHE_BACKEND == "memory":
        return _memory_backend
    return RedisCacheBackend(await get_redis())


async def get_feed_cache(
    backend: CacheBackend = Depends(get_cache_backend),
) -> CachedView:
    return CachedView(
        backend,
        key=settings.FEED_LIST_CACHE_KEY,
        ttl_seconds=settings.FEED_LIST_CACHE_TTL_SECONDS,
    )


async def get_feed_repository(
    db: DBSession,
    cache: CachedView = Depends(get_feed_cache),
) -> FeedRepository:
    return FeedRepository(db, cache)


async def get_gallery_query(db: DBSession) -> GalleryQueryFacade:
    return GalleryQueryFacade(db)


async def get_event_store(db: DBSession) -> EventStore:
    return EventStore(db)


async def get_analytics(db: DBSession) -> AnalyticsAggregator:
    return AnalyticsAggregator(db)


async def get_product_catalog(db: DBSession) -> Optional[ProductCatalog]:
    """None when the storefront is not installed."""
    if not settings.COMMERCE_ENABLED:
        return None
    return DatabaseProductCatalog(db)


async def get_product_tagging(
    db: DBSession,
    catalog: Optional[ProductCatalog] = Depends(get_product_catalog),
) -> ProductTaggingService:
    return ProductTaggingService(db, catalog)


Feeds = Annotated[FeedRepository, Depends(get_feed_repository)]
Gallery = Annotated[GalleryQueryFacade, Depends(get_gallery_query)]
Events = Annotated[EventStore, Depends(get_event_store)]
Analytics = Annotated[AnalyticsAggregator, Depends(get_analytics)]
ProductTagging = Annotated[ProductTaggingService, Depends(get_product_tagging)]
