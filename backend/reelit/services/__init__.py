"""Gallery core services."""

from reelit.services.analytics import AnalyticsAggregator
from reelit.services.cache import (
    CachedView,
    CacheBackend,
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
from reelit.services.results import MutationResult, ProductLookup, TrackResult

__all__ = [
    "AnalyticsAggregator",
    "CacheBackend",
    "CachedView",
    "InMemoryCacheBackend",
    "RedisCacheBackend",
    "EventStore",
    "FeedRepository",
    "GalleryQueryFacade",
    "ProductCatalog",
    "DatabaseProductCatalog",
    "ProductTaggingService",
    "MutationResult",
    "ProductLookup",
    "TrackResult",
]
