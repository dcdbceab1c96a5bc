"""
Database Models

Import models from this module to ensure they're registered with SQLAlchemy:

    from reelit.models import Feed, FeedVideo, AnalyticsEvent

This ensures that:
1. Alembic can detect all models for migrations
2. Relationships resolve correctly
"""

from reelit.models.analytics import AnalyticsEvent, EventType
from reelit.models.asset import MediaAsset
from reelit.models.feed import Feed, FeedVideo
from reelit.models.product import Product

__all__ = [
    # Gallery models
    "Feed",
    "FeedVideo",
    # Engagement
    "AnalyticsEvent",
    "EventType",
    # External collaborators' read models
    "MediaAsset",
    "Product",
]
