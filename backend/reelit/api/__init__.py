"""
API routes initialization.

This module aggregates all API routers and provides a single router
to include in the main application.
"""

from fastapi import APIRouter

from reelit.api.routes import analytics, feeds, settings, videos

# Create main API router
api_router = APIRouter()

# Feed CRUD and memberships (admin)
api_router.include_router(feeds.router)

# Video listing and product tagging
api_router.include_router(videos.router)

# Dashboard reads (admin) and public event tracking
api_router.include_router(analytics.router)

# Display settings
api_router.include_router(settings.router)
