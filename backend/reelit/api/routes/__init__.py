"""
API route modules.

Import all route modules here for easy access.
"""

from reelit.api.routes import analytics, feeds, settings, videos

__all__ = ["analytics", "feeds", "settings", "videos"]
