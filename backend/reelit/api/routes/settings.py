"""
Display settings endpoint.

Read-only: the values are sanitized once when Settings loads.
"""

from fastapi import APIRouter

from reelit.core.config import DisplaySettings, settings

router = APIRouter(prefix="/settings", tags=["Settings"])


@router.get("/display", response_model=DisplaySettings)
async def get_display_settings():
    """Player defaults and upload limits for the gallery front end."""
    return settings.DISPLAY
