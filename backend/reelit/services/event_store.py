"""
Event Store

Append-only log of engagement events emitted by the gallery player.

Two entry points:
- record_event: trusted insert; coerces optional fields instead of failing
- track_event: public entry point; validates everything before recording
"""

from datetime import datetime
from typing import Any, Callable, Optional

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from reelit.core.config import settings
from reelit.core.logging import get_logger
from reelit.db.base import utcnow
from reelit.models.analytics import AnalyticsEvent, EventType
from reelit.services.asset_store import AssetStore
from reelit.services.results import (
    INVALID_DATA,
    INVALID_EVENT_TYPE,
    INVALID_VIDEO,
    RECORD_FAILED,
    TrackResult,
)

logger = get_logger(__name__)


def absint(value: Any) -> int:
    """Non-negative integer from loosely typed input; 0 when unparseable."""
    if value is None or isinstance(value, bool):
        return 0
    try:
        return abs(int(float(value)))
    except (TypeError, ValueError, OverflowError):
        return 0


def _optional_id(value: Any) -> Optional[int]:
    coerced = absint(value)
    return coerced or None


class EventStore:
    """Writes analytics_events rows. There is no update or delete path."""

    def __init__(self, db: AsyncSession, clock: Callable[[], datetime] = utcnow):
        self.db = db
        self.clock = clock
        self.session_id_max_length = settings.ANALYTICS_SESSION_ID_MAX_LENGTH

    def _clean_session_id(self, session_id: Any) -> str:
        if session_id is None:
            return ""
        return str(session_id).strip()[: self.session_id_max_length]

    async def record_event(
        self,
        video_id: int,
        event_type: str,
        session_id: str,
        *,
        feed_id: Optional[int] = None,
        watch_time: Any = 0,
        product_id: Optional[int] = None,
    ) -> Optional[int]:
        """
        Insert one event stamped with the store's clock.

        Optional fields are coerced: watch_time to a non-negative int (0 when
        unparseable), falsy feed_id / product_id to NULL, session_id trimmed to
        the column width.

        Returns:
            The new event id, or None if the row could not be written
        """
        video_id = absint(video_id)
        session_id = self._clean_session_id(session_id)
        if not video_id or not session_id or event_type not in EventType.values():
            logger.warning(
                "event_record_skipped",
                video_id=video_id,
                event_type=event_type,
            )
            return None

        event = AnalyticsEvent(
            video_id=video_id,
            feed_id=_optional_id(feed_id),
            event_type=str(event_type),
            watch_time=absint(watch_time),
            product_id=_optional_id(product_id),
            session_id=session_id,
            created_at=self.clock(),
        )
        self.db.add(event)
        try:
            await self.db.commit()
        except SQLAlchemyError as e:
            await self.db.rollback()
            logger.error("event_record_failed", video_id=video_id, event_type=event_type, error=str(e))
            return None

        logger.debug("event_recorded", event_id=event.id, video_id=video_id, event_type=event_type)
        return event.id

    async def track_event(
        self,
        video_id: Any,
        event_type: Any,
        session_id: Any,
        feed_id: Any = None,
        watch_time: Any = 0,
        product_id: Any = None,
    ) -> TrackResult:
        """
        Validate an untrusted tracking call, then record it.

        Rejections (nothing is written):
            invalid_data: missing video id, event type or session id
            invalid_event_type: event type outside play / complete / product_click
            invalid_video: no asset with that id
            record_failed: the insert itself failed
        """
        video_id = absint(video_id)
        event_type = str(event_type or "").strip()
        session_id = self._clean_session_id(session_id)

        if not video_id or not event_type or not session_id:
            return self._reject(INVALID_DATA, video_id=video_id, event_type=event_type)

        if event_type not in EventType.values():
            return self._reject(INVALID_EVENT_TYPE, video_id=video_id, event_type=event_type)

        if not await AssetStore(self.db).exists(video_id):
            return self._reject(INVALID_VIDEO, video_id=video_id, event_type=event_type)

        event_id = await self.record_event(
            video_id=video_id,
            event_type=event_type,
            session_id=session_id,
            feed_id=feed_id,
            watch_time=watch_time,
            product_id=product_id,
        )
        if event_id is None:
            return TrackResult(ok=False, reason=RECORD_FAILED)

        return TrackResult(ok=True, event_id=event_id)

    def _reject(self, reason: str, **context: Any) -> TrackResult:
        logger.info("track_event_rejected", reason=reason, **context)
        return TrackResult(ok=False, reason=reason)
