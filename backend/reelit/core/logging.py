"""
Structured logging setup.

All modules log through structlog so that every event is a snake_case name
plus keyword context:

    logger = get_logger(__name__)
    logger.info("feed_created", feed_id=42, name="Summer")

LOG_FORMAT=json renders one JSON object per line (production log shipping);
LOG_FORMAT=text renders a colourless console line for local development.
"""

import logging
import sys
from typing import Any

import structlog

from reelit.core.config import settings


_configured = False


def setup_logging() -> None:
    """
    Configure structlog and the stdlib root logger.

    Safe to call more than once; only the first call has an effect.
    """
    global _configured
    if _configured:
        return

    level = logging.getLevelName(settings.LOG_LEVEL)

    # Route stdlib loggers (uvicorn, sqlalchemy) to stdout at the same level
    logging.basicConfig(
        format="%(message)s",
        stream=sys.stdout,
        level=level,
    )

    shared_processors: list[Any] = [
        structlog.contextvars.merge_contextvars,
        structlog.stdlib.add_logger_name,
        structlog.processors.add_log_level,
        structlog.processors.StackInfoRenderer(),
        structlog.processors.TimeStamper(fmt="iso", utc=True),
    ]

    if settings.LOG_FORMAT == "json":
        renderer: Any = structlog.processors.JSONRenderer()
        shared_processors.append(structlog.processors.format_exc_info)
    else:
        renderer = structlog.dev.ConsoleRenderer(colors=False)

    structlog.configure(
        processors=[*shared_processors, renderer],
        wrapper_class=structlog.make_filtering_bound_logger(level),
        logger_factory=structlog.stdlib.LoggerFactory(),
        cache_logger_on_first_use=True,
    )

    _configured = True


def get_logger(name: str | None = None) -> structlog.stdlib.BoundLogger:
    """Return a structlog logger bound to the given module name."""
    return structlog.get_logger(name)
