"""
Rate limiting for the public tracking endpoint.

Visitors can post engagement events without authenticating, so the endpoint
is throttled per client IP using the Redis sliding window limiter.
"""

from fastapi import HTTPException, Request, status

from reelit.core.config import settings
from reelit.core.logging import get_logger
from reelit.db.redis import RedisRateLimiter, get_redis

logger = get_logger(__name__)


def get_client_ip(request: Request) -> str:
    """Get client IP address, handling proxies."""
    forwarded_for = request.headers.get("X-Forwarded-For")
    if forwarded_for:
        # Take first IP in chain
        return forwarded_for.split(",")[0].strip()

    real_ip = request.headers.get("X-Real-IP")
    if real_ip:
        return real_ip

    if request.client:
        return request.client.host

    return "unknown"


async def limit_track_events(request: Request) -> None:
    """
    Dependency applied to POST /analytics/track.

    Raises:
        HTTPException 429: Limit exceeded for this client
    """
    if not settings.RATE_LIMIT_ENABLED:
        return

    max_requests = settings.RATE_LIMIT_TRACK_EVENTS_PER_MINUTE
    window_seconds = 60
    rate_key = f"track:ip:{get_client_ip(request)}"

    try:
        redis = await get_redis()
        rate_limiter = RedisRateLimiter(redis)
        is_allowed, current_count = await rate_limiter.is_allowed(
            rate_key, max_requests, window_seconds
        )
    except Exception as e:
        # Allow the request if Redis is unavailable
        logger.error("rate_limit_check_failed", error=str(e))
        return

    if not is_allowed:
        logger.warning(
            "rate_limit_exceeded",
            key=rate_key,
            count=current_count,
            limit=max_requests,
        )
        raise HTTPException(
            status_code=status.HTTP_429_TOO_MANY_REQUESTS,
            detail="Rate limit exceeded. Please try again later.",
            headers={
                "X-RateLimit-Limit": str(max_requests),
                "Retry-After": str(window_seconds),
            },
        )
