"""
Rate limiting tests for the public tracking endpoint.

Redis is mocked: the sliding window limiter only needs zremrangebyscore,
zcard, zadd and expire.
"""

from unittest.mock import AsyncMock, MagicMock

import pytest
from httpx import AsyncClient

from reelit.core import rate_limit
from reelit.core.config import settings
from reelit.db.redis import RedisRateLimiter

TRACK_URL = f"{settings.API_V1_PREFIX}/analytics/track"
PLAY = {"video_id": 101, "event_type": "play", "session_id": "s1"}


@pytest.fixture
def redis_mock() -> AsyncMock:
    redis = AsyncMock()
    redis.zcard.return_value = 0
    return redis


@pytest.fixture
def rate_limit_enabled(monkeypatch, redis_mock: AsyncMock) -> AsyncMock:
    monkeypatch.setattr(settings, "RATE_LIMIT_ENABLED", True)
    monkeypatch.setattr(rate_limit, "get_redis", AsyncMock(return_value=redis_mock))
    return redis_mock


class TestRedisRateLimiter:

    async def test_allows_under_limit(self, redis_mock: AsyncMock):
        redis_mock.zcard.return_value = 4

        allowed, count = await RedisRateLimiter(redis_mock).is_allowed("ip:1", 5, 60)

        assert allowed is True
        assert count == 5
        redis_mock.zadd.assert_awaited_once()
        redis_mock.expire.assert_awaited_once_with("rate_limit:ip:1", 60)

    async def test_refuses_at_limit(self, redis_mock: AsyncMock):
        redis_mock.zcard.return_value = 5

        allowed, count = await RedisRateLimiter(redis_mock).is_allowed("ip:1", 5, 60)

        assert allowed is False
        assert count == 5
        redis_mock.zadd.assert_not_awaited()


class TestClientIp:

    def test_forwarded_for_wins(self):
        request = MagicMock()
        request.headers = {"X-Forwarded-For": "203.0.113.9, 10.0.0.1", "X-Real-IP": "10.0.0.2"}

        assert rate_limit.get_client_ip(request) == "203.0.113.9"

    def test_real_ip(self):
        request = MagicMock()
        request.headers = {"X-Real-IP": "10.0.0.2"}

        assert rate_limit.get_client_ip(request) == "10.0.0.2"


@pytest.mark.asyncio
class TestTrackEndpointLimit:

    async def test_under_limit_is_tracked(self, client: AsyncClient, videos, rate_limit_enabled):
        response = await client.post(TRACK_URL, json=PLAY)

        assert response.status_code == 201
        key = rate_limit_enabled.zcard.await_args.args[0]
        assert key.startswith("rate_limit:track:ip:")

    async def test_over_limit_is_refused(self, client: AsyncClient, videos, rate_limit_enabled):
        rate_limit_enabled.zcard.return_value = settings.RATE_LIMIT_TRACK_EVENTS_PER_MINUTE

        response = await client.post(TRACK_URL, json=PLAY)

        assert response.status_code == 429
        assert response.headers["retry-after"] == "60"

    async def test_redis_outage_lets_events_through(
        self, client: AsyncClient, videos, rate_limit_enabled
    ):
        rate_limit_enabled.zremrangebyscore.side_effect = ConnectionError("redis down")

        response = await client.post(TRACK_URL, json=PLAY)

        assert response.status_code == 201
