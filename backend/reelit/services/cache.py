"""
Cache abstraction for derived views.

The feed list with counts and thumbnails is expensive to build and cheap to
throw away. It is cached as one whole JSON document under a single key with a
TTL, and every write that could change it deletes the key straight away.

Each view also keeps a generation counter under "<key>:generation". A write
bumps it before deleting the value, and a stored value is tagged with the
generation its builder read before querying. A rebuild that raced a write is
tagged with an old generation, so readers treat it as a miss instead of
serving it until the TTL runs out.

Backends:
---------
- RedisCacheBackend: shared across worker processes (default)
- InMemoryCacheBackend: process-local, for tests and single-process runs

A backend failure is logged and treated as a miss, so a Redis outage only
costs a recompute.
"""

import json
import time
from abc import ABC, abstractmethod
from typing import Any, Callable, Optional

from redis.asyncio import Redis

from reelit.core.logging import get_logger

logger = get_logger(__name__)


class CacheBackend(ABC):
    """Minimal string key/value store with per-key TTL."""

    @abstractmethod
    async def get(self, key: str) -> Optional[str]:
        ...

    @abstractmethod
    async def set(self, key: str, value: str, ttl_seconds: int) -> None:
        ...

    @abstractmethod
    async def delete(self, key: str) -> None:
        ...

    @abstractmethod
    async def incr(self, key: str) -> int:
        """Atomically increment an integer counter that never expires."""


class RedisCacheBackend(CacheBackend):
    """Cache stored in Redis; values replaced atomically by SET EX."""

    def __init__(self, redis: Redis):
        self.redis = redis

    async def get(self, key: str) -> Optional[str]:
        return await self.redis.get(key)

    async def set(self, key: str, value: str, ttl_seconds: int) -> None:
        await self.redis.set(key, value, ex=ttl_seconds)

    async def delete(self, key: str) -> None:
        await self.redis.delete(key)

    async def incr(self, key: str) -> int:
        return await self.redis.incr(key)


class InMemoryCacheBackend(CacheBackend):
    """Process-local cache with lazy expiry."""

    def __init__(self, clock: Callable[[], float] = time.monotonic):
        self.clock = clock
        self._entries: dict[str, tuple[float, str]] = {}

    async def get(self, key: str) -> Optional[str]:
        entry = self._entries.get(key)
        if entry is None:
            return None
        expires_at, value = entry
        if self.clock() >= expires_at:
            self._entries.pop(key, None)
            return None
        return value

    async def set(self, key: str, value: str, ttl_seconds: int) -> None:
        self._entries[key] = (self.clock() + ttl_seconds, value)

    async def delete(self, key: str) -> None:
        self._entries.pop(key, None)

    async def incr(self, key: str) -> int:
        value = int(await self.get(key) or 0) + 1
        self._entries[key] = (float("inf"), str(value))
        return value

    def clear(self) -> None:
        self._entries.clear()


class CachedView:
    """
    One cached, JSON-serialised value: a key, a TTL and an invalidation hook.

    Usage:
        view = CachedView(backend, key="reelit:feeds_data", ttl_seconds=3600)
        generation = await view.generation()
        data = await view.get()
        if data is None:
            data = await build()
            await view.set(data, generation)
        ...
        await view.invalidate()   # after any write that changes the view
    """

    def __init__(self, backend: CacheBackend, key: str, ttl_seconds: int):
        self.backend = backend
        self.key = key
        self.ttl_seconds = ttl_seconds
        self.generation_key = f"{key}:generation"

    async def generation(self) -> Optional[int]:
        """Current generation, or None when the backend cannot be read."""
        try:
            return int(await self.backend.get(self.generation_key) or 0)
        except Exception as e:
            logger.warning("cache_generation_failed", key=self.key, error=str(e))
            return None

    async def get(self) -> Optional[Any]:
        try:
            raw = await self.backend.get(self.key)
        except Exception as e:
            logger.warning("cache_get_failed", key=self.key, error=str(e))
            return None

        if raw is None:
            return None

        try:
            payload = json.loads(raw)
            stored_generation = payload["generation"]
            value = payload["value"]
        except (TypeError, KeyError, json.JSONDecodeError):
            logger.warning("cache_payload_corrupt", key=self.key)
            return None

        if stored_generation != await self.generation():
            logger.debug("cache_generation_stale", key=self.key, generation=stored_generation)
            return None
        return value

    async def set(self, value: Any, generation: Optional[int] = None) -> None:
        """
        Store value as built under `generation`.

        Pass the generation read before building the value. When omitted the
        current generation is used.
        """
        if generation is None:
            generation = await self.generation()
            if generation is None:
                return

        if generation != await self.generation():
            logger.debug("cache_set_skipped", key=self.key, generation=generation)
            return

        try:
            await self.backend.set(
                self.key,
                json.dumps({"generation": generation, "value": value}),
                self.ttl_seconds,
            )
        except Exception as e:
            logger.warning("cache_set_failed", key=self.key, error=str(e))

    async def invalidate(self) -> None:
        try:
            await self.backend.incr(self.generation_key)
        except Exception as e:
            logger.warning("cache_generation_bump_failed", key=self.key, error=str(e))

        try:
            await self.backend.delete(self.key)
            logger.debug("cache_invalidated", key=self.key)
        except Exception as e:
            logger.warning("cache_invalidate_failed", key=self.key, error=str(e))
