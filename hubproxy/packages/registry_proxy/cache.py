"""Token cache backends.

A token cache only needs get and put-with-expiry. Expiry is enforced by the
store itself; callers never see an entry past its TTL.
"""

import time
from typing import Callable, Optional, Protocol

import structlog
from redis.asyncio import Redis

logger = structlog.stdlib.get_logger(__name__)


class TokenCache(Protocol):
    """Protocol for token cache implementations."""

    async def get(self, key: str) -> Optional[str]:
        """Return the cached value for ``key`` or None if absent or expired."""
        ...

    async def put(self, key: str, value: str, ttl: int) -> None:
        """Store ``value`` under ``key`` for ``ttl`` seconds."""
        ...


class MemoryTokenCache:
    """In-process expiring map (per worker only)."""

    def __init__(self, clock: Callable[[], float] = time.monotonic):
        self._clock = clock
        self._entries: dict[str, tuple[str, float]] = {}

    async def get(self, key: str) -> Optional[str]:
        entry = self._entries.get(key)
        if entry is None:
            return None

        value, expires_at = entry
        if self._clock() >= expires_at:
            # Expired, drop it
            self._entries.pop(key, None)
            return None

        return value

    async def put(self, key: str, value: str, ttl: int) -> None:
        now = self._clock()
        # Scopes come from client-chosen repository names, drop stale ones on write
        self._entries = {
            entry_key: entry
            for entry_key, entry in self._entries.items()
            if now < entry[1]
        }
        self._entries[key] = (value, now + ttl)

    def __len__(self) -> int:
        return len(self._entries)


class RedisTokenCache:
    """Redis-backed token cache shared between workers."""

    def __init__(self, redis: Redis, prefix: str = "hubproxy:token:"):
        self._redis = redis
        self._prefix = prefix

    def _key(self, key: str) -> str:
        return f"{self._prefix}{key}"

    async def get(self, key: str) -> Optional[str]:
        value = await self._redis.get(self._key(key))
        if value is None:
            return None
        if isinstance(value, bytes):
            return value.decode()
        return value

    async def put(self, key: str, value: str, ttl: int) -> None:
        await self._redis.set(self._key(key), value, ex=ttl)
        logger.debug("Stored token in Redis", key=self._key(key), ttl=ttl)

    async def aclose(self) -> None:
        await self._redis.aclose()
