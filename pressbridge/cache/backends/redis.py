"""
PressBridge Cache - Redis backend for sharing the route table.

Lets every worker of a multi-process deployment reuse one compiled route
table. Entries are stored without TTL; a deploy hook is expected to call
``RouteCache.invalidate()``.
"""

from __future__ import annotations

import logging
from typing import Any, Optional

from ..core import CacheBackend, CacheStats
from ...faults import CacheBackendFault

logger = logging.getLogger("pressbridge.cache.redis")


class RedisBackend(CacheBackend):
    """
    Redis-backed cache using redis-py's asyncio client.

    Failures are raised as :class:`CacheBackendFault` so the caller can
    fall back to rebuilding.
    """

    __slots__ = (
        "_url",
        "_max_connections",
        "_socket_timeout",
        "_key_prefix",
        "_redis",
        "_stats",
        "_initialized",
    )

    def __init__(
        self,
        url: str = "redis://localhost:6379/0",
        max_connections: int = 10,
        socket_timeout: float = 5.0,
        key_prefix: str = "pb:",
        client: Optional[Any] = None,
    ):
        self._url = url
        self._max_connections = max_connections
        self._socket_timeout = socket_timeout
        self._key_prefix = key_prefix
        self._redis = client
        self._stats = CacheStats(backend="redis")
        self._initialized = client is not None

    @property
    def name(self) -> str:
        return "redis"

    @property
    def is_distributed(self) -> bool:
        return True

    async def initialize(self) -> None:
        """Connect to Redis and create connection pool."""
        if self._initialized:
            return

        try:
            import redis.asyncio as aioredis
        except ImportError:
            raise ImportError(
                "Redis backend requires 'redis' package. "
                "Install with: pip install pressbridge[redis]"
            )

        try:
            self._redis = aioredis.from_url(
                self._url,
                max_connections=self._max_connections,
                socket_timeout=self._socket_timeout,
                decode_responses=False,
            )
            await self._redis.ping()
            self._initialized = True
            logger.info(f"Redis cache connected: {self._url}")
        except Exception as e:
            logger.error(f"Failed to connect to Redis: {e}")
            raise CacheBackendFault(self.name, "connect", str(e)) from e

    async def shutdown(self) -> None:
        """Close Redis connection pool."""
        if self._redis is not None:
            await self._redis.aclose()
            self._redis = None
        self._initialized = False

    def _full_key(self, key: str) -> str:
        return f"{self._key_prefix}{key}"

    def _client(self, operation: str) -> Any:
        if self._redis is None:
            self._stats.errors += 1
            raise CacheBackendFault(self.name, operation, "backend not initialized")
        return self._redis

    async def get(self, key: str) -> Optional[bytes]:
        client = self._client("get")
        try:
            raw = await client.get(self._full_key(key))
        except Exception as e:
            self._stats.errors += 1
            raise CacheBackendFault(self.name, "get", str(e)) from e
        if raw is None:
            self._stats.misses += 1
            return None
        self._stats.hits += 1
        return raw if isinstance(raw, bytes) else str(raw).encode("utf-8")

    async def set(self, key: str, value: bytes) -> None:
        client = self._client("set")
        try:
            await client.set(self._full_key(key), value)
        except Exception as e:
            self._stats.errors += 1
            raise CacheBackendFault(self.name, "set", str(e)) from e
        self._stats.sets += 1

    async def delete(self, key: str) -> bool:
        client = self._client("delete")
        try:
            result = await client.delete(self._full_key(key))
        except Exception as e:
            self._stats.errors += 1
            raise CacheBackendFault(self.name, "delete", str(e)) from e
        if result:
            self._stats.deletes += 1
            return True
        return False

    async def clear(self) -> int:
        """Delete every key carrying our prefix."""
        client = self._client("clear")
        count = 0
        try:
            async for full_key in client.scan_iter(match=f"{self._key_prefix}*", count=1000):
                count += await client.delete(full_key)
        except Exception as e:
            self._stats.errors += 1
            raise CacheBackendFault(self.name, "clear", str(e)) from e
        return count

    async def stats(self) -> CacheStats:
        return self._stats
