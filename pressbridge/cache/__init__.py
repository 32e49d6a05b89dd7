"""
PressBridge Cache - Storage layer for the compiled route table.

Provides:
- **Backends**: Memory (process-local), Redis (shared), Null (disabled)
- **Serialization**: JSON serializer
- **Factory**: ``create_cache_backend()`` from :class:`BridgeConfig`

Usage::

    from pressbridge.cache import MemoryBackend
    from pressbridge.routing import RouteCache

    cache = RouteCache(MemoryBackend())
    table = await cache.get_or_build("pressbridge:routes", builder.build)
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Optional

from .core import CacheBackend, CacheStats, CacheSerializer
from .backends.memory import MemoryBackend
from .backends.null import NullBackend
from .backends.redis import RedisBackend
from .serializers import JsonCacheSerializer

if TYPE_CHECKING:
    from ..config import BridgeConfig


def create_cache_backend(config: "BridgeConfig") -> Optional[CacheBackend]:
    """
    Factory: create cache backend from configuration.

    Returns None when caching is disabled, which the route cache treats
    as "always rebuild".
    """
    if not config.cache_enabled:
        return None

    backend_type = config.cache_backend.lower()

    if backend_type == "memory":
        return MemoryBackend()
    elif backend_type == "redis":
        return RedisBackend(url=config.redis_url, key_prefix=config.redis_key_prefix)
    elif backend_type == "null":
        return NullBackend()
    else:
        raise ValueError(f"Unknown cache backend: {backend_type}")


__all__ = [
    "CacheBackend",
    "CacheStats",
    "CacheSerializer",
    "MemoryBackend",
    "NullBackend",
    "RedisBackend",
    "JsonCacheSerializer",
    "create_cache_backend",
]
