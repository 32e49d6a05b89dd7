"""
PressBridge Cache - In-memory backend.

Process-local dictionary store guarded by an asyncio.Lock. Suitable for
long-lived server processes; every worker keeps its own copy.
"""

from __future__ import annotations

import asyncio
import logging
from typing import Dict, Optional

from ..core import CacheBackend, CacheStats

logger = logging.getLogger("pressbridge.cache.memory")


class MemoryBackend(CacheBackend):
    """In-memory cache backend without expiry."""

    __slots__ = ("_store", "_lock", "_stats")

    def __init__(self):
        self._store: Dict[str, bytes] = {}
        self._lock = asyncio.Lock()
        self._stats = CacheStats(backend="memory")

    @property
    def name(self) -> str:
        return "memory"

    async def shutdown(self) -> None:
        """Drop all data."""
        async with self._lock:
            self._store.clear()
            self._stats.size = 0

    async def get(self, key: str) -> Optional[bytes]:
        async with self._lock:
            value = self._store.get(key)
            if value is None:
                self._stats.misses += 1
            else:
                self._stats.hits += 1
            return value

    async def set(self, key: str, value: bytes) -> None:
        async with self._lock:
            self._store[key] = value
            self._stats.sets += 1
            self._stats.size = len(self._store)

    async def delete(self, key: str) -> bool:
        async with self._lock:
            if self._store.pop(key, None) is None:
                return False
            self._stats.deletes += 1
            self._stats.size = len(self._store)
            return True

    async def clear(self) -> int:
        async with self._lock:
            count = len(self._store)
            self._store.clear()
            self._stats.size = 0
            logger.debug(f"Memory cache cleared ({count} entries)")
            return count

    async def stats(self) -> CacheStats:
        return self._stats

    def __len__(self) -> int:
        return len(self._store)
