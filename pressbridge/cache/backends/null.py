"""
PressBridge Cache - Null (no-op) backend.

Used when route caching should be disabled without changing application
code: every lookup is a miss, so the route table is rebuilt each time.
"""

from __future__ import annotations

from typing import Optional

from ..core import CacheBackend, CacheStats


class NullBackend(CacheBackend):
    """No-op cache backend - all operations are pass-through."""

    __slots__ = ("_stats",)

    def __init__(self):
        self._stats = CacheStats(backend="null")

    @property
    def name(self) -> str:
        return "null"

    async def get(self, key: str) -> Optional[bytes]:
        self._stats.misses += 1
        return None

    async def set(self, key: str, value: bytes) -> None:
        self._stats.sets += 1

    async def delete(self, key: str) -> bool:
        return False

    async def clear(self) -> int:
        return 0

    async def stats(self) -> CacheStats:
        return self._stats
