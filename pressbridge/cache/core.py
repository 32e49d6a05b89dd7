"""
PressBridge Cache - Core types and the storage contract.

The route cache stores one serialized route table per key. Backends
therefore deal in raw bytes and never expire entries on their own:
invalidation is always explicit.
"""

from __future__ import annotations

import time
from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from typing import Any, Dict, Optional, Protocol, runtime_checkable


# ============================================================================
# Cache Stats
# ============================================================================

@dataclass
class CacheStats:
    """Aggregate cache statistics for diagnostics."""
    hits: int = 0
    misses: int = 0
    sets: int = 0
    deletes: int = 0
    errors: int = 0
    size: int = 0
    backend: str = "unknown"
    started_at: float = field(default_factory=time.monotonic, repr=False)

    @property
    def hit_rate(self) -> float:
        """Cache hit rate as a percentage."""
        total = self.hits + self.misses
        if total == 0:
            return 0.0
        return (self.hits / total) * 100.0

    @property
    def uptime_seconds(self) -> float:
        return time.monotonic() - self.started_at

    def to_dict(self) -> Dict[str, Any]:
        """Serialize for diagnostics."""
        return {
            "hits": self.hits,
            "misses": self.misses,
            "sets": self.sets,
            "deletes": self.deletes,
            "errors": self.errors,
            "hit_rate": round(self.hit_rate, 2),
            "size": self.size,
            "backend": self.backend,
            "uptime_seconds": round(self.uptime_seconds, 2),
        }


# ============================================================================
# Cache Serializer Protocol
# ============================================================================

@runtime_checkable
class CacheSerializer(Protocol):
    """Protocol for cache value serialization."""

    def serialize(self, value: Any) -> bytes:
        """Serialize a value to bytes."""
        ...

    def deserialize(self, data: bytes) -> Any:
        """Deserialize bytes back to a value."""
        ...


# ============================================================================
# Cache Backend
# ============================================================================

class CacheBackend(ABC):
    """
    Abstract cache backend - defines the storage contract.

    Backends raise :class:`~pressbridge.faults.CacheBackendFault` when the
    underlying store fails. Callers decide whether that is fatal; the
    route cache treats it as a miss.
    """

    async def initialize(self) -> None:
        """Initialize backend resources (connection pools, etc.)."""

    async def shutdown(self) -> None:
        """Clean up backend resources."""

    @abstractmethod
    async def get(self, key: str) -> Optional[bytes]:
        """Retrieve raw value by key, or None if absent."""
        ...

    @abstractmethod
    async def set(self, key: str, value: bytes) -> None:
        """Store a raw value. Entries never expire on their own."""
        ...

    @abstractmethod
    async def delete(self, key: str) -> bool:
        """
        Delete entry by key.

        Returns True if the key existed and was deleted.
        """
        ...

    @abstractmethod
    async def clear(self) -> int:
        """Clear all entries. Returns the number of entries removed."""
        ...

    @abstractmethod
    async def stats(self) -> CacheStats:
        """Get backend statistics."""
        ...

    @property
    @abstractmethod
    def name(self) -> str:
        """Backend name for diagnostics."""
        ...

    @property
    def is_distributed(self) -> bool:
        """Whether this backend is shared between processes."""
        return False
