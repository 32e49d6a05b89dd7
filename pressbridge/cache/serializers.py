"""
PressBridge Cache - Serializers for cache value encoding.

The route table is stored as JSON: it is human-readable when inspected in
Redis and cannot smuggle executable objects into the cache.
"""

from __future__ import annotations

import json
import logging
from typing import Any

logger = logging.getLogger("pressbridge.cache.serializers")


class JsonCacheSerializer:
    """
    JSON serializer - safe, human-readable, cross-language.

    Default serializer. Handles dict, list, str, int, float, bool, None.
    Unlike a general purpose cache, non-serializable values are rejected
    rather than stringified.
    """

    def serialize(self, value: Any) -> bytes:
        """Serialize value to JSON bytes."""
        try:
            return json.dumps(value, ensure_ascii=False, separators=(",", ":")).encode("utf-8")
        except (TypeError, ValueError, OverflowError) as e:
            logger.warning(f"JSON serialization failed: {e}")
            raise

    def deserialize(self, data: bytes) -> Any:
        """Deserialize JSON bytes to value."""
        try:
            return json.loads(data.decode("utf-8"))
        except (json.JSONDecodeError, UnicodeDecodeError) as e:
            logger.warning(f"JSON deserialization failed: {e}")
            raise
