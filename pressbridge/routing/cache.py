"""
Route Cache - get-or-build wrapper around a cache backend.

The compiled route table is stored under one fixed key and never expires.
Whatever deploys new controller code must call :meth:`RouteCache.invalidate`.

Concurrency: builds are single-flight per key. A caller arriving while a
build is in flight waits for it and receives the same table (or the same
fault) instead of building its own.
"""

from __future__ import annotations

import asyncio
import inspect
import logging
from typing import Awaitable, Callable, Dict, Optional, Union

from ..cache.core import CacheBackend, CacheSerializer
from ..cache.serializers import JsonCacheSerializer
from ..faults import CacheBackendFault
from .table import RouteTable, table_from_data, table_to_data

logger = logging.getLogger("pressbridge.routing.cache")

DEFAULT_CACHE_KEY = "pressbridge:routes"

# Bumped when the serialized route layout changes
PAYLOAD_VERSION = 1

Builder = Callable[[], Union[RouteTable, Awaitable[RouteTable]]]


class RouteCache:
    """
    Caches the route table.

    Args:
        backend: Cache backend, or None to rebuild on every call
        serializer: Value serializer (JSON by default)
    """

    __slots__ = ("_backend", "_serializer", "_inflight", "builds")

    def __init__(
        self,
        backend: Optional[CacheBackend] = None,
        serializer: Optional[CacheSerializer] = None,
    ):
        self._backend = backend
        self._serializer = serializer or JsonCacheSerializer()
        self._inflight: Dict[str, asyncio.Future] = {}
        self.builds = 0

    @property
    def backend(self) -> Optional[CacheBackend]:
        return self._backend

    @property
    def enabled(self) -> bool:
        return self._backend is not None

    async def get_or_build(self, key: str, builder: Builder) -> RouteTable:
        """
        Return the cached table, building and storing it on a miss.

        Backend failures are logged and treated as a miss. Faults raised
        by ``builder`` propagate and nothing is stored.
        """
        table = await self._load(key)
        if table is not None:
            return table

        inflight = self._inflight.get(key)
        if inflight is not None:
            logger.debug(f"Waiting for in-flight route build for '{key}'")
            return await asyncio.shield(inflight)

        future: asyncio.Future = asyncio.get_running_loop().create_future()
        self._inflight[key] = future
        try:
            table = await self._build(builder)
            await self._store(key, table)
        except asyncio.CancelledError:
            future.cancel()
            raise
        except Exception as e:
            future.set_exception(e)
            # Mark retrieved when nobody was waiting
            future.exception()
            raise
        else:
            future.set_result(table)
        finally:
            self._inflight.pop(key, None)
        return table

    async def invalidate(self, key: str = DEFAULT_CACHE_KEY) -> bool:
        """
        Drop the cached table so the next request rebuilds it.

        Unlike lookups, a backend failure here is raised: a deploy that
        believes it invalidated the cache must know when it did not.
        """
        if self._backend is None:
            return False
        deleted = await self._backend.delete(key)
        logger.info(f"Route cache invalidated for '{key}' (existed={deleted})")
        return deleted

    async def _build(self, builder: Builder) -> RouteTable:
        result = builder()
        if inspect.isawaitable(result):
            result = await result
        self.builds += 1
        return tuple(result)

    async def _load(self, key: str) -> Optional[RouteTable]:
        if self._backend is None:
            return None

        try:
            raw = await self._backend.get(key)
        except CacheBackendFault as fault:
            logger.warning(f"Route cache lookup failed, rebuilding: {fault}")
            return None
        except Exception as e:
            logger.warning(f"Route cache lookup failed, rebuilding: {CacheBackendFault(self._backend.name, 'get', str(e))}")
            return None

        if raw is None:
            logger.debug(f"Route cache miss for '{key}'")
            return None

        try:
            payload = self._serializer.deserialize(raw)
            if payload.get("version") != PAYLOAD_VERSION:
                logger.info(f"Route cache entry '{key}' has an outdated layout, rebuilding")
                return None
            return table_from_data(payload["routes"])
        except (ValueError, TypeError, KeyError, AttributeError) as e:
            logger.warning(f"Route cache entry '{key}' is corrupt, rebuilding: {e}")
            return None

    async def _store(self, key: str, table: RouteTable) -> None:
        if self._backend is None:
            return

        try:
            data = self._serializer.serialize({"version": PAYLOAD_VERSION, "routes": table_to_data(table)})
        except (TypeError, ValueError, OverflowError) as e:
            logger.warning(
                f"Route table not cacheable, serving uncached table: "
                f"{CacheBackendFault(self._backend.name, 'serialize', str(e))}"
            )
            return

        try:
            await self._backend.set(key, data)
        except CacheBackendFault as fault:
            logger.warning(f"Route cache store failed, serving uncached table: {fault}")
        except Exception as e:
            logger.warning(f"Route cache store failed, serving uncached table: {CacheBackendFault(self._backend.name, 'set', str(e))}")
        else:
            logger.debug(f"Stored route table under '{key}' ({len(table)} routes)")
