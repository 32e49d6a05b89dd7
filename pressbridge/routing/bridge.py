"""
Route Bridge - exposes registered controller routes to the host router.

Wires the registry, table builder, route cache and dispatcher together:

    registry = ControllerRegistry()
    registry.register(BlogController(), name="blog")

    bridge = RouteBridge.from_config(registry, build_bridge_config(loader))
    await bridge.startup()
    await bridge.register(cms_router)

    # later, from the host's request hook
    response = await bridge.handle(Request.from_scope(scope))
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Any, Awaitable, Callable, Dict, List, Mapping, Optional, Tuple, TYPE_CHECKING

from ..cache import create_cache_backend
from ..config import BridgeConfig
from ..controller.base import _safe_call
from ..controller.metadata import ActionRef
from ..request import Request
from ..response import Response
from .cache import RouteCache
from .dispatcher import DispatchOutcome, DispatchState, RequestDispatcher
from .interfaces import HostRouter, NotFoundHandler
from .table import RouteTable, RouteTableBuilder

if TYPE_CHECKING:
    from ..controller.registry import ControllerRegistry

logger = logging.getLogger("pressbridge.routing.bridge")


@dataclass(frozen=True)
class RouteRegistration:
    """
    What the host router receives for one route.

    ``callback`` points back into the bridge; the host calls it with the
    request once its own router has selected this entry.
    """

    name: str
    path: str
    methods: Tuple[str, ...]
    callback: Callable[[Request], Awaitable[Optional[Response]]]
    template: str = ""
    action: Optional[ActionRef] = None
    title: Optional[str] = None
    settings: Mapping[str, Any] = field(default_factory=dict)


class RouteBridge:
    """
    Host-facing facade.

    Args:
        registry: Descriptor source, annotation reader, invoker and
                  resolvers (normally a ControllerRegistry)
        config: Bridge configuration
        cache: Route cache; defaults to an uncached one
        not_found_handler: Host 404 policy
    """

    def __init__(
        self,
        registry: "ControllerRegistry",
        *,
        config: Optional[BridgeConfig] = None,
        cache: Optional[RouteCache] = None,
        not_found_handler: Optional[NotFoundHandler] = None,
    ):
        self.registry = registry
        self.config = config or BridgeConfig()
        self.cache = cache or RouteCache()
        self.not_found_handler = not_found_handler
        self.builder = RouteTableBuilder(source=registry, annotations=registry)
        self.dispatcher = RequestDispatcher(
            registry,
            registry,
            registry,
            home_path=self.config.home_path,
        )

    @classmethod
    def from_config(
        cls,
        registry: "ControllerRegistry",
        config: BridgeConfig,
        *,
        not_found_handler: Optional[NotFoundHandler] = None,
    ) -> "RouteBridge":
        """
        Create a bridge with the cache backend named in ``config``.

        Also applies ``config.legacy_method_suffix`` to the registry.
        """
        registry.legacy_method_suffix = config.legacy_method_suffix
        cache = RouteCache(create_cache_backend(config))
        return cls(registry, config=config, cache=cache, not_found_handler=not_found_handler)

    # ── Lifecycle ────────────────────────────────────────────────────

    async def startup(self) -> None:
        if self.cache.backend is not None:
            await self.cache.backend.initialize()
        logger.info(
            f"Route bridge started (cache={self.cache.backend.name if self.cache.backend else 'off'}, "
            f"home_path={self.config.home_path!r})"
        )

    async def shutdown(self) -> None:
        if self.cache.backend is not None:
            await self.cache.backend.shutdown()

    # ── Routes ───────────────────────────────────────────────────────

    async def routes(self) -> RouteTable:
        """The route table, from cache when possible."""
        return await self.cache.get_or_build(self.config.cache_key, self.builder.build)

    async def invalidate(self) -> bool:
        """Forget the cached table; call after deploying controller changes."""
        return await self.cache.invalidate(self.config.cache_key)

    async def generate_routes(self) -> List[RouteRegistration]:
        """One registration per route, in table order."""
        registrations = []
        for index, route in enumerate(await self.routes()):
            settings: Dict[str, Any] = dict(route.settings or {})
            registrations.append(RouteRegistration(
                name=f"{self.config.route_name_prefix}{index}",
                path=route.path,
                methods=(route.http_method,),
                callback=self.handle,
                template=route.template,
                action=route.action,
                title=route.title,
                settings=settings,
            ))
        return registrations

    async def register(self, router: HostRouter) -> int:
        """Hand every registration to the host router."""
        registrations = await self.generate_routes()
        for registration in registrations:
            router.add_route(registration.name, registration)
        logger.info(f"Registered {len(registrations)} route(s) with {type(router).__name__}")
        return len(registrations)

    # ── Requests ─────────────────────────────────────────────────────

    async def dispatch(self, request: Request) -> DispatchOutcome:
        return await self.dispatcher.dispatch(await self.routes(), request)

    async def handle(self, request: Request) -> Optional[Response]:
        """
        Dispatch and translate the outcome for the host.

        Returns:
            The action's response; the not-found handler's response (or
            None without a handler) when nothing matched

        Raises:
            Fault: The fault of a FAILED dispatch
        """
        outcome = await self.dispatch(request)
        if outcome.state is DispatchState.NOT_FOUND:
            if self.not_found_handler is None:
                return None
            result = await _safe_call(self.not_found_handler.handle, request)
            return None if result is None else Response.coerce(result)
        return outcome.unwrap()
