"""
Tests for the host-facing RouteBridge.
"""

from __future__ import annotations

from datetime import date
from unittest.mock import AsyncMock, MagicMock

import pytest

from pressbridge.cache import MemoryBackend
from pressbridge.config import BridgeConfig, build_bridge_config
from pressbridge.controller import GET, Controller, ControllerRegistry
from pressbridge.faults import ParameterValidationFault
from pressbridge.response import Response
from pressbridge.routing import DispatchState, RouteBridge, RouteCache, RouteRegistration

from conftest import BlogController, make_request


@pytest.fixture
def bridge(registry):
    return RouteBridge(registry, cache=RouteCache(MemoryBackend()))


class RecordingRouter:
    def __init__(self):
        self.routes = {}

    def add_route(self, name, registration):
        self.routes[name] = registration


class TestGenerateRoutes:
    @pytest.mark.asyncio
    async def test_registrations_in_table_order(self, bridge):
        registrations = await bridge.generate_routes()
        assert [r.name for r in registrations] == [f"pressbridge_route_{i}" for i in range(5)]
        assert [r.template for r in registrations] == [
            "/post/list",
            "/contact",
            "/post/{id}",
            "/post/{id}",
            "/archive/{year}/{month}",
        ]

    @pytest.mark.asyncio
    async def test_registration_fields(self, bridge):
        registrations = await bridge.generate_routes()
        show = registrations[2]
        assert isinstance(show, RouteRegistration)
        assert show.path == "^post/([^/]*?)$"
        assert show.methods == ("GET",)
        assert show.title == "Post"
        assert show.callback == bridge.handle

        contact = registrations[1]
        assert contact.methods == ("default",)
        assert contact.settings == {"type": "MENU_NORMAL_ITEM", "weight": 3}

    @pytest.mark.asyncio
    async def test_custom_name_prefix(self, registry):
        bridge = RouteBridge(registry, config=BridgeConfig(route_name_prefix="blog_"))
        registrations = await bridge.generate_routes()
        assert registrations[0].name == "blog_0"

    @pytest.mark.asyncio
    async def test_register_with_host_router(self, bridge):
        router = RecordingRouter()
        assert await bridge.register(router) == 5
        assert list(router.routes) == [f"pressbridge_route_{i}" for i in range(5)]

    @pytest.mark.asyncio
    async def test_register_with_mock_router(self, bridge):
        router = MagicMock()
        await bridge.register(router)
        name, registration = router.add_route.call_args_list[0].args
        assert name == "pressbridge_route_0"
        assert registration.action.method == "list_posts"


class TestCaching:
    @pytest.mark.asyncio
    async def test_table_built_once(self, bridge):
        await bridge.routes()
        await bridge.generate_routes()
        await bridge.handle(make_request("GET", "/post/list"))
        assert bridge.cache.builds == 1

    @pytest.mark.asyncio
    async def test_invalidate_rebuilds(self, bridge):
        await bridge.routes()
        assert await bridge.invalidate() is True
        await bridge.routes()
        assert bridge.cache.builds == 2

    @pytest.mark.asyncio
    async def test_uncached_bridge_rebuilds(self, registry):
        bridge = RouteBridge(registry)
        await bridge.routes()
        await bridge.routes()
        assert bridge.cache.builds == 2


class TestHandle:
    @pytest.mark.asyncio
    async def test_returns_action_response(self, bridge):
        response = await bridge.handle(make_request("GET", "/post/12"))
        assert response.body == b'{"id": 12}'

    @pytest.mark.asyncio
    async def test_not_found_without_handler(self, bridge):
        assert await bridge.handle(make_request("GET", "/missing")) is None

    @pytest.mark.asyncio
    async def test_not_found_handler(self, registry):
        handler = MagicMock()
        handler.handle = AsyncMock(return_value=Response.html("<h1>Not found</h1>", status=404))
        bridge = RouteBridge(registry, not_found_handler=handler)

        request = make_request("GET", "/missing")
        response = await bridge.handle(request)

        handler.handle.assert_awaited_once_with(request)
        assert response.status == 404

    @pytest.mark.asyncio
    async def test_sync_not_found_handler_result_is_coerced(self, registry):
        class Fallback:
            def handle(self, request):
                return "<p>Page not found</p>"

        bridge = RouteBridge(registry, not_found_handler=Fallback())
        response = await bridge.handle(make_request("GET", "/missing"))
        assert response.decode() == "<p>Page not found</p>"

    @pytest.mark.asyncio
    async def test_failed_dispatch_raises(self, bridge):
        with pytest.raises(ParameterValidationFault) as exc_info:
            await bridge.handle(make_request("POST", "/post/1"))
        assert exc_info.value.fetcher == "body"

    @pytest.mark.asyncio
    async def test_dispatch_returns_outcome(self, bridge):
        outcome = await bridge.dispatch(make_request("POST", "/post/1"))
        assert outcome.state is DispatchState.FAILED
        assert outcome.route.action.method == "update"

    @pytest.mark.asyncio
    async def test_home_path(self, registry):
        bridge = RouteBridge(registry, config=build_bridge_config({"home_path": "/wordpress/"}))
        response = await bridge.handle(make_request("GET", "/WordPress/post/list"))
        assert response.decode() == "<ul></ul>"

    @pytest.mark.asyncio
    async def test_legacy_variant_through_bridge(self, bridge):
        response = await bridge.handle(make_request("POST", "/contact"))
        assert response.decode() == "<p>sent</p>"


class TestFromConfig:
    @pytest.mark.asyncio
    async def test_memory_cache(self):
        registry = ControllerRegistry()
        registry.register(BlogController())
        bridge = RouteBridge.from_config(registry, BridgeConfig(cache_key="site:routes"))
        await bridge.startup()

        await bridge.routes()
        assert await bridge.cache.backend.get("site:routes") is not None
        await bridge.shutdown()

    def test_disabled_cache(self, registry):
        bridge = RouteBridge.from_config(registry, BridgeConfig(cache_enabled=False))
        assert bridge.cache.backend is None

    @pytest.mark.asyncio
    async def test_legacy_suffix_disabled_by_config(self, registry):
        bridge = RouteBridge.from_config(registry, build_bridge_config({"legacy_method_suffix": False}))
        assert registry.legacy_method_suffix is False

        response = await bridge.handle(make_request("POST", "/contact"))
        assert response.decode() == "<p>POST</p>"

    @pytest.mark.asyncio
    async def test_non_json_default_served_uncached(self):
        class DiaryController(Controller):
            @GET("/diary")
            def index(self, since: date = date(2020, 1, 1)):
                return {"since": since.isoformat()}

        registry = ControllerRegistry()
        registry.register(DiaryController(), name="diary")
        bridge = RouteBridge.from_config(registry, build_bridge_config({"cache_backend": "memory"}))

        response = await bridge.handle(make_request("GET", "/diary"))
        assert response.body == b'{"since": "2020-01-01"}'
        assert await bridge.cache.backend.get(bridge.config.cache_key) is None
