"""
Tests for the controller registry: descriptor collection, parameter
inference, resolution and invocation.
"""

from __future__ import annotations

import pytest

from pressbridge.controller import (
    Controller,
    ControllerRegistry,
    ActionDescriptor,
    ActionRef,
    CallbackFilter,
    ParameterSpec,
    RequestContext,
    GET,
    POST,
    URL,
    route,
    menu_settings,
    infer_parameters,
)
from pressbridge.controller.params import RequestParameterFetcher, UrlParameterFetcher
from pressbridge.faults import DescriptorFault
from pressbridge.request import Request
from pressbridge.response import Response

from conftest import BlogController, make_request


class TestRegistration:
    def test_descriptors_in_declaration_order(self, registry):
        actions = [d.action.method for d in registry.list_actions()]
        assert actions == ["show", "list_posts", "update", "contact", "archive"]

    def test_descriptor_fields(self, registry):
        show = registry.list_actions()[0]
        assert show.url == "/post/{id}"
        assert show.action == ActionRef("blog", "show")
        assert show.http_methods == ("GET",)
        assert show.title == "Post"

    def test_default_name_is_class_name(self):
        class Plain:
            @GET("/plain")
            def index(self):
                return "ok"

        reg = ControllerRegistry()
        reg.register(Plain())
        assert reg.list_actions()[0].action == ActionRef("Plain", "index")

    def test_duplicate_controller_name(self, registry):
        with pytest.raises(DescriptorFault, match="already registered"):
            registry.register(BlogController())

    def test_stacked_decorators_expose_several_urls(self):
        class Pages(Controller):
            @GET("/about")
            @GET("/about-us")
            def about(self):
                return "about"

        reg = ControllerRegistry()
        reg.register(Pages(), name="pages")
        assert [d.url for d in reg.list_actions()] == ["/about-us", "/about"]

    def test_route_with_several_methods(self):
        class Forms(Controller):
            @route(["GET", "POST"], "/contact")
            def contact(self):
                return ""

        reg = ControllerRegistry()
        reg.register(Forms(), name="forms")
        assert reg.list_actions()[0].http_methods == ("GET", "POST")

    def test_inherited_routes(self):
        class Base(Controller):
            @GET("/base")
            def base(self):
                return "base"

        class Child(Base):
            @GET("/child")
            def child(self):
                return "child"

        reg = ControllerRegistry()
        reg.register(Child(), name="child")
        assert [d.url for d in reg.list_actions()] == ["/base", "/child"]

    def test_filter_instances_are_registered(self):
        audit = CallbackFilter("audit")

        class Guarded(Controller):
            @GET("/guarded", filters=[audit])
            def index(self):
                return ""

        reg = ControllerRegistry()
        reg.register(Guarded(), name="guarded")
        assert reg.list_actions()[0].filters == ("audit",)
        assert reg.resolve_filter("audit") is audit

    def test_bad_filter_declaration(self):
        class Broken(Controller):
            @GET("/broken", filters=[42])
            def index(self):
                return ""

        with pytest.raises(DescriptorFault):
            ControllerRegistry().register(Broken(), name="broken")

    def test_filter_name_clash(self, registry):
        with pytest.raises(DescriptorFault):
            registry.register_filter(CallbackFilter("audit"))

    def test_nameless_filter(self, registry):
        with pytest.raises(DescriptorFault):
            registry.register_filter(CallbackFilter(""))


class TestManifest:
    def test_register_manifest(self, registry):
        registry.register_manifest([
            {
                "url": "/feed/{format}",
                "controller": "blog",
                "method": "list_posts",
                "methods": ["GET"],
                "title": "Feed",
                "parameters": [{"name": "format", "source": "url"}],
                "settings": {"type": "MENU_CALLBACK"},
            },
        ])
        added = registry.list_actions()[-1]
        assert added.url == "/feed/{format}"
        assert added.parameters == (ParameterSpec("format", source="url"),)
        assert registry.get_specificity_settings(added.action) == {"type": "MENU_CALLBACK"}

    def test_manifest_unknown_controller(self, registry):
        with pytest.raises(DescriptorFault, match="Unknown controller"):
            registry.register_manifest([
                {"url": "/x", "controller": "missing", "method": "index"},
            ])

    def test_add_action_merges_settings_conflict(self, registry):
        action = ActionRef("blog", "contact")
        registry.add_action(ActionDescriptor(url="/contact-us", action=action), settings=[{"weight": 1}])
        with pytest.raises(DescriptorFault) as exc_info:
            registry.get_specificity_settings(action)
        assert exc_info.value.code == "DESCRIPTOR_CONFLICT"


class TestSettings:
    def test_single_payload(self, registry):
        assert registry.get_specificity_settings(ActionRef("blog", "contact")) == {
            "type": "MENU_NORMAL_ITEM",
            "weight": 3,
        }

    def test_no_payload(self, registry):
        assert registry.get_specificity_settings(ActionRef("blog", "show")) is None

    def test_two_payloads_conflict(self):
        class Menus(Controller):
            @GET("/menu")
            @menu_settings({"a": 1})
            @menu_settings({"b": 2})
            def index(self):
                return ""

        reg = ControllerRegistry()
        reg.register(Menus(), name="menus")
        with pytest.raises(DescriptorFault):
            reg.get_specificity_settings(ActionRef("menus", "index"))


class TestParameterInference:
    def test_url_and_request_sources(self):
        def update(self, id: int, body: str, notify: bool = False):
            ...

        specs = infer_parameters(update, "/post/{id}")
        assert specs == (
            ParameterSpec("id", source="url", cast="int"),
            ParameterSpec("body", source="request", cast="str"),
            ParameterSpec("notify", source="request", required=False, default=False, cast="bool"),
        )

    def test_request_and_context_objects(self):
        def action(self, request: Request, ctx: RequestContext):
            ...

        specs = infer_parameters(action, "/x")
        assert [s.source for s in specs] == ["request_object", "context"]

    def test_unannotated_has_no_cast(self):
        def action(self, slug):
            ...

        (spec,) = infer_parameters(action, "/page/{slug}")
        assert spec.cast is None
        assert spec.source == "url"

    def test_explicit_spec_wins(self):
        def action(self, page):
            ...

        explicit = ParameterSpec("page", source="request", required=False, default="1", cast="int")
        assert infer_parameters(action, "/list", [explicit]) == (explicit,)

    def test_unused_explicit_spec(self):
        def action(self, page):
            ...

        with pytest.raises(DescriptorFault):
            infer_parameters(action, "/list", [ParameterSpec("missing")])

    def test_var_args_ignored(self):
        def action(self, *args, **kwargs):
            ...

        assert infer_parameters(action, "/x") == ()

    def test_unresolvable_annotation_falls_back_to_names(self):
        def action(self, request: "Request", ctx: "RequestContext", page: "int", extra: NotImported = None):  # noqa: F821
            ...

        specs = infer_parameters(action, "/list")
        assert [s.source for s in specs] == ["request_object", "context", "request", "request"]
        assert specs[2].cast == "int"
        assert specs[3].required is False


class TestResolution:
    def test_resolve_fetcher(self, registry):
        assert isinstance(registry.resolve_fetcher(ParameterSpec("id", source="url")), UrlParameterFetcher)
        assert isinstance(registry.resolve_fetcher(ParameterSpec("q")), RequestParameterFetcher)

    def test_resolve_fetcher_bad_source(self, registry):
        with pytest.raises(DescriptorFault):
            registry.resolve_fetcher(ParameterSpec("id", source="cookie"))

    def test_resolve_fetcher_bad_cast(self, registry):
        with pytest.raises(DescriptorFault):
            registry.resolve_fetcher(ParameterSpec("id", cast="decimal"))

    def test_unknown_filter(self, registry):
        with pytest.raises(DescriptorFault, match="Unknown filter"):
            registry.resolve_filter("nope")

    def test_unknown_controller(self, registry):
        with pytest.raises(DescriptorFault):
            registry.resolve_controller("nope")


class TestInvoke:
    @pytest.mark.asyncio
    async def test_sync_action_is_coerced(self, registry):
        ctx = RequestContext(request=make_request("GET", "/post/3"))
        response = await registry.invoke(ActionRef("blog", "show"), [3], ctx)
        assert isinstance(response, Response)
        assert response.status == 200
        assert response.headers["content-type"].startswith("application/json")
        assert response.body == b'{"id": 3}'

    @pytest.mark.asyncio
    async def test_async_action(self, registry):
        ctx = RequestContext(request=make_request("POST", "/post/3"))
        response = await registry.invoke(ActionRef("blog", "update"), [3, "hi", True], ctx)
        assert response.body == b'{"id": 3, "body": "hi", "notify": true}'

    @pytest.mark.asyncio
    async def test_legacy_method_variant(self, registry):
        request = make_request("POST", "/contact")
        response = await registry.invoke(ActionRef("blog", "contact"), [request], RequestContext(request=request))
        assert response.decode() == "<p>sent</p>"

    @pytest.mark.asyncio
    async def test_legacy_variant_disabled(self):
        reg = ControllerRegistry(legacy_method_suffix=False)
        reg.register(BlogController())
        request = make_request("POST", "/contact")
        response = await reg.invoke(ActionRef("blog", "contact"), [request], RequestContext(request=request))
        assert response.decode() == "<p>POST</p>"

    @pytest.mark.asyncio
    async def test_missing_method(self, registry):
        ctx = RequestContext(request=make_request())
        with pytest.raises(DescriptorFault) as exc_info:
            await registry.invoke(ActionRef("blog", "nope"), [], ctx)
        assert exc_info.value.code == "ACTION_NOT_FOUND"

    @pytest.mark.asyncio
    async def test_none_result_is_no_content(self):
        class Quiet(Controller):
            @URL("/ping")
            def ping(self):
                return None

        reg = ControllerRegistry()
        reg.register(Quiet(), name="quiet")
        response = await reg.invoke(ActionRef("quiet", "ping"), [], RequestContext(request=make_request()))
        assert response.status == 204
