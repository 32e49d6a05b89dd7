"""
Shared test fixtures and helpers for the PressBridge test suite.
"""

from __future__ import annotations

from typing import Dict, List, Optional, Sequence

import pytest

from pressbridge.controller import (
    Controller,
    ControllerRegistry,
    ActionFilter,
    RequestContext,
    ActionRef,
    ParameterSpec,
    GET,
    POST,
    URL,
    title,
    menu_settings,
)
from pressbridge.request import Request
from pressbridge.routing.table import DEFAULT_METHOD, Route, RouteTableBuilder, normalize_methods
from pressbridge.routing.template import compile_template


# ============================================================================
# Request Helpers
# ============================================================================


def make_request(
    method: str = "GET",
    uri: str = "/",
    form: Optional[Dict[str, str]] = None,
    headers: Optional[Dict[str, str]] = None,
) -> Request:
    """Build a Request from a raw URI."""
    return Request.from_uri(method, uri, form=form, headers=headers)


def make_scope(
    method: str = "GET",
    path: str = "/",
    query_string: str = "",
    headers: Optional[List[tuple]] = None,
    root_path: str = "",
) -> dict:
    """Build a minimal ASGI HTTP scope."""
    raw_headers = []
    for name, value in headers or []:
        raw_headers.append((name.encode("latin-1"), value.encode("latin-1")))
    return {
        "type": "http",
        "asgi": {"version": "3.0"},
        "http_version": "1.1",
        "method": method,
        "path": path,
        "root_path": root_path,
        "query_string": query_string.encode("latin-1"),
        "headers": raw_headers,
    }


def make_route(
    template: str,
    method: str = DEFAULT_METHOD,
    controller: str = "test",
    action: str = "action",
    *,
    parameters: Sequence[ParameterSpec] = (),
    filters: Sequence[str] = (),
) -> Route:
    """Compile one route directly, bypassing the builder."""
    compiled = compile_template(template)
    return Route(
        path=compiled.pattern,
        parameter_positions=dict(compiled.parameter_positions),
        parameter_count=compiled.parameter_count,
        http_method=method,
        http_methods=normalize_methods([] if method == DEFAULT_METHOD else [method]),
        action=ActionRef(controller, action),
        template=template,
        parameters=tuple(parameters),
        filters=tuple(filters),
    )


# ============================================================================
# Test Controllers
# ============================================================================


class RecordingFilter(ActionFilter):
    """Appends its hook calls to a shared event list."""

    def __init__(self, name: str, events: List[str]):
        self.name = name
        self.events = events

    def before_action(self, ctx: RequestContext):
        self.events.append(f"{self.name}.before")

    async def after_action(self, ctx: RequestContext):
        self.events.append(f"{self.name}.after")


class BlogController(Controller):
    controller_name = "blog"

    # Declared before the static route on purpose
    @title("Post")
    @GET("/post/{id}")
    def show(self, id: int):
        return {"id": id}

    @GET("/post/list")
    def list_posts(self):
        return "<ul></ul>"

    @POST("/post/{id}", filters=["audit"])
    async def update(self, id: int, body: str, notify: bool = False):
        return {"id": id, "body": body, "notify": notify}

    @URL("/contact/")
    @menu_settings({"type": "MENU_NORMAL_ITEM", "weight": 3})
    def contact(self, request: Request):
        return f"<p>{request.method}</p>"

    def contact__POST(self, request: Request):
        return "<p>sent</p>"

    @GET("/archive/{year}/{month}")
    def archive(self, year: int, month: int, ctx: RequestContext):
        return {"year": year, "month": month, "path": ctx.path}


# ============================================================================
# Fixtures
# ============================================================================


@pytest.fixture
def events() -> List[str]:
    return []


@pytest.fixture
def registry(events) -> ControllerRegistry:
    """Registry with BlogController and an 'audit' filter."""
    reg = ControllerRegistry()
    reg.register_filter(RecordingFilter("audit", events))
    reg.register(BlogController())
    return reg


@pytest.fixture
def builder(registry) -> RouteTableBuilder:
    return RouteTableBuilder(source=registry, annotations=registry)


@pytest.fixture
def table(builder):
    return builder.build()
