"""
PressBridge Controller System

Class-based controllers whose decorated methods become CMS routes.

Example:
    from pressbridge.controller import Controller, GET, POST, title

    class BlogController(Controller):
        controller_name = "blog"

        @GET("/post/list")
        @title("All posts")
        def list(self):
            return "<ul>...</ul>"

        @GET("/post/{id}")
        def show(self, id: int):
            return {"id": id}

        @POST("/post/{id}", filters=["auth"])
        async def update(self, id: int, body: str):
            ...
"""

from .base import Controller, RequestContext
from .decorators import (
    URL, GET, POST, PUT, PATCH, DELETE,
    HEAD, OPTIONS,
    route,
    title,
    menu_settings,
)
from .metadata import (
    ActionRef,
    ActionDescriptor,
    ParameterSpec,
    SOURCE_URL,
    SOURCE_REQUEST,
    SOURCE_REQUEST_OBJECT,
    SOURCE_CONTEXT,
)
from .filters import ActionFilter, CallbackFilter
from .params import (
    ParameterFetcher,
    UrlParameterFetcher,
    RequestParameterFetcher,
    RequestFetcher,
    ContextFetcher,
    build_fetcher,
)
from .registry import ControllerRegistry, infer_parameters

__all__ = [
    # Base
    "Controller",
    "RequestContext",

    # Decorators
    "URL",
    "GET",
    "POST",
    "PUT",
    "PATCH",
    "DELETE",
    "HEAD",
    "OPTIONS",
    "route",
    "title",
    "menu_settings",

    # Metadata
    "ActionRef",
    "ActionDescriptor",
    "ParameterSpec",
    "SOURCE_URL",
    "SOURCE_REQUEST",
    "SOURCE_REQUEST_OBJECT",
    "SOURCE_CONTEXT",

    # Filters and fetchers
    "ActionFilter",
    "CallbackFilter",
    "ParameterFetcher",
    "UrlParameterFetcher",
    "RequestParameterFetcher",
    "RequestFetcher",
    "ContextFetcher",
    "build_fetcher",

    # Registry
    "ControllerRegistry",
    "infer_parameters",
]
