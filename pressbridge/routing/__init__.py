"""
PressBridge Routing

Descriptors -> compiled routes -> cached table -> per-request match.

- ``template``: URL template compiler
- ``table``: route table builder (sorted by parameter count, stable)
- ``cache``: get-or-build route cache
- ``dispatcher``: request matching and action invocation
- ``bridge``: host router facade
"""

from .template import CompiledTemplate, compile_template, extract_parameters, split_segments
from .table import (
    DEFAULT_METHOD,
    Route,
    RouteTable,
    RouteTableBuilder,
    normalize_methods,
    table_from_data,
    table_to_data,
)
from .interfaces import (
    ActionDescriptorSource,
    AnnotationReader,
    ActionInvoker,
    ParameterResolver,
    FilterResolver,
    NotFoundHandler,
    HostRouter,
)
from .cache import DEFAULT_CACHE_KEY, RouteCache
from .dispatcher import DispatchOutcome, DispatchState, RequestDispatcher, normalize_path
from .bridge import RouteBridge, RouteRegistration

__all__ = [
    # Compiler
    "CompiledTemplate",
    "compile_template",
    "extract_parameters",
    "split_segments",

    # Table
    "DEFAULT_METHOD",
    "Route",
    "RouteTable",
    "RouteTableBuilder",
    "normalize_methods",
    "table_from_data",
    "table_to_data",

    # Collaborators
    "ActionDescriptorSource",
    "AnnotationReader",
    "ActionInvoker",
    "ParameterResolver",
    "FilterResolver",
    "NotFoundHandler",
    "HostRouter",

    # Cache / dispatch
    "DEFAULT_CACHE_KEY",
    "RouteCache",
    "DispatchOutcome",
    "DispatchState",
    "RequestDispatcher",
    "normalize_path",
    "RouteBridge",
    "RouteRegistration",
]
