"""
PressBridge - expose MVC controller routes to a CMS router.

- Controllers: decorated controller methods declare URL templates
- Routing: templates compile to anchored patterns, ordered so that routes
  with fewer parameters win
- Cache: the compiled table is cached (memory or Redis) until invalidated
- Dispatch: the host hands each request back; the bridge matches it, runs
  parameter fetchers and filters, and invokes the action
"""

__version__ = "0.1.0"

from .faults import (
    Fault,
    FaultDomain,
    Severity,
    ConfigInvalidFault,
    DescriptorFault,
    MalformedTemplateFault,
    ParameterValidationFault,
    ActionInvocationFault,
    CacheBackendFault,
)
from .config import BridgeConfig, ConfigLoader, build_bridge_config
from .request import Request
from .response import Response
from .controller import (
    Controller,
    ControllerRegistry,
    RequestContext,
    ActionFilter,
    CallbackFilter,
    ParameterSpec,
    URL, GET, POST, PUT, PATCH, DELETE,
    route,
    title,
    menu_settings,
)
from .routing import (
    Route,
    RouteTableBuilder,
    RouteCache,
    RequestDispatcher,
    DispatchOutcome,
    DispatchState,
    RouteBridge,
    RouteRegistration,
    compile_template,
)

__all__ = [
    "__version__",

    # Faults
    "Fault",
    "FaultDomain",
    "Severity",
    "ConfigInvalidFault",
    "DescriptorFault",
    "MalformedTemplateFault",
    "ParameterValidationFault",
    "ActionInvocationFault",
    "CacheBackendFault",

    # Config
    "BridgeConfig",
    "ConfigLoader",
    "build_bridge_config",

    # Request / response
    "Request",
    "Response",

    # Controllers
    "Controller",
    "ControllerRegistry",
    "RequestContext",
    "ActionFilter",
    "CallbackFilter",
    "ParameterSpec",
    "URL",
    "GET",
    "POST",
    "PUT",
    "PATCH",
    "DELETE",
    "route",
    "title",
    "menu_settings",

    # Routing
    "Route",
    "RouteTableBuilder",
    "RouteCache",
    "RequestDispatcher",
    "DispatchOutcome",
    "DispatchState",
    "RouteBridge",
    "RouteRegistration",
    "compile_template",
]
