"""
Collaborator interfaces consumed by the routing core.

:class:`~pressbridge.controller.registry.ControllerRegistry` implements
all of them except :class:`NotFoundHandler` and :class:`HostRouter`,
which belong to the host CMS integration.
"""

from typing import Any, Dict, Optional, Protocol, Sequence, runtime_checkable

from ..controller.base import RequestContext
from ..controller.filters import ActionFilter
from ..controller.metadata import ActionDescriptor, ActionRef, ParameterSpec
from ..controller.params import ParameterFetcher
from ..request import Request
from ..response import Response


@runtime_checkable
class ActionDescriptorSource(Protocol):
    """Supplies raw route declarations in a stable order."""

    def list_actions(self) -> Sequence[ActionDescriptor]:
        ...


@runtime_checkable
class AnnotationReader(Protocol):
    """Supplies the single menu settings payload attached to an action."""

    def get_specificity_settings(self, action: ActionRef) -> Optional[Dict[str, Any]]:
        """
        Raises:
            DescriptorFault: More than one payload is attached
        """
        ...


@runtime_checkable
class ActionInvoker(Protocol):
    """Executes a resolved controller method."""

    async def invoke(self, action: ActionRef, args: Sequence[Any], ctx: RequestContext) -> Response:
        ...


@runtime_checkable
class ParameterResolver(Protocol):
    def resolve_fetcher(self, spec: ParameterSpec) -> ParameterFetcher:
        ...


@runtime_checkable
class FilterResolver(Protocol):
    def resolve_filter(self, name: str) -> ActionFilter:
        ...


@runtime_checkable
class NotFoundHandler(Protocol):
    """Host policy applied when no route matched."""

    async def handle(self, request: Request) -> Any:
        ...


@runtime_checkable
class HostRouter(Protocol):
    """The CMS router routes are registered with."""

    def add_route(self, name: str, registration: Any) -> None:
        ...
