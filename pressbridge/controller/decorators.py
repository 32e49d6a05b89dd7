"""
Controller Method Decorators

Attach route metadata to controller methods without import-time side
effects. The metadata is read once, when the controller instance is
registered with :class:`~pressbridge.controller.registry.ControllerRegistry`.
"""

from typing import Any, Callable, Dict, List, Optional, Sequence, TypeVar, Union

from .metadata import ParameterSpec


F = TypeVar('F', bound=Callable[..., Any])


class RouteDecorator:
    """
    Base route decorator.

    Each application appends one entry to ``func.__route_metadata__``; a
    method may therefore be exposed under several URLs.
    """

    methods: Sequence[str] = ()

    def __init__(
        self,
        path: str,
        *,
        methods: Optional[Sequence[str]] = None,
        title: Optional[str] = None,
        filters: Optional[List[Any]] = None,
        parameters: Optional[List[ParameterSpec]] = None,
    ):
        """
        Initialize route decorator.

        Args:
            path: URL template (e.g., "/post/{id}")
            methods: Allowed HTTP methods; empty means any method
            title: Display title handed to the host router
            filters: Filter names or ActionFilter instances, outermost first
            parameters: Explicit argument specs overriding signature inference
        """
        self.path = path
        if methods is not None:
            self.methods = tuple(methods)
        self.title = title
        self.filters = list(filters or [])
        self.parameters = list(parameters or [])

    def __call__(self, func: F) -> F:
        if not hasattr(func, '__route_metadata__'):
            func.__route_metadata__ = []

        func.__route_metadata__.append({
            'path': self.path,
            'http_methods': tuple(self.methods),
            'title': self.title,
            'filters': self.filters,
            'parameters': self.parameters,
            'func_name': func.__name__,
        })
        return func


class URL(RouteDecorator):
    """Expose a method under a URL for any HTTP method."""


class GET(RouteDecorator):
    """GET request decorator."""
    methods = ('GET',)


class POST(RouteDecorator):
    """POST request decorator."""
    methods = ('POST',)


class PUT(RouteDecorator):
    """PUT request decorator."""
    methods = ('PUT',)


class PATCH(RouteDecorator):
    """PATCH request decorator."""
    methods = ('PATCH',)


class DELETE(RouteDecorator):
    """DELETE request decorator."""
    methods = ('DELETE',)


class HEAD(RouteDecorator):
    """HEAD request decorator."""
    methods = ('HEAD',)


class OPTIONS(RouteDecorator):
    """OPTIONS request decorator."""
    methods = ('OPTIONS',)


def route(
    method: Union[str, List[str]],
    path: str,
    **kwargs
) -> Callable[[F], F]:
    """
    Generic route decorator.

    Unlike stacking ``@GET`` and ``@POST``, this yields a single
    declaration allowing several methods.

    Example:
        @route(["GET", "POST"], "/contact")
        def contact(self, name: str = ""):
            ...
    """
    methods = [method] if isinstance(method, str) else list(method)
    return RouteDecorator(path, methods=methods, **kwargs)


def title(text: str) -> Callable[[F], F]:
    """
    Set the display title for every route of the decorated method.

    Must sit above the route decorators so it sees their metadata.
    """
    def decorator(func: F) -> F:
        for meta in getattr(func, '__route_metadata__', []):
            if meta['title'] is None:
                meta['title'] = text
        func.__route_title__ = text
        return func
    return decorator


def menu_settings(settings: Dict[str, Any]) -> Callable[[F], F]:
    """
    Attach a menu settings payload (JSON object) to an action.

    At most one payload per action is allowed; a second one makes route
    table construction fail.
    """
    def decorator(func: F) -> F:
        if not hasattr(func, '__menu_settings__'):
            func.__menu_settings__ = []
        func.__menu_settings__.append(dict(settings))
        return func
    return decorator
