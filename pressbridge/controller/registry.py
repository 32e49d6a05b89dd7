"""
Controller Registry - explicit registration of controllers and filters.

The registry is the bridge's view of the MVC side. It:
- collects action descriptors from decorated controller methods
  (or from a declarative manifest) at registration time
- answers menu settings lookups
- turns serialized references back into live fetchers, filters and
  controller methods at dispatch time
"""

from typing import Any, Dict, Iterable, List, Mapping, Optional, Sequence, Tuple
import inspect
import logging

from .base import RequestContext, _safe_call
from .filters import ActionFilter
from .metadata import (
    ActionDescriptor,
    ActionRef,
    ParameterSpec,
    SOURCE_URL,
    SOURCE_REQUEST,
    SOURCE_REQUEST_OBJECT,
    SOURCE_CONTEXT,
)
from .params import ParameterFetcher, build_fetcher
from ..faults import DescriptorFault
from ..request import Request
from ..response import Response
from ..routing.template import split_segments

logger = logging.getLogger("pressbridge.controller.registry")

_CAST_NAMES = {int: "int", float: "float", bool: "bool", str: "str"}

# Annotations still recognised when left as strings
_KNOWN_ANNOTATIONS = {
    "Request": Request,
    "RequestContext": RequestContext,
    **{name: cast for cast, name in _CAST_NAMES.items()},
}


def _signature(func: Any) -> inspect.Signature:
    try:
        return inspect.signature(func, eval_str=True)
    except NameError as e:
        logger.debug(f"Unresolved annotation on {func.__qualname__} ({e}), matching annotations by name")
        return inspect.signature(func)


def _resolve_annotation(annotation: Any) -> Any:
    if isinstance(annotation, str):
        name = annotation.strip().strip("\"'").rsplit(".", 1)[-1]
        return _KNOWN_ANNOTATIONS.get(name, annotation)
    return annotation


def infer_parameters(
    func: Any,
    url: str,
    explicit: Sequence[ParameterSpec] = (),
) -> Tuple[ParameterSpec, ...]:
    """
    Derive argument specs from a method signature.

    - explicit specs win, matched by name
    - names captured by the URL template come from the URL
    - ``Request`` / ``RequestContext`` annotations get the object itself
    - everything else is a request (form/query) parameter; a default
      value makes it optional
    """
    overrides = {spec.name: spec for spec in explicit}
    captures = {s[1:-1] for s in split_segments(url) if s.startswith("{") and s.endswith("}")}
    specs: List[ParameterSpec] = []

    for param in _signature(func).parameters.values():
        if param.name == "self" or param.kind in (param.VAR_POSITIONAL, param.VAR_KEYWORD):
            continue
        if param.name in overrides:
            specs.append(overrides[param.name])
            continue

        annotation = _resolve_annotation(param.annotation)
        if annotation is Request:
            specs.append(ParameterSpec(param.name, SOURCE_REQUEST_OBJECT))
            continue
        if annotation is RequestContext:
            specs.append(ParameterSpec(param.name, SOURCE_CONTEXT))
            continue

        source = SOURCE_URL if param.name in captures else SOURCE_REQUEST
        has_default = param.default is not inspect.Parameter.empty
        specs.append(ParameterSpec(
            name=param.name,
            source=source,
            required=not has_default,
            default=param.default if has_default else None,
            cast=_CAST_NAMES.get(annotation),
        ))

    unused = set(overrides) - {spec.name for spec in specs}
    if unused:
        raise DescriptorFault(
            f"Parameter spec(s) {sorted(unused)} do not match any argument of '{func.__name__}'",
            action=func.__name__,
        )
    return tuple(specs)


def _declared_methods(controller: Any) -> Iterable[Tuple[str, Any]]:
    """Yield (name, function) in class declaration order, base classes first."""
    seen: Dict[str, Any] = {}
    for klass in reversed(type(controller).__mro__):
        for name, attr in vars(klass).items():
            if callable(attr) and hasattr(attr, "__route_metadata__"):
                seen[name] = attr
    return seen.items()


class ControllerRegistry:
    """
    Holds registered controllers and filters.

    Implements ActionDescriptorSource, AnnotationReader, ActionInvoker,
    ParameterResolver and FilterResolver.

    Example:
        registry = ControllerRegistry()
        registry.register_filter(AuthFilter())
        registry.register(BlogController(), name="blog")
    """

    def __init__(self, *, legacy_method_suffix: bool = True):
        self._controllers: Dict[str, Any] = {}
        self._filters: Dict[str, ActionFilter] = {}
        self._descriptors: List[ActionDescriptor] = []
        self._settings: Dict[ActionRef, List[Dict[str, Any]]] = {}
        self._legacy_method_suffix = legacy_method_suffix

    @property
    def legacy_method_suffix(self) -> bool:
        """Whether ``<method>__<HTTP METHOD>`` variants replace the declared method."""
        return self._legacy_method_suffix

    @legacy_method_suffix.setter
    def legacy_method_suffix(self, enabled: bool) -> None:
        self._legacy_method_suffix = bool(enabled)

    # ── Registration ─────────────────────────────────────────────────

    def register(self, controller: Any, name: Optional[str] = None) -> List[ActionDescriptor]:
        """
        Register a controller instance and collect its routes.

        Args:
            controller: Object with route-decorated methods
            name: Registration name (defaults to ``controller_name`` or
                  the class name)

        Returns:
            Descriptors added for this controller
        """
        name = name or getattr(controller, "controller_name", None) or type(controller).__name__
        if name in self._controllers:
            raise DescriptorFault(f"Controller '{name}' is already registered", controller=name)
        self._controllers[name] = controller

        added: List[ActionDescriptor] = []
        for method_name, func in _declared_methods(controller):
            action = ActionRef(name, method_name)
            settings = getattr(func, "__menu_settings__", None)
            if settings:
                self._settings[action] = list(settings)

            for meta in func.__route_metadata__:
                filters = tuple(self._filter_name(f, action) for f in meta["filters"])
                descriptor = ActionDescriptor(
                    url=meta["path"],
                    action=action,
                    http_methods=tuple(meta["http_methods"]),
                    title=meta["title"] or getattr(func, "__route_title__", None),
                    parameters=infer_parameters(func, meta["path"], meta["parameters"]),
                    filters=filters,
                )
                self._descriptors.append(descriptor)
                added.append(descriptor)

        logger.debug(f"Registered controller '{name}' with {len(added)} route(s)")
        return added

    def register_filter(self, action_filter: ActionFilter, name: Optional[str] = None) -> str:
        """Register a filter under ``name`` (defaults to ``action_filter.name``)."""
        name = name or action_filter.name
        if not name:
            raise DescriptorFault(f"Filter {action_filter!r} has no name")
        existing = self._filters.get(name)
        if existing is not None and existing is not action_filter:
            raise DescriptorFault(f"Filter '{name}' is already registered")
        self._filters[name] = action_filter
        return name

    def add_action(
        self,
        descriptor: ActionDescriptor,
        settings: Optional[Sequence[Mapping[str, Any]]] = None,
    ) -> None:
        """Register a hand-built descriptor for an already registered controller."""
        if descriptor.action.controller not in self._controllers:
            raise DescriptorFault(
                f"Unknown controller '{descriptor.action.controller}'",
                controller=descriptor.action.controller,
                action=descriptor.action.method,
            )
        if settings:
            self._settings.setdefault(descriptor.action, []).extend(dict(s) for s in settings)
        self._descriptors.append(descriptor)

    def register_manifest(self, entries: Iterable[Mapping[str, Any]]) -> None:
        """
        Register routes from a declarative manifest.

        Each entry::

            {"url": "/post/{id}", "controller": "blog", "method": "show",
             "methods": ["GET"], "title": "Post", "filters": ["auth"],
             "parameters": [{"name": "id", "source": "url", "cast": "int"}],
             "settings": {"type": "MENU_NORMAL_ITEM"}}
        """
        for entry in entries:
            action = ActionRef(entry["controller"], entry["method"])
            parameters = tuple(ParameterSpec.from_dict(p) for p in entry.get("parameters", ()))
            settings = entry.get("settings")
            self.add_action(
                ActionDescriptor(
                    url=entry["url"],
                    action=action,
                    http_methods=tuple(entry.get("methods", ())),
                    title=entry.get("title"),
                    parameters=parameters,
                    filters=tuple(entry.get("filters", ())),
                ),
                settings=[settings] if settings else None,
            )

    def _filter_name(self, declared: Any, action: ActionRef) -> str:
        if isinstance(declared, str):
            return declared
        if isinstance(declared, ActionFilter):
            return self.register_filter(declared)
        raise DescriptorFault(
            f"Filter {declared!r} on {action} must be a name or an ActionFilter",
            controller=action.controller,
            action=action.method,
        )

    # ── ActionDescriptorSource / AnnotationReader ────────────────────

    def list_actions(self) -> List[ActionDescriptor]:
        return list(self._descriptors)

    def get_specificity_settings(self, action: ActionRef) -> Optional[Dict[str, Any]]:
        settings = self._settings.get(action)
        if not settings:
            return None
        if len(settings) > 1:
            raise DescriptorFault(
                f"Action {action.method} for controller {action.controller} should have "
                f"at most 1 menu settings annotation",
                controller=action.controller,
                action=action.method,
                code="DESCRIPTOR_CONFLICT",
            )
        return dict(settings[0])

    # ── Resolution ───────────────────────────────────────────────────

    def resolve_controller(self, name: str) -> Any:
        try:
            return self._controllers[name]
        except KeyError:
            raise DescriptorFault(f"Unknown controller '{name}'", controller=name) from None

    def resolve_filter(self, name: str) -> ActionFilter:
        try:
            return self._filters[name]
        except KeyError:
            raise DescriptorFault(f"Unknown filter '{name}'") from None

    def resolve_fetcher(self, spec: ParameterSpec) -> ParameterFetcher:
        try:
            return build_fetcher(spec)
        except ValueError as e:
            raise DescriptorFault(f"Bad parameter '{spec.name}': {e}") from e

    # ── ActionInvoker ────────────────────────────────────────────────

    async def invoke(self, action: ActionRef, args: Sequence[Any], ctx: RequestContext) -> Response:
        """
        Call the controller method and coerce its result.

        When legacy suffixes are enabled and the controller defines
        ``<method>__<HTTP METHOD>``, that variant is called instead.
        """
        controller = self.resolve_controller(action.controller)

        method_name = action.method
        if self._legacy_method_suffix:
            legacy = f"{method_name}__{ctx.method}"
            if callable(getattr(controller, legacy, None)):
                method_name = legacy

        handler = getattr(controller, method_name, None)
        if not callable(handler):
            raise DescriptorFault(
                f"Controller '{action.controller}' has no method '{action.method}'",
                controller=action.controller,
                action=action.method,
                code="ACTION_NOT_FOUND",
            )

        result = await _safe_call(handler, *args)
        return Response.coerce(result)
