"""
Route Table Builder.

Compiles action descriptors into an ordered, serializable route table.

Ordering rule: routes with fewer URL parameters come first; routes with
the same parameter count keep the order in which their descriptors were
listed. ``sorted()`` is stable, which is what makes the tie-break hold,
so a static ``/post/list`` is always tried before ``/post/{id}``.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from types import MappingProxyType
from typing import Any, Dict, Iterable, Mapping, Optional, Sequence, Tuple

from ..controller.metadata import ActionDescriptor, ActionRef, ParameterSpec
from ..faults import DescriptorFault
from .interfaces import ActionDescriptorSource, AnnotationReader
from .template import compile_template

logger = logging.getLogger("pressbridge.routing.table")

# Method discriminator of routes that accept any HTTP method
DEFAULT_METHOD = "default"


@dataclass(frozen=True)
class Route:
    """
    One compiled, matchable route.

    A descriptor allowing N methods yields N routes that differ only in
    ``http_method``. Routes are hashable; the hash ignores the mapping
    and parameter fields.
    """

    path: str
    parameter_positions: Mapping[str, int] = field(hash=False)
    parameter_count: int
    http_method: str
    action: ActionRef
    http_methods: Tuple[str, ...] = ()
    template: str = ""
    title: Optional[str] = None
    parameters: Tuple[ParameterSpec, ...] = field(default=(), hash=False)
    filters: Tuple[str, ...] = ()
    settings: Optional[Mapping[str, Any]] = field(default=None, compare=False)

    def __post_init__(self):
        object.__setattr__(self, "parameter_positions", MappingProxyType(dict(self.parameter_positions)))

    def allows(self, method: str) -> bool:
        """Whether this route accepts ``method``."""
        return self.http_method == DEFAULT_METHOD or self.http_method == method.upper()

    def to_dict(self) -> Dict[str, Any]:
        """Serialize to a JSON-compatible dict for caching."""
        return {
            "path": self.path,
            "parameter_positions": dict(self.parameter_positions),
            "parameter_count": self.parameter_count,
            "http_method": self.http_method,
            "http_methods": list(self.http_methods),
            "action": self.action.to_dict(),
            "template": self.template,
            "title": self.title,
            "parameters": [p.to_dict() for p in self.parameters],
            "filters": list(self.filters),
            "settings": dict(self.settings) if self.settings is not None else None,
        }

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> "Route":
        return cls(
            path=data["path"],
            parameter_positions=dict(data["parameter_positions"]),
            parameter_count=data["parameter_count"],
            http_method=data["http_method"],
            http_methods=tuple(data.get("http_methods", ())),
            action=ActionRef.from_dict(data["action"]),
            template=data.get("template", ""),
            title=data.get("title"),
            parameters=tuple(ParameterSpec.from_dict(p) for p in data.get("parameters", ())),
            filters=tuple(data.get("filters", ())),
            settings=data.get("settings"),
        )


RouteTable = Tuple[Route, ...]


def table_to_data(table: Iterable[Route]) -> list:
    return [route.to_dict() for route in table]


def table_from_data(data: Sequence[Mapping[str, Any]]) -> RouteTable:
    return tuple(Route.from_dict(item) for item in data)


def normalize_methods(methods: Iterable[str]) -> Tuple[str, ...]:
    """Upper-case and de-duplicate methods; empty means ``("default",)``."""
    normalized = []
    for method in methods:
        upper = method.strip().upper()
        if upper and upper not in normalized:
            normalized.append(upper)
    return tuple(normalized) or (DEFAULT_METHOD,)


class RouteTableBuilder:
    """
    Builds the route table from an action descriptor source.

    Pure transformation: a fault anywhere aborts the whole build and no
    partial table is returned.
    """

    def __init__(
        self,
        source: Optional[ActionDescriptorSource] = None,
        annotations: Optional[AnnotationReader] = None,
    ):
        self.source = source
        self.annotations = annotations

    def build(self, descriptors: Optional[Sequence[ActionDescriptor]] = None) -> RouteTable:
        """
        Compile descriptors into a sorted route table.

        Args:
            descriptors: Explicit descriptors; defaults to ``source.list_actions()``

        Raises:
            MalformedTemplateFault: A URL template has bad placeholder syntax
            DescriptorFault: Conflicting annotations on an action
        """
        if descriptors is None:
            if self.source is None:
                raise DescriptorFault("RouteTableBuilder has no descriptor source")
            descriptors = self.source.list_actions()

        routes = []
        for descriptor in descriptors:
            routes.extend(self._compile_descriptor(descriptor))

        table = tuple(sorted(routes, key=lambda r: r.parameter_count))
        logger.info(f"Built route table: {len(table)} route(s) from {len(descriptors)} action(s)")
        return table

    def _compile_descriptor(self, descriptor: ActionDescriptor) -> Iterable[Route]:
        url = descriptor.url.rstrip("/") or "/"
        compiled = compile_template(url)

        settings = None
        if self.annotations is not None:
            settings = self.annotations.get_specificity_settings(descriptor.action)
            if settings is not None and not isinstance(settings, Mapping):
                raise DescriptorFault(
                    f"Menu settings of {descriptor.action} must be a JSON object",
                    controller=descriptor.action.controller,
                    action=descriptor.action.method,
                )

        methods = normalize_methods(descriptor.http_methods)
        for method in methods:
            yield Route(
                path=compiled.pattern,
                parameter_positions=dict(compiled.parameter_positions),
                parameter_count=compiled.parameter_count,
                http_method=method,
                http_methods=methods,
                action=descriptor.action,
                template=url,
                title=descriptor.title,
                parameters=tuple(descriptor.parameters),
                filters=tuple(descriptor.filters),
                settings=settings,
            )
