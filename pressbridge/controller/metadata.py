"""
Controller Metadata

Serializable descriptions of controller actions. Everything here is
plain data (strings, tuples, JSON-compatible defaults) so a compiled route
table can be cached and later resolved back to live objects through the
controller registry.
"""

from typing import Any, Dict, Optional, Tuple
from dataclasses import dataclass, field


# Parameter sources understood by the built-in fetchers
SOURCE_URL = "url"
SOURCE_REQUEST = "request"
SOURCE_REQUEST_OBJECT = "request_object"
SOURCE_CONTEXT = "context"

PARAMETER_SOURCES = (SOURCE_URL, SOURCE_REQUEST, SOURCE_REQUEST_OBJECT, SOURCE_CONTEXT)


@dataclass(frozen=True)
class ActionRef:
    """
    Stable reference to a controller action.

    Attributes:
        controller: Name the controller instance was registered under
        method: Method name on the controller
    """
    controller: str
    method: str

    def __str__(self) -> str:
        return f"{self.controller}.{self.method}"

    def to_dict(self) -> Dict[str, str]:
        return {"controller": self.controller, "method": self.method}

    @classmethod
    def from_dict(cls, data: Dict[str, str]) -> "ActionRef":
        return cls(controller=data["controller"], method=data["method"])


@dataclass(frozen=True)
class ParameterSpec:
    """
    Description of one action argument and where its value comes from.

    Attributes:
        name: Argument name (and lookup key for url/request sources)
        source: One of 'url', 'request', 'request_object', 'context'
        required: Whether a missing value is a validation error
        default: Value used when not required and absent (JSON-compatible)
        cast: Optional converter name ('int', 'float', 'bool', 'str')
    """
    name: str
    source: str = SOURCE_REQUEST
    required: bool = True
    default: Any = None
    cast: Optional[str] = None

    def to_dict(self) -> Dict[str, Any]:
        return {
            "name": self.name,
            "source": self.source,
            "required": self.required,
            "default": self.default,
            "cast": self.cast,
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "ParameterSpec":
        return cls(
            name=data["name"],
            source=data.get("source", SOURCE_REQUEST),
            required=data.get("required", True),
            default=data.get("default"),
            cast=data.get("cast"),
        )


@dataclass(frozen=True)
class ActionDescriptor:
    """
    Raw route declaration for one controller action.

    Attributes:
        url: URL template, e.g. "/post/{id}"
        action: Reference to the controller method
        http_methods: Allowed methods; empty means any method
        title: Optional display title exposed to the host router
        parameters: Ordered argument fetcher descriptions
        filters: Ordered filter names
    """
    url: str
    action: ActionRef
    http_methods: Tuple[str, ...] = ()
    title: Optional[str] = None
    parameters: Tuple[ParameterSpec, ...] = field(default_factory=tuple)
    filters: Tuple[str, ...] = field(default_factory=tuple)
