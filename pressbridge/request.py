"""
Request - Explicit request object handed to the dispatcher.

Replaces ambient request state (superglobals, host router globals) with a
plain value built by the host integration:
- ``Request.from_uri()`` for a raw method + request URI
- ``Request.from_scope()`` for an ASGI HTTP scope
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Dict, Mapping, Optional
from urllib.parse import parse_qsl, urlsplit


def _parse_query(query_string: str) -> Dict[str, str]:
    # Last value wins for repeated keys
    return dict(parse_qsl(query_string, keep_blank_values=True))


@dataclass(frozen=True)
class Request:
    """
    Immutable view of an inbound HTTP request.

    Attributes:
        method: Upper-cased HTTP method
        path: Request path without query string (may carry the CMS home path)
        query: Query string parameters
        form: Decoded form body parameters
        headers: Lower-cased header names to values
        state: Free-form integration data (server variables, user, ...)
    """

    method: str
    path: str
    query: Mapping[str, str] = field(default_factory=dict)
    form: Mapping[str, str] = field(default_factory=dict)
    headers: Mapping[str, str] = field(default_factory=dict)
    state: Mapping[str, Any] = field(default_factory=dict)

    def __post_init__(self):
        object.__setattr__(self, "method", self.method.upper())

    @classmethod
    def from_uri(
        cls,
        method: str,
        uri: str,
        *,
        form: Optional[Mapping[str, str]] = None,
        headers: Optional[Mapping[str, str]] = None,
    ) -> "Request":
        """Build a request from a raw request URI such as ``/blog/post/3?x=1``."""
        parts = urlsplit(uri)
        return cls(
            method=method,
            path=parts.path or "/",
            query=_parse_query(parts.query),
            form=dict(form or {}),
            headers={k.lower(): v for k, v in (headers or {}).items()},
        )

    @classmethod
    def from_scope(
        cls,
        scope: Mapping[str, Any],
        *,
        form: Optional[Mapping[str, str]] = None,
    ) -> "Request":
        """
        Build a request from an ASGI HTTP scope.

        The body is not read here; pass an already decoded ``form`` when the
        host integration has parsed it.
        """
        if scope.get("type") != "http":
            raise ValueError(f"Unsupported scope type: {scope.get('type')!r}")

        raw_query = scope.get("query_string", b"")
        if isinstance(raw_query, bytes):
            raw_query = raw_query.decode("latin-1")

        headers: Dict[str, str] = {}
        for name, value in scope.get("headers", []):
            headers[name.decode("latin-1").lower()] = value.decode("latin-1")

        path = scope.get("path", "/")
        root_path = scope.get("root_path", "")
        if root_path and path.startswith(root_path):
            path = path[len(root_path):] or "/"

        return cls(
            method=scope.get("method", "GET"),
            path=path,
            query=_parse_query(raw_query),
            form=dict(form or {}),
            headers=headers,
        )

    def param(self, name: str, default: Optional[str] = None) -> Optional[str]:
        """Look up a request parameter: form body first, then query string."""
        if name in self.form:
            return self.form[name]
        return self.query.get(name, default)

    def has_param(self, name: str) -> bool:
        return name in self.form or name in self.query
