"""
Parameter Fetchers

A fetcher produces one action argument from the request context. Fetchers
are rebuilt from :class:`ParameterSpec` records so the route table stays
serializable.
"""

from typing import Any, Callable, Dict, Optional

from .base import RequestContext
from .metadata import (
    ParameterSpec,
    SOURCE_URL,
    SOURCE_REQUEST,
    SOURCE_REQUEST_OBJECT,
    SOURCE_CONTEXT,
)
from ..faults import ParameterValidationFault


def _to_bool(value: Any) -> bool:
    if isinstance(value, bool):
        return value
    lowered = str(value).strip().lower()
    if lowered in ("1", "true", "yes", "on"):
        return True
    if lowered in ("0", "false", "no", "off", ""):
        return False
    raise ValueError(f"'{value}' is not a boolean")


CASTS: Dict[str, Callable[[Any], Any]] = {
    "str": str,
    "int": int,
    "float": float,
    "bool": _to_bool,
}


class ParameterFetcher:
    """
    Base fetcher.

    Subclasses implement :meth:`lookup`; casting, defaults and the
    required check are shared.
    """

    def __init__(self, spec: ParameterSpec):
        self.spec = spec
        self._cast = CASTS[spec.cast] if spec.cast else None

    @property
    def name(self) -> str:
        return self.spec.name

    def lookup(self, ctx: RequestContext) -> Optional[Any]:
        raise NotImplementedError

    def fetch_value(self, ctx: RequestContext) -> Any:
        """
        Produce the argument value.

        Raises:
            ParameterValidationFault: Missing required value or failed cast
        """
        value = self.lookup(ctx)
        if value is None:
            if self.spec.required:
                raise ParameterValidationFault(self.name, "required value is missing")
            return self.spec.default
        if self._cast is None:
            return value
        try:
            return self._cast(value)
        except (TypeError, ValueError) as e:
            raise ParameterValidationFault(
                self.name,
                f"cannot convert '{value}' to {self.spec.cast}",
                cause=e,
            ) from e

    def __repr__(self) -> str:
        return f"<{self.__class__.__name__} {self.name!r}>"


class UrlParameterFetcher(ParameterFetcher):
    """Value captured from a ``{name}`` URL segment."""

    def lookup(self, ctx: RequestContext) -> Optional[Any]:
        return ctx.url_parameter(self.name)


class RequestParameterFetcher(ParameterFetcher):
    """Value from the form body or query string."""

    def lookup(self, ctx: RequestContext) -> Optional[Any]:
        return ctx.request.param(self.name)


class RequestFetcher(ParameterFetcher):
    """The request object itself."""

    def lookup(self, ctx: RequestContext) -> Optional[Any]:
        return ctx.request

    def fetch_value(self, ctx: RequestContext) -> Any:
        return ctx.request


class ContextFetcher(ParameterFetcher):
    """The whole request context."""

    def lookup(self, ctx: RequestContext) -> Optional[Any]:
        return ctx

    def fetch_value(self, ctx: RequestContext) -> Any:
        return ctx


FETCHERS = {
    SOURCE_URL: UrlParameterFetcher,
    SOURCE_REQUEST: RequestParameterFetcher,
    SOURCE_REQUEST_OBJECT: RequestFetcher,
    SOURCE_CONTEXT: ContextFetcher,
}


def build_fetcher(spec: ParameterSpec) -> ParameterFetcher:
    """Instantiate the fetcher for ``spec.source``."""
    try:
        fetcher_cls = FETCHERS[spec.source]
    except KeyError:
        raise ValueError(f"Unknown parameter source: {spec.source!r}") from None
    if spec.cast is not None and spec.cast not in CASTS:
        raise ValueError(f"Unknown cast: {spec.cast!r}. Options: {list(CASTS)}")
    return fetcher_cls(spec)
