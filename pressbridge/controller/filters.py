"""
Action Filters

Filters wrap an action with ``before_action``/``after_action`` hooks.
For filters declared as ``[outer, inner]`` the dispatcher runs::

    inner.before_action -> outer.before_action -> action
        -> outer.after_action -> inner.after_action

Hooks may be plain or ``async`` methods.
"""

from typing import Any, Awaitable, Callable, Optional, Union

from .base import RequestContext


class ActionFilter:
    """
    Base filter with no-op hooks.

    Subclasses override one or both hooks. ``name`` is the key the filter
    is registered under and referenced by in route declarations.
    """

    name: Optional[str] = None

    def before_action(self, ctx: RequestContext) -> Union[None, Awaitable[None]]:
        return None

    def after_action(self, ctx: RequestContext) -> Union[None, Awaitable[None]]:
        return None

    def __repr__(self) -> str:
        return f"<{self.__class__.__name__} name={self.name!r}>"


class CallbackFilter(ActionFilter):
    """Filter built from two callables, handy for small hooks."""

    def __init__(
        self,
        name: str,
        before: Optional[Callable[[RequestContext], Any]] = None,
        after: Optional[Callable[[RequestContext], Any]] = None,
    ):
        self.name = name
        self._before = before
        self._after = after

    def before_action(self, ctx: RequestContext):
        if self._before is not None:
            return self._before(ctx)
        return None

    def after_action(self, ctx: RequestContext):
        if self._after is not None:
            return self._after(ctx)
        return None
