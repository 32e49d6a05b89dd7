"""
Request Dispatcher - matches a request against the route table and runs
the matched action.

Per-request flow (single pass, no retry)::

    Matching --no route--> NOT_FOUND
        |
        v
    Invoking: fetchers -> before hooks (reversed) -> action
              -> after hooks (forward)
        |
        v
    DONE(response) | FAILED(fault)

A parameter validation failure aborts before any filter hook runs, so
after hooks only ever run for requests whose before hooks ran.
"""

from __future__ import annotations

import logging
from enum import Enum
from typing import Any, Dict, List, Optional, Sequence

from ..controller.base import RequestContext, _safe_call
from ..controller.filters import ActionFilter
from ..faults import ActionInvocationFault, DescriptorFault, Fault, ParameterValidationFault
from ..request import Request
from ..response import Response
from .interfaces import ActionInvoker, FilterResolver, ParameterResolver
from .table import Route
from .template import extract_parameters, pattern_regex

logger = logging.getLogger("pressbridge.routing.dispatcher")


class DispatchState(str, Enum):
    """Terminal states of a dispatch."""

    NOT_FOUND = "not_found"
    DONE = "done"
    FAILED = "failed"


class DispatchOutcome:
    """
    Result of :meth:`RequestDispatcher.dispatch`.

    Exactly one of ``response`` (DONE) or ``error`` (FAILED) is set;
    neither is set for NOT_FOUND.
    """

    __slots__ = ("state", "route", "response", "error", "url_parameters")

    def __init__(
        self,
        state: DispatchState,
        route: Optional[Route] = None,
        response: Optional[Response] = None,
        error: Optional[Fault] = None,
        url_parameters: Optional[Dict[str, str]] = None,
    ):
        self.state = state
        self.route = route
        self.response = response
        self.error = error
        self.url_parameters = url_parameters or {}

    @classmethod
    def not_found(cls) -> "DispatchOutcome":
        return cls(DispatchState.NOT_FOUND)

    @classmethod
    def done(cls, route: Route, response: Response, url_parameters: Dict[str, str]) -> "DispatchOutcome":
        return cls(DispatchState.DONE, route=route, response=response, url_parameters=url_parameters)

    @classmethod
    def failed(cls, route: Route, error: Fault, url_parameters: Dict[str, str]) -> "DispatchOutcome":
        return cls(DispatchState.FAILED, route=route, error=error, url_parameters=url_parameters)

    @property
    def found(self) -> bool:
        return self.state is not DispatchState.NOT_FOUND

    def unwrap(self) -> Optional[Response]:
        """Return the response, raise the fault, or None when nothing matched."""
        if self.state is DispatchState.FAILED:
            raise self.error
        return self.response

    def __repr__(self) -> str:
        target = f" {self.route.action}" if self.route is not None else ""
        return f"<DispatchOutcome {self.state.value}{target}>"


def normalize_path(path: str, home_path: str = "") -> str:
    """
    Reduce a request path to the form route patterns are matched against.

    Drops the query string, trims slashes and removes the CMS home path
    prefix (compared case-insensitively).

    Example:
        normalize_path("/Blog/post/3?x=1", "blog") == "post/3"
    """
    path = path.split("?", 1)[0].strip("/")
    home = home_path.strip("/")
    if home:
        lowered, lowered_home = path.lower(), home.lower()
        if lowered == lowered_home:
            return ""
        if lowered.startswith(lowered_home + "/"):
            path = path[len(home):].strip("/")
    return path


class RequestDispatcher:
    """
    Dispatches requests against a route table.

    Args:
        invoker: Runs the resolved controller method
        parameters: Turns parameter specs into fetchers
        filters: Turns filter names into filter objects
        home_path: CMS base path stripped before matching
    """

    def __init__(
        self,
        invoker: ActionInvoker,
        parameters: ParameterResolver,
        filters: FilterResolver,
        *,
        home_path: str = "",
    ):
        self.invoker = invoker
        self.parameters = parameters
        self.filters = filters
        self.home_path = home_path

    def match(self, table: Sequence[Route], request: Request) -> Optional[Route]:
        """
        First route whose pattern matches and whose methods allow the request.

        A method mismatch does not stop the search.
        """
        path = normalize_path(request.path, self.home_path)
        for route in table:
            if pattern_regex(route.path).match(path) is None:
                continue
            if not route.allows(request.method):
                logger.debug(f"Route {route.template} matched but does not allow {request.method}")
                continue
            return route
        return None

    async def dispatch(self, table: Sequence[Route], request: Request) -> DispatchOutcome:
        """
        Dispatch one request.

        Never raises for an unmatched path. Faults from fetchers, filters and
        the action are returned as FAILED outcomes.
        """
        route = self.match(table, request)
        if route is None:
            logger.debug(f"No route for {request.method} {request.path}")
            return DispatchOutcome.not_found()

        path = normalize_path(request.path, self.home_path)
        url_parameters = extract_parameters(path, route.parameter_positions)
        ctx = RequestContext(request=request, url_parameters=url_parameters)

        try:
            args = self._fetch_arguments(route, ctx)
            filters = [self.filters.resolve_filter(name) for name in route.filters]
        except (ParameterValidationFault, DescriptorFault) as fault:
            logger.debug(f"Dispatch of {route.action} aborted: {fault}")
            return DispatchOutcome.failed(route, fault, url_parameters)

        try:
            response = await self._run(route, filters, args, ctx)
        except Fault as fault:
            logger.debug(f"Dispatch of {route.action} failed: {fault}")
            return DispatchOutcome.failed(route, fault, url_parameters)

        return DispatchOutcome.done(route, response, url_parameters)

    def _fetch_arguments(self, route: Route, ctx: RequestContext) -> List[Any]:
        args = []
        for spec in route.parameters:
            fetcher = self.parameters.resolve_fetcher(spec)
            args.append(fetcher.fetch_value(ctx))
        return args

    async def _run(
        self,
        route: Route,
        filters: List[ActionFilter],
        args: List[Any],
        ctx: RequestContext,
    ) -> Response:
        action = str(route.action)

        for action_filter in reversed(filters):
            await self._call_hook(action, action_filter.before_action, ctx, "before_action")

        error: Optional[BaseException] = None
        try:
            return await self.invoker.invoke(route.action, args, ctx)
        except Fault as fault:
            error = fault
            raise
        except Exception as e:
            error = ActionInvocationFault(action, str(e) or type(e).__name__, cause=e)
            raise error from e
        finally:
            for action_filter in filters:
                try:
                    await self._call_hook(action, action_filter.after_action, ctx, "after_action")
                except Fault:
                    # The action's own failure takes precedence
                    if error is None:
                        raise
                    logger.exception(f"after_action hook of {action_filter!r} failed after action error")

    @staticmethod
    async def _call_hook(action: str, hook: Any, ctx: RequestContext, stage: str) -> None:
        try:
            await _safe_call(hook, ctx)
        except Fault:
            raise
        except Exception as e:
            raise ActionInvocationFault(action, str(e) or type(e).__name__, cause=e, stage=stage) from e
