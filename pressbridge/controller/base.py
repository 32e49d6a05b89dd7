"""
Controller Base Class

Provides the base Controller class and the RequestContext handed to
parameter fetchers and filters.
"""

from typing import Any, Dict, Mapping, Optional, TYPE_CHECKING
from dataclasses import dataclass, field
import inspect

if TYPE_CHECKING:
    from pressbridge.request import Request


async def _safe_call(func: Any, *args, **kwargs) -> Any:
    """Call a sync or async callable."""
    result = func(*args, **kwargs)
    if inspect.isawaitable(result):
        return await result
    return result


@dataclass
class RequestContext:
    """
    Execution context for one dispatched request.

    Attributes:
        request: The inbound request
        url_parameters: Values captured from the URL, by name
        state: Scratch space shared by filters and the action
    """

    request: "Request"
    url_parameters: Mapping[str, str] = field(default_factory=dict)
    state: Dict[str, Any] = field(default_factory=dict)

    @property
    def path(self) -> str:
        return self.request.path

    @property
    def method(self) -> str:
        return self.request.method

    def url_parameter(self, name: str, default: Optional[str] = None) -> Optional[str]:
        """Get a single URL parameter."""
        return self.url_parameters.get(name, default)

    def has_url_parameter(self, name: str) -> bool:
        return name in self.url_parameters


class Controller:
    """
    Base Controller class.

    Subclassing is optional: any object with decorated methods can be
    registered. Subclasses get ``controller_name`` as the default
    registration name.

    Example:
        class BlogController(Controller):
            controller_name = "blog"

            @GET("/post/{id}")
            def show(self, id: int):
                ...
    """

    controller_name: Optional[str] = None

    def __repr__(self) -> str:
        return f"<{self.__class__.__name__} name={self.controller_name!r}>"
