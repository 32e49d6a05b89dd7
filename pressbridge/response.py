"""
Response - Artifact produced by a controller action.

The bridge never writes to the wire itself; the host integration reads
``status``, ``headers`` and ``body`` and emits them through the CMS.
"""

from __future__ import annotations

import json
from typing import Any, Dict, Mapping, Optional, Union


class Response:
    """
    HTTP response artifact.

    Attributes:
        status: HTTP status code
        headers: Lower-cased header names to values
        body: Encoded body bytes
    """

    __slots__ = ("status", "_headers", "body", "encoding")

    def __init__(
        self,
        content: Union[bytes, str] = b"",
        status: int = 200,
        headers: Optional[Mapping[str, str]] = None,
        media_type: Optional[str] = None,
        *,
        encoding: str = "utf-8",
    ):
        self.status = status
        self.encoding = encoding
        self._headers: Dict[str, str] = {k.lower(): v for k, v in (headers or {}).items()}

        if isinstance(content, str):
            self.body = content.encode(encoding)
        else:
            self.body = bytes(content)

        if media_type:
            self._headers["content-type"] = media_type
        elif "content-type" not in self._headers:
            self._headers["content-type"] = (
                f"text/plain; charset={encoding}" if isinstance(content, str)
                else "application/octet-stream"
            )

    @property
    def headers(self) -> Dict[str, str]:
        return self._headers

    def decode(self) -> str:
        """Body decoded with the response encoding."""
        return self.body.decode(self.encoding)

    def __repr__(self) -> str:
        return f"<Response status={self.status} content-type={self._headers.get('content-type')!r}>"

    # ========================================================================
    # Factory Methods
    # ========================================================================

    @classmethod
    def json(cls, obj: Any, status: int = 200, *, headers: Optional[Mapping[str, str]] = None) -> "Response":
        """Create JSON response."""
        return cls(
            content=json.dumps(obj, default=str),
            status=status,
            headers=headers,
            media_type="application/json; charset=utf-8",
        )

    @classmethod
    def html(cls, content: str, status: int = 200, **kwargs) -> "Response":
        """Create HTML response."""
        return cls(content=content, status=status, media_type="text/html; charset=utf-8", **kwargs)

    @classmethod
    def text(cls, content: str, status: int = 200, **kwargs) -> "Response":
        """Create plain text response."""
        return cls(content=content, status=status, media_type="text/plain; charset=utf-8", **kwargs)

    @classmethod
    def redirect(cls, url: str, status: int = 302) -> "Response":
        """Create redirect response."""
        return cls(content=b"", status=status, headers={"location": url})

    @classmethod
    def coerce(cls, result: Any) -> "Response":
        """
        Convert an action's return value to a Response.

        Strings are HTML fragments rendered inside the CMS theme.
        """
        if isinstance(result, Response):
            return result
        elif isinstance(result, (dict, list, tuple)):
            return cls.json(result)
        elif isinstance(result, str):
            return cls.html(result)
        elif isinstance(result, bytes):
            return cls(result)
        elif result is None:
            return cls(b"", status=204)
        else:
            return cls.json({"result": str(result)})
