"""
Minimal response object for the error middleware.

The middleware only needs ``with_status(status)`` and ``body.write(text)``;
any response type offering those works. This one is used when the
application doesn't bring its own.
"""

from __future__ import annotations

import copy
import io
from typing import Dict, Optional


class Stream:
    """Writable text body."""

    def __init__(self, initial: str = ""):
        self._buffer = io.StringIO()
        if initial:
            self._buffer.write(initial)

    def write(self, text: str) -> int:
        return self._buffer.write(text)

    def getvalue(self) -> str:
        return self._buffer.getvalue()

    def __str__(self) -> str:
        return self.getvalue()

    def __repr__(self) -> str:
        return f"<Stream {self.getvalue()[:40]!r}>"


class Response:
    """
    HTTP response with a status, headers and a writable body.

    ``with_status`` returns a copy; the copy shares the body stream.
    """

    def __init__(
        self,
        status: int = 200,
        headers: Optional[Dict[str, str]] = None,
        body: Optional[Stream] = None,
    ):
        self.status = status
        self.headers = dict(headers or {})
        self.body = body if body is not None else Stream()

    def with_status(self, status: int) -> "Response":
        response = copy.copy(self)
        response.headers = dict(self.headers)
        response.status = status
        return response

    def __repr__(self) -> str:
        return f"<Response status={self.status}>"
