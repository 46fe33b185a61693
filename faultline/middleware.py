"""
Faultline - Error middleware.

Runs the next step of a request pipeline and turns any exception it
raises into a logged failure and a 500 response.

Signatures:
    def __call__(self, request, response, next) -> response
    async def __call__(self, request, response, next) -> response
"""

from __future__ import annotations

import inspect
from typing import Any, Awaitable, Callable

from .handler import ErrorHandler

Next = Callable[[Any, Any], Any]
AsyncNext = Callable[[Any, Any], Awaitable[Any]]


class _ErrorMiddlewareBase:

    def __init__(self, error_handler: ErrorHandler, message: str = "Unexpected error"):
        self.error_handler = error_handler
        self.message = message

    def _check_next(self, next: Any):
        if not callable(next):
            raise TypeError("'next' should be a callable")

    def _caught(self, request: Any, response: Any, error: Exception) -> Any:
        self.error_handler.set_error(error)
        self.error_handler.log(error)
        return self.error_response(request, response)

    def error_response(self, request: Any, response: Any) -> Any:
        """
        Build the response for a caught error.

        Override to render something other than a plain 500.
        """
        error_response = response.with_status(500)
        error_response.body.write(self.message)
        return error_response


class Middleware(_ErrorMiddlewareBase):
    """
    Catches exceptions raised by the rest of the pipeline.

    Usage:
        ```python
        middleware = handler.as_middleware()
        response = middleware(request, Response(), app)
        ```
    """

    def __call__(self, request: Any, response: Any, next: Next) -> Any:
        self._check_next(next)

        try:
            next_response = next(request, response)
        except Exception as e:
            return self._caught(request, response, e)

        self.error_handler.set_error(None)
        return next_response


class AsyncMiddleware(_ErrorMiddlewareBase):
    """
    Async variant of :class:`Middleware`.

    ``next`` may be a coroutine function or return an awaitable.
    """

    async def __call__(self, request: Any, response: Any, next: AsyncNext) -> Any:
        self._check_next(next)

        try:
            next_response = next(request, response)
            if inspect.isawaitable(next_response):
                next_response = await next_response
        except Exception as e:
            return self._caught(request, response, e)

        self.error_handler.set_error(None)
        return next_response
