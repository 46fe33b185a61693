"""
Faultline - Interception engine.

Bodies of the runtime failure hook and the uncaught exception hook.

Runtime failures are classified, optionally promoted to an
ErrorException, optionally logged and then passed on to the chained
hook. Uncaught exceptions are logged when they match the filter, reported
to the fatal error callback and then re-raised: this engine never keeps
the process from terminating.
"""

from __future__ import annotations

from typing import Any, Optional

from .codes import CONVERTIBLE
from .failures import ErrorException
from .host import Host, category_for_exception
from .reporting import FailureLogger
from .state import HandlerState


class InterceptionEngine:
    """
    Handles failures delivered through the process hooks.

    Args:
        state: Shared handler state
        host: Process hook capability
        reporter: Logger for captured failures
    """

    def __init__(self, state: HandlerState, host: Host, reporter: FailureLogger):
        self.state = state
        self.host = host
        self.reporter = reporter

    def handle_error(
        self,
        category: int,
        message: str,
        filename: Optional[str] = None,
        lineno: Optional[int] = None,
        context: Optional[dict[str, Any]] = None,
    ) -> Any:
        """
        Runtime failure hook.

        Args:
            category: ErrorCategory of the failure
            message: Failure message
            filename: File where the failure occurred
            lineno: Line where the failure occurred
            context: Host specific details, passed on to the chained hook

        Returns:
            Result of the chained hook, ``False`` (not handled) if there is none

        Raises:
            ErrorException: For RECOVERABLE_ERROR and USER_ERROR when fatal
                error conversion is enabled
        """
        if int(self.host.reporting_mask()) & int(category):
            error = ErrorException(message, category, filename, lineno)

            if self.state.convert_fatal_errors and int(category) & int(CONVERTIBLE):
                raise error

            if int(self.state.log_error_types) & int(category):
                self.reporter.log(error)

        chained = self.state.chained_error_handler
        if chained:
            return chained(category, message, filename, lineno, context)

        return False

    def handle_exception(self, exception: BaseException):
        """
        Uncaught exception hook.

        Always re-raises ``exception`` so the platform reports it and the
        process terminates.
        """
        # Don't intercept failures raised while handling this one
        self.host.install_exception_hook(None)
        self.host.install_runtime_failure_hook(None)

        if self.should_log(exception):
            self.reporter.log(exception)

        self.state.call_on_fatal_error(exception)

        chained = self.state.chained_exception_handler
        if chained:
            chained(exception)

        raise exception

    def should_log(self, exception: BaseException) -> bool:
        """
        Check the exception against the category mask or the class filter.

        Fatal exceptions (``MemoryError``, ``SyntaxError``, ...) match the
        category mask through their category as well as the class filter.
        """
        mask = int(self.state.log_error_types)

        if isinstance(exception, ErrorException):
            return bool(mask & int(exception.category))

        category = category_for_exception(exception)
        if category is not None and mask & int(category):
            return True

        classes = tuple(self.state.log_exception_classes)
        return bool(classes) and isinstance(exception, classes)
