"""
Faultline - Error handler.

The ErrorHandler is the configuration surface. It composes:
1. FailureLogger: formats and logs captured failures
2. HookRegistrar: installs the process hooks once, keeping the replaced hooks
3. InterceptionEngine: runtime failure and uncaught exception hook bodies
4. ShutdownDetector: reports fatal failures at shutdown

Usage:
    ```python
    handler = ErrorHandler(logging.getLogger("myapp"))

    handler.log_uncaught(ErrorCategory.ALL & ~ErrorCategory.DEPRECATED)
    handler.log_uncaught(ValueError)
    handler.on_fatal_error(notify_ops, clear_output=True)
    ```
"""

from __future__ import annotations

import logging
import warnings
from abc import ABC, abstractmethod
from typing import TYPE_CHECKING, Any, Callable, List, Optional, Union

from .codes import ErrorCategory
from .failures import ErrorException
from .host import Host, PythonHost
from .interception import InterceptionEngine
from .registrar import HookRegistrar
from .reporting import FailureLogger, Sink
from .shutdown import ShutdownDetector
from .state import HandlerState

if TYPE_CHECKING:
    from .config import ErrorHandlerConfig
    from .middleware import AsyncMiddleware, Middleware


class ErrorHandlerInterface(ABC):
    """
    Interface for interacting with an error handler.

    Not concerned with how the error handler is configured.
    """

    @abstractmethod
    def set_error(self, error: Optional[BaseException]):
        """Set the caught error."""
        pass

    @abstractmethod
    def get_error(self) -> Optional[BaseException]:
        """Get the caught error."""
        pass

    @abstractmethod
    def log(self, error: Any):
        """Log an error or exception."""
        pass


class ErrorHandler(ErrorHandlerInterface):
    """
    Process-wide error handler.

    Args:
        logger: Logging sink (``faultline`` logger if None)
        host: Process hook capability (PythonHost if None)
    """

    def __init__(self, logger: Optional[Sink] = None, *, host: Optional[Host] = None):
        self.host = host or PythonHost()
        self.state = HandlerState()
        self.reporter = FailureLogger(logger)

        self.engine = InterceptionEngine(self.state, self.host, self.reporter)
        self.shutdown = ShutdownDetector(self.state, self.host, self.reporter)
        self.registrar = HookRegistrar(
            self.state,
            self.host,
            runtime_hook=self.handle_error,
            exception_hook=self.handle_exception,
            shutdown_hook=self.shutdown_function,
        )

        self._error: Optional[BaseException] = None

    @classmethod
    def from_config(
        cls,
        config: "ErrorHandlerConfig",
        *,
        logger: Optional[Sink] = None,
        host: Optional[Host] = None,
    ) -> "ErrorHandler":
        """
        Create an error handler from configuration.

        Args:
            config: Loaded configuration
            logger: Logging sink (``config.logger_name`` logger if None)
            host: Process hook capability (PythonHost with ``config.reporting`` if None)

        Returns:
            Configured ErrorHandler, hooks installed as needed
        """
        handler = cls(
            logger or logging.getLogger(config.logger_name),
            host=host or PythonHost(config.reporting),
        )

        if config.convert_fatal_errors:
            handler.convert_fatal_errors_to_exceptions()

        if config.log_uncaught:
            handler.log_uncaught(config.log_uncaught)

        for name in config.exception_classes:
            handler.log_uncaught(name)

        return handler

    # ========================================================================
    # Logging
    # ========================================================================

    @property
    def logger(self) -> Sink:
        return self.reporter.logger

    def set_logger(self, logger: Sink):
        """Set the logger for logging errors."""
        self.reporter.set_logger(logger)

    def log(self, error: Any):
        """Log an error or exception."""
        self.reporter.log(error)

    # ========================================================================
    # Caught error
    # ========================================================================

    def set_error(self, error: Optional[BaseException]):
        """
        Set the caught error.

        A value that is neither ``None`` nor an exception is rejected with
        a warning and leaves the caught error unchanged.
        """
        if error is not None and not isinstance(error, BaseException):
            kind = type(error).__name__
            warnings.warn(f"Expected an Error or Exception, got a {kind}", UserWarning, stacklevel=2)
            return

        self._error = error

    def get_error(self) -> Optional[BaseException]:
        return self._error

    error = property(get_error, set_error)

    # ========================================================================
    # Configuration
    # ========================================================================

    def log_uncaught(self, type_: Union[int, type, str]):
        """
        Log these types of errors or exceptions.

        Args:
            type_: ErrorCategory mask, or an exception class (or its name)
        """
        self.registrar.log_uncaught(type_)

    def convert_fatal_errors_to_exceptions(self):
        """Raise RECOVERABLE_ERROR and USER_ERROR failures as ErrorException."""
        self.state.convert_fatal_errors = True
        self.registrar.enable_runtime_hook()

    def on_fatal_error(self, callback: Callable[[BaseException], Any], clear_output: bool = False):
        """
        Set a callback for when the process dies because of a failure.

        Args:
            callback: Called with the failure as only argument
            clear_output: Clear buffered output before calling the callback
        """
        if not clear_output:
            self.state.on_fatal_error = callback
            return

        def on_fatal_error(error: BaseException):
            self.host.clear_output_buffer()
            callback(error)

        self.state.on_fatal_error = on_fatal_error

    # ========================================================================
    # Hooks
    # ========================================================================

    def handle_error(
        self,
        category: int,
        message: str,
        filename: Optional[str] = None,
        lineno: Optional[int] = None,
        context: Optional[dict[str, Any]] = None,
    ) -> Any:
        """Runtime failure hook."""
        return self.engine.handle_error(category, message, filename, lineno, context)

    def handle_exception(self, exception: BaseException):
        """Uncaught exception hook. Re-raises ``exception``."""
        self.engine.handle_exception(exception)

    def shutdown_function(self):
        """Shutdown hook."""
        self.shutdown.run()

    # ========================================================================
    # Inspection
    # ========================================================================

    @property
    def chained_error_handler(self) -> Any:
        """Runtime failure hook that was replaced (``None`` if not installed)."""
        return self.state.chained_error_handler

    @property
    def chained_exception_handler(self) -> Any:
        """Exception hook that was replaced (``None`` if not installed)."""
        return self.state.chained_exception_handler

    @property
    def logged_error_types(self) -> ErrorCategory:
        return self.state.log_error_types

    @property
    def logged_exception_classes(self) -> List[type]:
        return list(self.state.log_exception_classes)

    @property
    def converts_fatal_errors(self) -> bool:
        return self.state.convert_fatal_errors

    @property
    def reserved_memory(self) -> Optional[bytearray]:
        return self.state.reserved_memory

    # ========================================================================
    # Middleware
    # ========================================================================

    def as_middleware(self, message: str = "Unexpected error") -> "Middleware":
        """Use this error handler as middleware."""
        from .middleware import Middleware
        return Middleware(self, message=message)

    def as_async_middleware(self, message: str = "Unexpected error") -> "AsyncMiddleware":
        """Use this error handler as async middleware."""
        from .middleware import AsyncMiddleware
        return AsyncMiddleware(self, message=message)


__all__ = ["ErrorHandler", "ErrorHandlerInterface", "ErrorException"]
