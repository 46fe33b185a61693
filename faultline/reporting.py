"""
Faultline - Failure logging.

Formats captured failures into log records and writes them to a
:mod:`logging` logger.
"""

from __future__ import annotations

import logging
from typing import Any, Optional, Union

from .codes import LogLevel, label_for, level_for
from .failures import ErrorException, origin_of, safe_str, type_name

Sink = Union[logging.Logger, logging.LoggerAdapter]

logger = logging.getLogger("faultline.hooks")


class FailureLogger:
    """
    Writes captured failures to a logging sink.

    Every call to :meth:`log` results in exactly one ``sink.log()`` call.
    The structured context of a record is passed as ``extra={"context": ...}``
    and ends up as ``record.context``.

    ``log()`` never raises: unprintable exceptions get a placeholder message
    and a sink that raises is reported on the ``faultline.hooks`` logger.

    Usage:
        ```python
        reporter = FailureLogger(logging.getLogger("myapp.errors"))
        try:
            ...
        except Exception as e:
            reporter.log(e)
        ```
    """

    def __init__(self, logger: Optional[Sink] = None):
        self._logger = logger

    @property
    def logger(self) -> Sink:
        """The logging sink, ``faultline`` logger if none was set."""
        if self._logger is None:
            self._logger = logging.getLogger("faultline")
        return self._logger

    def set_logger(self, logger: Sink):
        """Set the logger for logging errors."""
        self._logger = logger

    def log(self, failure: Any):
        """
        Log an error or exception.

        Args:
            failure: ErrorException or other exception
        """
        if isinstance(failure, ErrorException):
            return self._log_error(failure)

        if isinstance(failure, BaseException):
            return self._log_exception(failure)

        self._emit(LogLevel.WARNING, f"Unable to log a {self._describe(failure)}")

    def _log_error(self, error: ErrorException):
        level = level_for(error.category)
        message = "%s: %s at %s line %s" % (
            label_for(error.category), safe_str(error.message), error.filename, error.lineno,
        )

        context = {
            "category": error.category,
            "message": error.message,
            "file": error.filename,
            "line": error.lineno,
            "failure": error,
        }

        self._emit(level, message, extra={"context": context})

    def _log_exception(self, exception: BaseException):
        level = level_for()
        filename, lineno = origin_of(exception)

        message = 'Uncaught Exception %s: "%s" at %s:%s' % (
            type_name(exception), safe_str(exception), filename, lineno,
        )

        self._emit(
            level,
            message,
            exc_info=(type(exception), exception, exception.__traceback__),
            extra={"context": {"exception": exception}},
        )

    def _emit(self, level: int, message: str, **kwargs: Any):
        try:
            self.logger.log(level, message, **kwargs)
        except Exception as e:
            logger.error(
                "Logging sink %s raised %s while logging: %s",
                type_name(self.logger), type_name(e), message,
            )

    @staticmethod
    def _describe(value: Any) -> str:
        if value is None:
            return "NoneType"
        if isinstance(value, type):
            return f"{type_name(value)} class"
        return f"{type_name(value)} object"
