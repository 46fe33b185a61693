"""
Faultline - Process hook capability.

The error handler never touches ``warnings.showwarning``, ``sys.excepthook``
or ``atexit`` directly. It goes through a :class:`Host`, so hooks can be
swapped for a test double and previous hooks become explicit values.

Hook shapes seen by the handler:
- runtime failure hook: ``hook(category, message, filename, lineno, context)``
- exception hook: ``hook(exc)``
- shutdown hook: ``hook()``
"""

from __future__ import annotations

import atexit
import io
import logging
import sys
import warnings
from abc import ABC, abstractmethod
from typing import Any, Callable, Optional

from .codes import ErrorCategory
from .failures import CategorizedWarning, ErrorException, FatalInfo, origin_of, safe_str

logger = logging.getLogger("faultline.hooks")

RuntimeHook = Callable[..., Any]
ExceptionHook = Callable[[BaseException], Any]
ShutdownHook = Callable[[], Any]

_PLATFORM_SHOWWARNING = getattr(warnings, "_showwarning_orig", warnings.showwarning)


class Host(ABC):
    """
    Process-wide hook capability.

    Install methods return the hook that was replaced, or ``None`` when
    the platform default was in place. Passing ``None`` restores the
    platform default.
    """

    @abstractmethod
    def install_runtime_failure_hook(self, hook: Optional[RuntimeHook]) -> Optional[RuntimeHook]:
        pass

    @abstractmethod
    def install_exception_hook(self, hook: Optional[ExceptionHook]) -> Optional[ExceptionHook]:
        pass

    @abstractmethod
    def install_shutdown_hook(self, hook: ShutdownHook) -> None:
        pass

    @abstractmethod
    def last_fatal_info(self) -> Optional[FatalInfo]:
        pass

    @abstractmethod
    def reporting_mask(self) -> ErrorCategory:
        pass

    def clear_output_buffer(self) -> None:
        """Discard output that has been buffered but not yet written."""
        pass


# ============================================================================
# Category mapping
# ============================================================================

WARNING_CATEGORIES = (
    (EncodingWarning, ErrorCategory.STRICT),
    (DeprecationWarning, ErrorCategory.DEPRECATED),
    (PendingDeprecationWarning, ErrorCategory.DEPRECATED),
    (FutureWarning, ErrorCategory.USER_DEPRECATED),
    (SyntaxWarning, ErrorCategory.COMPILE_WARNING),
    (ImportWarning, ErrorCategory.CORE_WARNING),
    (ResourceWarning, ErrorCategory.NOTICE),
    (UnicodeWarning, ErrorCategory.NOTICE),
    (BytesWarning, ErrorCategory.STRICT),
    (UserWarning, ErrorCategory.USER_WARNING),
    (RuntimeWarning, ErrorCategory.WARNING),
)

FATAL_CATEGORIES = (
    (SyntaxError, ErrorCategory.PARSE),
    (SystemError, ErrorCategory.CORE_ERROR),
    (ImportError, ErrorCategory.COMPILE_ERROR),
    (MemoryError, ErrorCategory.ERROR),
    (RecursionError, ErrorCategory.ERROR),
)


def category_for_warning(message: Any, warning_class: Optional[type] = None) -> ErrorCategory:
    """
    Map a warning to an error category.

    The closest class along the MRO wins, so a ``DeprecationWarning``
    subclass is DEPRECATED rather than WARNING.
    """
    if isinstance(message, CategorizedWarning):
        return message.category

    cls = warning_class or type(message)
    mapping = dict(WARNING_CATEGORIES)
    for base in getattr(cls, "__mro__", ()):
        if base in mapping:
            return mapping[base]

    return ErrorCategory.WARNING


def category_for_exception(exc: BaseException) -> Optional[ErrorCategory]:
    """Category of an exception that kills the process, ``None`` if not fatal."""
    if isinstance(exc, ErrorException):
        return exc.category

    for cls, category in FATAL_CATEGORIES:
        if isinstance(exc, cls):
            return category

    return None


# ============================================================================
# Python host
# ============================================================================

class PythonHost(Host):
    """
    Host backed by the running interpreter.

    - runtime failures are warnings delivered through ``warnings.showwarning``
    - uncaught exceptions arrive through ``sys.excepthook``
    - shutdown hooks are registered with ``atexit``

    Attributes:
        reporting: Categories that are reported at all (default ALL)
    """

    def __init__(self, reporting: int = ErrorCategory.ALL):
        self.reporting = ErrorCategory(reporting)
        self._default_showwarning = _PLATFORM_SHOWWARNING
        self._delivered: Optional[BaseException] = None

    def reporting_mask(self) -> ErrorCategory:
        return self.reporting

    # ------------------------------------------------------------------
    # Runtime failures (warnings)
    # ------------------------------------------------------------------

    def install_runtime_failure_hook(self, hook: Optional[RuntimeHook]) -> Optional[RuntimeHook]:
        previous = warnings.showwarning

        if hook is None:
            warnings.showwarning = self._default_showwarning
        else:
            warnings.showwarning = self._wrap_runtime_hook(hook)
            logger.debug("Installed runtime failure hook %r", hook)

        if previous is self._default_showwarning:
            return None

        return _ChainedShowwarning(previous)

    def _wrap_runtime_hook(self, hook: RuntimeHook):
        default = self._default_showwarning

        def showwarning(message, category, filename, lineno, file=None, line=None):
            code = category_for_warning(message, category)
            context = {"warning": message, "warning_class": category, "file": file, "source": line}

            handled = hook(code, safe_str(message), filename, lineno, context)
            if not handled:
                default(message, category, filename, lineno, file, line)

        showwarning.__wrapped__ = hook
        return showwarning

    # ------------------------------------------------------------------
    # Uncaught exceptions
    # ------------------------------------------------------------------

    def install_exception_hook(self, hook: Optional[ExceptionHook]) -> Optional[ExceptionHook]:
        previous = sys.excepthook

        if hook is None:
            sys.excepthook = sys.__excepthook__
        else:
            sys.excepthook = self._wrap_exception_hook(hook)
            logger.debug("Installed exception hook %r", hook)

        if previous is sys.__excepthook__:
            return None

        return _ChainedExcepthook(previous)

    def _wrap_exception_hook(self, hook: ExceptionHook):
        def excepthook(exc_type, exc, tb):
            self._delivered = exc
            try:
                hook(exc)
            except BaseException as reraised:
                if reraised is not exc:
                    raise
                # The hook is done, now let the interpreter report and exit
                sys.__excepthook__(exc_type, exc, tb)

        excepthook.__wrapped__ = hook
        return excepthook

    # ------------------------------------------------------------------
    # Shutdown
    # ------------------------------------------------------------------

    def install_shutdown_hook(self, hook: ShutdownHook) -> None:
        atexit.register(hook)
        logger.debug("Registered shutdown hook %r", hook)

    def last_fatal_info(self) -> Optional[FatalInfo]:
        exc = getattr(sys, "last_exc", None) or getattr(sys, "last_value", None)
        if exc is None or exc is self._delivered:
            return None

        category = category_for_exception(exc)
        if category is None:
            return None

        filename, lineno = origin_of(exc)
        message = exc.message if isinstance(exc, ErrorException) else safe_str(exc)

        return FatalInfo(category, message, filename, lineno)

    def clear_output_buffer(self) -> None:
        for stream in (sys.stdout, sys.stderr):
            if isinstance(stream, (io.StringIO, io.BytesIO)):
                stream.seek(0)
                stream.truncate(0)


class _ChainedShowwarning:
    """
    Previous ``warnings.showwarning`` called with the runtime hook shape.

    Returns ``True``: the previous hook has displayed the warning.
    """

    def __init__(self, showwarning):
        self.showwarning = showwarning

    def __call__(self, category, message, filename, lineno, context=None):
        context = context or {}
        warning = context.get("warning", message)
        warning_class = context.get("warning_class") or UserWarning
        self.showwarning(
            warning, warning_class, filename, lineno,
            context.get("file"), context.get("source"),
        )
        return True

    def __eq__(self, other: Any) -> bool:
        if isinstance(other, _ChainedShowwarning):
            return self.showwarning == other.showwarning
        return self.showwarning == other

    def __hash__(self) -> int:
        return hash(self.showwarning)

    def __repr__(self) -> str:
        return f"<chained showwarning {self.showwarning!r}>"


class _ChainedExcepthook:
    """Previous ``sys.excepthook`` called with the exception hook shape."""

    def __init__(self, excepthook):
        self.excepthook = excepthook

    def __call__(self, exc: BaseException):
        return self.excepthook(type(exc), exc, exc.__traceback__)

    def __eq__(self, other: Any) -> bool:
        if isinstance(other, _ChainedExcepthook):
            return self.excepthook == other.excepthook
        return self.excepthook == other

    def __hash__(self) -> int:
        return hash(self.excepthook)

    def __repr__(self) -> str:
        return f"<chained excepthook {self.excepthook!r}>"
