"""
Faultline - Captured failure types.

A captured failure is either:
- an ErrorException (runtime failure with a category, usually a warning)
- any other exception (language level failure)

Also defines the ABSENT chained hook sentinel and FatalInfo, the record
of a failure that was only detected at shutdown.
"""

from __future__ import annotations

import traceback
import warnings
from typing import Any, NamedTuple, Optional, Tuple

from .codes import ErrorCategory


class ErrorException(Exception):
    """
    Runtime failure promoted to an exception.

    Attributes:
        category: ErrorCategory of the failure
        message: Failure message
        filename: File where the failure occurred
        lineno: Line number where the failure occurred
    """

    def __init__(
        self,
        message: str,
        category: int = ErrorCategory.ERROR,
        filename: Optional[str] = None,
        lineno: Optional[int] = None,
    ):
        super().__init__(message)
        self._message = message
        self._category = ErrorCategory(int(category) & ErrorCategory.ALL)
        self._filename = filename if filename is not None else "unknown"
        self._lineno = lineno if lineno is not None else 0

    @property
    def category(self) -> ErrorCategory:
        return self._category

    @property
    def message(self) -> str:
        return self._message

    @property
    def filename(self) -> str:
        return self._filename

    @property
    def lineno(self) -> int:
        return self._lineno

    def __repr__(self) -> str:
        return (
            f"ErrorException({self._message!r}, category={self._category!r}, "
            f"filename={self._filename!r}, lineno={self._lineno})"
        )

    def __reduce__(self):
        return (
            self.__class__,
            (self._message, int(self._category), self._filename, self._lineno),
        )


class CategorizedWarning(Warning):
    """Warning carrying an explicit error category."""

    def __init__(self, message: str, category: int = ErrorCategory.USER_NOTICE):
        super().__init__(message)
        self.category = ErrorCategory(category)


_USER_CATEGORIES = frozenset({
    ErrorCategory.USER_ERROR,
    ErrorCategory.USER_WARNING,
    ErrorCategory.USER_NOTICE,
    ErrorCategory.USER_DEPRECATED,
})


def trigger_error(
    message: str,
    category: int = ErrorCategory.USER_NOTICE,
    stacklevel: int = 1,
) -> None:
    """
    Raise a user level runtime failure.

    The failure goes through the warnings machinery, so an installed
    runtime failure hook sees it with the given category.

    Args:
        message: Failure message
        category: One of the USER_* categories
        stacklevel: Passed to ``warnings.warn`` (1 is the caller)

    Raises:
        ValueError: If category is not a single USER_* category
    """
    if isinstance(category, bool) or category not in _USER_CATEGORIES:
        raise ValueError("Invalid error category; use one of the USER_* categories")

    warnings.warn(CategorizedWarning(message, category), stacklevel=stacklevel + 1)


def origin_of(exc: BaseException) -> Tuple[str, int]:
    """
    Get the file and line where an exception was raised.

    Uses the innermost traceback frame. ``SyntaxError`` reports the
    location of the offending source instead.
    """
    if isinstance(exc, ErrorException):
        return exc.filename, exc.lineno

    if isinstance(exc, SyntaxError) and exc.filename:
        return exc.filename, exc.lineno or 0

    tb = exc.__traceback__
    if tb is None:
        return "unknown", 0

    frame = traceback.extract_tb(tb)[-1]
    return frame.filename, frame.lineno or 0


def type_name(obj: Any) -> str:
    """Qualified type name, without the module for builtins."""
    cls = obj if isinstance(obj, type) else type(obj)
    if cls.__module__ == "builtins":
        return cls.__qualname__
    return f"{cls.__module__}.{cls.__qualname__}"


def safe_str(value: Any) -> str:
    """``str(value)``, or a placeholder when its ``__str__`` fails."""
    try:
        return str(value)
    except Exception:
        return f"<unprintable {type_name(value)} object>"


# ============================================================================
# Hook chaining & shutdown records
# ============================================================================

class _Absent:
    """
    Marker for a hook that was installed without a previous hook to chain.

    Falsy, so ``if chained:`` skips it.
    """
    _instance = None

    def __new__(cls):
        if cls._instance is None:
            cls._instance = super().__new__(cls)
        return cls._instance

    def __bool__(self) -> bool:
        return False

    def __repr__(self) -> str:
        return "ABSENT"


ABSENT = _Absent()


class FatalInfo(NamedTuple):
    """Last fatal failure, as reported by the host at shutdown."""
    category: ErrorCategory
    message: str
    filename: str
    lineno: int
