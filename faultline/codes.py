"""
Faultline - Error categories and severity classification.

Defines:
- ErrorCategory (bitmask of runtime failure categories)
- LogLevel (log levels used when reporting a failure)
- level_for / label_for (category -> level / human label)
- parse_mask (configuration text -> ErrorCategory)
"""

from __future__ import annotations

import logging
from enum import IntEnum, IntFlag
from typing import Optional, Union


# ============================================================================
# Categories
# ============================================================================

class ErrorCategory(IntFlag):
    """
    Runtime failure categories.

    Values are single bits so categories combine into a mask.
    """
    ERROR = 1
    WARNING = 2
    PARSE = 4
    NOTICE = 8
    CORE_ERROR = 16
    CORE_WARNING = 32
    COMPILE_ERROR = 64
    COMPILE_WARNING = 128
    USER_ERROR = 256
    USER_WARNING = 512
    USER_NOTICE = 1024
    STRICT = 2048
    RECOVERABLE_ERROR = 4096
    DEPRECATED = 8192
    USER_DEPRECATED = 16384

    ALL = 32767


# Can't be intercepted while running, only detected at shutdown
UNHANDLED = (
    ErrorCategory.ERROR
    | ErrorCategory.PARSE
    | ErrorCategory.CORE_ERROR
    | ErrorCategory.COMPILE_ERROR
)

# Promoted to ErrorException when fatal error conversion is enabled
CONVERTIBLE = ErrorCategory.RECOVERABLE_ERROR | ErrorCategory.USER_ERROR

# Single-bit categories, in bit order
CATEGORIES = tuple(
    category for category in ErrorCategory if category is not ErrorCategory.ALL
)


# ============================================================================
# Log levels
# ============================================================================

NOTICE = 25
logging.addLevelName(NOTICE, "NOTICE")


class LogLevel(IntEnum):
    """
    Log levels for reported failures.

    Values are :mod:`logging` levels, so a member can be passed straight
    to ``Logger.log``.
    """
    CRITICAL = logging.CRITICAL
    ERROR = logging.ERROR
    WARNING = logging.WARNING
    NOTICE = NOTICE
    INFO = logging.INFO


_LEVELS = {
    ErrorCategory.STRICT: LogLevel.INFO,
    ErrorCategory.DEPRECATED: LogLevel.INFO,
    ErrorCategory.USER_DEPRECATED: LogLevel.INFO,

    ErrorCategory.NOTICE: LogLevel.NOTICE,
    ErrorCategory.USER_NOTICE: LogLevel.NOTICE,

    ErrorCategory.WARNING: LogLevel.WARNING,
    ErrorCategory.CORE_WARNING: LogLevel.WARNING,
    ErrorCategory.COMPILE_WARNING: LogLevel.WARNING,
    ErrorCategory.USER_WARNING: LogLevel.WARNING,

    ErrorCategory.PARSE: LogLevel.CRITICAL,
    ErrorCategory.CORE_ERROR: LogLevel.CRITICAL,
    ErrorCategory.COMPILE_ERROR: LogLevel.CRITICAL,
}

_LABELS = {
    ErrorCategory.ERROR: "Fatal error",
    ErrorCategory.USER_ERROR: "Fatal error",
    ErrorCategory.RECOVERABLE_ERROR: "Fatal error",
    ErrorCategory.WARNING: "Warning",
    ErrorCategory.USER_WARNING: "Warning",
    ErrorCategory.PARSE: "Parse error",
    ErrorCategory.NOTICE: "Notice",
    ErrorCategory.USER_NOTICE: "Notice",
    ErrorCategory.CORE_ERROR: "Core error",
    ErrorCategory.CORE_WARNING: "Core warning",
    ErrorCategory.COMPILE_ERROR: "Compile error",
    ErrorCategory.COMPILE_WARNING: "Compile warning",
    ErrorCategory.STRICT: "Strict standards",
    ErrorCategory.DEPRECATED: "Deprecated",
    ErrorCategory.USER_DEPRECATED: "Deprecated",
}


def _lookup(table: dict, category) -> Optional[object]:
    if category is None or isinstance(category, bool):
        return None
    try:
        return table.get(int(category))
    except (TypeError, ValueError):
        return None


def level_for(category: Optional[int] = None) -> LogLevel:
    """
    Get the log level for a failure category.

    Unknown categories, combined masks and ``None`` (used for exceptions)
    map to ``LogLevel.ERROR``.

    Args:
        category: Single ErrorCategory bit

    Returns:
        LogLevel for the category
    """
    level = _lookup(_LEVELS, category)
    return level if level is not None else LogLevel.ERROR


def label_for(category: Optional[int]) -> str:
    """Turn a failure category into a human readable label."""
    label = _lookup(_LABELS, category)
    return label if label is not None else "Unknown error"


# ============================================================================
# Parsing
# ============================================================================

def _parse_term(term: str) -> ErrorCategory:
    if term.lstrip("-").isdigit():
        return ErrorCategory(int(term) & ErrorCategory.ALL)

    name = term.upper()
    if name.startswith("E_"):
        name = name[2:]

    try:
        return ErrorCategory[name]
    except KeyError:
        raise ValueError(f"Unknown error category '{term}'") from None


def parse_mask(value: Union[str, int, ErrorCategory, None]) -> ErrorCategory:
    """
    Parse a category mask from configuration text.

    Terms are separated by ``,`` or ``|``. A term is a category name
    (case-insensitive, ``E_`` prefix optional) or an integer. A term
    prefixed with ``~`` removes its bits from the mask.

    Example:
        ```python
        parse_mask("ALL,~DEPRECATED")
        parse_mask("E_WARNING | E_NOTICE")
        ```

    Raises:
        ValueError: If a term is not a known category
    """
    if value is None:
        return ErrorCategory(0)
    if isinstance(value, bool):
        raise ValueError(f"Invalid error category mask {value!r}")
    if isinstance(value, int):
        return ErrorCategory(value & ErrorCategory.ALL)

    mask = ErrorCategory(0)
    for raw in value.replace("|", ",").split(","):
        term = raw.strip()
        if not term:
            continue
        if term.startswith("~"):
            bits = int(mask) & ~int(_parse_term(term[1:].strip()))
        else:
            bits = int(mask) | int(_parse_term(term))
        mask = ErrorCategory(bits & ErrorCategory.ALL)

    return mask
