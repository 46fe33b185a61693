"""
Faultline - Centralized handling of runtime failures.

Routes warnings, uncaught exceptions and fatal errors detected at shutdown
through one handler, with consistent severity mapping, opt-in filtering
and chaining of previously installed hooks.

Core exports:
- ErrorHandler: Configuration surface and hook bodies
- ErrorCategory: Bitmask of runtime failure categories
- ErrorException: Runtime failure promoted to an exception
- Middleware / AsyncMiddleware: Request pipeline integration
- ErrorHandlerConfig: Layered configuration
"""

import logging

__version__ = "0.3.0"

from .codes import (
    ErrorCategory,
    LogLevel,
    UNHANDLED,
    CONVERTIBLE,
    level_for,
    label_for,
    parse_mask,
)

from .failures import (
    ABSENT,
    CategorizedWarning,
    ErrorException,
    FatalInfo,
    trigger_error,
)

from .host import Host, PythonHost
from .reporting import FailureLogger
from .registrar import HookRegistrar
from .interception import InterceptionEngine
from .shutdown import ShutdownDetector
from .handler import ErrorHandler, ErrorHandlerInterface
from .middleware import Middleware, AsyncMiddleware
from .response import Response, Stream
from .config import ConfigError, ErrorHandlerConfig
from .logging_setup import configure_logging

logging.getLogger("faultline").addHandler(logging.NullHandler())

__all__ = [
    # Categories
    "ErrorCategory",
    "LogLevel",
    "UNHANDLED",
    "CONVERTIBLE",
    "level_for",
    "label_for",
    "parse_mask",

    # Failures
    "ABSENT",
    "CategorizedWarning",
    "ErrorException",
    "FatalInfo",
    "trigger_error",

    # Engine
    "Host",
    "PythonHost",
    "FailureLogger",
    "HookRegistrar",
    "InterceptionEngine",
    "ShutdownDetector",
    "ErrorHandler",
    "ErrorHandlerInterface",

    # Pipeline
    "Middleware",
    "AsyncMiddleware",
    "Response",
    "Stream",

    # Configuration
    "ConfigError",
    "ErrorHandlerConfig",
    "configure_logging",
]
