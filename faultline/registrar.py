"""
Faultline - Hook registration.

Decides when the process-wide hooks are installed and keeps the hooks
they replaced, so coexisting handlers still see failures.

Each hook is installed at most once per handler:
- runtime failure hook, for categories outside UNHANDLED
- shutdown hook, for categories inside UNHANDLED
- exception hook, for exception classes
"""

from __future__ import annotations

import builtins
import importlib
import logging
from typing import Union

from .codes import UNHANDLED, ErrorCategory
from .failures import ABSENT
from .host import ExceptionHook, Host, RuntimeHook, ShutdownHook
from .state import HandlerState

logger = logging.getLogger("faultline.hooks")


def resolve_exception_class(name: str) -> type:
    """
    Resolve an exception class from its name.

    Accepts a builtin name (``"ValueError"``) or a dotted path
    (``"json.JSONDecodeError"``, ``"myapp.errors.PaymentError"``).

    Raises:
        ValueError: If the name doesn't resolve to an exception class
    """
    module_name, _, attr = name.rpartition(".")

    if module_name:
        try:
            module = importlib.import_module(module_name)
        except ImportError as e:
            raise ValueError(f"Unable to import '{module_name}' for exception class '{name}'") from e
        cls = getattr(module, attr, None)
    else:
        cls = getattr(builtins, attr, None)

    if not (isinstance(cls, type) and issubclass(cls, BaseException)):
        raise ValueError(f"'{name}' is not an exception class")

    return cls


class HookRegistrar:
    """
    Installs the handler's hooks through a :class:`Host`.

    Args:
        state: Shared handler state
        host: Process hook capability
        runtime_hook: Body of the runtime failure hook
        exception_hook: Body of the uncaught exception hook
        shutdown_hook: Body of the shutdown hook
    """

    def __init__(
        self,
        state: HandlerState,
        host: Host,
        runtime_hook: RuntimeHook,
        exception_hook: ExceptionHook,
        shutdown_hook: ShutdownHook,
    ):
        self.state = state
        self.host = host
        self.runtime_hook = runtime_hook
        self.exception_hook = exception_hook
        self.shutdown_hook = shutdown_hook

    # ========================================================================
    # Filtering
    # ========================================================================

    def log_uncaught(self, type_: Union[int, type, str]):
        """
        Log these types of errors or exceptions.

        Args:
            type_: ErrorCategory mask, or an exception class (or its name)

        Raises:
            TypeError: If type_ is neither a category mask nor an exception class
            ValueError: If an exception class name can't be resolved
        """
        if isinstance(type_, bool):
            raise TypeError("Type should be an error category (int) or exception class")

        if isinstance(type_, int):
            self.log_uncaught_errors(type_)
        elif isinstance(type_, type) and issubclass(type_, BaseException):
            self.log_uncaught_exception(type_)
        elif isinstance(type_, str):
            self.log_uncaught_exception(resolve_exception_class(type_))
        else:
            raise TypeError("Type should be an error category (int) or exception class")

    def log_uncaught_errors(self, mask: int):
        mask = ErrorCategory(int(mask) & ErrorCategory.ALL)

        with self.state.lock:
            self.state.log_error_types |= mask

        if int(mask) & ~int(UNHANDLED):
            self.enable_runtime_hook()

        if mask & UNHANDLED:
            self.enable_shutdown_hook()

    def log_uncaught_exception(self, cls: type):
        with self.state.lock:
            if cls not in self.state.log_exception_classes:
                self.state.log_exception_classes.append(cls)

        self.enable_exception_hook()

    # ========================================================================
    # Installation
    # ========================================================================

    def enable_runtime_hook(self):
        """Use the runtime failure hook. Installs once."""
        with self.state.lock:
            if self.state.chained_error_handler is None:
                previous = self.host.install_runtime_failure_hook(self.runtime_hook)
                self.state.chained_error_handler = previous or ABSENT
                if previous:
                    logger.debug("Chaining previous runtime failure hook %r", previous)

    def enable_exception_hook(self):
        """Use the uncaught exception hook. Installs once."""
        with self.state.lock:
            if self.state.chained_exception_handler is None:
                previous = self.host.install_exception_hook(self.exception_hook)
                self.state.chained_exception_handler = previous or ABSENT
                if previous:
                    logger.debug("Chaining previous exception hook %r", previous)

    def enable_shutdown_hook(self):
        """Register the shutdown hook and reserve memory. Registers once."""
        with self.state.lock:
            if not self.state.registered_shutdown:
                self.host.install_shutdown_hook(self.shutdown_hook)
                self.state.registered_shutdown = True
                self.state.reserve_memory()
