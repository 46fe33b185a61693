"""
Faultline - Handler state.

Process-wide configuration shared by the registrar, the interception
engine and the shutdown detector. Configured once at process setup.
"""

from __future__ import annotations

import threading
from dataclasses import dataclass, field
from typing import Any, Callable, List, Optional

from .codes import ErrorCategory

# Headroom kept aside to log an out of memory failure at shutdown
RESERVED_MEMORY_SIZE = 10 * 1024


@dataclass
class HandlerState:
    """
    Mutable handler state.

    Chained handlers are ``None`` until the hook is installed, then either
    the replaced hook or ``ABSENT``. They are never overwritten afterwards.

    Attributes:
        log_error_types: Categories of runtime failures that are logged
        log_exception_classes: Uncaught exception classes that are logged
        chained_error_handler: Runtime failure hook replaced by ours
        chained_exception_handler: Exception hook replaced by ours
        convert_fatal_errors: Raise RECOVERABLE_ERROR / USER_ERROR as ErrorException
        on_fatal_error: Callback for when the process dies of a failure
        registered_shutdown: Whether the shutdown hook is registered
        reserved_memory: Buffer released at shutdown
        lock: Serializes hook installation and reserved memory updates
    """
    log_error_types: ErrorCategory = ErrorCategory(0)
    log_exception_classes: List[type] = field(default_factory=list)

    chained_error_handler: Optional[Any] = None
    chained_exception_handler: Optional[Any] = None

    convert_fatal_errors: bool = False
    on_fatal_error: Optional[Callable[[BaseException], Any]] = None

    registered_shutdown: bool = False
    reserved_memory: Optional[bytearray] = None

    lock: threading.RLock = field(default_factory=threading.RLock, repr=False, compare=False)

    def reserve_memory(self):
        with self.lock:
            self.reserved_memory = bytearray(RESERVED_MEMORY_SIZE)

    def release_memory(self):
        with self.lock:
            self.reserved_memory = None

    def call_on_fatal_error(self, error: BaseException):
        """Run the fatal error callback, if any."""
        callback = self.on_fatal_error
        if callback is not None:
            callback(error)
