"""
Faultline - Shutdown detector.

Failures in the UNHANDLED categories can't be caught while the process
runs. The shutdown hook looks at the last fatal failure the host recorded
and reports it post-mortem.
"""

from __future__ import annotations

import logging

from .codes import UNHANDLED
from .failures import ErrorException
from .host import Host
from .reporting import FailureLogger
from .state import HandlerState

logger = logging.getLogger("faultline.hooks")


class ShutdownDetector:
    """
    Shutdown hook body.

    Args:
        state: Shared handler state
        host: Process hook capability
        reporter: Logger for captured failures
    """

    def __init__(self, state: HandlerState, host: Host, reporter: FailureLogger):
        self.state = state
        self.host = host
        self.reporter = reporter

    def __call__(self):
        return self.run()

    def run(self):
        """Called when the process ends."""
        # Free the headroom first, logging may need it after an out of memory failure
        self.state.release_memory()

        info = self.host.last_fatal_info()
        if info is None or not int(info.category) & int(UNHANDLED):
            return

        logger.debug("Fatal %s detected at shutdown", info.category)

        error = ErrorException(info.message, info.category, info.filename, info.lineno)

        if int(info.category) & int(self.state.log_error_types):
            self.reporter.log(error)

        self.state.call_on_fatal_error(error)
