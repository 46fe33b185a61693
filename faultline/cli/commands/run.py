"""
Run command - execute a Python script under a configured error handler.
"""

from __future__ import annotations

import os
import runpy
import sys
from typing import Optional, Sequence

from ...config import ErrorHandlerConfig
from ...handler import ErrorHandler
from ...logging_setup import configure_logging


def run_script(
    path: str,
    args: Sequence[str],
    config: ErrorHandlerConfig,
    *,
    stream=None,
    handler: Optional[ErrorHandler] = None,
) -> ErrorHandler:
    """
    Run a script as ``__main__`` with the error handler installed.

    Uncaught exceptions propagate out of this function; the installed
    exception hook reports them when they reach the interpreter.

    Args:
        path: Script to run
        args: Arguments for the script (``sys.argv[1:]``)
        config: Error handler configuration
        stream: Log stream when no log file is configured
        handler: Preconfigured handler (built from config if None)

    Returns:
        The error handler the script ran under
    """
    configure_logging(config, stream)
    handler = handler or ErrorHandler.from_config(config)

    script = os.path.abspath(path)
    sys.argv = [script, *args]
    sys.path.insert(0, os.path.dirname(script))

    runpy.run_path(script, run_name="__main__")

    return handler
