"""
Shared test fixtures for the faultline test suite.
"""

import logging
import sys
import warnings

import pytest

# Import fixtures so pytest can discover them
from faultline.testing.fixtures import (  # noqa: F401
    recording_host,
    captured_logs,
    error_handler,
)


@pytest.fixture
def restore_hooks(monkeypatch):
    """Put ``warnings.showwarning`` and ``sys.excepthook`` back after the test."""
    monkeypatch.setattr(warnings, "showwarning", warnings.showwarning)
    monkeypatch.setattr(sys, "excepthook", sys.excepthook)
    yield


@pytest.fixture
def faultline_logger():
    """The ``faultline`` logger, with handlers and level restored after the test."""
    logger = logging.getLogger("faultline")
    handlers, level = list(logger.handlers), logger.level
    yield logger
    for handler in logger.handlers[:]:
        if handler not in handlers:
            logger.removeHandler(handler)
            handler.close()
    logger.setLevel(level)
