"""
Faultline Testing - Pytest Fixtures.

Usage in conftest.py::

    from faultline.testing.fixtures import (  # noqa: F401
        recording_host,
        captured_logs,
        error_handler,
    )
"""

from __future__ import annotations

import pytest

from faultline.handler import ErrorHandler

from .host import RecordingHost
from .logs import CapturingHandler


@pytest.fixture
def recording_host():
    """A :class:`RecordingHost` for observing hook installation."""
    host = RecordingHost()
    yield host
    host.reset()


@pytest.fixture
def captured_logs():
    """A :class:`CapturingHandler` on its own logger."""
    logs = CapturingHandler.attach()
    yield logs
    logs.detach()


@pytest.fixture
def error_handler(recording_host, captured_logs):
    """An :class:`ErrorHandler` logging to ``captured_logs`` through ``recording_host``."""
    return ErrorHandler(captured_logs.logger, host=recording_host)
