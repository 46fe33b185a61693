"""
Faultline Testing - helpers for testing code that uses the error handler.

Components:
    - RecordingHost:     Host double recording hook installation
    - CapturingHandler:  Logging handler keeping records for assertions
    - fixtures:          pytest fixtures (recording_host, captured_logs, error_handler)
"""

from .host import RecordingHost, InstallCall
from .logs import CapturingHandler

__all__ = [
    "RecordingHost",
    "InstallCall",
    "CapturingHandler",
]
