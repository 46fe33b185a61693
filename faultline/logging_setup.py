"""Logging configuration helpers for processes using faultline."""

import logging

from .config import ErrorHandlerConfig


def configure_logging(config: ErrorHandlerConfig, stream=None) -> logging.Handler:
    """
    Attach a handler for failure records to the configured logger.

    Writes to ``config.log_file`` when set, otherwise to ``stream``
    (stderr by default).

    Returns:
        The handler that was attached
    """
    if config.log_file:
        handler: logging.Handler = logging.FileHandler(config.log_file, encoding="utf-8")
    else:
        handler = logging.StreamHandler(stream)

    handler.setFormatter(logging.Formatter(config.log_format))

    logger = logging.getLogger(config.logger_name)
    logger.setLevel(config.log_level)
    logger.addHandler(handler)

    return handler
