"""Logging setup for termsession.

Every module logs through ``logging.getLogger(__name__)``; this module
attaches handlers to the shared ``termsession`` parent logger once the
CLI has loaded its settings.
"""

from __future__ import annotations

import logging
import sys

from termsession.config.settings import LoggingConfig

PACKAGE_LOGGER = "termsession"

# Third-party loggers that are chatty at INFO
_NOISY_LOGGERS = ("httpx", "httpcore", "uvicorn.access")

# Marks handlers installed here so a second call replaces them
_HANDLER_FLAG = "_termsession_handler"


def setup_logging(config: LoggingConfig | None = None) -> logging.Logger:
    """Attach console and optional file handlers to the package logger.

    Calling it again (for example after ``--verbose`` changes the level)
    replaces the handlers from the previous call instead of stacking them.

    Args:
        config: Logging configuration. Defaults to INFO on stderr.

    Returns:
        The configured ``termsession`` logger.
    """
    config = config or LoggingConfig()
    level = logging.getLevelName(config.level.upper())
    if not isinstance(level, int):
        level = logging.INFO

    package_logger = logging.getLogger(PACKAGE_LOGGER)
    package_logger.setLevel(level)
    for handler in list(package_logger.handlers):
        if getattr(handler, _HANDLER_FLAG, False):
            package_logger.removeHandler(handler)
            handler.close()

    handlers: list[logging.Handler] = [logging.StreamHandler(sys.stderr)]
    if config.file:
        handlers.append(logging.FileHandler(config.file, encoding="utf-8"))

    formatter = logging.Formatter(config.format)
    for handler in handlers:
        handler.setFormatter(formatter)
        setattr(handler, _HANDLER_FLAG, True)
        package_logger.addHandler(handler)

    if level > logging.DEBUG:
        for name in _NOISY_LOGGERS:
            logging.getLogger(name).setLevel(logging.WARNING)

    package_logger.debug("Logging configured at %s", logging.getLevelName(level))
    return package_logger
