"""Logging setup for schema-typegen.

Modules log through ``logging.getLogger(__name__)``; this module only
decides where those records go and at which level.
"""

import logging
from enum import Enum
from typing import Optional

from rich.console import Console
from rich.logging import RichHandler

PACKAGE_LOGGER = "schema_typegen"


class LogLevel(str, Enum):
    SILENT = "silent"
    INFO = "info"
    WARN = "warn"
    ERROR = "error"
    DEBUG = "debug"


_LEVELS = {
    LogLevel.SILENT: logging.CRITICAL + 10,
    LogLevel.ERROR: logging.ERROR,
    LogLevel.WARN: logging.WARNING,
    LogLevel.INFO: logging.INFO,
    LogLevel.DEBUG: logging.DEBUG,
}


def to_logging_level(level: LogLevel) -> int:
    return _LEVELS[LogLevel(level)]


def configure_logging(level: LogLevel = LogLevel.WARN, console: Optional[Console] = None) -> logging.Logger:
    """Route package logs to a rich handler on stderr.

    Calling it again replaces the previous handler, so the CLI can
    reconfigure once the final log level is known.

    Args:
        level: Minimum level to emit; ``silent`` suppresses everything
        console: Console to write to (defaults to a stderr console)

    Returns:
        The package logger
    """
    package_logger = logging.getLogger(PACKAGE_LOGGER)
    for handler in list(package_logger.handlers):
        package_logger.removeHandler(handler)

    handler = RichHandler(
        console=console or Console(stderr=True),
        show_path=False,
        show_time=False,
        markup=False,
    )
    handler.setFormatter(logging.Formatter("%(message)s"))
    package_logger.addHandler(handler)
    package_logger.setLevel(to_logging_level(level))
    package_logger.propagate = False
    return package_logger
