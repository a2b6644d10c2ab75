"""Logging configuration for todo-state."""

import sys

from loguru import logger


def configure_logging(*, verbose: bool = False, quiet: bool = False) -> None:
    """Route loguru output to stderr.

    ``verbose`` shows store and storage debug messages (loads, writes).
    ``quiet`` only shows warnings and errors, and wins over ``verbose``.
    """
    logger.remove()
    if quiet:
        level = "WARNING"
    elif verbose:
        level = "DEBUG"
    else:
        level = "INFO"
    logger.add(sys.stderr, level=level, format="{level.icon} {message}")
