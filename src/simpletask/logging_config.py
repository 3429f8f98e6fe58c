"""Logging configuration for simpletask."""

import sys

from loguru import logger


def configure_logging(*, verbose: bool = False, quiet: bool = False) -> None:
    """Send loguru output to stderr.

    ``verbose`` shows debug messages (navigation no-ops, every edit);
    ``quiet`` limits output to errors. ``verbose`` wins if both are set.
    """
    logger.remove()
    if verbose:
        level = "DEBUG"
    elif quiet:
        level = "ERROR"
    else:
        level = "INFO"
    logger.add(sys.stderr, level=level, format="{level.icon} {message}")
