"""Logging setup for aaxconvert.

All modules log through ``logging.getLogger(__name__)``. Only the CLI calls
``setup_logging``; library users configure logging themselves.
"""

import logging
import sys

# Level for each number of -v flags
VERBOSITY_LEVELS = ["error", "warning", "info", "debug"]

LOG_FORMAT = "%(levelname)s: %(message)s"
DEBUG_LOG_FORMAT = "%(levelname)s %(name)s: %(message)s"


def level_for_verbosity(verbose: int, default: str = "error") -> str:
    """Map the number of ``-v`` flags to a level name."""
    if verbose <= 0:
        return default
    return VERBOSITY_LEVELS[min(verbose, len(VERBOSITY_LEVELS) - 1)]


def setup_logging(level: str = "error") -> logging.Logger:
    """Attach a stderr handler to the ``aaxconvert`` logger.

    Args:
        level: Level name (error, warning, info, debug)

    Returns:
        The package logger
    """
    numeric = logging.getLevelName(level.upper())
    if not isinstance(numeric, int):
        raise ValueError(f"Unknown log level: {level!r}")

    logger = logging.getLogger("aaxconvert")
    for handler in list(logger.handlers):
        logger.removeHandler(handler)

    handler = logging.StreamHandler(sys.stderr)
    handler.setFormatter(logging.Formatter(DEBUG_LOG_FORMAT if numeric <= logging.DEBUG else LOG_FORMAT))
    logger.addHandler(handler)
    logger.setLevel(numeric)
    logger.propagate = False
    return logger
