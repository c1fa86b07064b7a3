"""Logging for sitesched with verbosity-mapped custom levels.

Verbosity 1 reports warnings as they are emitted, verbosity 2 adds every
pairwise rule evaluation, verbosity 3 adds graph-pass internals.
"""

from __future__ import annotations

import logging
import sys
from typing import Any, TextIO

CHANGES_LEVEL = 25  # Between INFO (20) and WARNING (30)
CHECKS_LEVEL = 15  # Between DEBUG (10) and INFO (20)

logging.addLevelName(CHANGES_LEVEL, "CHANGES")
logging.addLevelName(CHECKS_LEVEL, "CHECKS")

VERBOSITY_SILENT = 0
VERBOSITY_CHANGES = 1
VERBOSITY_CHECKS = 2
VERBOSITY_DEBUG = 3

_LEVEL_MAP = {
    VERBOSITY_SILENT: logging.WARNING,
    VERBOSITY_CHANGES: CHANGES_LEVEL,
    VERBOSITY_CHECKS: CHECKS_LEVEL,
    VERBOSITY_DEBUG: logging.DEBUG,
}


class SiteschedLogger(logging.Logger):
    """Logger with one method per engine verbosity level.

    - changes(): a warning was emitted or a result was produced
    - checks(): a rule or pair of tasks was evaluated
    - debug(): topological order, pass values and similar internals
    """

    def changes(self, msg: str, *args: Any, **kwargs: Any) -> None:
        if self.isEnabledFor(CHANGES_LEVEL):
            self._log(CHANGES_LEVEL, msg, args, **kwargs)

    def checks(self, msg: str, *args: Any, **kwargs: Any) -> None:
        if self.isEnabledFor(CHECKS_LEVEL):
            self._log(CHECKS_LEVEL, msg, args, **kwargs)


def get_logger() -> SiteschedLogger:
    """Return the shared ``sitesched`` logger.

    The logger class is swapped only for the duration of the lookup so other
    libraries keep getting plain loggers.
    """
    previous = logging.getLoggerClass()
    logging.setLoggerClass(SiteschedLogger)
    try:
        logger = logging.getLogger("sitesched")
    finally:
        logging.setLoggerClass(previous)
    assert isinstance(logger, SiteschedLogger)
    return logger


def setup_logger(verbosity: int, stream: TextIO | None = None) -> None:
    """Configure the sitesched logger for a verbosity level.

    Can be called repeatedly; existing handlers are replaced.

    Args:
        verbosity: 0=graph problems only, 1=emitted warnings, 2=rule checks, 3=debug
        stream: Output stream, defaults to sys.stderr
    """
    logger = get_logger()
    logger.handlers.clear()
    logger.setLevel(_LEVEL_MAP.get(verbosity, logging.WARNING))

    handler = logging.StreamHandler(stream if stream is not None else sys.stderr)
    handler.setFormatter(logging.Formatter("%(message)s"))
    logger.addHandler(handler)
    logger.propagate = False


def reset_logger() -> None:
    """Drop handlers and return to the default level (for tests)."""
    logger = get_logger()
    logger.handlers.clear()
    logger.setLevel(logging.WARNING)
    logger.propagate = True


def changes_enabled() -> bool:
    return get_logger().isEnabledFor(CHANGES_LEVEL)


def checks_enabled() -> bool:
    return get_logger().isEnabledFor(CHECKS_LEVEL)


def debug_enabled() -> bool:
    return get_logger().isEnabledFor(logging.DEBUG)
