"""Logging setup shared by the entry script and library modules."""

import logging
import sys
from typing import Optional

_DEFAULT_FORMAT = "%(asctime)s | %(levelname)s | %(name)s | %(message)s"


def setup_logger(
    name: str = "topicbingo",
    level: int = logging.INFO,
    handler: Optional[logging.Handler] = None
) -> logging.Logger:
    """
    Configure the package logger with a consistent format.

    Library modules only call ``logging.getLogger(__name__)``; entry points
    call this once to attach a handler.

    Args:
        name: Logger name to configure
        level: Log level
        handler: Handler to attach (defaults to stderr)

    Returns:
        The configured logger
    """
    log = logging.getLogger(name)
    log.setLevel(level)

    if handler is None:
        handler = logging.StreamHandler(sys.stderr)
    handler.setFormatter(logging.Formatter(_DEFAULT_FORMAT))

    # Replace handlers from a previous call instead of stacking them
    for existing in list(log.handlers):
        log.removeHandler(existing)
    log.addHandler(handler)
    return log
