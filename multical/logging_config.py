"""
Logging setup for applications embedding multical.

The library modules only create loggers; handlers are installed here, once,
by the embedding program.
"""

import logging
import os
import sys
from typing import Optional


LOG_FORMAT = "%(asctime)s %(levelname)s [%(name)s] %(message)s"
DATE_FORMAT = "%Y-%m-%d %H:%M:%S"

_handler: Optional[logging.Handler] = None


def configure_logging(level: str = "INFO", debug: bool = False) -> logging.Handler:
    """
    Configure the multical loggers with a single stderr handler.

    Calling it again replaces the level but never adds a second handler.

    Args:
        level: Level name (DEBUG, INFO, WARNING, ERROR)
        debug: Force DEBUG regardless of level

    Environment Variables:
        MULTICAL_DEBUG: Set to '1', 'true', 'yes' to force debug logging

    Returns:
        The installed handler
    """
    global _handler

    env_debug = os.getenv("MULTICAL_DEBUG", "").lower() in ("1", "true", "yes")
    if debug or env_debug:
        resolved = logging.DEBUG
    else:
        resolved = getattr(logging, str(level).upper(), logging.INFO)

    package_logger = logging.getLogger("multical")
    package_logger.setLevel(resolved)

    if _handler is None:
        _handler = logging.StreamHandler(sys.stderr)
        _handler.setFormatter(logging.Formatter(fmt=LOG_FORMAT, datefmt=DATE_FORMAT))
        package_logger.addHandler(_handler)

    package_logger.debug("Logging configured at %s", logging.getLevelName(resolved))
    return _handler
