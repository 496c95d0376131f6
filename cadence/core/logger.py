"""
Logging setup.
"""

import logging
import sys

from cadence.core.config import get_settings

LOG_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"


def setup_logger(name: str) -> logging.Logger:
    """
    Get a logger with the application's handler and level.

    Args:
        name: Logger name (usually __name__)

    Returns:
        Configured logger
    """
    log = logging.getLogger(name)
    log.setLevel(get_settings().LOG_LEVEL.upper())

    # Prevent adding handlers multiple times
    if not log.handlers:
        handler = logging.StreamHandler(sys.stdout)
        handler.setFormatter(logging.Formatter(LOG_FORMAT))
        log.addHandler(handler)
        log.propagate = False

    return log


logger = setup_logger("cadence")
