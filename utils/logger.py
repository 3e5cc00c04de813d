"""
utils/logger.py
---------------
Centralized logging configuration.
Every module obtains its logger through `get_logger(__name__)`; the root
handler is installed once with the level taken from LOG_LEVEL.
"""

import logging
import sys

from config import LOG_LEVEL

_LOG_FORMAT = "%(asctime)s | %(levelname)-8s | %(name)s | %(message)s"
_DATE_FORMAT = "%Y-%m-%d %H:%M:%S"
_initialized = False


def _init_logging() -> None:
    """Configure the root logger once."""
    global _initialized
    if _initialized:
        return
    handler = logging.StreamHandler(sys.stdout)
    handler.setFormatter(logging.Formatter(_LOG_FORMAT, _DATE_FORMAT))
    root = logging.getLogger()
    root.setLevel(getattr(logging, LOG_LEVEL, logging.INFO))
    root.addHandler(handler)
    # scheduler logs every job run at INFO
    logging.getLogger("apscheduler").setLevel(logging.WARNING)
    _initialized = True


def get_logger(name: str) -> logging.Logger:
    """
    Get a named logger instance.

    Args:
        name: Usually ``__name__`` of the calling module.

    Returns:
        A configured logging.Logger.
    """
    _init_logging()
    return logging.getLogger(name)
