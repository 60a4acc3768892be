"""Logging setup for the memory store.

Modules log through ``logging.getLogger(__name__)``; applications call
``get_logger`` once to attach a console handler to the package logger.
"""

import logging
from typing import Dict, Optional

LOG_FORMAT = "%(asctime)s - %(levelname)s - %(name)s - %(message)s"

# Cache configured loggers so repeated calls don't duplicate handlers
_LOGGER_CACHE: Dict[str, logging.Logger] = {}


def get_logger(name: str = "fitmemory", level: Optional[str] = None) -> logging.Logger:
    """
    Return a configured :class:`logging.Logger`.

    Args:
        name: Logger name; configuring "fitmemory" covers every module
        level: Level name such as "DEBUG"; defaults to the configured one

    Returns:
        The logger, with a single console handler attached
    """
    if name in _LOGGER_CACHE:
        logger = _LOGGER_CACHE[name]
        if level:
            logger.setLevel(level.upper())
        return logger

    if level is None:
        from .config import get_settings

        level = get_settings().log_level

    logger = logging.getLogger(name)
    logger.setLevel(level.upper())

    # Guard against double-adding handlers if the interpreter reloads modules
    if not logger.handlers:
        handler = logging.StreamHandler()
        handler.setFormatter(logging.Formatter(LOG_FORMAT))
        logger.addHandler(handler)

    _LOGGER_CACHE[name] = logger
    return logger
