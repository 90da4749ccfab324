"""Shared logger for the calculator package."""
import logging
import os
import sys
from typing import Optional

LOGGER_NAME = "incremental_calculator"
LOG_FORMAT = "%(asctime)s [%(levelname)s] %(name)s: %(message)s"

logger: logging.Logger = logging.getLogger(LOGGER_NAME)

_configured = False


def setup_logging(level: Optional[str] = None) -> logging.Logger:
    """
    Configure the package logger once.

    The level defaults to the ``CALCULATOR_LOG_LEVEL`` environment variable, then ``INFO``.
    Calling it again only updates the level.

    :param str level: Log level name (DEBUG, INFO, WARNING, ERROR)

    :return: The configured package logger
    :rtype: logging.Logger
    """
    global _configured

    level_name = (level or os.environ.get("CALCULATOR_LOG_LEVEL", "INFO")).upper()
    logger.setLevel(getattr(logging, level_name, logging.INFO))

    if not _configured:
        handler = logging.StreamHandler(sys.stderr)
        handler.setFormatter(logging.Formatter(LOG_FORMAT))
        logger.addHandler(handler)
        # Keep records out of the root logger to avoid duplicates
        logger.propagate = False
        _configured = True

    return logger
