"""Logging configuration for the application."""

import logging
import sys

from app.core.config import settings

LOGGER_NAME = "alumni"

DEBUG_FORMAT = "\n%(levelname)s [%(asctime)s] %(name)s\n└── %(message)s"
DEFAULT_FORMAT = "%(levelname)s: %(message)s"


def setup_logging(debug: bool = settings.DEBUG) -> logging.Logger:
    """Configure and return the application logger.

    Can be called again by the application factory with its own settings;
    the stdout handler is attached once and only the level and format change.
    """
    level = logging.DEBUG if debug else logging.INFO

    logger = logging.getLogger(LOGGER_NAME)
    logger.setLevel(level)

    if debug:
        formatter = logging.Formatter(DEBUG_FORMAT, datefmt="%Y-%m-%d %H:%M:%S")
    else:
        formatter = logging.Formatter(DEFAULT_FORMAT)

    handler = next((h for h in logger.handlers if getattr(h, "_alumni_console", False)), None)
    if handler is None:
        handler = logging.StreamHandler(sys.stdout)
        handler._alumni_console = True
        logger.addHandler(handler)

    handler.setLevel(level)
    handler.setFormatter(formatter)

    return logger


# Application logger instance
logger = setup_logging()
