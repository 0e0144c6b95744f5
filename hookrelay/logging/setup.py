"""Logging configuration for the relay."""

import logging
import sys
from typing import Union

LOGGER_NAME = "hookrelay"
LOG_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"
DATE_FORMAT = "%Y-%m-%d %H:%M:%S"


def resolve_level(level: Union[int, str]) -> int:
    """Accept a numeric level or a name such as ``"debug"``; unknown names mean INFO."""
    if isinstance(level, int):
        return level
    resolved = logging.getLevelName(str(level).strip().upper())
    return resolved if isinstance(resolved, int) else logging.INFO


def setup_logging(level: Union[int, str] = logging.INFO) -> logging.Logger:
    """Attach a single stdout handler to the ``hookrelay`` logger."""
    numeric_level = resolve_level(level)
    logger = logging.getLogger(LOGGER_NAME)
    logger.setLevel(numeric_level)

    logger.handlers.clear()
    console_handler = logging.StreamHandler(sys.stdout)
    console_handler.setLevel(numeric_level)
    console_handler.setFormatter(logging.Formatter(LOG_FORMAT, datefmt=DATE_FORMAT))
    logger.addHandler(console_handler)

    # Keep propagating so uvicorn and pytest handlers on the root still see records
    logger.propagate = True
    return logger


# Global logger instance
logger = setup_logging()
