"""Logging helpers for the relay."""

from .setup import LOGGER_NAME, logger, resolve_level, setup_logging

__all__ = ["LOGGER_NAME", "logger", "resolve_level", "setup_logging"]
