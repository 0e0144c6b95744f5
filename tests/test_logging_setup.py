"""Tests for logger configuration."""

import logging

from hookrelay.logging import LOGGER_NAME, resolve_level, setup_logging


def test_resolve_level_accepts_names_and_numbers():
    assert resolve_level("debug") == logging.DEBUG
    assert resolve_level(" Warning ") == logging.WARNING
    assert resolve_level(logging.ERROR) == logging.ERROR
    assert resolve_level("chatty") == logging.INFO


def test_setup_logging_replaces_handlers():
    logger = setup_logging("debug")
    setup_logging("debug")
    try:
        assert logger.name == LOGGER_NAME
        assert logger.level == logging.DEBUG
        assert len(logger.handlers) == 1
        assert logger.propagate is True
    finally:
        setup_logging()
