"""Unit tests for logging configuration module.

Tests verify that the logging configuration functions work correctly with
different log levels and formats.
"""

import logging

import pytest

from tutorconnect.core.logging_config import (
    DETAILED_FORMAT,
    JSON_FORMAT,
    MODULE_LOG_LEVELS,
    SIMPLE_FORMAT,
    get_logger,
    resolve_format,
    setup_logging,
)


def _console_handler():
    return next(
        (h for h in logging.getLogger().handlers if isinstance(h, logging.StreamHandler)),
        None,
    )


class TestSetupLoggingLogLevels:
    """Test setup_logging with different log levels."""

    @pytest.mark.parametrize(
        "log_level,expected_level",
        [
            ("DEBUG", logging.DEBUG),
            ("INFO", logging.INFO),
            ("WARNING", logging.WARNING),
            ("ERROR", logging.ERROR),
            ("debug", logging.DEBUG),
        ],
    )
    def test_setup_logging_with_different_levels(self, log_level, expected_level):
        """Test setup_logging configures correct log level."""
        setup_logging(log_level=log_level, enable_file=False)

        handler = _console_handler()
        assert handler is not None
        assert handler.level == expected_level

    def test_setup_logging_does_not_duplicate_handlers(self):
        setup_logging(enable_file=False)
        setup_logging(enable_file=False)

        assert len(logging.getLogger().handlers) == 1

    def test_module_levels_are_applied(self):
        setup_logging(enable_file=False)

        for module_name, level in MODULE_LOG_LEVELS.items():
            assert logging.getLogger(module_name).level == logging.getLevelName(level)


class TestLogFormats:
    @pytest.mark.parametrize(
        "name,expected",
        [
            ("simple", SIMPLE_FORMAT),
            ("detailed", DETAILED_FORMAT),
            ("json", JSON_FORMAT),
            ("JSON", JSON_FORMAT),
            ("unknown", DETAILED_FORMAT),
        ],
    )
    def test_resolve_format(self, name, expected):
        assert resolve_format(name) == expected

    def test_simple_format_applied_to_console(self):
        setup_logging(log_format="simple", enable_file=False)

        assert _console_handler().formatter._fmt == SIMPLE_FORMAT


def test_get_logger_returns_named_logger():
    logger = get_logger("tutorconnect.server.api.v1.auth")
    assert isinstance(logger, logging.Logger)
    assert logger.name == "tutorconnect.server.api.v1.auth"
