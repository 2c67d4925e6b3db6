"""Unit tests for logging configuration module.

Tests verify that the logging configuration functions work correctly with different
scenarios including various log levels, formats, and file logging options.
"""

import logging
from unittest.mock import patch

import pytest

from edustack.core.logging_config import (
    DETAILED_FORMAT,
    JSON_FORMAT,
    MODULE_LOG_LEVELS,
    SIMPLE_FORMAT,
    get_logger,
    setup_logging,
)


def console_handler():
    return next(
        (
            h
            for h in logging.getLogger().handlers
            if isinstance(h, logging.StreamHandler) and not isinstance(h, logging.FileHandler)
        ),
        None,
    )


def file_handler():
    return next((h for h in logging.getLogger().handlers if isinstance(h, logging.FileHandler)), None)


class TestSetupLoggingLogLevels:
    """Test setup_logging with different log levels."""

    @pytest.mark.parametrize(
        "log_level,expected_level",
        [
            ("DEBUG", logging.DEBUG),
            ("INFO", logging.INFO),
            ("WARNING", logging.WARNING),
            ("ERROR", logging.ERROR),
            ("debug", logging.DEBUG),  # lowercase
        ],
    )
    def test_setup_logging_with_different_levels(self, log_level, expected_level):
        setup_logging(log_level=log_level, enable_file=False)

        assert console_handler().level == expected_level

    def test_root_logger_passes_everything_to_handlers(self):
        setup_logging(log_level="ERROR", enable_file=False)

        assert logging.getLogger().level == logging.DEBUG


class TestSetupLoggingFormats:
    @pytest.mark.parametrize(
        "log_format,expected_format",
        [
            ("simple", SIMPLE_FORMAT),
            ("detailed", DETAILED_FORMAT),
            ("json", JSON_FORMAT),
            ("unknown", DETAILED_FORMAT),
        ],
    )
    def test_setup_logging_with_different_formats(self, log_format, expected_format):
        setup_logging(log_format=log_format, enable_file=False)

        handler = console_handler()
        assert handler.formatter._fmt == expected_format
        assert handler.formatter.datefmt == "%Y-%m-%d %H:%M:%S"


class TestSetupLoggingFileHandling:
    """Test setup_logging file logging functionality."""

    def test_setup_logging_with_file_enabled(self, tmp_path):
        with patch("edustack.core.logging_config.LOG_FILE_DIR", str(tmp_path / "logs")), patch(
            "edustack.core.logging_config.ENABLE_FILE_LOGGING", True
        ):
            setup_logging(log_level="WARNING", enable_file=True)

        handler = file_handler()
        try:
            assert handler is not None
            assert handler.level == logging.DEBUG
            assert (tmp_path / "logs" / "edustack.log").exists()
        finally:
            setup_logging(enable_file=False)
            if handler is not None:
                handler.close()

    def test_setup_logging_with_file_disabled(self):
        setup_logging(enable_file=False)

        assert file_handler() is None

    def test_environment_switch_disables_file_logging(self, tmp_path):
        with patch("edustack.core.logging_config.LOG_FILE_DIR", str(tmp_path)), patch(
            "edustack.core.logging_config.ENABLE_FILE_LOGGING", False
        ):
            setup_logging(enable_file=True)

        assert file_handler() is None

    def test_repeated_setup_does_not_duplicate_handlers(self):
        setup_logging(enable_file=False)
        setup_logging(enable_file=False)

        assert len(logging.getLogger().handlers) == 1


class TestModuleLogLevels:
    def test_module_levels_are_applied(self):
        setup_logging(enable_file=False)

        for module_name, level in MODULE_LOG_LEVELS.items():
            assert logging.getLogger(module_name).level == logging.getLevelName(level)

    def test_noisy_libraries_are_quietened(self):
        assert MODULE_LOG_LEVELS["sqlalchemy.engine"] == "WARNING"
        assert MODULE_LOG_LEVELS["stripe"] == "WARNING"


def test_get_logger_returns_named_logger():
    logger = get_logger("edustack.server.services.courses")

    assert isinstance(logger, logging.Logger)
    assert logger.name == "edustack.server.services.courses"
    assert logger is logging.getLogger("edustack.server.services.courses")
