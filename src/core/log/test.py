"""Tests for core logging module."""

import logging
from io import StringIO

import pytest

from .lib import get_logger, setup_logging


class TestLogging:
    """Test core logging API."""

    @pytest.mark.unit
    def test_get_logger(self) -> None:
        """Named loggers nest under the package logger."""
        logger = get_logger("render")
        assert logger.name == "jsonform.render"
        assert isinstance(logger, logging.Logger)

    @pytest.mark.unit
    def test_get_logger_default_name(self) -> None:
        """Verify default logger name."""
        logger = get_logger()
        assert logger.name == "jsonform"

    @pytest.mark.unit
    def test_child_logger_propagates_to_package_logger(self) -> None:
        """Child loggers share the package logger as parent."""
        assert get_logger("form").parent is get_logger()

    @pytest.mark.unit
    def test_setup_logging_accepts_level_name(self) -> None:
        """String level names are accepted."""
        stream = StringIO()
        setup_logging(level="debug", stream=stream)
        logger = get_logger("test_setup")
        logger.debug("test message")

        # basicConfig is a no-op if logging was already configured,
        # so only the API contract is checked here.
        assert logger.level == logging.NOTSET

    @pytest.mark.unit
    def test_setup_logging_reads_environment(self, monkeypatch) -> None:
        """Level falls back to FORM_LOG_LEVEL."""
        monkeypatch.setenv("FORM_LOG_LEVEL", "WARNING")
        setup_logging(stream=StringIO())
