"""
Tests for logging setup.
"""

import io
import logging

import pytest
from rich.console import Console
from rich.logging import RichHandler

from docx_cascade.utils.logger import PACKAGE_LOGGER, configure_logging, get_logger


@pytest.fixture
def package_logger():
    """Restore the package logger after each test."""
    logger = logging.getLogger(PACKAGE_LOGGER)
    yield logger
    logger.handlers.clear()
    logger.setLevel(logging.NOTSET)


@pytest.mark.unit
class TestConfigureLogging:
    """Test cases for configure_logging."""

    def test_rich_handler(self, package_logger):
        """Test the default setup installs one rich handler."""
        logger = configure_logging("debug")

        assert logger is package_logger
        assert logger.level == logging.DEBUG
        assert len(logger.handlers) == 1
        assert isinstance(logger.handlers[0], RichHandler)

    def test_plain_handler(self, package_logger):
        """Test rich output can be switched off."""
        logger = configure_logging("WARNING", rich_output=False)

        handler = logger.handlers[0]
        assert not isinstance(handler, RichHandler)
        assert isinstance(handler, logging.StreamHandler)
        assert handler.level == logging.WARNING

    def test_reconfigure_replaces_handlers(self, package_logger):
        """Test calling twice does not stack handlers."""
        configure_logging()
        configure_logging()
        assert len(package_logger.handlers) == 1

    def test_records_reach_console(self, package_logger):
        """Test module loggers write through the configured console."""
        buffer = io.StringIO()
        configure_logging("INFO", console=Console(file=buffer, width=200))
        get_logger("docx_cascade.engine.converter").info("Converted document")

        assert "Converted document" in buffer.getvalue()

    def test_invalid_level(self, package_logger):
        """Test unknown levels are rejected."""
        with pytest.raises(ValueError):
            configure_logging("LOUD")


@pytest.mark.unit
class TestGetLogger:
    """Test cases for get_logger."""

    def test_named_logger(self):
        """Test loggers are looked up by name."""
        assert get_logger("docx_cascade.parser").name == "docx_cascade.parser"

    @pytest.mark.parametrize("name", ["", None])
    def test_invalid_name(self, name):
        """Test empty names are rejected."""
        with pytest.raises(ValueError):
            get_logger(name)
