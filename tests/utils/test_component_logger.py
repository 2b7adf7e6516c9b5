"""
Tests for the component logger.

Tests cover:
- Logger creation by component name and by explicit name/color
- Message formatting with component prefixes
- Color lookup from the logging configuration
"""

import logging

import pytest
from rich.logging import RichHandler

from provider_model.utils.logger import ComponentLogger, get_logger


class TestComponentLogger:
    """Test ComponentLogger functionality."""

    def test_logger_creation(self):
        """Test that a component logger wraps the stdlib logger of the same name."""
        logger = get_logger("test_component")

        assert isinstance(logger, ComponentLogger)
        assert logger.component_name == "test_component"
        assert logger.name == "test_component"
        assert logger.color == "white"

    def test_logger_creation_with_custom_params(self):
        """Test custom logger creation with explicit parameters."""
        logger = get_logger(name="custom_logger", color="blue")

        assert logger.component_name == "custom_logger"
        assert logger.color == "blue"

    def test_component_name_is_required(self):
        with pytest.raises(ValueError, match="Component name is required"):
            get_logger()

    def test_rich_handler_installed_once(self):
        """Test that repeated get_logger calls do not duplicate the root handler."""
        get_logger("first")
        get_logger("second")

        handlers = [h for h in logging.getLogger().handlers if isinstance(h, RichHandler)]
        assert len(handlers) == 1

    def test_messages_carry_component_prefix(self, caplog):
        """Test that messages are prefixed with the component name."""
        logger = get_logger("registry_test")
        logger.setLevel(logging.DEBUG)

        with caplog.at_level(logging.DEBUG, logger="registry_test"):
            logger.info("Loaded providers")
            logger.debug("Detail")
            logger.warning("Careful")
            logger.error("Failed")
            logger.success("Done")
            logger.key_info("Key")
            logger.timing("Took 1s")

        records = [record for record in caplog.records if record.name == "registry_test"]
        messages = [record.getMessage() for record in records]
        assert len(messages) == 7
        assert all("Registry_Test: " in message for message in messages)
        assert [record.levelno for record in records][:4] == [
            logging.INFO,
            logging.DEBUG,
            logging.WARNING,
            logging.ERROR,
        ]

    def test_color_read_from_configuration(self, tmp_path, monkeypatch):
        """Test that component colors come from logging.logging_colors."""
        config_file = tmp_path / "config.yml"
        config_file.write_text("logging:\n  logging_colors:\n    colored: magenta\n")
        monkeypatch.setenv("CONFIG_FILE", str(config_file))

        logger = get_logger("colored")

        assert logger.color == "magenta"
        assert logger._format_message("hi", logger.color) == "[magenta]Colored: hi[/magenta]"

    def test_level_delegation(self):
        logger = get_logger(name="level_test")
        logger.setLevel(logging.WARNING)

        assert logger.level == logging.WARNING
        assert not logger.isEnabledFor(logging.INFO)
        assert logger.isEnabledFor(logging.ERROR)
