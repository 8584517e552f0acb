"""
Tests for observability — logging setup.
"""

import logging
from pathlib import Path

import pytest

from homebin.core.observability.logging_config import _parse_level, setup_logging


@pytest.fixture(autouse=True)
def restore_root_logger():
    root = logging.getLogger()
    handlers, level = list(root.handlers), root.level
    yield
    for handler in root.handlers:
        if handler not in handlers:
            handler.close()
    root.handlers[:] = handlers
    root.setLevel(level)


class TestParseLevel:
    @pytest.mark.parametrize("name,expected", [
        ("DEBUG", logging.DEBUG),
        ("info", logging.INFO),
        ("Error", logging.ERROR),
        ("bogus", logging.WARNING),
        (None, logging.WARNING),
        ("", logging.WARNING),
    ])
    def test_levels(self, name, expected):
        assert _parse_level(name) == expected


class TestSetupLogging:
    def test_console_only(self):
        setup_logging("INFO")
        root = logging.getLogger()
        assert root.level == logging.INFO
        assert len(root.handlers) == 1

    def test_idempotent(self):
        setup_logging("DEBUG")
        setup_logging("DEBUG")
        assert len(logging.getLogger().handlers) == 1

    def test_file_handler(self, tmp_path: Path):
        log_file = tmp_path / "homebin.log"
        setup_logging("WARNING", log_file=str(log_file), log_file_level="DEBUG")
        root = logging.getLogger()
        assert root.level == logging.DEBUG

        logging.getLogger("homebin.test").debug("only in the file")
        for handler in root.handlers:
            handler.flush()
        assert "only in the file" in log_file.read_text()

    def test_file_level_defaults_to_console(self, tmp_path: Path):
        log_file = tmp_path / "homebin.log"
        setup_logging("ERROR", log_file=str(log_file))
        logging.getLogger("homebin.test").warning("dropped")
        for handler in logging.getLogger().handlers:
            handler.flush()
        assert "dropped" not in log_file.read_text()
