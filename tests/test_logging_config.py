# -*- coding: utf-8 -*-
"""Tests for logging setup."""
import logging

import pytest
from rich.console import Console
from rich.logging import RichHandler

from scheduler_server.logging_config import configure_logging


@pytest.fixture(autouse=True)
def restore_root_logger():
    root = logging.getLogger()
    handlers, level = list(root.handlers), root.level
    yield
    root.handlers = handlers
    root.setLevel(level)


def test_configure_logging_installs_single_rich_handler():
    configure_logging("debug")
    configure_logging("WARNING")

    root = logging.getLogger()
    assert root.level == logging.WARNING
    assert len(root.handlers) == 1
    assert isinstance(root.handlers[0], RichHandler)


def test_configure_logging_uses_given_console():
    console = Console(record=True, width=120)
    configure_logging("INFO", console=console)

    logging.getLogger("scheduler_server.test").info("opened data directory")

    assert "opened data directory" in console.export_text()


def test_invalid_level_is_rejected():
    with pytest.raises(ValueError, match="Invalid log level"):
        configure_logging("CHATTY")
