"""Unit tests configuration file."""

import logging

import pytest


def pytest_configure(config):
    """Disable verbose output when running tests."""
    terminal = config.pluginmanager.getplugin("terminal")
    if terminal:
        terminal.TerminalReporter.showfspath = False


@pytest.fixture(autouse=True)
def restore_package_logger():
    """Undo the handler and level changes the CLI makes to the package logger."""
    log = logging.getLogger("refgen")
    handlers, level = list(log.handlers), log.level
    yield
    log.handlers[:] = handlers
    log.setLevel(level)
