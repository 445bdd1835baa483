"""Pytest fixtures shared across the suite."""

import logging

import pytest


@pytest.fixture(autouse=True)
def restore_root_logging():
    """Undo handlers installed by setup_logging so they do not outlive captured streams."""
    root = logging.getLogger()
    handlers = list(root.handlers)
    level = root.level
    yield
    for handler in root.handlers:
        if handler not in handlers:
            handler.close()
    root.handlers = handlers
    root.setLevel(level)
