"""
Test configuration and fixtures for host-level tests.
"""

import logging
import os

import pytest

from host.config import ENV_PREFIX


@pytest.fixture
def clean_relay_env(monkeypatch, tmp_path):
    """
    Runs the test from an empty directory (no .env) with every RELAY_
    variable removed from the environment.
    """
    for key in list(os.environ):
        if key.upper().startswith(ENV_PREFIX):
            monkeypatch.delenv(key, raising=False)
    monkeypatch.chdir(tmp_path)
    return tmp_path


@pytest.fixture
def restore_root_logger():
    """Puts the root logger's handlers and level back after a test reconfigures it."""
    root_logger = logging.getLogger()
    handlers = root_logger.handlers[:]
    level = root_logger.level
    yield root_logger
    for handler in root_logger.handlers[:]:
        if handler not in handlers:
            handler.close()
        root_logger.removeHandler(handler)
    for handler in handlers:
        root_logger.addHandler(handler)
    root_logger.setLevel(level)
