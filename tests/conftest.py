"""
Test configuration for the DNIe reader test suite.
"""

import logging

import pytest

from dnie_reader.config import get_settings


def pytest_collection_modifyitems(config, items):
    """Add markers based on where tests live."""
    for item in items:
        if "unit" in str(item.fspath):
            item.add_marker(pytest.mark.unit)
        if "mrz" in item.name.lower() or "dg1" in item.name.lower():
            item.add_marker(pytest.mark.mrz)
        if "tlv" in str(item.fspath):
            item.add_marker(pytest.mark.tlv)
        if "qr" in item.name.lower():
            item.add_marker(pytest.mark.qr)


@pytest.fixture(autouse=True)
def isolated_environment(monkeypatch):
    """Keep DNIE_* variables and cached settings from leaking between tests."""
    for name in ("DNIE_CONFIG_FILE", "DNIE_LOG_LEVEL", "DNIE_LOG_FORMAT"):
        monkeypatch.delenv(name, raising=False)
    get_settings.cache_clear()
    yield
    get_settings.cache_clear()


@pytest.fixture
def restore_root_logger():
    """Restore root logger handlers and level after a logging test."""
    root_logger = logging.getLogger()
    handlers = root_logger.handlers[:]
    level = root_logger.level
    yield root_logger
    for handler in root_logger.handlers[:]:
        root_logger.removeHandler(handler)
    for handler in handlers:
        root_logger.addHandler(handler)
    root_logger.setLevel(level)
