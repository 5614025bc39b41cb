"""Pytest configuration for all tests."""

import pytest
import structlog

from predicated.core.config import get_settings


@pytest.fixture(autouse=True)
def testing_settings(monkeypatch):
    """Run every test against fresh settings in the testing environment."""
    monkeypatch.setenv("PREDICATED_ENVIRONMENT", "testing")
    get_settings.cache_clear()
    yield get_settings()
    get_settings.cache_clear()


@pytest.fixture
def reset_logging():
    """Restore the default structlog configuration after a test."""
    yield
    structlog.reset_defaults()
