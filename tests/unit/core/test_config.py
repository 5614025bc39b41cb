
import os
from unittest.mock import patch

import pytest
from pydantic import ValidationError

from predicated.core.config import Settings, get_settings


def test_settings_defaults():
    """Test that settings load with correct defaults."""
    get_settings.cache_clear()

    with patch.dict(os.environ, {}, clear=True):
        settings = Settings(_env_file=None)

    assert settings.environment == "development"
    assert settings.log_level == "INFO"
    assert settings.log_format == "console"
    assert settings.log_parse_failures is True
    assert settings.max_nesting_depth == 64
    assert settings.is_development is True
    assert settings.is_production is False
    assert settings.is_testing is False


def test_settings_env_override():
    """Test that environment variables override defaults."""
    get_settings.cache_clear()

    with patch.dict(os.environ, {
        "PREDICATED_ENVIRONMENT": "production",
        "PREDICATED_LOG_FORMAT": "json",
        "PREDICATED_LOG_PARSE_FAILURES": "false",
        "PREDICATED_MAX_NESTING_DEPTH": "8",
    }):
        settings = Settings(_env_file=None)

        assert settings.environment == "production"
        assert settings.log_format == "json"
        assert settings.log_parse_failures is False
        assert settings.max_nesting_depth == 8
        assert settings.is_production is True
        assert settings.is_development is False


def test_log_level_case_insensitive():
    """Test that log levels are normalized to upper case."""
    settings = Settings(_env_file=None, log_level="debug")
    assert settings.log_level == "DEBUG"


def test_invalid_log_level():
    """Test that unknown log levels are rejected."""
    with pytest.raises(ValidationError):
        Settings(_env_file=None, log_level="verbose")


def test_max_nesting_depth_validation():
    """Test that the nesting depth must allow at least one group."""
    with pytest.raises(ValidationError, match="max_nesting_depth must be at least 1"):
        Settings(_env_file=None, max_nesting_depth=0)


def test_get_settings_cached():
    """Test that get_settings returns the same instance until cleared."""
    get_settings.cache_clear()
    first = get_settings()
    assert get_settings() is first

    get_settings.cache_clear()
    assert get_settings() is not first
