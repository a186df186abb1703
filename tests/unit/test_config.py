"""
Unit tests for configuration management.
"""

import os
from unittest.mock import patch

import pytest
from pydantic import ValidationError

from project_insights.config.settings import (
    InsightsConfig,
    get_config,
    load_config,
    reload_config,
)

CONFIG_KEYS = (
    "API_BASE_URL",
    "API_TOKEN",
    "TENANT_ID",
    "REQUEST_TIMEOUT",
    "DEFAULT_CURRENCY",
    "REPORT_MAX_CHARS",
    "REPORT_STORE_MAX_LENGTH",
    "REPORT_STORE_FALLBACK_LENGTH",
    "ENVIRONMENT",
    "DEBUG",
    "LOG_LEVEL",
    "MAX_RETRIES",
    "RETRY_DELAY",
)


@pytest.fixture
def clean_env(monkeypatch):
    """Environment with none of the configuration variables set."""
    for key in CONFIG_KEYS:
        monkeypatch.delenv(key, raising=False)


class TestInsightsConfig:
    """Test cases for InsightsConfig."""

    def test_config_with_valid_env_vars(self, test_config):
        """Test configuration loads correctly with valid environment variables."""
        assert test_config.api_base_url == "https://backend.test/api"
        assert test_config.api_token == "test-token"
        assert test_config.tenant_id == "tenant-1"
        assert test_config.default_currency == "USD"
        assert test_config.environment == "testing"
        assert test_config.debug is False
        assert test_config.log_level == "WARNING"
        assert test_config.max_retries == 2
        assert test_config.retry_delay == 0

    def test_default_values(self, clean_env):
        """Test default configuration values."""
        config = InsightsConfig(_env_file=None)

        assert config.api_base_url == "http://localhost:5000/api"
        assert config.api_token is None
        assert config.tenant_id is None
        assert config.request_timeout == 30.0
        assert config.default_currency == "INR"
        assert config.report_max_chars == 2000
        assert config.report_store_max_length == 800_000
        assert config.report_store_fallback_length == 500_000
        assert config.environment == "development"
        assert config.max_retries == 3
        assert config.retry_delay == 1.0

    def test_trailing_slash_is_stripped(self, clean_env):
        config = InsightsConfig(_env_file=None, API_BASE_URL="https://api.test/v1/")

        assert config.api_base_url == "https://api.test/v1"

    def test_currency_is_upper_cased(self, clean_env):
        config = InsightsConfig(_env_file=None, DEFAULT_CURRENCY=" usd ")

        assert config.default_currency == "USD"

    def test_invalid_currency(self, clean_env):
        """Test that invalid currency codes raise validation error."""
        with pytest.raises(ValidationError) as exc_info:
            InsightsConfig(_env_file=None, DEFAULT_CURRENCY="DOLLARS")

        assert "Invalid currency code" in str(exc_info.value)

    def test_invalid_log_level(self, clean_env):
        """Test that invalid log level raises validation error."""
        with pytest.raises(ValidationError) as exc_info:
            InsightsConfig(_env_file=None, LOG_LEVEL="INVALID")

        assert "Log level must be one of" in str(exc_info.value)

    def test_log_level_case_insensitive(self, clean_env):
        """Test that log level validation is case insensitive."""
        config = InsightsConfig(_env_file=None, LOG_LEVEL="debug")

        assert config.log_level == "DEBUG"

    def test_invalid_environment(self, clean_env):
        """Test that invalid environment raises validation error."""
        with pytest.raises(ValidationError) as exc_info:
            InsightsConfig(_env_file=None, ENVIRONMENT="staging")

        assert "Environment must be one of" in str(exc_info.value)

    def test_fallback_length_must_be_smaller(self, clean_env):
        with pytest.raises(ValidationError) as exc_info:
            InsightsConfig(
                _env_file=None,
                REPORT_STORE_MAX_LENGTH=1000,
                REPORT_STORE_FALLBACK_LENGTH=1000,
            )

        assert "REPORT_STORE_FALLBACK_LENGTH" in str(exc_info.value)

    def test_empty_base_url(self, clean_env):
        with pytest.raises(ValidationError):
            InsightsConfig(_env_file=None, API_BASE_URL="")

    def test_auth_headers(self, test_config):
        assert test_config.auth_headers() == {"Authorization": "Bearer test-token"}

    def test_auth_headers_without_token(self, clean_env):
        assert InsightsConfig(_env_file=None).auth_headers() == {}


class TestConfigFunctions:
    """Test configuration loading functions."""

    def test_load_config_reads_env_file(self, clean_env, tmp_path):
        """Test loading configuration from a specific .env file."""
        env_file = tmp_path / ".env"
        env_file.write_text("TENANT_ID=from-file\nDEFAULT_CURRENCY=EUR\n")

        try:
            config = load_config(str(env_file))
        finally:
            os.environ.pop("TENANT_ID", None)
            os.environ.pop("DEFAULT_CURRENCY", None)

        assert config.tenant_id == "from-file"
        assert config.default_currency == "EUR"

    def test_get_config_singleton(self, mock_env):
        """Test that get_config returns the same instance."""
        config1 = get_config()
        config2 = get_config()

        assert config1 is config2

    def test_reload_config_replaces_instance(self, mock_env):
        """Test that reload_config creates a new instance."""
        config1 = get_config()
        config2 = reload_config()

        assert config1 is not config2
        assert get_config() is config2

    def test_get_config_uses_environment(self, mock_env):
        with patch.dict(os.environ, {"TENANT_ID": "tenant-2"}):
            config = reload_config()

        assert config.tenant_id == "tenant-2"
