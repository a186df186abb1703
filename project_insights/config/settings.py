"""
Configuration management for the insights engine.
"""

from typing import Optional

from dotenv import load_dotenv
from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class InsightsConfig(BaseSettings):
    """Configuration settings for the insights engine."""

    # Backend API Configuration
    api_base_url: str = Field(default="http://localhost:5000/api", alias="API_BASE_URL")
    api_token: Optional[str] = Field(default=None, alias="API_TOKEN")
    tenant_id: Optional[str] = Field(default=None, alias="TENANT_ID")
    request_timeout: float = Field(default=30.0, alias="REQUEST_TIMEOUT")

    # Reporting Configuration
    default_currency: str = Field(default="INR", alias="DEFAULT_CURRENCY")
    report_max_chars: int = Field(default=2000, alias="REPORT_MAX_CHARS")
    report_store_max_length: int = Field(default=800_000, alias="REPORT_STORE_MAX_LENGTH")
    report_store_fallback_length: int = Field(
        default=500_000, alias="REPORT_STORE_FALLBACK_LENGTH"
    )

    # Application Configuration
    environment: str = Field(default="development", alias="ENVIRONMENT")
    debug: bool = Field(default=False, alias="DEBUG")
    log_level: str = Field(default="INFO", alias="LOG_LEVEL")
    log_format: str = Field(default="standard", alias="LOG_FORMAT")
    log_file: Optional[str] = Field(default=None, alias="LOG_FILE")
    log_console: bool = Field(default=True, alias="LOG_CONSOLE")
    log_max_file_size: int = Field(default=10 * 1024 * 1024, alias="LOG_MAX_FILE_SIZE")
    log_backup_count: int = Field(default=5, alias="LOG_BACKUP_COUNT")

    # Processing Configuration
    max_retries: int = Field(default=3, alias="MAX_RETRIES")
    retry_delay: float = Field(default=1.0, alias="RETRY_DELAY")

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        validate_default=True,
        populate_by_name=True,
    )

    @field_validator("api_base_url")
    @classmethod
    def strip_trailing_slash(cls, v):
        """Endpoints are joined onto the base URL with a leading slash."""
        if not v:
            raise ValueError("API base URL must not be empty")
        return v.rstrip("/")

    @field_validator("default_currency")
    @classmethod
    def validate_currency(cls, v):
        """Ensure the currency is a 3-letter code."""
        code = v.strip().upper()
        if len(code) != 3 or not code.isalpha():
            raise ValueError(f"Invalid currency code: {v}")
        return code

    @field_validator("report_store_fallback_length")
    @classmethod
    def validate_fallback_length(cls, v, info):
        """The fallback cap must be smaller than the primary cap."""
        max_length = info.data.get("report_store_max_length")
        if max_length is not None and v >= max_length:
            raise ValueError(
                "REPORT_STORE_FALLBACK_LENGTH must be less than REPORT_STORE_MAX_LENGTH"
            )
        return v

    @field_validator("log_level")
    @classmethod
    def validate_log_level(cls, v):
        """Ensure log level is valid."""
        valid_levels = ["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"]
        if v.upper() not in valid_levels:
            raise ValueError(f"Log level must be one of: {valid_levels}")
        return v.upper()

    @field_validator("log_format")
    @classmethod
    def validate_log_format(cls, v):
        """Ensure log format is known."""
        if v.lower() not in ("standard", "json"):
            raise ValueError("Log format must be 'standard' or 'json'")
        return v.lower()

    @field_validator("log_file", mode="before")
    @classmethod
    def empty_log_file(cls, v):
        """An empty LOG_FILE disables file logging."""
        return v or None

    @field_validator("environment")
    @classmethod
    def validate_environment(cls, v):
        """Ensure environment is valid."""
        valid_envs = ["development", "testing", "production"]
        if v.lower() not in valid_envs:
            raise ValueError(f"Environment must be one of: {valid_envs}")
        return v.lower()

    def auth_headers(self) -> dict:
        """Request headers carrying the API token, if one is configured."""
        if not self.api_token:
            return {}
        return {"Authorization": f"Bearer {self.api_token}"}


def load_config(env_file: Optional[str] = None) -> InsightsConfig:
    """Load configuration from environment variables and .env file."""
    if env_file:
        load_dotenv(env_file)
    else:
        load_dotenv()

    return InsightsConfig()


# Global configuration instance
_config: Optional[InsightsConfig] = None


def get_config() -> InsightsConfig:
    """Get the global configuration instance."""
    global _config
    if _config is None:
        _config = load_config()
    return _config


def reload_config(env_file: Optional[str] = None) -> InsightsConfig:
    """Reload configuration (useful for testing)."""
    global _config
    _config = load_config(env_file)
    return _config
