"""Application settings loaded from environment variables.

Environment Configuration:
    WEATHERPROXY_ENV: Deployment environment (local | test | staging | prod)
    LOG_JSON: Emit JSON logs (default true); false switches to console output
    FORCE_HTTPS: Redirect plain HTTP requests to HTTPS (default false)

Upstream Configuration:
    WEATHER_API_KEY: weatherapi.com credential (also read as WEATHERAPI__KEY)
    WEATHER_API_BASE_URL: Base address of the provider API
    WEATHER_API_TIMEOUT_S: Outbound request timeout in seconds

Note: WEATHER_API_KEY is deliberately not required at startup. A missing
key surfaces on first use, when the API-key stage refuses to send.
"""

from enum import Enum
from functools import lru_cache

from pydantic import AliasChoices, Field, field_validator
from pydantic_settings import BaseSettings

DEFAULT_WEATHER_API_BASE_URL = "https://api.weatherapi.com/v1/"


class Environment(str, Enum):
    """Valid deployment environments."""

    LOCAL = "local"
    TEST = "test"
    STAGING = "staging"
    PROD = "prod"


class Settings(BaseSettings):
    """Application configuration.

    Settings are loaded from environment variables (and `.env` when present).
    """

    app_env: Environment = Field(default=Environment.LOCAL, alias="WEATHERPROXY_ENV")
    log_json: bool = Field(default=True, alias="LOG_JSON")
    force_https: bool = Field(default=False, alias="FORCE_HTTPS")

    # Upstream weather provider
    weather_api_key: str | None = Field(
        default=None,
        validation_alias=AliasChoices("WEATHER_API_KEY", "WEATHERAPI__KEY"),
    )
    weather_api_base_url: str = Field(
        default=DEFAULT_WEATHER_API_BASE_URL, alias="WEATHER_API_BASE_URL"
    )
    weather_api_timeout_s: float = Field(default=10.0, alias="WEATHER_API_TIMEOUT_S")

    model_config = {
        "env_file": ".env",
        "env_file_encoding": "utf-8",
        "extra": "ignore",
    }

    @field_validator("weather_api_key")
    @classmethod
    def blank_key_is_missing(cls, value: str | None) -> str | None:
        """Treat an empty or whitespace-only key as not configured."""
        if value is None or not value.strip():
            return None
        return value.strip()

    @field_validator("weather_api_base_url")
    @classmethod
    def validate_base_url(cls, value: str) -> str:
        """Require an absolute http(s) URL, normalized with a trailing slash."""
        if not value.startswith(("http://", "https://")):
            raise ValueError("WEATHER_API_BASE_URL must be an absolute http(s) URL")
        return value if value.endswith("/") else value + "/"

    @field_validator("weather_api_timeout_s")
    @classmethod
    def validate_timeout(cls, value: float) -> float:
        if value <= 0:
            raise ValueError("WEATHER_API_TIMEOUT_S must be > 0")
        return value

    @property
    def has_weather_api_key(self) -> bool:
        """Whether an upstream credential is configured."""
        return self.weather_api_key is not None


@lru_cache
def get_settings() -> Settings:
    """Get cached application settings.

    Returns:
        Settings instance loaded from environment.

    Raises:
        ValidationError: If settings are invalid.
    """
    return Settings()


def clear_settings_cache() -> None:
    """Clear the settings cache. Useful for testing."""
    get_settings.cache_clear()
