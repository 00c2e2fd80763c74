"""Typed settings loader for the weather resolver."""

from __future__ import annotations

from pathlib import Path
from typing import Any, Literal

from pydantic import AnyUrl, Field, ValidationError, field_validator, model_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

from .exceptions import ConfigError


class Settings(BaseSettings):
    """Application settings loaded from environment variables and `.env`."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    app_env: Literal["dev", "staging", "prod"] = Field(default="dev", alias="APP_ENV")

    weather_api_key: str | None = Field(default=None, alias="WEATHER_API_KEY", repr=False)
    weather_api_base_url: AnyUrl = Field(
        default=AnyUrl("https://api.weatherapi.com/v1"),
        alias="WEATHER_API_BASE_URL",
    )
    weather_timeout_seconds: float = Field(default=10.0, alias="WEATHER_TIMEOUT_SECONDS")

    cache_backend: Literal["memory", "redis"] = Field(default="memory", alias="CACHE_BACKEND")
    redis_url: str | None = Field(default=None, alias="REDIS_URL", repr=False)
    record_store_dir: Path = Field(
        default=Path("./data/weather_records"),
        alias="RECORD_STORE_DIR",
    )

    geocoder_base_url: AnyUrl = Field(
        default=AnyUrl("https://nominatim.openstreetmap.org"),
        alias="GEOCODER_BASE_URL",
    )
    geocoder_user_agent: str = Field(
        default="weather-resolver/0.1 (contact: ops@example.com)",
        alias="GEOCODER_USER_AGENT",
    )
    geocoder_country_codes: str = Field(default="us,ca", alias="GEOCODER_COUNTRY_CODES")

    log_level: Literal["DEBUG", "INFO", "WARNING", "ERROR"] = Field(
        default="INFO", alias="LOG_LEVEL"
    )

    @field_validator("weather_api_key", "redis_url", mode="before")
    @classmethod
    def empty_string_to_none(cls, value: Any) -> Any:
        """Treat empty env-string values as unset."""
        if isinstance(value, str) and value.strip() == "":
            return None
        return value

    @field_validator("log_level", mode="before")
    @classmethod
    def upper_log_level(cls, value: Any) -> Any:
        if isinstance(value, str):
            return value.strip().upper()
        return value

    @model_validator(mode="after")
    def validate_backends(self) -> Settings:
        """Validate cross-field constraints."""
        if self.weather_timeout_seconds <= 0:
            raise ValueError("WEATHER_TIMEOUT_SECONDS must be > 0.")
        if self.cache_backend == "redis" and not self.redis_url:
            raise ValueError("REDIS_URL is required when CACHE_BACKEND='redis'.")
        if not self.geocoder_user_agent.strip():
            raise ValueError("GEOCODER_USER_AGENT must not be empty.")
        return self

    @property
    def weather_configured(self) -> bool:
        return bool(self.weather_api_key)

    def safe_summary(self) -> dict[str, Any]:
        """Return config summary safe for logging (no credentials)."""
        return {
            "app_env": self.app_env,
            "weather_api_base_url": str(self.weather_api_base_url),
            "weather_api_key_configured": self.weather_configured,
            "weather_timeout_seconds": self.weather_timeout_seconds,
            "cache_backend": self.cache_backend,
            "record_store_dir": str(self.record_store_dir),
            "geocoder_base_url": str(self.geocoder_base_url),
            "log_level": self.log_level,
        }


def load_settings() -> Settings:
    """Load and validate settings, raising ConfigError on failure."""
    try:
        settings = Settings()
    except ValidationError as exc:
        raise ConfigError(f"Invalid configuration: {exc}") from exc
    except OSError as exc:
        raise ConfigError(f"Failed reading environment/.env: {exc}") from exc

    try:
        settings.record_store_dir.mkdir(parents=True, exist_ok=True)
    except OSError as exc:
        raise ConfigError(
            f"Cannot create record store directory {settings.record_store_dir}: {exc}"
        ) from exc
    return settings
