"""
Web client configuration using Pydantic Settings.

All settings can be overridden via environment variables with the prefix
"FREIGHT_WEB_" (e.g., FREIGHT_WEB_API_BASE_URL).
"""

from pydantic_settings import BaseSettings, SettingsConfigDict
from pydantic import Field, field_validator
from functools import lru_cache


class WebSettings(BaseSettings):
    """Settings for the server-rendered web client."""

    app_name: str = Field(
        default="Freight Logistics Web",
        description="Application name"
    )
    environment: str = Field(
        default="development",
        description="Environment (development, staging, production)"
    )
    host: str = Field(default="0.0.0.0", description="Server host")
    port: int = Field(default=3000, ge=1, le=65535, description="Server port")

    # =========================================================================
    # Backend API
    # =========================================================================

    api_base_url: str = Field(
        default="http://localhost:8000/api",
        description="Base URL of the REST API, including the /api prefix"
    )
    api_timeout_seconds: float = Field(
        default=10.0,
        gt=0,
        description="Timeout for each backend request"
    )
    api_throttle_seconds: float = Field(
        default=2.0,
        ge=0,
        description="Window in which identical GETs reuse the previous response (0 disables)"
    )

    # =========================================================================
    # Session
    # =========================================================================

    auth_cookie_name: str = Field(
        default="token",
        description="Cookie holding the API token on the web client"
    )
    auth_cookie_max_age_seconds: int = Field(
        default=7 * 24 * 60 * 60,
        gt=0,
        description="Lifetime of the auth cookie"
    )

    # =========================================================================
    # Logging
    # =========================================================================

    log_level: str = Field(default="INFO", description="Logging level")
    log_format: str = Field(default="json", description="Log format (json, text)")

    @field_validator("api_base_url")
    @classmethod
    def strip_trailing_slash(cls, v: str) -> str:
        return v.rstrip("/")

    @field_validator("log_format")
    @classmethod
    def validate_log_format(cls, v: str) -> str:
        valid = {"json", "text"}
        v = v.lower()
        if v not in valid:
            raise ValueError(f"Invalid log format: {v}. Must be one of {valid}")
        return v

    @property
    def is_production(self) -> bool:
        return self.environment.lower() == "production"

    model_config = SettingsConfigDict(
        env_prefix="FREIGHT_WEB_",
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore"
    )


@lru_cache()
def get_settings() -> WebSettings:
    """Get cached web client settings."""
    return WebSettings()


def clear_settings_cache():
    """Clear settings cache (useful for testing)."""
    get_settings.cache_clear()
