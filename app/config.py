"""
Application configuration using Pydantic settings.
"""
from typing import Literal

from pydantic_settings import BaseSettings
from pydantic import Field


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    # Weather API Configuration
    weather_api_base_url: str = Field(
        default="https://api.open-meteo.com",
        description="Base URL for the Open-Meteo weather API"
    )
    weather_timeout_seconds: float = Field(
        default=15.0,
        description="Timeout in seconds for a single weather request"
    )

    # Retry Configuration
    weather_max_attempts: int = Field(
        default=1,
        ge=1,
        description="Total attempts per weather request (1 = no retry)"
    )
    retry_backoff_multiplier: int = Field(
        default=1,
        description="Multiplier for exponential backoff"
    )
    retry_min_wait: int = Field(
        default=1,
        description="Minimum wait time in seconds between retries"
    )
    retry_max_wait: int = Field(
        default=5,
        description="Maximum wait time in seconds between retries"
    )

    # Persistent Store
    store_backend: Literal["memory", "supabase"] = Field(
        default="memory",
        description="Record store backend: in-process memory or hosted Supabase"
    )
    supabase_url: str = Field(
        default="",
        description="Supabase project URL"
    )
    supabase_key: str = Field(
        default="",
        description="Supabase API key"
    )
    supabase_image_bucket: str = Field(
        default="plant_images",
        description="Storage bucket for uploaded plant images"
    )

    # Identity Provider
    static_tokens: dict[str, dict] = Field(
        default_factory=dict,
        description=(
            "Bearer token to user mapping for the static identity provider, "
            'e.g. {"dev-token": {"id": "user-123", "email": "demo@example.com"}}'
        )
    )

    # Health series
    default_range_days: int = Field(
        default=7,
        ge=0,
        description="Days covered by a health or weather range when none is given"
    )

    # Logging
    log_level: str = Field(
        default="INFO",
        description="Logging level (DEBUG, INFO, WARNING, ERROR)"
    )

    # CORS Configuration
    cors_origins: list[str] = Field(
        default=["*"],
        description="Allowed CORS origins (use specific origins in production)"
    )

    # Rate Limiting
    rate_limit_requests: int = Field(
        default=100,
        description="Maximum requests per minute per client"
    )

    # Application Settings
    app_name: str = Field(
        default="Plant Tracker API",
        description="Application name"
    )
    app_version: str = Field(
        default="1.0.0",
        description="Application version"
    )
    debug: bool = Field(
        default=False,
        description="Debug mode"
    )

    class Config:
        env_file = ".env"
        case_sensitive = False


# Global settings instance
settings = Settings()
