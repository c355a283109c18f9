"""Application configuration using Pydantic settings."""

from functools import lru_cache

from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
    )

    # Database
    database_url: str = "postgresql+asyncpg://localhost:5432/resqlink"
    db_connect_timeout_seconds: float = 10.0
    db_command_timeout_seconds: float = 15.0

    # API settings
    api_prefix: str = "/api"
    cors_origins: list[str] = [
        "http://localhost:3000",
        "http://localhost:5173",
        "http://localhost:5174",
    ]
    rate_limit: str = "100/15minutes"
    rate_limit_enabled: bool = True

    # Feed and live map
    feed_default_limit: int = 20
    feed_max_limit: int = 100
    live_default_radius_meters: int = 50_000
    live_max_results: int = 100

    # Reverse geocoding (best effort)
    geocoding_enabled: bool = True
    geocoding_base_url: str = "https://nominatim.openstreetmap.org"
    geocoding_user_agent: str = "ResQLink Emergency App"
    geocoding_timeout_seconds: float = 5.0
    geocoding_max_retries: int = 2

    # Environment
    log_level: str = "INFO"
    debug: bool = False


@lru_cache
def get_settings() -> Settings:
    """Get cached settings instance."""
    return Settings()
