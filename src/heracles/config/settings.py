"""
Application settings using Pydantic.

Provides environment-based configuration loading with HERACLES_ prefix.
"""

from functools import lru_cache

from pydantic_settings import BaseSettings


class Settings(BaseSettings):
    """Application settings."""

    # Dashboards
    dashboards_path: str = "dashboards.yaml"

    # Server
    listen_host: str = "127.0.0.1"
    listen_port: int = 3000

    # Per-connector request deadline in seconds
    request_timeout: float = 30.0

    # Logging
    log_level: str = "INFO"

    class Config:
        env_file = ".env"
        env_file_encoding = "utf-8"
        env_prefix = "HERACLES_"


@lru_cache
def get_settings() -> Settings:
    """Get cached settings instance."""
    return Settings()
