"""
Application settings.

Values come from environment variables prefixed with ``GARDEN_`` (or a local
``.env`` file), e.g. ``GARDEN_ENDPOINT=https://script.google.com/.../exec``.
"""

from __future__ import annotations

from functools import lru_cache
from pathlib import Path

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Runtime configuration for fetching and building the garden."""

    model_config = SettingsConfigDict(
        env_prefix="GARDEN_",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    app_name: str = "garden-walk"
    app_env: str = "development"
    debug: bool = False

    # Acquisition
    endpoint: str = Field(default="", description="Export web app /exec URL")
    bot: str = "winston"
    limit: int = 40
    route_mode: str = Field(default="r", description="'r' (routed export) or 'direct'")
    transport: str = Field(default="direct", description="'direct' or 'script' (JSONP)")
    cache_enabled: bool = True
    timeout: float = 12.0

    # Storage and rendering
    data_dir: Path = Path("data")
    columns: int = 10
    view_box: str = "0 0 1600 900"
    show_labels: bool = False

    api_port: int = 8000


@lru_cache
def get_settings() -> Settings:
    """Return the process-wide settings instance."""
    return Settings()
