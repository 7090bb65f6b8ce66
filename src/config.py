# ABOUTME: Environment-driven settings for the weather dashboard.
# ABOUTME: pydantic-settings reads WEATHER_* variables and .env into a validated Settings model.

import logging
from pathlib import Path

from pydantic import Field, ValidationError
from pydantic_settings import BaseSettings, SettingsConfigDict

from src.errors import ConfigError


class Settings(BaseSettings):
    """Runtime configuration, one field per WEATHER_* environment variable."""

    model_config = SettingsConfigDict(
        env_prefix="WEATHER_",
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    language: str = "zh"
    search_count: int = Field(default=5, ge=1, le=100)
    hourly_window: int = Field(default=12, ge=10, le=24)
    debounce_seconds: float = Field(default=0.5, ge=0)
    default_city: str = "北京"
    store_path: Path = Path(".weather_dashboard.json")
    http_timeout: float = Field(default=10.0, gt=0)
    mock_fallback: bool = False
    log_level: str = "INFO"


def load_settings(env_file: str | Path | None = ".env") -> Settings:
    """Build Settings from the environment and an optional .env file."""
    try:
        return Settings(_env_file=env_file)
    except ValidationError as e:
        raise ConfigError(f"Invalid weather dashboard configuration: {e}") from e


def configure_logging(level: str = "INFO") -> None:
    """Configure root logging once for the web entry point."""
    logging.basicConfig(
        level=getattr(logging, level.upper(), logging.INFO),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )
