"""Configuration management for dashboard-feeds."""

import os
from pathlib import Path

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


def default_config_path() -> Path:
    """Location of the feed list: $XDG_CONFIG_HOME/dashboard-feeds/config.toml."""
    base = os.environ.get("XDG_CONFIG_HOME") or Path.home() / ".config"
    return Path(base) / "dashboard-feeds" / "config.toml"


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    model_config = SettingsConfigDict(env_file=".env", env_prefix="DF_", extra="ignore")

    # Feed list
    config_path: Path = Field(default_factory=default_config_path)
    default_limit: int = Field(default=20, ge=0)

    # HTTP
    http_timeout_seconds: float = Field(default=10.0, gt=0)

    # Response cache (disabled unless a Redis URL is given)
    redis_url: str | None = None
    feed_ttl_seconds: int = 900  # 15 minutes
    feed_ttl_splay_max: int = 300  # up to 5 minutes randomized

    # Whole-run deadline; None means only the per-request timeout applies
    run_timeout_seconds: float | None = Field(default=None, gt=0)

    # Logging
    log_level: str = Field(default="WARNING")
    env: str = Field(default="dev", pattern="^(dev|prod)$")


_settings: Settings | None = None


def get_settings() -> Settings:
    """Get cached settings instance (singleton pattern)."""
    global _settings
    if _settings is None:
        _settings = Settings()
    return _settings
