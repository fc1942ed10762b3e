from __future__ import annotations

from functools import lru_cache
from pathlib import Path

from pydantic_settings import BaseSettings, SettingsConfigDict

from .constants import DEFAULT_CONFIG_PATH, ENV_PREFIX


class Settings(BaseSettings):
    """Application runtime settings sourced from environment variables."""

    model_config = SettingsConfigDict(env_prefix=ENV_PREFIX, env_file=".env", extra="ignore")

    config_path: Path = DEFAULT_CONFIG_PATH
    env: str | None = None
    service_url: str | None = None
    enable_local_api: bool | None = None


@lru_cache
def get_settings() -> Settings:
    """Return cached settings instance."""

    return Settings()


__all__ = ["Settings", "get_settings"]
