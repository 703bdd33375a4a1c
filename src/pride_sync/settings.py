"""Client configuration loaded from the environment."""

from __future__ import annotations

from functools import cache
from pathlib import Path

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict

from pride_sync.client.session import DEFAULT_BASE_URL
from pride_sync.game.queue import DEFAULT_ORDER_DELAY_SECONDS
from pride_sync.game.scheduler import DEFAULT_REFRESH_INTERVAL_SECONDS


class ClientSettings(BaseSettings):
    """Centralized settings for the synchronization client."""

    model_config = SettingsConfigDict(
        env_prefix="NEPTUNES_PRIDE_",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    username: str
    password: str
    base_url: str = DEFAULT_BASE_URL
    refresh_interval_seconds: float = Field(
        default=DEFAULT_REFRESH_INTERVAL_SECONDS, gt=0
    )
    order_delay_seconds: float = Field(default=DEFAULT_ORDER_DELAY_SECONDS, ge=0)
    cache_dir: Path = Path("cache/games")
    debug_dump_dir: Path | None = None
    log_level: str = "INFO"


@cache
def get_settings() -> ClientSettings:
    """Return the cached settings instance."""

    return ClientSettings()


__all__ = ["ClientSettings", "get_settings"]
