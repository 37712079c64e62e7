from __future__ import annotations

from functools import lru_cache

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


DEFAULT_BASE_URL = "https://sendly.live/api"
DEFAULT_TIMEOUT_S = 30.0
DEFAULT_MAX_RETRIES = 3


class Settings(BaseSettings):
    """Client settings read from the environment.

    Loads SENDLY_* variables (and a local .env) with the library defaults.
    """

    api_key: str = Field(default="", alias="SENDLY_API_KEY")
    base_url: str = Field(default=DEFAULT_BASE_URL, alias="SENDLY_BASE_URL")
    # Per-attempt request timeout in seconds
    timeout: float = Field(default=DEFAULT_TIMEOUT_S, alias="SENDLY_TIMEOUT")
    max_retries: int = Field(default=DEFAULT_MAX_RETRIES, alias="SENDLY_MAX_RETRIES")
    log_level: str = Field(default="INFO", alias="SENDLY_LOG_LEVEL")

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
        populate_by_name=True,
    )


@lru_cache(maxsize=1)
def get_settings() -> Settings:
    """Return a cached Settings instance."""
    return Settings()  # type: ignore[call-arg]
