"""Runtime configuration loaded from environment variables and .env files."""

from functools import lru_cache
from typing import Literal

from pydantic_settings import BaseSettings, SettingsConfigDict

DEFAULT_SCHEMA_URI = "https://paam.dev/schema/v0.json"


class Settings(BaseSettings):
    """PAAM Studio settings. Every field can be overridden with a PAAM_ variable."""

    llm_model: str = "claude-sonnet-4-20250514"
    log_level: Literal["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"] = "INFO"
    log_file: str | None = None  # rotating file sink, disabled when unset
    conductor_tick_interval: float = 0.1  # seconds between queue drains
    schema_uri: str = DEFAULT_SCHEMA_URI

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        env_prefix="PAAM_",
        case_sensitive=False,
        extra="ignore",
    )


@lru_cache(maxsize=1)
def get_settings() -> Settings:
    return Settings()
