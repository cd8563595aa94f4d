"""Environment and settings (Pydantic Settings)."""

from pathlib import Path
from typing import Literal

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict

from braindump.utils.llm.constants import DEFAULT_CACHE_MAX_SIZE, DEFAULT_CACHE_TTL_SECONDS

# Default data directory: ~/.braindump/
_data_dir = Path.home() / ".braindump"

LogLevel = Literal["DEBUG", "INFO", "WARNING", "ERROR"]


class Settings(BaseSettings):
    """Application settings loaded from environment and .env.

    AI backend settings live in ~/.braindump/config.toml and are read by
    braindump.utils.llm.config; this covers process-wide concerns.
    """

    model_config = SettingsConfigDict(
        env_prefix="BRAINDUMP_",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    data_dir: Path = _data_dir
    config_path: Path = _data_dir / "config.toml"

    # Extraction cache
    cache_ttl_seconds: float = Field(default=DEFAULT_CACHE_TTL_SECONDS, ge=0)
    cache_max_size: int = Field(default=DEFAULT_CACHE_MAX_SIZE, ge=0)

    # Logging
    log_level: LogLevel = "INFO"
    console_log_level: LogLevel = "WARNING"
    log_file: Path = _data_dir / "braindump.log"


def get_settings() -> Settings:
    """Return application settings (singleton-like)."""
    return Settings()
