"""
Configuration management for chat-watcher.

Uses pydantic-settings to load configuration from environment variables
and .env files. Command line flags are passed as init values and win over
the environment.
"""

from functools import lru_cache
from pathlib import Path

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict

from chat_watcher.utils.helpers import normalise_path


class Settings(BaseSettings):
    """Daemon settings loaded from environment."""

    # Watched directory
    watch_dir: Path = Field(default_factory=Path.cwd)
    file_pattern: str = "*.txt"

    # Debounce timing (seconds)
    quiet_period: float = Field(default=5.0, ge=0)
    min_commit_spacing: float = Field(default=5.0, ge=0)
    probe_interval: float = Field(default=10.0, gt=0)
    tick_interval: float = Field(default=1.0, gt=0)

    # Repository naming
    repo_prefix: str = "persistence_of_memory_grok"
    repo_suffix: str = ".fossil"

    # Versioning engine
    fossil_bin: str = "fossil"
    command_timeout: float = Field(default=120.0, gt=0)
    commit_marker: str = "auto: grok chat capture(s)"

    log_level: str = "INFO"

    model_config = SettingsConfigDict(
        env_prefix="CHAT_WATCHER_",
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore"
    )

    def get_watch_dir(self) -> Path:
        """Absolute watched directory, without requiring it to exist."""
        return normalise_path(self.watch_dir)


@lru_cache()
def get_settings() -> Settings:
    """Get cached settings instance."""
    return Settings()
