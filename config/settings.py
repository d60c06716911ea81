"""Settings and configuration management."""

from functools import lru_cache
from pathlib import Path

from pydantic import Field, model_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application settings.

    Priority chain: init kwargs > env vars (AUTOMATION_*) > .env file > defaults
    """

    model_config = SettingsConfigDict(
        env_prefix="AUTOMATION_",
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    data_dir: Path = Field(Path.home() / ".remoteflow", description="Directory holding local state")
    database_url: str | None = Field(None, description="SQLAlchemy URL, defaults to a SQLite file in data_dir")

    poll_interval_seconds: float = Field(300.0, gt=0, description="Calendar poll interval")
    lookahead_minutes: int = Field(5, gt=0, description="Upcoming event window for meeting_start rules")
    meeting_end_threshold_seconds: float = Field(
        120.0, gt=0, description="Remaining meeting time at or below which meeting_end rules fire"
    )

    log_level: str = Field("INFO", description="Log level (DEBUG, INFO, WARNING, ERROR)")
    log_format: str = Field("console", description="Log format: 'console' or 'json'")

    @model_validator(mode="after")
    def derive_database_url(self) -> "Settings":
        if not self.database_url:
            self.database_url = f"sqlite:///{self.data_dir.expanduser() / 'automation.db'}"
        return self


@lru_cache
def get_settings() -> Settings:
    """Get cached settings instance."""
    return Settings()
