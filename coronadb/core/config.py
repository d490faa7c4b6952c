"""
CoronaDB Core Configuration

Unified settings, read from environment variables and an optional .env file
"""
from functools import lru_cache
from pathlib import Path

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class DatabaseSettings(BaseSettings):
    """SQLite settings"""

    echo: bool = Field(default=False, description="Echo SQL statements")
    sqlite_timeout: float = Field(default=30.0, gt=0, description="Seconds to wait for a locked database")


class IngestSettings(BaseSettings):
    """Ingestion settings"""

    who_date_offset_days: int = Field(
        default=1,
        description="Days added to WHO report dates to align them with the other sources",
    )
    world_regression_window: int = Field(
        default=28,
        ge=0,
        description="Trailing days checked for regressing world totals",
    )
    drop_future_dates: bool = Field(default=True, description="Skip rows dated after today")
    fill_missing_dates: bool = Field(default=False, description="Insert zero rows for missing days")
    max_gap_days: int = Field(default=100, gt=0, description="Largest gap that may be filled")


class AppSettings(BaseSettings):
    """Application settings"""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        env_nested_delimiter="__",
        case_sensitive=False,
        extra="ignore",
    )

    # Basic information
    app_name: str = Field(default="CoronaDB", description="Application name")
    version: str = Field(default="2.0.0", description="Version")
    app_env: str = Field(default="development", description="Environment")

    # Logging
    log_level: str = Field(default="INFO", description="Log level")
    log_dir: Path = Field(default=Path("logs"), description="Log directory")
    log_to_file: bool = Field(default=True, description="Write log files besides stderr")

    # Sub settings
    database: DatabaseSettings = Field(default_factory=DatabaseSettings)
    ingest: IngestSettings = Field(default_factory=IngestSettings)

    @field_validator("log_dir")
    @classmethod
    def ensure_path_exists(cls, v: Path) -> Path:
        """Make sure the directory exists"""
        v.mkdir(parents=True, exist_ok=True)
        return v


@lru_cache
def get_config() -> AppSettings:
    """
    Get the settings singleton

    lru_cache keeps a single instance per process; call get_config.cache_clear()
    to reload after changing the environment.
    """
    return AppSettings()
