"""Load test configuration settings."""

from __future__ import annotations

from pathlib import Path
from typing import Optional

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class LoadTestSettings(BaseSettings):
    """Settings loaded from environment variables, a .env file or a YAML file."""

    model_config = SettingsConfigDict(
        env_prefix="LOADTEST_",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    # Platform API
    api_url: str = "http://localhost:8009"
    request_timeout: float = 60.0  # seconds

    # External loader
    loader_command: list[str] = Field(
        default_factory=lambda: ["node", "./node_modules/tidepool-uploader/lib/insulet/cli/ibf_loader.js"]
    )
    source_file: Path = Field(default=Path("./data/sample.ibf"))
    loader_timeout: Optional[float] = None  # seconds, None waits for exit

    # Generated accounts
    email_suffix: str = "+skipit@tidepool.ninja"
    username_length: int = Field(default=6, ge=1)
    password_length: int = Field(default=8, ge=1)
    profile_birthday: str = "1900-01-01"
    profile_diagnosis_date: str = "1900-01-01"

    # Run shape
    default_concurrency: int = Field(default=5, ge=1)
    default_cycles: int = Field(default=1, ge=1)

    # Report
    report_dir: Path = Field(default=Path("."))
    report_prefix: str = "load_test_"
    report_suffix: str = ".json"

    # Logging
    log_level: str = "INFO"
    log_format: str = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"


# Global settings instance
_settings: Optional[LoadTestSettings] = None


def get_settings() -> LoadTestSettings:
    """Get the global settings instance."""
    global _settings
    if _settings is None:
        _settings = LoadTestSettings()
    return _settings


def init_settings(**kwargs) -> LoadTestSettings:
    """Initialize settings with custom values."""
    global _settings
    _settings = LoadTestSettings(**kwargs)
    return _settings
