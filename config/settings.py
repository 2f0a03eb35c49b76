"""
Configuration settings for the model asset manager.
"""

from pathlib import Path
from typing import Optional
from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    model_config = SettingsConfigDict(
        env_prefix="ASSETS_",
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    # Manifest
    manifest_path: str = Field(default="config.yaml")

    # Download settings
    download_dir: str = Field(default="models")
    venv_path: str = Field(default=".venv")
    python_path: Optional[str] = Field(default=None)
    downloader_script: str = Field(default="downloader.py")

    # HuggingFace
    hf_token: Optional[str] = Field(default=None)

    # Logging
    log_level: str = Field(default="WARNING")
    json_logs: bool = Field(default=False)
    log_file: Optional[str] = Field(default=None)

    @property
    def download_path(self) -> Path:
        """Download root as a path."""
        return Path(self.download_dir)


# Global settings instance, only read by the command line entry point
settings = Settings()


def get_settings() -> Settings:
    """Get settings instance."""
    return settings


def reload_settings() -> Settings:
    """Reload settings from environment."""
    global settings
    settings = Settings()
    return settings
