"""
Configuration settings for repostudy.

Uses Pydantic Settings for environment variable management with .env file support.
"""
from __future__ import annotations

from functools import lru_cache
from pathlib import Path
from typing import Any, Literal

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    # ========================================
    # Storage
    # ========================================
    notes_dir: Path = Field(
        default=Path("learning-notes"),
        description="Root directory for per-repository note files",
    )
    export_dir: Path = Field(
        default=Path("exports"),
        description="Directory for formatted export documents",
    )

    # ========================================
    # GitHub API
    # ========================================
    github_api_url: str = Field(
        default="https://api.github.com",
        description="GitHub REST API base URL",
    )
    github_token: str | None = Field(
        default=None,
        description="GitHub token (raises the anonymous rate limit)",
    )
    http_timeout_seconds: float = Field(
        default=30.0,
        description="Timeout for collaborator HTTP requests",
    )

    # ========================================
    # Retry (remote collaborators only)
    # ========================================
    retry_attempts: int = Field(
        default=3,
        description="Attempts for metadata fetch and answer generation",
    )
    retry_base_delay_seconds: float = Field(
        default=1.0,
        description="Initial backoff delay, doubled after each failure",
    )

    # ========================================
    # X.com Publishing (optional)
    # ========================================
    x_api_url: str = Field(
        default="https://api.x.com/2",
        description="X API v2 base URL",
    )
    x_api_key: str | None = Field(default=None, description="X API key")
    x_api_secret: str | None = Field(default=None, description="X API secret")
    x_access_token: str | None = Field(default=None, description="X user access token")
    x_access_secret: str | None = Field(default=None, description="X user access secret")
    x_bearer_token: str | None = Field(default=None, description="X bearer token")

    # ========================================
    # Export Heuristics
    # ========================================
    vocabulary_file: Path | None = Field(
        default=None,
        description="JSON file overriding the insight/highlight keyword tables",
    )

    # ========================================
    # Logging
    # ========================================
    log_level: Literal["DEBUG", "INFO", "WARNING", "ERROR"] = Field(
        default="WARNING",
        description="Logging verbosity level",
    )
    log_file: str | None = Field(
        default=None,
        description="Log file path (None for stderr only)",
    )

    # ========================================
    # Helper Methods
    # ========================================
    def has_github_token(self) -> bool:
        """Check if authenticated GitHub access is configured."""
        return bool(self.github_token)

    def get_x_credentials(self) -> dict[str, str | None]:
        """Return the X credentials keyed by name (including None)."""
        return {
            "api_key": self.x_api_key,
            "api_secret": self.x_api_secret,
            "access_token": self.x_access_token,
            "access_secret": self.x_access_secret,
            "bearer_token": self.x_bearer_token,
        }

    def has_x_configured(self) -> bool:
        """Check if every X credential is present."""
        return all(self.get_x_credentials().values())

    def get_retry_config(self) -> dict[str, Any]:
        """Get retry configuration as a dictionary."""
        return {
            "attempts": self.retry_attempts,
            "base_delay": self.retry_base_delay_seconds,
        }


@lru_cache(maxsize=1)
def get_settings() -> Settings:
    """Get cached settings instance."""
    return Settings()
