"""
Configuration settings for the PupLearn flashcard app.

Uses Pydantic Settings for environment variable management with .env file support.
"""
from __future__ import annotations

from functools import lru_cache
from pathlib import Path
from typing import Literal

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict

DEFAULT_DATA_DIR = Path.home() / ".puplearn"


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    # ========================================
    # Database
    # ========================================
    database_url: str = Field(
        default=f"sqlite:///{DEFAULT_DATA_DIR / 'puplearn.db'}",
        description="SQLAlchemy connection string (SQLite or PostgreSQL)",
    )

    # ========================================
    # Identity
    # ========================================
    user_email: str = Field(
        default="learner@localhost",
        description="Email of the local user that owns study sets and sessions",
    )
    user_name: str | None = Field(
        default=None,
        description="Display name of the local user",
    )

    # ========================================
    # Learn Mode
    # ========================================
    learn_mastery_goal: int = Field(
        default=2,
        ge=1,
        description="Consecutive correct answers required to master a card",
    )

    # ========================================
    # Logging
    # ========================================
    log_level: Literal["DEBUG", "INFO", "WARNING", "ERROR"] = Field(
        default="WARNING",
        description="Logging level",
    )
    log_file: str | None = Field(
        default=None,
        description="Optional log file path",
    )


@lru_cache(maxsize=1)
def get_settings() -> Settings:
    """Get cached settings instance."""
    return Settings()
