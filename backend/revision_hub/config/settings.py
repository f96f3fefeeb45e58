"""
Application Configuration

This module provides type-safe configuration loading using Pydantic settings.
Environment variables are loaded from .env file and validated.

Usage:
    from revision_hub.config import settings

    # Access settings
    db_url = settings.POSTGRES_URL
    review_limit = settings.get_rate_limit(RateLimitType.REVIEW)
"""

from functools import lru_cache
from pathlib import Path
from typing import Any

import yaml
from pydantic_settings import BaseSettings, SettingsConfigDict

from revision_hub.enums.api import RateLimitType


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    model_config = SettingsConfigDict(env_file=".env", env_file_encoding="utf-8")

    # Application
    APP_NAME: str = "Revision Hub"
    DEBUG: bool = False
    LOG_LEVEL: str = "INFO"
    CORS_ORIGINS: list[str] = ["*"]

    # PostgreSQL
    POSTGRES_HOST: str = "localhost"
    POSTGRES_PORT: int = 5432
    POSTGRES_USER: str = "revisionhub"
    POSTGRES_PASSWORD: str = ""
    POSTGRES_DB: str = "revisionhub"

    @property
    def POSTGRES_URL(self) -> str:
        """Async PostgreSQL connection URL."""
        return f"postgresql+asyncpg://{self.POSTGRES_USER}:{self.POSTGRES_PASSWORD}@{self.POSTGRES_HOST}:{self.POSTGRES_PORT}/{self.POSTGRES_DB}"

    @property
    def POSTGRES_URL_SYNC(self) -> str:
        """Sync PostgreSQL connection URL (table setup scripts, integration tests)."""
        return f"postgresql://{self.POSTGRES_USER}:{self.POSTGRES_PASSWORD}@{self.POSTGRES_HOST}:{self.POSTGRES_PORT}/{self.POSTGRES_DB}"

    # Spaced repetition
    SRS_DEFAULT_PACING_MODE: float = 0.0

    # Streaks and activity heatmap
    STREAK_HISTORY_DAYS: int = 90
    STREAK_MILESTONES: list[int] = [7, 14, 30, 60, 100, 365]
    ACTIVITY_LEVEL_HIGH: float = 0.75
    ACTIVITY_LEVEL_MEDIUM_HIGH: float = 0.5
    ACTIVITY_LEVEL_MEDIUM: float = 0.25

    # Rate limiting (slowapi limit strings)
    RATE_LIMIT_ENABLED: bool = True
    RATE_LIMIT_DEFAULT: str = "100/minute"
    RATE_LIMIT_REVIEW: str = "60/minute"
    RATE_LIMIT_ANALYTICS: str = "30/minute"

    def get_rate_limit(self, rate_limit_type: RateLimitType) -> str:
        """Return the slowapi limit string for an endpoint category."""
        limits = {
            RateLimitType.DEFAULT: self.RATE_LIMIT_DEFAULT,
            RateLimitType.REVIEW: self.RATE_LIMIT_REVIEW,
            RateLimitType.ANALYTICS: self.RATE_LIMIT_ANALYTICS,
        }
        return limits.get(rate_limit_type, self.RATE_LIMIT_DEFAULT)


@lru_cache()
def get_settings() -> Settings:
    """Get cached settings instance."""
    return Settings()


settings = get_settings()


@lru_cache()
def load_yaml_config() -> dict[str, Any]:
    """Load application configuration from config/default.yaml."""
    config_path = Path(__file__).parent.parent.parent.parent / "config" / "default.yaml"

    if not config_path.exists():
        return {}

    with open(config_path) as f:
        return yaml.safe_load(f) or {}


yaml_config: dict[str, Any] = load_yaml_config()
