"""
Application configuration using Pydantic Settings.

Values are read from environment variables (or a local .env file).
"""

from datetime import timedelta
from functools import lru_cache
from typing import Literal

from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=True,
        extra="ignore",
    )

    # ===========================================
    # Environment
    # ===========================================
    ENVIRONMENT: Literal["local", "test"] = "local"
    DEBUG: bool = False
    LOG_LEVEL: str = "INFO"

    # ===========================================
    # Database
    # ===========================================
    DATABASE_URL: str = "sqlite+aiosqlite:///./cadence.db"

    # ===========================================
    # Generation
    # ===========================================
    # Forward window beyond which no instance is generated
    MAX_ADVANCE_DAYS: int = 365

    # Two due dates closer than this are treated as the same slot
    DUE_DATE_TOLERANCE_SECONDS: float = 1.0

    # ===========================================
    # Scheduler (batch reconciliation)
    # ===========================================
    RECONCILE_CRON_DAY: int = 1
    RECONCILE_CRON_HOUR: int = 0
    RECONCILE_ON_STARTUP: bool = True

    @property
    def max_advance(self) -> timedelta:
        """Advance horizon as a timedelta."""
        return timedelta(days=self.MAX_ADVANCE_DAYS)

    @property
    def due_date_tolerance(self) -> timedelta:
        """Tolerance window as a timedelta."""
        return timedelta(seconds=self.DUE_DATE_TOLERANCE_SECONDS)

    @property
    def is_test(self) -> bool:
        """Check if running in the test environment."""
        return self.ENVIRONMENT == "test"


@lru_cache()
def get_settings() -> Settings:
    """
    Get cached settings instance.

    Using lru_cache ensures settings are loaded only once.
    """
    return Settings()
