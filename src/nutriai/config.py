"""
NutriAI - Configuration and settings.

Settings come from environment variables and an optional `.env` file.
"""

import logging
from functools import lru_cache
from typing import Literal

from pydantic_settings import BaseSettings, SettingsConfigDict


class NutriSettings(BaseSettings):
    """Application settings."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    # Application
    nutriai_env: Literal["development", "staging", "production"] = "development"
    log_level: Literal["DEBUG", "INFO", "WARNING", "ERROR"] = "INFO"

    # Session management
    session_active_timeout_minutes: int = 30  # "stale" after this
    session_expire_hours: int = 24  # Sessions idle longer than this are dropped

    @property
    def is_development(self) -> bool:
        return self.nutriai_env == "development"

    @property
    def is_production(self) -> bool:
        return self.nutriai_env == "production"


@lru_cache
def get_settings() -> NutriSettings:
    """Get cached settings instance."""
    return NutriSettings()


# Convenience singleton - lazy loaded
class _SettingsProxy:
    """Lazy proxy for settings to avoid loading .env at import time."""

    _instance: NutriSettings | None = None

    def __getattr__(self, name: str):
        if self._instance is None:
            self._instance = get_settings()
        return getattr(self._instance, name)


settings = _SettingsProxy()


def configure_logging(level: str | None = None) -> None:
    """Apply the configured log level to the root logger. Safe to call twice."""
    level = level or get_settings().log_level
    logging.basicConfig(
        level=level,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )
    logging.getLogger().setLevel(level)
