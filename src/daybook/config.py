"""
Daybook - Configuration and settings.

All settings come from the environment (or a local .env file).
"""

from functools import lru_cache
from typing import Literal

from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """
    Application settings.

    Supabase credentials are required. OpenAI is optional: without a key,
    category suggestions fall back to the generic label.
    """

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    # Supabase
    supabase_url: str
    supabase_anon_key: str
    supabase_service_role_key: str | None = None

    # OpenAI (category suggestions)
    openai_api_key: str | None = None
    category_model: str = "gpt-4.1-mini"
    category_temperature: float = 0.7

    # Application
    daybook_env: Literal["development", "staging", "production"] = "development"
    log_level: Literal["DEBUG", "INFO", "WARNING", "ERROR"] = "INFO"

    # "Today" for brain dump parsing is computed in this timezone
    timezone: str = "UTC"
    default_due_time: str = "20:00:00"

    # Dev user for the CLI
    dev_user_id: str = "00000000-0000-0000-0000-000000000001"


@lru_cache
def get_settings() -> Settings:
    """Get cached settings instance."""
    return Settings()


class _SettingsProxy:
    """Lazy proxy for settings to avoid loading .env at import time."""

    _instance: Settings | None = None

    def __getattr__(self, name: str):
        if self._instance is None:
            self._instance = get_settings()
        return getattr(self._instance, name)


settings = _SettingsProxy()
