from __future__ import annotations

from functools import lru_cache

from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application configuration.

    Values are loaded from environment variables and optional .env file.
    """

    model_config = SettingsConfigDict(env_file=".env", env_file_encoding="utf-8", case_sensitive=False)

    # App
    app_name: str = "Venue Booking Rules"
    environment: str = "dev"  # dev|staging|prod
    api_prefix: str = "/api"

    # Database (template library)
    database_url: str = "sqlite:///./venue_rules.db"

    # Logging
    log_level: str = "info"
    log_json: bool = False

    # Timezone used when a simulation request does not carry one
    timezone: str = "UTC"

    # Text-to-rules (Gemini)
    gemini_api_key: str = ""
    gemini_model: str = "gemini-1.5-pro"
    gemini_base_url: str = "https://generativelanguage.googleapis.com"
    gemini_timeout: float = 30.0

    # Admin routes; empty disables the check (local use)
    admin_api_key: str = ""


@lru_cache
def get_settings() -> Settings:
    return Settings()
