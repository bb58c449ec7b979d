import logging
from typing import Optional

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class AppSettings(BaseSettings):
    """Application settings loaded from environment variables or .env file."""

    # Supabase Configuration
    supabase_url: Optional[str] = Field(
        None, description="URL for the Supabase project."
    )
    supabase_key: Optional[str] = Field(
        None, description="Anon key for the Supabase project."
    )
    supabase_service_key: Optional[str] = Field(
        None, description="Service role key for Supabase (use with caution!)."
    )
    users_table: str = Field(
        "users", description="Table holding one row per user account."
    )
    preferences_column: str = Field(
        "preferences", description="JSON column holding the preference blob."
    )

    # Team Feed Configuration
    feed_base_url: str = Field(
        "http://site.api.espn.com/apis/site/v2/sports",
        description="Base URL that league feed paths are joined onto.",
    )
    feed_timeout_seconds: float = Field(
        10.0,
        gt=0,
        description="Upper bound for a single league fetch, retries included.",
    )
    feed_max_attempts: int = Field(
        2,
        ge=1,
        description="Total attempts per league fetch for transient errors.",
    )
    feed_user_agent: str = Field(
        "GameWatchr/1.0", description="User-Agent sent to the feed provider."
    )
    local_user_id: str = Field(
        "local",
        description="Account used by the in-memory store when Supabase is not configured.",
    )

    # Logging Configuration
    log_level: str = Field(
        "INFO", description="Logging level (DEBUG, INFO, WARNING, ERROR, CRITICAL)."
    )

    # Pydantic Settings Configuration
    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
        case_sensitive=False,
    )

    @property
    def supabase_configured(self) -> bool:
        return bool(self.supabase_url and (self.supabase_service_key or self.supabase_key))


def load_settings() -> AppSettings:
    """Loads and validates application settings."""
    try:
        settings = AppSettings()
        log_level_upper = settings.log_level.upper()
        # Validate log_level even if loaded from .env
        if log_level_upper not in ["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"]:
            logging.warning(
                f"Invalid LOG_LEVEL '{settings.log_level}' found in .env or default. Using INFO."
            )
            settings.log_level = "INFO"
        else:
            settings.log_level = log_level_upper
        return settings
    except Exception as e:
        logging.exception(f"Error loading application settings: {e}")
        raise SystemExit("Failed to load application settings. Exiting.")


settings: AppSettings = load_settings()
