"""
Application settings loaded from the environment (and `.env` if present).
"""
import logging
from functools import lru_cache
from typing import Optional

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict

logger = logging.getLogger(__name__)

DEFAULT_CACHE_MAX_ENTRIES = 1024


class Settings(BaseSettings):
    """Settings for the placeholder service"""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
        populate_by_name=True,
    )

    # Key clients must present; the endpoint refuses to work without it
    api_key: Optional[str] = Field(None, description="Server API key (API_KEY)")

    cache_max_entries: int = Field(
        DEFAULT_CACHE_MAX_ENTRIES,
        ge=1,
        validation_alias="LQIP_CACHE_MAX_ENTRIES",
        description="Maximum number of placeholders kept by the memo cache",
    )


@lru_cache()
def get_settings() -> Settings:
    """Return the process-wide settings instance."""
    settings = Settings()
    if not settings.api_key:
        logger.warning("API_KEY is not set, placeholder requests will be rejected")
    return settings
