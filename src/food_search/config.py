"""Application configuration."""

import os

from pydantic_settings import BaseSettings, SettingsConfigDict

from food_search.domain.nutrition import SourceTag

_ENVIRONMENT = os.getenv("ENVIRONMENT", "local")


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    supabase_url: str
    supabase_service_key: str
    fdc_api_key: str | None = None
    fdc_base_url: str = "https://api.nal.usda.gov/fdc/v1"
    off_search_url: str = "https://world.openfoodfacts.org/cgi/search.pl"
    off_user_agent: str = "FoodSearch/1.0"
    localized_language: str | None = "he"
    provider_timeout_seconds: float = 10.0
    search_deadline_seconds: float | None = None
    default_limit: int = 30
    max_limit: int = 50
    max_recent_results: int = 5
    recent_days: int = 30
    enabled_sources: str | None = None
    service_token: str | None = None
    environment: str = _ENVIRONMENT

    model_config = SettingsConfigDict(
        env_file=(f".env.{_ENVIRONMENT}", ".env"),
        extra="ignore",
    )


def parse_enabled_sources(raw: str | None) -> set[SourceTag] | None:
    """Parse the enabled source tags from env; None enables every source."""
    if raw is None:
        return None
    cleaned = raw.strip()
    if cleaned in {"", "*"}:
        return None
    sources: set[SourceTag] = set()
    for chunk in cleaned.split(","):
        value = chunk.strip().lower()
        if not value:
            continue
        if value in {tag.value for tag in SourceTag}:
            sources.add(SourceTag(value))
    return sources or None
