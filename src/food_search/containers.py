"""Dependency container wiring for the application."""

import logging
from collections.abc import Awaitable, Callable
from dataclasses import dataclass

from supabase import create_client

from food_search.adapters.fdc_client import HttpxFdcClient
from food_search.adapters.open_food_facts_client import HttpxOpenFoodFactsClient
from food_search.adapters.supabase_government_food_repository import (
    SupabaseGovernmentFoodRepository,
)
from food_search.adapters.supabase_user_food_repository import (
    SupabaseUserFoodRepository,
)
from food_search.config import Settings, parse_enabled_sources
from food_search.domain.nutrition import SourceTag
from food_search.providers.base import FoodProvider
from food_search.providers.government import GovernmentFoodProvider
from food_search.providers.open_food_facts import OpenFoodFactsProvider
from food_search.providers.usda import UsdaFoodProvider
from food_search.services.search import FoodSearchService

_logger = logging.getLogger(__name__)


@dataclass
class AppContainer:
    """Holds application-wide dependencies."""

    settings: Settings
    search_service: FoodSearchService
    close_resources: Callable[[], Awaitable[None]]


def build_container(settings: Settings | None = None) -> AppContainer:
    """Create the default dependency container."""
    resolved_settings = settings or Settings()
    enabled = parse_enabled_sources(resolved_settings.enabled_sources)

    def is_enabled(source: SourceTag) -> bool:
        return enabled is None or source in enabled

    supabase_client = create_client(
        resolved_settings.supabase_url, resolved_settings.supabase_service_key
    )
    timeout = resolved_settings.provider_timeout_seconds
    providers: list[FoodProvider] = []
    if is_enabled(SourceTag.GOVERNMENT_DB):
        providers.append(
            GovernmentFoodProvider(
                repository=SupabaseGovernmentFoodRepository(supabase_client),
                timeout_seconds=timeout,
            )
        )

    off_client = HttpxOpenFoodFactsClient.create(
        search_url=resolved_settings.off_search_url,
        user_agent=resolved_settings.off_user_agent,
        localized_language=resolved_settings.localized_language,
        timeout_seconds=timeout,
    )
    if is_enabled(SourceTag.INTERNATIONAL_DB):
        providers.append(
            OpenFoodFactsProvider(
                client=off_client,
                localized_language=resolved_settings.localized_language,
            )
        )

    fdc_client: HttpxFdcClient | None = None
    if resolved_settings.fdc_api_key:
        fdc_client = HttpxFdcClient.create(
            api_key=resolved_settings.fdc_api_key,
            base_url=resolved_settings.fdc_base_url,
            timeout_seconds=timeout,
        )
        if is_enabled(SourceTag.COMMERCIAL_DB):
            providers.append(UsdaFoodProvider(client=fdc_client))
    else:
        _logger.warning("FDC_API_KEY not configured, USDA search disabled")

    user_food_repository = (
        SupabaseUserFoodRepository(supabase_client)
        if is_enabled(SourceTag.USER_HISTORY)
        else None
    )
    search_service = FoodSearchService(
        providers=providers,
        user_food_repository=user_food_repository,
        provider_timeout_seconds=timeout,
        deadline_seconds=resolved_settings.search_deadline_seconds,
        recent_days=resolved_settings.recent_days,
    )

    async def close_resources() -> None:
        await off_client.close()
        if fdc_client is not None:
            await fdc_client.close()

    return AppContainer(
        settings=resolved_settings,
        search_service=search_service,
        close_resources=close_resources,
    )
