"""Shared test fixtures."""

import asyncio
from dataclasses import dataclass, field
from datetime import date

import pytest

from food_search.config import Settings
from food_search.containers import AppContainer
from food_search.domain.nutrition import Per100g, ProviderResult, SourceTag
from food_search.domain.sources import (
    GovernmentFoodRecord,
    LoggedMealRecord,
    UserFoodRecord,
)
from food_search.providers.government import GovernmentFoodRepository
from food_search.providers.user_history import UserFoodRepository
from food_search.services.hebrew_search import normalize_name
from food_search.services.search import FoodSearchService

# Shaped like a JWT so supabase-py accepts it without a network call.
FAKE_SERVICE_KEY = (
    "eyJhbGciOiJIUzI1NiIsInR5cCI6IkpXVCJ9."
    "eyJyb2xlIjoic2VydmljZV9yb2xlIn0."
    "c2lnbmF0dXJlLWZvci10ZXN0cw"
)
SERVICE_TOKEN = "service-token-for-tests"


def make_result(  # noqa: PLR0913
    name: str,
    *,
    result_id: str | None = None,
    brand: str | None = None,
    kcal: int = 52,
    protein_g: float = 0.3,
    carbs_g: float = 13.8,
    fat_g: float = 0.2,
    image_url: str | None = None,
    name_localized: str | None = None,
    serving_size_grams: float | None = None,
) -> ProviderResult:
    """Build a provider result with complete nutrition by default."""
    return ProviderResult(
        id=result_id or name.lower().replace(" ", "-"),
        name=name,
        name_localized=name_localized,
        brand=brand,
        per100g=Per100g(kcal=kcal, protein_g=protein_g, carbs_g=carbs_g, fat_g=fat_g),
        serving_size_grams=serving_size_grams,
        image_url=image_url,
    )


@dataclass
class StaticProvider:
    """Provider returning fixed results, optionally after a delay."""

    name: SourceTag
    results: list[ProviderResult] = field(default_factory=list)
    delay_seconds: float = 0.0
    supported: bool = True
    queries: list[tuple[str, int]] = field(default_factory=list)

    def supports(self, query: str) -> bool:
        return self.supported and len(query) >= 2

    async def search(self, query: str, limit: int) -> list[ProviderResult]:
        self.queries.append((query, limit))
        if self.delay_seconds:
            await asyncio.sleep(self.delay_seconds)
        return list(self.results)


@dataclass
class FailingProvider:
    """Provider whose search raises unexpectedly."""

    name: SourceTag
    error: Exception = field(default_factory=lambda: RuntimeError("boom"))

    def supports(self, query: str) -> bool:
        return True

    async def search(self, query: str, limit: int) -> list[ProviderResult]:
        raise self.error


@dataclass
class InMemoryGovernmentFoodRepository(GovernmentFoodRepository):
    """In-memory government foods table for tests."""

    records: list[GovernmentFoodRecord] = field(default_factory=list)
    terms: list[str] = field(default_factory=list)
    failing_terms: set[str] = field(default_factory=set)

    def search_by_name(self, term: str, limit: int) -> list[GovernmentFoodRecord]:
        self.terms.append(term)
        if term in self.failing_terms:
            raise RuntimeError(f"lookup failed for {term}")
        matches = [
            record
            for record in self.records
            if normalize_name(term) in normalize_name(record.name_he)
        ]
        return matches[:limit]


@dataclass
class InMemoryUserFoodRepository(UserFoodRepository):
    """In-memory user food history for tests."""

    custom_foods: list[UserFoodRecord] = field(default_factory=list)
    meals: list[LoggedMealRecord] = field(default_factory=list)
    fail_custom_foods: bool = False
    requested_users: list[str] = field(default_factory=list)
    since_dates: list[date] = field(default_factory=list)

    def list_custom_foods(
        self, user_id: str, query: str, limit: int
    ) -> list[UserFoodRecord]:
        self.requested_users.append(user_id)
        if self.fail_custom_foods:
            raise RuntimeError("user_foods unavailable")
        return [
            food
            for food in self.custom_foods
            if query.lower() in (food.name or "").lower()
        ][:limit]

    def list_recent_meals(
        self, user_id: str, query: str, since: date, limit: int
    ) -> list[LoggedMealRecord]:
        self.requested_users.append(user_id)
        self.since_dates.append(since)
        return [
            meal for meal in self.meals if query.lower() in (meal.name or "").lower()
        ][:limit]


def government_record(  # noqa: PLR0913
    record_id: str,
    name_he: str,
    *,
    name_en: str | None = None,
    category: str | None = None,
    calories: float | None = 52,
    protein_g: float | None = 0.3,
    carbs_g: float | None = 13.8,
    fat_g: float | None = 0.2,
) -> GovernmentFoodRecord:
    """Build a government table record."""
    return GovernmentFoodRecord(
        id=record_id,
        name_he=name_he,
        name_en=name_en,
        brand=None,
        category=category,
        calories=calories,
        protein_g=protein_g,
        carbs_g=carbs_g,
        fat_g=fat_g,
        sugars_g=None,
        sodium_mg=None,
        fiber_g=None,
    )


@pytest.fixture
def settings() -> Settings:
    return Settings(
        supabase_url="https://example.supabase.co",
        supabase_service_key=FAKE_SERVICE_KEY,
        fdc_api_key="fdc-key",
        service_token=SERVICE_TOKEN,
    )


@pytest.fixture
def user_food_repository() -> InMemoryUserFoodRepository:
    return InMemoryUserFoodRepository()


@pytest.fixture
def container(
    settings: Settings, user_food_repository: InMemoryUserFoodRepository
) -> AppContainer:
    providers = [
        StaticProvider(
            name=SourceTag.GOVERNMENT_DB,
            results=[make_result("Apple", result_id="moh-1")],
        ),
        StaticProvider(
            name=SourceTag.INTERNATIONAL_DB,
            results=[
                make_result(
                    "Apple juice",
                    result_id="off-1",
                    brand="Prigat",
                    image_url="https://img.test/juice.jpg",
                )
            ],
        ),
    ]
    search_service = FoodSearchService(
        providers=providers,
        user_food_repository=user_food_repository,
    )

    async def close_resources() -> None:
        return None

    return AppContainer(
        settings=settings,
        search_service=search_service,
        close_resources=close_resources,
    )
