"""Tests for the multi-provider search orchestration."""

import asyncio
from datetime import UTC, datetime, timedelta

import pytest

from food_search.domain.nutrition import SourceTag
from food_search.domain.sources import UserFoodRecord
from food_search.services.search import FoodSearchService, InvalidSearchRequest
from tests.conftest import (
    FailingProvider,
    InMemoryUserFoodRepository,
    StaticProvider,
    make_result,
)


def test_partial_failure_still_returns_results() -> None:
    working = StaticProvider(
        name=SourceTag.INTERNATIONAL_DB, results=[make_result("Hummus")]
    )
    service = FoodSearchService(
        providers=[
            FailingProvider(name=SourceTag.GOVERNMENT_DB),
            StaticProvider(name=SourceTag.COMMERCIAL_DB),
            working,
        ]
    )

    outcome = asyncio.run(service.run("hummus", 10))

    assert [result.name for result in outcome.results] == ["Hummus"]
    assert outcome.sources == [SourceTag.INTERNATIONAL_DB]


def test_all_providers_failing_returns_empty_list() -> None:
    service = FoodSearchService(
        providers=[
            FailingProvider(name=SourceTag.GOVERNMENT_DB),
            FailingProvider(
                name=SourceTag.COMMERCIAL_DB, error=ValueError("bad payload")
            ),
        ]
    )

    assert asyncio.run(service.search("hummus", 10)) == []


def test_slow_provider_times_out_individually() -> None:
    slow = StaticProvider(
        name=SourceTag.COMMERCIAL_DB,
        results=[make_result("Tahini")],
        delay_seconds=1.0,
    )
    fast = StaticProvider(
        name=SourceTag.GOVERNMENT_DB,
        results=[make_result("Tahini", brand="Har Bracha")],
    )
    service = FoodSearchService(providers=[slow, fast], provider_timeout_seconds=0.05)

    outcome = asyncio.run(service.run("tahini", 10))

    assert [result.source for result in outcome.results] == [SourceTag.GOVERNMENT_DB]
    assert outcome.sources == [SourceTag.GOVERNMENT_DB]


def test_overall_deadline_abandons_pending_providers() -> None:
    slow = StaticProvider(
        name=SourceTag.INTERNATIONAL_DB,
        results=[make_result("Pretzel")],
        delay_seconds=1.0,
    )
    fast = StaticProvider(name=SourceTag.GOVERNMENT_DB, results=[make_result("Bagel")])
    service = FoodSearchService(providers=[slow, fast], deadline_seconds=0.05)

    collected = asyncio.run(service.collect([slow, fast], "bagel", 10))

    assert collected == {
        SourceTag.INTERNATIONAL_DB: [],
        SourceTag.GOVERNMENT_DB: [make_result("Bagel")],
    }


def test_results_keyed_in_registration_order() -> None:
    first = StaticProvider(
        name=SourceTag.COMMERCIAL_DB, results=[make_result("Rice")], delay_seconds=0.05
    )
    second = StaticProvider(name=SourceTag.GOVERNMENT_DB, results=[make_result("Rice")])
    service = FoodSearchService(providers=[first, second])

    collected = asyncio.run(service.collect(service.providers, "rice", 5))
    outcome = asyncio.run(service.run("rice", 5))

    assert list(collected) == [SourceTag.COMMERCIAL_DB, SourceTag.GOVERNMENT_DB]
    # Equal nutrition and no image, so the government rank wins the duplicate.
    assert [result.id for result in outcome.results] == ["government_db:rice"]


def test_unsupported_providers_are_skipped() -> None:
    skipped = StaticProvider(
        name=SourceTag.COMMERCIAL_DB, results=[make_result("Rice")], supported=False
    )
    used = StaticProvider(name=SourceTag.GOVERNMENT_DB, results=[make_result("Rice")])
    service = FoodSearchService(providers=[skipped, used])

    asyncio.run(service.run("rice", 5))

    assert skipped.queries == []
    assert used.queries == [("rice", 5)]


def test_short_query_yields_no_results() -> None:
    provider = StaticProvider(
        name=SourceTag.GOVERNMENT_DB, results=[make_result("Rice")]
    )
    service = FoodSearchService(providers=[provider])

    assert asyncio.run(service.search("r", 5)) == []
    assert provider.queries == []


def test_search_truncates_to_limit_and_trims_query() -> None:
    provider = StaticProvider(
        name=SourceTag.GOVERNMENT_DB,
        results=[make_result(f"Cheese {index}") for index in range(5)],
    )
    service = FoodSearchService(providers=[provider])

    results = asyncio.run(service.search("  cheese  ", 3))

    assert len(results) == 3
    assert provider.queries == [("cheese", 3)]


@pytest.mark.parametrize(("query", "limit"), [("", 10), ("   ", 10), ("rice", 0)])
def test_invalid_requests_are_rejected(query: str, limit: int) -> None:
    service = FoodSearchService(providers=[])

    with pytest.raises(InvalidSearchRequest):
        asyncio.run(service.run(query, limit))


def test_missing_provider_is_a_configuration_error() -> None:
    with pytest.raises(ValueError):
        FoodSearchService(providers=[None])  # type: ignore[list-item]


def test_user_history_included_for_authenticated_user() -> None:
    created_at = datetime(2026, 10, 10, 8, 30, tzinfo=UTC)
    repository = InMemoryUserFoodRepository(
        custom_foods=[
            UserFoodRecord(
                id="42",
                name="Apple pancakes",
                brand=None,
                serving_grams=150,
                per_100g={"kcal": 227, "protein_g": 6.4, "carbs_g": 28.3, "fat_g": 9.7},
                created_at=created_at,
            )
        ]
    )
    service = FoodSearchService(
        providers=[
            StaticProvider(name=SourceTag.GOVERNMENT_DB, results=[make_result("Apple")])
        ],
        user_food_repository=repository,
        recent_days=7,
    )

    outcome = asyncio.run(service.run("apple", 10, user_id="user-1"))

    assert outcome.sources == [SourceTag.GOVERNMENT_DB, SourceTag.USER_HISTORY]
    history = [r for r in outcome.results if r.source == SourceTag.USER_HISTORY]
    assert [result.id for result in history] == ["user_history:food:42"]
    assert history[0].last_used == created_at
    assert set(repository.requested_users) == {"user-1"}
    expected_since = datetime.now(tz=UTC).date() - timedelta(days=7)
    assert repository.since_dates == [expected_since]


def test_user_history_skipped_when_recent_disabled_or_anonymous() -> None:
    repository = InMemoryUserFoodRepository()
    service = FoodSearchService(providers=[], user_food_repository=repository)

    asyncio.run(service.run("apple", 10, user_id="user-1", include_recent=False))
    asyncio.run(service.run("apple", 10))

    assert repository.requested_users == []
