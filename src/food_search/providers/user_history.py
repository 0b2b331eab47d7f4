"""Provider over the user's own custom foods and recently logged meals."""

import asyncio
import logging
from collections.abc import Callable
from dataclasses import dataclass
from datetime import UTC, date, datetime, timedelta
from typing import Protocol, TypeVar

from food_search.domain.nutrition import ProviderResult, SourceTag
from food_search.domain.sources import LoggedMealRecord, UserFoodRecord
from food_search.providers.base import (
    DEFAULT_TIMEOUT_SECONDS,
    MIN_QUERY_LENGTH,
    build_per100g,
    clean_text,
    normalize_for_dedup,
)

_logger = logging.getLogger(__name__)

_DEFAULT_PORTION_GRAMS = 100.0
_T = TypeVar("_T")


class UserFoodRepository(Protocol):
    """Read access to a user's food history, scoped by user id."""

    def list_custom_foods(
        self, user_id: str, query: str, limit: int
    ) -> list[UserFoodRecord]:
        """Return custom foods matching the query, newest first."""

    def list_recent_meals(
        self, user_id: str, query: str, since: date, limit: int
    ) -> list[LoggedMealRecord]:
        """Return meals logged since a date matching the query, newest first."""


@dataclass
class UserHistoryProvider:
    """Searches foods the user created or logged recently.

    The user id is trusted: authentication happens before the provider is
    constructed.
    """

    repository: UserFoodRepository
    user_id: str | None
    recent_days: int = 30
    max_recent_meals: int = 20
    timeout_seconds: float = DEFAULT_TIMEOUT_SECONDS
    name: SourceTag = SourceTag.USER_HISTORY

    def supports(self, query: str) -> bool:
        """Require an authenticated user and a two character query."""
        return len(query) >= MIN_QUERY_LENGTH and bool(self.user_id)

    async def search(self, query: str, limit: int) -> list[ProviderResult]:
        """Return custom foods first, then recent meals not already listed."""
        if not self.user_id:
            return []
        since = datetime.now(tz=UTC).date() - timedelta(days=self.recent_days)
        try:
            custom_foods, recent_meals = await asyncio.wait_for(
                asyncio.gather(
                    self._fetch(
                        "custom foods",
                        self.repository.list_custom_foods,
                        self.user_id,
                        query,
                        limit,
                    ),
                    self._fetch(
                        "recent meals",
                        self.repository.list_recent_meals,
                        self.user_id,
                        query,
                        since,
                        self.max_recent_meals,
                    ),
                ),
                timeout=self.timeout_seconds,
            )
        except TimeoutError:
            _logger.warning("User history search timed out: user_id=%s", self.user_id)
            return []

        results: list[ProviderResult] = []
        for food in custom_foods:
            converted = _convert_custom_food(food)
            if converted is not None:
                results.append(converted)

        seen = {normalize_for_dedup(result.name, result.brand) for result in results}
        for meal in recent_meals:
            if not meal.name:
                continue
            key = normalize_for_dedup(meal.name, meal.brand)
            if key in seen:
                continue
            seen.add(key)
            converted = _convert_meal(meal)
            if converted is not None:
                results.append(converted)

        return results[:limit]

    async def _fetch(
        self, label: str, func: Callable[..., list[_T]], *args: object
    ) -> list[_T]:
        try:
            return await asyncio.to_thread(func, *args)
        except Exception:
            _logger.exception("Failed to load %s: user_id=%s", label, self.user_id)
            return []


def _convert_custom_food(food: UserFoodRecord) -> ProviderResult | None:
    name = clean_text(food.name)
    if not name:
        return None
    values = food.per_100g
    try:
        per100g = build_per100g(
            kcal=values.get("kcal"),
            protein_g=values.get("protein_g"),
            carbs_g=values.get("carbs_g"),
            fat_g=values.get("fat_g"),
            fiber_g=values.get("fiber_g"),
            sugar_g=values.get("sugar_g"),
            sodium_mg=values.get("sodium_mg"),
        )
    except (TypeError, ValueError) as exc:
        _logger.warning("Skipping custom food %s: %s", food.id, exc)
        return None
    if per100g is None:
        return None
    return ProviderResult(
        id=f"food:{food.id}",
        name=name,
        name_localized=name,
        brand=clean_text(food.brand),
        per100g=per100g,
        serving_size_grams=food.serving_grams,
        last_used=food.created_at,
    )


def _convert_meal(meal: LoggedMealRecord) -> ProviderResult | None:
    """Reverse-scale a logged portion back to per-100g values."""
    name = clean_text(meal.name)
    if not name:
        return None
    portion_grams = meal.portion_grams or _DEFAULT_PORTION_GRAMS
    if portion_grams <= 0:
        return None
    factor = 100 / portion_grams
    try:
        per100g = build_per100g(
            kcal=(meal.calories or 0) * factor,
            protein_g=(meal.protein_g or 0) * factor,
            carbs_g=(meal.carbs_g or 0) * factor,
            fat_g=(meal.fat_g or 0) * factor,
        )
    except ValueError as exc:
        _logger.warning("Skipping logged meal %s: %s", meal.id, exc)
        return None
    if per100g is None:
        return None
    brand = clean_text(meal.brand)
    return ProviderResult(
        id=f"meal:{meal.id or normalize_for_dedup(name, brand)}",
        name=name,
        brand=brand,
        per100g=per100g,
        serving_size_grams=portion_grams,
        last_used=meal.created_at,
    )
