"""Supabase repository for a user's custom foods and logged meals."""

from dataclasses import dataclass
from datetime import date, datetime

from supabase import Client

from food_search.domain.sources import LoggedMealRecord, UserFoodRecord
from food_search.providers.user_history import UserFoodRepository


@dataclass
class SupabaseUserFoodRepository(UserFoodRepository):
    """Supabase-backed access to user food history, scoped by user id."""

    client: Client

    def list_custom_foods(
        self, user_id: str, query: str, limit: int
    ) -> list[UserFoodRecord]:
        """Return the user's custom foods matching the query, newest first."""
        response = (
            self.client.table("user_foods")
            .select("id, name_he, brand, serving_grams, per_100g, created_at")
            .eq("user_id", user_id)
            .ilike("name_he", f"%{query}%")
            .order("created_at", desc=True)
            .limit(limit)
            .execute()
        )
        return [_parse_user_food(row) for row in response.data or []]

    def list_recent_meals(
        self, user_id: str, query: str, since: date, limit: int
    ) -> list[LoggedMealRecord]:
        """Return meals logged since the given date matching the query."""
        response = (
            self.client.table("meals")
            .select(
                "id, name, brand, calories, protein, carbs, fat, "
                "portion_grams, created_at"
            )
            .eq("user_id", user_id)
            .gte("date", since.isoformat())
            .ilike("name", f"%{query}%")
            .order("created_at", desc=True)
            .limit(limit)
            .execute()
        )
        return [_parse_meal(row) for row in response.data or []]


def _parse_user_food(row: dict[str, object]) -> UserFoodRecord:
    per_100g = row.get("per_100g")
    return UserFoodRecord(
        id=str(row["id"]),
        name=_optional_str(row.get("name_he")),
        brand=_optional_str(row.get("brand")),
        serving_grams=_optional_float(row.get("serving_grams")),
        per_100g=per_100g if isinstance(per_100g, dict) else {},
        created_at=_parse_timestamp(row.get("created_at")),
    )


def _parse_meal(row: dict[str, object]) -> LoggedMealRecord:
    meal_id = row.get("id")
    return LoggedMealRecord(
        id=str(meal_id) if meal_id is not None else None,
        name=_optional_str(row.get("name")),
        brand=_optional_str(row.get("brand")),
        calories=_optional_float(row.get("calories")),
        protein_g=_optional_float(row.get("protein")),
        carbs_g=_optional_float(row.get("carbs")),
        fat_g=_optional_float(row.get("fat")),
        portion_grams=_optional_float(row.get("portion_grams")),
        created_at=_parse_timestamp(row.get("created_at")),
    )


def _parse_timestamp(value: object) -> datetime | None:
    if isinstance(value, str) and value:
        return datetime.fromisoformat(value)
    return None


def _optional_str(value: object) -> str | None:
    return str(value) if value is not None else None


def _optional_float(value: object) -> float | None:
    if value is None:
        return None
    try:
        return float(value)  # type: ignore[arg-type]
    except (TypeError, ValueError):
        return None
