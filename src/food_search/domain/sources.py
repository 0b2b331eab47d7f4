"""Rows read from the food stores backed by Supabase."""

from dataclasses import dataclass
from datetime import datetime


@dataclass(frozen=True)
class GovernmentFoodRecord:
    """A food from the government nutrition table, values per 100g."""

    id: str
    name_he: str | None
    name_en: str | None
    brand: str | None
    category: str | None
    calories: float | None
    protein_g: float | None
    carbs_g: float | None
    fat_g: float | None
    sugars_g: float | None
    sodium_mg: float | None
    fiber_g: float | None


@dataclass(frozen=True)
class UserFoodRecord:
    """A custom food the user created, with stored per-100g values."""

    id: str
    name: str | None
    brand: str | None
    serving_grams: float | None
    per_100g: dict[str, object]
    created_at: datetime | None


@dataclass(frozen=True)
class LoggedMealRecord:
    """A meal the user logged, with totals for the logged portion."""

    id: str | None
    name: str | None
    brand: str | None
    calories: float | None
    protein_g: float | None
    carbs_g: float | None
    fat_g: float | None
    portion_grams: float | None
    created_at: datetime | None
