"""Nutrition domain models shared by providers and the ranking engine."""

import math
from dataclasses import dataclass, field
from datetime import datetime
from enum import StrEnum


class SourceTag(StrEnum):
    """Identifies the food database a result came from."""

    GOVERNMENT_DB = "government_db"
    USER_HISTORY = "user_history"
    COMMERCIAL_DB = "commercial_db"
    INTERNATIONAL_DB = "international_db"


def round_whole(value: float) -> int:
    """Round to the nearest integer, halves away from zero."""
    return int(math.floor(value + 0.5))


def round_grams(value: float) -> float:
    """Round a gram amount to one decimal, halves away from zero."""
    return math.floor(value * 10 + 0.5) / 10


@dataclass(frozen=True)
class Per100g:
    """Nutrition facts for a fixed quantity of food.

    Providers emit values for 100 grams; serving options reuse the same
    shape for their scaled amounts. ``None`` means the value is unknown.
    """

    kcal: int
    protein_g: float
    carbs_g: float
    fat_g: float
    fiber_g: float | None = None
    sugar_g: float | None = None
    sodium_mg: int | None = None

    @property
    def is_incomplete(self) -> bool:
        """Return True when any primary macro is exactly zero."""
        return any(
            value == 0
            for value in (self.kcal, self.protein_g, self.carbs_g, self.fat_g)
        )

    def scaled(self, grams: float) -> "Per100g":
        """Return the values scaled linearly to ``grams`` of food."""
        factor = grams / 100
        return Per100g(
            kcal=round_whole(self.kcal * factor),
            protein_g=round_grams(self.protein_g * factor),
            carbs_g=round_grams(self.carbs_g * factor),
            fat_g=round_grams(self.fat_g * factor),
            fiber_g=(
                round_grams(self.fiber_g * factor) if self.fiber_g is not None else None
            ),
            sugar_g=(
                round_grams(self.sugar_g * factor) if self.sugar_g is not None else None
            ),
            sodium_mg=(
                round_whole(self.sodium_mg * factor)
                if self.sodium_mg is not None
                else None
            ),
        )


@dataclass(frozen=True)
class ProviderResult:
    """One candidate food as reported by a single source."""

    id: str
    name: str
    per100g: Per100g
    name_localized: str | None = None
    brand: str | None = None
    serving_size_grams: float | None = None
    image_url: str | None = None
    last_used: datetime | None = None


@dataclass(frozen=True)
class ServingOption:
    """A named, fixed-gram portion with pre-scaled nutrition."""

    id: str
    label: str
    grams: float
    nutrition: Per100g
    is_default: bool = False


@dataclass(frozen=True)
class FoodSearchResult:
    """A deduplicated, ranked food candidate returned to the caller."""

    id: str
    source: SourceTag
    name: str
    per100g: Per100g
    default_serving: str
    servings: list[ServingOption] = field(default_factory=list)
    name_localized: str | None = None
    brand: str | None = None
    image_url: str | None = None
    is_partial: bool = False
    last_used: datetime | None = None
