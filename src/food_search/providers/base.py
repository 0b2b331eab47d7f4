"""Food provider interface and shared normalization helpers."""

import re
from typing import Protocol

from food_search.domain.nutrition import (
    Per100g,
    ProviderResult,
    SourceTag,
    round_grams,
    round_whole,
)

MIN_QUERY_LENGTH = 2
DEFAULT_TIMEOUT_SECONDS = 10.0
KJ_TO_KCAL = 0.239

_WHITESPACE = re.compile(r"\s+")


class FoodProvider(Protocol):
    """A searchable food data source.

    ``search`` must not raise for network, status, decode or empty-result
    failures; those are reported as an empty list.
    """

    name: SourceTag

    def supports(self, query: str) -> bool:
        """Return True if the provider can usefully answer the query."""

    async def search(self, query: str, limit: int) -> list[ProviderResult]:
        """Return normalized results for the query."""


def normalize_for_dedup(name: str, brand: str | None = None) -> str:
    """Build the ``name|brand`` key used to group duplicate foods."""
    normalized_name = _WHITESPACE.sub(" ", name.lower().strip())
    if brand and brand.strip():
        return f"{normalized_name}|{brand.lower().strip()}"
    return normalized_name


def build_per100g(  # noqa: PLR0913
    *,
    kcal: float | None,
    protein_g: float | None,
    carbs_g: float | None,
    fat_g: float | None,
    fiber_g: float | None = None,
    sugar_g: float | None = None,
    sodium_mg: float | None = None,
    kilojoules: float | None = None,
) -> Per100g | None:
    """Normalize raw per-100g values.

    Missing primary macros count as zero. Energy falls back to kilojoules
    when kcal is absent. Returns None when all four primary macros are zero,
    and raises ValueError for negative values.
    """
    energy = _number(kcal) or 0.0
    if energy == 0 and kilojoules:
        energy = round_whole(_number(kilojoules) * KJ_TO_KCAL)
    protein = _number(protein_g) or 0.0
    carbs = _number(carbs_g) or 0.0
    fat = _number(fat_g) or 0.0

    if energy == 0 and protein == 0 and carbs == 0 and fat == 0:
        return None

    fiber = _number(fiber_g)
    sugar = _number(sugar_g)
    sodium = _number(sodium_mg)
    return Per100g(
        kcal=round_whole(energy),
        protein_g=round_grams(protein),
        carbs_g=round_grams(carbs),
        fat_g=round_grams(fat),
        fiber_g=round_grams(fiber) if fiber is not None else None,
        sugar_g=round_grams(sugar) if sugar is not None else None,
        sodium_mg=round_whole(sodium) if sodium is not None else None,
    )


def clean_text(value: object) -> str | None:
    """Return a stripped string, or None for blank and missing values."""
    if value is None:
        return None
    text = str(value).strip()
    return text or None


def _number(value: object) -> float | None:
    if value is None or value == "":
        return None
    number = float(value)  # type: ignore[arg-type]
    if number < 0:
        raise ValueError(f"Negative nutrient value: {number}")
    return number
