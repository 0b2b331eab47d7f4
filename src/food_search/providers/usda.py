"""USDA FoodData Central provider."""

import logging
from dataclasses import dataclass

import httpx

from food_search.adapters.fdc_client import FdcClient
from food_search.domain.nutrition import ProviderResult, SourceTag
from food_search.providers.base import MIN_QUERY_LENGTH, build_per100g, clean_text

_logger = logging.getLogger(__name__)

_NUTRIENT_IDS = {
    "kcal": 1008,
    "protein": 1003,
    "carbs": 1005,
    "fat": 1004,
    "fiber": 1079,
    "sugars": 2000,
    "sodium": 1093,
}

# SR Legacy is the only data type with consistent macronutrients.
_DATA_TYPES = ["SR Legacy"]
_MAX_PAGE_SIZE = 50
_GRAM_UNITS = {"g", "grm", "gram", "grams"}
_MILLILITRE_UNITS = {"ml", "mlt", "milliliter", "milliliters", "millilitre"}


@dataclass
class UsdaFoodProvider:
    """Searches USDA FoodData Central."""

    client: FdcClient
    name: SourceTag = SourceTag.COMMERCIAL_DB

    def supports(self, query: str) -> bool:
        """Accept any query of at least two characters."""
        return len(query) >= MIN_QUERY_LENGTH

    async def search(self, query: str, limit: int) -> list[ProviderResult]:
        """Search FDC and convert foods that carry usable nutrition."""
        try:
            payload = await self.client.search_foods(
                query,
                page_size=min(limit, _MAX_PAGE_SIZE),
                data_types=_DATA_TYPES,
            )
        except httpx.TimeoutException:
            _logger.warning("USDA search timed out: query=%s", query)
            return []
        except httpx.HTTPStatusError as exc:
            _logger.warning(
                "USDA search failed: query=%s status=%s",
                query,
                exc.response.status_code,
            )
            return []
        except (httpx.HTTPError, ValueError) as exc:
            _logger.warning("USDA search failed: query=%s error=%s", query, exc)
            return []

        foods = payload.get("foods") if isinstance(payload, dict) else None
        if not isinstance(foods, list) or not foods:
            _logger.info("USDA search returned no foods: query=%s", query)
            return []

        results: list[ProviderResult] = []
        for food in foods:
            if not isinstance(food, dict):
                _logger.warning("Skipping malformed USDA food: %r", food)
                continue
            try:
                converted = _convert(food)
            except (KeyError, TypeError, ValueError, AttributeError) as exc:
                _logger.warning("Skipping malformed USDA food: %s", exc)
                continue
            if converted is not None:
                results.append(converted)
        return results


def _convert(food: dict[str, object]) -> ProviderResult | None:
    name = clean_text(food.get("description"))
    if not name:
        return None

    nutrients = _nutrient_values(food.get("foodNutrients") or [])
    per100g = build_per100g(
        kcal=nutrients.get(_NUTRIENT_IDS["kcal"]),
        protein_g=nutrients.get(_NUTRIENT_IDS["protein"]),
        carbs_g=nutrients.get(_NUTRIENT_IDS["carbs"]),
        fat_g=nutrients.get(_NUTRIENT_IDS["fat"]),
        fiber_g=nutrients.get(_NUTRIENT_IDS["fiber"]),
        sugar_g=nutrients.get(_NUTRIENT_IDS["sugars"]),
        sodium_mg=nutrients.get(_NUTRIENT_IDS["sodium"]),
    )
    if per100g is None:
        return None

    return ProviderResult(
        id=str(food["fdcId"]),
        name=name,
        brand=clean_text(food.get("brandOwner")) or clean_text(food.get("brandName")),
        per100g=per100g,
        serving_size_grams=_serving_size_grams(food),
    )


def _nutrient_values(food_nutrients: list[dict[str, object]]) -> dict[int, float]:
    """Map nutrient id to amount, accepting search and detail payload shapes."""
    values: dict[int, float] = {}
    for nutrient in food_nutrients:
        if not isinstance(nutrient, dict):
            continue
        nutrient_info = nutrient.get("nutrient") or {}
        if not isinstance(nutrient_info, dict):
            nutrient_info = {}
        nutrient_id = nutrient.get("nutrientId") or nutrient_info.get("id")
        amount = nutrient.get("value", nutrient.get("amount"))
        if nutrient_id is None or amount is None:
            continue
        values[int(nutrient_id)] = float(amount)
    return values


def _serving_size_grams(food: dict[str, object]) -> float | None:
    size = food.get("servingSize")
    unit = food.get("servingSizeUnit")
    if not size or not isinstance(unit, str):
        return None
    normalized_unit = unit.strip().lower()
    # Liquids are treated as 1 ml = 1 g.
    if normalized_unit in _GRAM_UNITS or normalized_unit in _MILLILITRE_UNITS:
        grams = float(size)
        return grams if grams > 0 else None
    return None
