"""Serving size generation based on the kind of food."""

from dataclasses import dataclass
from enum import StrEnum

from food_search.domain.nutrition import Per100g, ProviderResult, ServingOption

BASELINE_ID = "100g"
COMMON_GRAMS = (50, 150, 200, 250)
SERVING_RANGE_GRAMS = (50, 300)


class FoodCategory(StrEnum):
    """Food kinds with their own typical portions."""

    EGG = "egg"
    BREAD = "bread"
    BEVERAGE = "beverage"
    FRUIT = "fruit"
    VEGETABLE = "vegetable"
    GENERIC = "generic"


# Checked in order; the first matching category wins.
CATEGORY_KEYWORDS: tuple[tuple[FoodCategory, tuple[str, ...]], ...] = (
    (FoodCategory.EGG, ("egg", "ביצה", "ביצים", "בצה")),
    (
        FoodCategory.BREAD,
        (
            "bread",
            "לחם",
            "toast",
            "טוסט",
            "slice",
            "פרוסה",
            "bagel",
            "בייגל",
            "pita",
            "פיתה",
            "tortilla",
        ),
    ),
    (
        FoodCategory.BEVERAGE,
        (
            "milk",
            "חלב",
            "juice",
            "מיץ",
            "water",
            "מים",
            "coffee",
            "קפה",
            "tea",
            "תה",
            "soda",
            "drink",
            "משקה",
        ),
    ),
    (
        FoodCategory.FRUIT,
        ("apple", "תפוח", "banana", "בננה", "orange", "תפוז", "strawberry", "תות"),
    ),
    (
        FoodCategory.VEGETABLE,
        ("tomato", "עגבניה", "cucumber", "מלפפון", "carrot", "גזר", "pepper", "פלפל"),
    ),
)

BAGEL_KEYWORDS = ("bagel", "בייגל")
PITA_KEYWORDS = ("pita", "פיתה")


@dataclass(frozen=True)
class _Portion:
    id: str
    label: str
    grams: float


_CATEGORY_PORTIONS: dict[FoodCategory, tuple[_Portion, ...]] = {
    FoodCategory.EGG: (
        _Portion("1-egg-small", "1 egg small (50g)", 50),
        _Portion("1-egg-medium", "1 egg medium (58g)", 58),
        _Portion("1-egg-large", "1 egg large (63g)", 63),
    ),
    FoodCategory.BEVERAGE: (
        _Portion("1-cup", "1 cup (240ml)", 240),
        _Portion("1-glass", "1 glass (300ml)", 300),
        _Portion("1-bottle", "1 bottle (500ml)", 500),
    ),
    FoodCategory.FRUIT: (
        _Portion("1-small", "1 small (80g)", 80),
        _Portion("1-medium", "1 medium (120g)", 120),
        _Portion("1-large", "1 large (180g)", 180),
    ),
    FoodCategory.VEGETABLE: (
        _Portion("1-small", "1 small (80g)", 80),
        _Portion("1-medium", "1 medium (120g)", 120),
        _Portion("1-cup", "1 cup (150g)", 150),
    ),
}

_SLICE = _Portion("1-slice", "1 slice (30g)", 30)
_TWO_SLICES = _Portion("2-slices", "2 slices (60g)", 60)
_BAGEL = _Portion("1-bagel", "1 bagel (90g)", 90)
_PITA = _Portion("1-pita", "1 pita (60g)", 60)

_CATEGORY_DEFAULTS = {
    FoodCategory.EGG: "1-egg-medium",
    FoodCategory.BREAD: "1-slice",
    FoodCategory.BEVERAGE: "1-cup",
    FoodCategory.FRUIT: "1-medium",
    FoodCategory.VEGETABLE: "1-medium",
}


def detect_category(name: str) -> FoodCategory:
    """Classify a food name by case-insensitive keyword match."""
    for category, keywords in CATEGORY_KEYWORDS:
        if _matches(name, keywords):
            return category
    return FoodCategory.GENERIC


def generate_servings(food: ProviderResult) -> tuple[list[ServingOption], str]:
    """Build the serving menu for a food and return it with the default id.

    The list always starts with the 100g baseline, whose nutrition is the
    food's per-100g values. Gram amounts are unique within the list.
    """
    category = detect_category(food.name)
    portions = [_Portion(BASELINE_ID, "100g", 100)]
    portions.extend(_category_portions(food, category))

    present = {portion.grams for portion in portions}
    for grams in COMMON_GRAMS:
        if grams not in present:
            portions.append(_Portion(f"{grams}g", f"{grams}g", grams))
            present.add(grams)

    default_id = _default_serving_id(food, category, portions)
    servings = [
        ServingOption(
            id=portion.id,
            label=portion.label,
            grams=portion.grams,
            nutrition=_nutrition_for(food.per100g, portion.grams),
            is_default=portion.id == default_id,
        )
        for portion in portions
    ]
    return servings, default_id


def _category_portions(
    food: ProviderResult, category: FoodCategory
) -> list[_Portion]:
    if category is FoodCategory.BREAD:
        portions = [_SLICE]
        if _matches(food.name, PITA_KEYWORDS):
            # A pita weighs the same as two slices, so it takes that place.
            portions.append(_PITA)
        else:
            portions.append(_TWO_SLICES)
        if _matches(food.name, BAGEL_KEYWORDS):
            portions.append(_BAGEL)
        return portions
    if category is FoodCategory.GENERIC:
        serving = food.serving_size_grams
        if serving and serving > 0 and serving != 100:
            label = f"1 serving ({_format_grams(serving)}g)"
            return [_Portion("1-serving", label, serving)]
        return []
    return list(_CATEGORY_PORTIONS[category])


def _default_serving_id(
    food: ProviderResult, category: FoodCategory, portions: list[_Portion]
) -> str:
    if category is FoodCategory.BREAD:
        if _matches(food.name, BAGEL_KEYWORDS):
            return _BAGEL.id
        if _matches(food.name, PITA_KEYWORDS):
            return _PITA.id
    if category is not FoodCategory.GENERIC:
        return _CATEGORY_DEFAULTS[category]

    low, high = SERVING_RANGE_GRAMS
    serving = next((p for p in portions if p.id == "1-serving"), None)
    if serving is not None and low <= serving.grams <= high:
        return serving.id
    return BASELINE_ID


def _nutrition_for(per100g: Per100g, grams: float) -> Per100g:
    if grams == 100:
        return per100g
    return per100g.scaled(grams)


def _matches(name: str, keywords: tuple[str, ...]) -> bool:
    lowered = name.lower()
    return any(keyword.lower() in lowered for keyword in keywords)


def _format_grams(grams: float) -> str:
    if float(grams).is_integer():
        return str(int(grams))
    return f"{grams:.1f}"
