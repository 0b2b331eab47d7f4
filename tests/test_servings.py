"""Tests for serving size generation."""

from food_search.domain.nutrition import Per100g
from food_search.services.servings import (
    FoodCategory,
    detect_category,
    generate_servings,
)
from tests.conftest import make_result


def _by_id(servings):  # type: ignore[no-untyped-def]
    return {serving.id: serving for serving in servings}


def test_detect_category_priority_order() -> None:
    assert detect_category("Egg bread") == FoodCategory.EGG
    assert detect_category("Whole wheat BREAD") == FoodCategory.BREAD
    assert detect_category("Apple juice") == FoodCategory.BEVERAGE
    assert detect_category("Green apple") == FoodCategory.FRUIT
    assert detect_category("Cherry tomato") == FoodCategory.VEGETABLE
    assert detect_category("חלב 3%") == FoodCategory.BEVERAGE
    assert detect_category("Chicken breast") == FoodCategory.GENERIC


def test_linear_scaling_for_200g() -> None:
    food = make_result(
        "Chicken breast", kcal=200, protein_g=10.0, carbs_g=20.0, fat_g=5.0
    )

    servings, _ = generate_servings(food)
    option = _by_id(servings)["200g"]

    assert option.grams == 200
    assert option.nutrition == Per100g(
        kcal=400, protein_g=20.0, carbs_g=40.0, fat_g=10.0
    )


def test_baseline_equals_source_values() -> None:
    food = make_result("Rice", kcal=130, protein_g=2.7, carbs_g=28.2, fat_g=0.3)

    servings, _ = generate_servings(food)
    baseline = [serving for serving in servings if serving.grams == 100]

    assert len(baseline) == 1
    assert baseline[0].id == "100g"
    assert baseline[0].nutrition == food.per100g


def test_egg_servings_default_to_medium() -> None:
    servings, default_id = generate_servings(make_result("Egg, whole, raw"))
    options = _by_id(servings)

    assert default_id == "1-egg-medium"
    assert options["1-egg-small"].grams == 50
    assert options["1-egg-medium"].label == "1 egg medium (58g)"
    assert options["1-egg-large"].grams == 63
    # 50g is already covered by the small egg.
    assert "50g" not in options
    assert [s.id for s in servings if s.is_default] == ["1-egg-medium"]


def test_bread_servings_and_bagel_default() -> None:
    servings, default_id = generate_servings(make_result("Sesame bagel"))
    options = _by_id(servings)

    assert default_id == "1-bagel"
    assert options["1-slice"].grams == 30
    assert options["2-slices"].grams == 60
    assert options["1-bagel"].grams == 90


def test_pita_takes_the_place_of_two_slices() -> None:
    servings, default_id = generate_servings(make_result("Whole wheat pita"))
    options = _by_id(servings)

    assert default_id == "1-pita"
    assert options["1-pita"].grams == 60
    assert "2-slices" not in options
    grams = [serving.grams for serving in servings]
    assert len(grams) == len(set(grams))


def test_beverage_servings_default_to_cup() -> None:
    servings, default_id = generate_servings(make_result("Skim milk"))
    options = _by_id(servings)

    assert default_id == "1-cup"
    assert options["1-cup"].label == "1 cup (240ml)"
    assert options["1-glass"].grams == 300
    assert options["1-bottle"].grams == 500


def test_vegetable_cup_replaces_common_150g() -> None:
    servings, default_id = generate_servings(make_result("Carrot, raw"))
    options = _by_id(servings)

    assert default_id == "1-medium"
    assert options["1-cup"].grams == 150
    assert "150g" not in options
    assert {"50g", "200g", "250g"} <= set(options)


def test_generic_uses_provider_serving_in_range() -> None:
    food = make_result("Granola bar", serving_size_grams=40)
    servings, default_id = generate_servings(food)
    options = _by_id(servings)

    assert options["1-serving"].label == "1 serving (40g)"
    # 40g is outside the 50-300g window, so the baseline stays default.
    assert default_id == "100g"
    assert options["100g"].is_default

    food = make_result("Protein shake powder", serving_size_grams=250)
    servings, default_id = generate_servings(food)

    assert default_id == "1-serving"
    assert "250g" not in _by_id(servings)


def test_generic_serving_of_100g_is_not_duplicated() -> None:
    servings, default_id = generate_servings(
        make_result("Hummus", serving_size_grams=100)
    )

    assert default_id == "100g"
    assert [s.id for s in servings] == ["100g", "50g", "150g", "200g", "250g"]


def test_servings_are_reproducible() -> None:
    food = make_result("Banana", kcal=89, protein_g=1.1, carbs_g=22.8, fat_g=0.3)

    assert generate_servings(food) == generate_servings(food)
