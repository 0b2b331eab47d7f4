"""Merge, deduplicate and rank results from several food providers."""

from collections.abc import Mapping, Sequence
from dataclasses import dataclass, field

from food_search.domain.nutrition import FoodSearchResult, ProviderResult, SourceTag
from food_search.providers.base import normalize_for_dedup
from food_search.services.servings import generate_servings

# Tie-break order when duplicates are otherwise equal; higher wins.
SOURCE_RANK: dict[SourceTag, int] = {
    SourceTag.GOVERNMENT_DB: 4,
    SourceTag.USER_HISTORY: 3,
    SourceTag.COMMERCIAL_DB: 2,
    SourceTag.INTERNATIONAL_DB: 1,
}


@dataclass(frozen=True)
class ScoringWeights:
    """Additive relevance weights.

    Relative order must hold: exact > prefix > substring > brand >
    completeness > image.
    """

    exact_match: int = 100
    prefix_match: int = 50
    name_contains: int = 25
    localized_contains: int = 20
    has_brand: int = 5
    brand_contains: int = 15
    complete_nutrition: int = 10
    has_image: int = 3
    source_bonus: Mapping[SourceTag, int] = field(
        default_factory=lambda: {
            SourceTag.GOVERNMENT_DB: 8,
            SourceTag.USER_HISTORY: 7,
            SourceTag.COMMERCIAL_DB: 6,
            SourceTag.INTERNATIONAL_DB: 5,
        }
    )


DEFAULT_WEIGHTS = ScoringWeights()


@dataclass(frozen=True)
class TaggedResult:
    """A provider result paired with the source that produced it."""

    source: SourceTag
    result: ProviderResult


def flatten(
    provider_results: Mapping[SourceTag, Sequence[ProviderResult]],
) -> list[TaggedResult]:
    """Pair every result with its source, keeping mapping order."""
    return [
        TaggedResult(source=SourceTag(source), result=result)
        for source, results in provider_results.items()
        for result in results
    ]


def deduplicate(items: Sequence[TaggedResult]) -> list[TaggedResult]:
    """Keep one winner per normalized name|brand key.

    Winners are chosen by complete nutrition, then image presence, then
    source rank. Groups keep the position of their first member.
    """
    winners: dict[str, TaggedResult] = {}
    for item in items:
        key = normalize_for_dedup(item.result.name, item.result.brand)
        current = winners.get(key)
        if current is None or _precedence(item) > _precedence(current):
            winners[key] = item
    return list(winners.values())


def score_result(
    item: TaggedResult, query: str, weights: ScoringWeights = DEFAULT_WEIGHTS
) -> int:
    """Score a result's relevance to the query."""
    result = item.result
    needle = query.lower().strip()
    name = result.name.lower()
    localized = (result.name_localized or "").lower()

    score = 0
    if name == needle or localized == needle:
        score += weights.exact_match
    elif name.startswith(needle) or (localized and localized.startswith(needle)):
        score += weights.prefix_match
    if needle in name:
        score += weights.name_contains
    if localized and needle in localized:
        score += weights.localized_contains
    if result.brand:
        score += weights.has_brand
        if needle in result.brand.lower():
            score += weights.brand_contains
    if not result.per100g.is_incomplete:
        score += weights.complete_nutrition
    if result.image_url:
        score += weights.has_image
    score += weights.source_bonus.get(item.source, 0)
    return score


def merge_and_rank(
    provider_results: Mapping[SourceTag, Sequence[ProviderResult]],
    query: str,
    weights: ScoringWeights = DEFAULT_WEIGHTS,
) -> list[FoodSearchResult]:
    """Flatten, deduplicate, score and sort, then attach serving options."""
    items = flatten(provider_results)
    if not items:
        return []

    survivors = deduplicate(items)
    scored = [(score_result(item, query, weights), item) for item in survivors]
    scored.sort(key=lambda pair: pair[0], reverse=True)
    return [_to_search_result(item) for _, item in scored]


def split_recent(
    results: Sequence[FoodSearchResult], max_recent: int = 5
) -> tuple[list[FoodSearchResult], list[FoodSearchResult]]:
    """Separate results the user used before from database results."""
    recent = [result for result in results if result.last_used is not None]
    database = [result for result in results if result.last_used is None]
    return recent[:max_recent], database


def _precedence(item: TaggedResult) -> tuple[bool, bool, int]:
    return (
        not item.result.per100g.is_incomplete,
        bool(item.result.image_url),
        SOURCE_RANK.get(item.source, 0),
    )


def _to_search_result(item: TaggedResult) -> FoodSearchResult:
    result = item.result
    servings, default_serving = generate_servings(result)
    return FoodSearchResult(
        id=f"{item.source}:{result.id}",
        source=item.source,
        name=result.name,
        name_localized=result.name_localized,
        brand=result.brand,
        per100g=result.per100g,
        servings=servings,
        default_serving=default_serving,
        image_url=result.image_url,
        is_partial=result.per100g.is_incomplete,
        last_used=result.last_used if item.source is SourceTag.USER_HISTORY else None,
    )
