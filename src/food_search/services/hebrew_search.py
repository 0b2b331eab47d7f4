"""Hebrew-aware name normalization and ranking for the government database."""

import re
from collections.abc import Sequence

from food_search.domain.sources import GovernmentFoodRecord

_NIQQUD = re.compile("[\u0591-\u05C7]")
_PUNCTUATION = re.compile(r"[.,\-()\[\]{}:;\"'!?״]")
_WHITESPACE = re.compile(r"\s+")

STOP_WORDS = frozenset({"של", "עם", "ו", "את", "על", "ב", "ה", "מ", "כ", "ל"})

COMPOSITE_INDICATORS = (
    ",",
    " עם ",
    " ו",
    "בתיבול",
    "במילוי",
    "ברוטב",
    "מעורב",
    "מוקפץ",
    "מבושל עם",
    "ממולא",
    "תערובת",
    "סלט",
    "מרק",
    "תבשיל",
    "מנה",
)

BASIC_CATEGORIES = (
    "פרי",
    "פרות",
    "ירק",
    "ירקות",
    "בשר",
    "עוף",
    "דגים",
    "דג ",
    "ביצה",
    "ביצים",
    "לחם",
    "חלב",
    "גבינה",
    "קטניות",
    "דגן",
    "דגנים",
    "אורז",
    "פסטה",
)

SYNONYMS = {
    "תפוח": "תפוח עץ",
    "תפוחים": "תפוח עץ",
    "עגבניות": "עגבניה",
    "עגבנייה": "עגבניה",
    "בטטה": "תפוח אדמה מתוק",
    "בטטות": "תפוח אדמה מתוק",
    "מלפפונים": "מלפפון",
    "גזרים": "גזר",
    "בצלים": "בצל",
    "פלפלים": "פלפל",
    "בננות": "בננה",
    "תפוזים": "תפוז",
    "לימונים": "לימון",
}

_EXACT_MATCH = 60
_PREFIX_MATCH = 35
_TOKEN_OVERLAP_STEP = 10
_TOKEN_OVERLAP_MAX = 25
_BASIC_FOOD = 20
_BASIC_CATEGORY = 10
_COMPOSITE_PENALTY = -20


def normalize_name(text: str | None) -> str:
    """Strip niqqud and punctuation, collapse whitespace, lowercase."""
    if not text:
        return ""
    cleaned = _NIQQUD.sub("", text)
    cleaned = _PUNCTUATION.sub("", cleaned)
    cleaned = _WHITESPACE.sub(" ", cleaned)
    return cleaned.lower().strip()


def tokenize(text: str | None) -> list[str]:
    """Split a normalized name into tokens, dropping stop words."""
    return [
        token
        for token in normalize_name(text).split(" ")
        if token and token not in STOP_WORDS
    ]


def apply_synonyms(query: str) -> str:
    """Map a query to its canonical produce name, if one is known."""
    normalized = normalize_name(query)
    return SYNONYMS.get(normalized, normalized)


def is_basic_food(name: str | None, category: str | None = None) -> bool:
    """Return True for single-ingredient foods rather than composite dishes."""
    if _is_composite(name):
        return False
    if 1 <= len(tokenize(name)) <= 3:
        return True
    return _has_basic_category(category)


def score_name(name: str | None, category: str | None, query: str) -> int:
    """Score how well a Hebrew food name matches the query."""
    normalized_query = normalize_name(query)
    normalized_name = normalize_name(name)
    query_tokens = tokenize(query)
    name_tokens = tokenize(name)

    score = 0
    if normalized_name and normalized_name == normalized_query:
        score += _EXACT_MATCH
    if name_tokens and query_tokens and name_tokens[0].startswith(query_tokens[0]):
        score += _PREFIX_MATCH

    overlap = sum(
        1
        for query_token in query_tokens
        if any(
            query_token in name_token or name_token in query_token
            for name_token in name_tokens
        )
    )
    if overlap:
        score += min(_TOKEN_OVERLAP_MAX, overlap * _TOKEN_OVERLAP_STEP)

    basic = is_basic_food(name, category)
    if basic and len(query_tokens) <= 2:
        score += _BASIC_FOOD
    if _has_basic_category(category):
        score += _BASIC_CATEGORY
    if not basic and _is_composite(name):
        score += _COMPOSITE_PENALTY
    return score


def rank_records(
    records: Sequence[GovernmentFoodRecord], query: str
) -> list[GovernmentFoodRecord]:
    """Order records by match score, shorter Hebrew names first on ties."""
    return sorted(
        records,
        key=lambda record: (
            -score_name(record.name_he, record.category, query),
            len(record.name_he or ""),
        ),
    )


def _is_composite(name: str | None) -> bool:
    # Commas are significant here, so only niqqud and spacing are normalized.
    text = _WHITESPACE.sub(" ", _NIQQUD.sub("", name or "")).lower()
    return any(indicator in text for indicator in COMPOSITE_INDICATORS)


def _has_basic_category(category: str | None) -> bool:
    if not category:
        return False
    normalized = normalize_name(category)
    return any(keyword in normalized for keyword in BASIC_CATEGORIES)
