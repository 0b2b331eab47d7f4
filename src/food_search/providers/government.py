"""Government nutrition database provider."""

import asyncio
import logging
from dataclasses import dataclass
from typing import Protocol

from food_search.domain.nutrition import ProviderResult, SourceTag
from food_search.domain.sources import GovernmentFoodRecord
from food_search.providers.base import (
    DEFAULT_TIMEOUT_SECONDS,
    MIN_QUERY_LENGTH,
    build_per100g,
    clean_text,
)
from food_search.services.hebrew_search import (
    apply_synonyms,
    normalize_name,
    rank_records,
    tokenize,
)

_logger = logging.getLogger(__name__)

_PRIMARY_LIMIT = 100
_SECONDARY_LIMIT = 50


class GovernmentFoodRepository(Protocol):
    """Read access to the government foods table."""

    def search_by_name(self, term: str, limit: int) -> list[GovernmentFoodRecord]:
        """Return foods whose Hebrew name contains the term."""


@dataclass
class GovernmentFoodProvider:
    """Searches the verified government food composition table."""

    repository: GovernmentFoodRepository
    timeout_seconds: float = DEFAULT_TIMEOUT_SECONDS
    name: SourceTag = SourceTag.GOVERNMENT_DB

    def supports(self, query: str) -> bool:
        """Accept any query of at least two characters."""
        return len(query) >= MIN_QUERY_LENGTH

    async def search(self, query: str, limit: int) -> list[ProviderResult]:
        """Look up the query by name, first token and synonym in parallel."""
        try:
            records = await asyncio.wait_for(
                self._lookup(query), timeout=self.timeout_seconds
            )
        except TimeoutError:
            _logger.warning("Government search timed out: query=%s", query)
            return []
        except Exception:
            _logger.exception("Government search failed: query=%s", query)
            return []

        if not records:
            return []
        results: list[ProviderResult] = []
        for record in rank_records(records, query)[:limit]:
            converted = _convert(record)
            if converted is not None:
                results.append(converted)
        return results

    async def _lookup(self, query: str) -> list[GovernmentFoodRecord]:
        normalized = normalize_name(query)
        tokens = tokenize(query)
        terms = [(normalized, _PRIMARY_LIMIT)]
        if len(tokens) > 1:
            terms.append((tokens[0], _SECONDARY_LIMIT))
        synonym = apply_synonyms(query)
        if synonym != normalized:
            terms.append((synonym, _SECONDARY_LIMIT))

        batches = await asyncio.gather(
            *(
                asyncio.to_thread(self.repository.search_by_name, term, term_limit)
                for term, term_limit in terms
            ),
            return_exceptions=True,
        )

        seen: set[str] = set()
        records: list[GovernmentFoodRecord] = []
        for (term, _), batch in zip(terms, batches, strict=True):
            if isinstance(batch, BaseException):
                _logger.warning(
                    "Government lookup failed: term=%s error=%s", term, batch
                )
                continue
            for record in batch:
                if record.id not in seen:
                    seen.add(record.id)
                    records.append(record)
        return records


def _convert(record: GovernmentFoodRecord) -> ProviderResult | None:
    """Convert a table row, skipping unnamed foods and rows without nutrition."""
    name = clean_text(record.name_en) or clean_text(record.name_he)
    if not name:
        return None
    try:
        per100g = build_per100g(
            kcal=record.calories,
            protein_g=record.protein_g,
            carbs_g=record.carbs_g,
            fat_g=record.fat_g,
            fiber_g=record.fiber_g,
            sugar_g=record.sugars_g,
            sodium_mg=record.sodium_mg,
        )
    except ValueError as exc:
        _logger.warning("Skipping government food %s: %s", record.id, exc)
        return None
    if per100g is None:
        return None
    return ProviderResult(
        id=record.id,
        name=name,
        name_localized=clean_text(record.name_he),
        brand=clean_text(record.brand),
        per100g=per100g,
    )
