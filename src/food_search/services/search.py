"""Food search orchestration across providers."""

import asyncio
import logging
import time
from collections.abc import Sequence
from dataclasses import dataclass, field

from food_search.domain.nutrition import FoodSearchResult, ProviderResult, SourceTag
from food_search.providers.base import DEFAULT_TIMEOUT_SECONDS, FoodProvider
from food_search.providers.user_history import UserFoodRepository, UserHistoryProvider
from food_search.services.ranking import ScoringWeights, merge_and_rank

_logger = logging.getLogger(__name__)


class InvalidSearchRequest(ValueError):
    """Raised when the caller passes an unusable query or limit."""


@dataclass(frozen=True)
class SearchOutcome:
    """Ranked results plus the sources that contributed to them."""

    results: list[FoodSearchResult]
    sources: list[SourceTag]


@dataclass
class FoodSearchService:
    """Fans a query out to providers and ranks whatever comes back.

    A provider that raises, times out or returns nothing contributes an
    empty list; the search itself only fails on invalid input.
    """

    providers: Sequence[FoodProvider]
    user_food_repository: UserFoodRepository | None = None
    provider_timeout_seconds: float = DEFAULT_TIMEOUT_SECONDS
    deadline_seconds: float | None = None
    recent_days: int = 30
    weights: ScoringWeights = field(default_factory=ScoringWeights)

    def __post_init__(self) -> None:
        if any(provider is None for provider in self.providers):
            raise ValueError("Food providers must not be None")

    async def search(
        self,
        query: str,
        limit: int,
        *,
        user_id: str | None = None,
        include_recent: bool = True,
    ) -> list[FoodSearchResult]:
        """Return up to ``limit`` ranked results for the query."""
        outcome = await self.run(
            query, limit, user_id=user_id, include_recent=include_recent
        )
        return outcome.results[:limit]

    async def run(
        self,
        query: str,
        limit: int,
        *,
        user_id: str | None = None,
        include_recent: bool = True,
    ) -> SearchOutcome:
        """Query all supporting providers and merge their results."""
        cleaned = query.strip() if query else ""
        if not cleaned:
            raise InvalidSearchRequest("Query must not be empty")
        if limit <= 0:
            raise InvalidSearchRequest("Limit must be positive")

        providers = self._providers_for(user_id, include_recent)
        collected = await self.collect(providers, cleaned, limit)
        results = merge_and_rank(collected, cleaned, self.weights)
        sources = [source for source, items in collected.items() if items]
        _logger.info(
            "Food search: query=%s providers=%s results=%s",
            cleaned,
            len(collected),
            len(results),
        )
        return SearchOutcome(results=results, sources=sources)

    async def collect(
        self, providers: Sequence[FoodProvider], query: str, limit: int
    ) -> dict[SourceTag, list[ProviderResult]]:
        """Run supporting providers concurrently, keyed in registration order."""
        active = [provider for provider in providers if provider.supports(query)]
        if not active:
            return {}

        tasks = [
            asyncio.create_task(self._run_provider(provider, query, limit))
            for provider in active
        ]
        done, pending = await asyncio.wait(tasks, timeout=self.deadline_seconds)
        for task in pending:
            task.cancel()
        if pending:
            _logger.warning(
                "Search deadline reached, abandoning %s provider(s)", len(pending)
            )

        collected: dict[SourceTag, list[ProviderResult]] = {}
        for provider, task in zip(active, tasks, strict=True):
            results = task.result() if task in done else []
            collected.setdefault(provider.name, []).extend(results)
        return collected

    def _providers_for(
        self, user_id: str | None, include_recent: bool
    ) -> list[FoodProvider]:
        providers = list(self.providers)
        if user_id and include_recent and self.user_food_repository is not None:
            providers.append(
                UserHistoryProvider(
                    repository=self.user_food_repository,
                    user_id=user_id,
                    recent_days=self.recent_days,
                    timeout_seconds=self.provider_timeout_seconds,
                )
            )
        return providers

    async def _run_provider(
        self, provider: FoodProvider, query: str, limit: int
    ) -> list[ProviderResult]:
        started = time.perf_counter()
        try:
            results = await asyncio.wait_for(
                provider.search(query, limit), timeout=self.provider_timeout_seconds
            )
        except TimeoutError:
            _logger.warning("Provider %s timed out", provider.name)
            return []
        except Exception:
            _logger.exception("Provider %s failed", provider.name)
            return []
        elapsed_ms = (time.perf_counter() - started) * 1000
        _logger.info(
            "Provider %s: %s results (%.0fms)", provider.name, len(results), elapsed_ms
        )
        return list(results)
