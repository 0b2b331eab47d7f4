"""Open Food Facts provider."""

import logging
from dataclasses import dataclass

import httpx

from food_search.adapters.open_food_facts_client import OpenFoodFactsClient
from food_search.domain.nutrition import ProviderResult, SourceTag
from food_search.providers.base import (
    MIN_QUERY_LENGTH,
    build_per100g,
    clean_text,
    normalize_for_dedup,
)

_logger = logging.getLogger(__name__)

_MAX_PAGE_SIZE = 50
_GRAMS_TO_MG = 1000


@dataclass
class OpenFoodFactsProvider:
    """Searches the crowd-sourced Open Food Facts database."""

    client: OpenFoodFactsClient
    localized_language: str | None = None
    name: SourceTag = SourceTag.INTERNATIONAL_DB

    def supports(self, query: str) -> bool:
        """Accept any query of at least two characters."""
        return len(query) >= MIN_QUERY_LENGTH

    async def search(self, query: str, limit: int) -> list[ProviderResult]:
        """Search products and convert those with a name and nutrition."""
        try:
            payload = await self.client.search_products(
                query, page_size=min(limit, _MAX_PAGE_SIZE)
            )
        except httpx.TimeoutException:
            _logger.warning("Open Food Facts search timed out: query=%s", query)
            return []
        except httpx.HTTPStatusError as exc:
            _logger.warning(
                "Open Food Facts search failed: query=%s status=%s",
                query,
                exc.response.status_code,
            )
            return []
        except (httpx.HTTPError, ValueError) as exc:
            _logger.warning(
                "Open Food Facts search failed: query=%s error=%s", query, exc
            )
            return []

        products = payload.get("products") if isinstance(payload, dict) else None
        if not isinstance(products, list) or not products:
            _logger.info("Open Food Facts returned no products: query=%s", query)
            return []

        results: list[ProviderResult] = []
        for product in products:
            try:
                converted = self._convert(product)
            except (KeyError, TypeError, ValueError, AttributeError) as exc:
                _logger.warning("Skipping malformed Open Food Facts product: %s", exc)
                continue
            if converted is not None:
                results.append(converted)
        _logger.info(
            "Open Food Facts products: query=%s found=%s usable=%s",
            query,
            len(products),
            len(results),
        )
        return results

    def _convert(self, product: dict[str, object]) -> ProviderResult | None:
        localized_name = None
        if self.localized_language:
            localized_name = clean_text(
                product.get(f"product_name_{self.localized_language}")
            )
        name = localized_name or clean_text(product.get("product_name"))
        if not name:
            return None

        nutriments = product.get("nutriments") or {}
        sodium_g = nutriments.get("sodium_100g")
        per100g = build_per100g(
            kcal=nutriments.get("energy-kcal_100g"),
            kilojoules=nutriments.get("energy-kj_100g"),
            protein_g=nutriments.get("proteins_100g"),
            carbs_g=nutriments.get("carbohydrates_100g"),
            fat_g=nutriments.get("fat_100g"),
            fiber_g=nutriments.get("fiber_100g"),
            sugar_g=nutriments.get("sugars_100g"),
            sodium_mg=(
                float(sodium_g) * _GRAMS_TO_MG if sodium_g not in (None, "") else None
            ),
        )
        if per100g is None:
            return None

        brand = _first_brand(product.get("brands"))
        return ProviderResult(
            id=clean_text(product.get("code")) or normalize_for_dedup(name, brand),
            name=name,
            name_localized=localized_name,
            brand=brand,
            per100g=per100g,
            image_url=clean_text(product.get("image_url")),
        )


def _first_brand(brands: object) -> str | None:
    text = clean_text(brands)
    if not text:
        return None
    return clean_text(text.split(",")[0])
