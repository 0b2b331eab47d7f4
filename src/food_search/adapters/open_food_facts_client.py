"""Open Food Facts search API client."""

from dataclasses import dataclass
from typing import Protocol

import httpx

_PRODUCT_FIELDS = (
    "product_name",
    "brands",
    "image_url",
    "nutriments",
    "code",
)


class OpenFoodFactsClient(Protocol):
    """Interface for Open Food Facts text search."""

    async def search_products(
        self, query: str, page_size: int = 20
    ) -> dict[str, object]:
        """Search products by free text and return raw API data."""


@dataclass
class HttpxOpenFoodFactsClient(OpenFoodFactsClient):
    """HTTPX-backed Open Food Facts client."""

    search_url: str
    user_agent: str
    http_client: httpx.AsyncClient
    localized_language: str | None = None
    timeout_seconds: float = 10.0

    @classmethod
    def create(
        cls,
        search_url: str,
        user_agent: str,
        localized_language: str | None = None,
        timeout_seconds: float = 10.0,
    ) -> "HttpxOpenFoodFactsClient":
        """Create an Open Food Facts client with a managed httpx session."""
        return cls(
            search_url=search_url,
            user_agent=user_agent,
            http_client=httpx.AsyncClient(),
            localized_language=localized_language,
            timeout_seconds=timeout_seconds,
        )

    async def search_products(
        self, query: str, page_size: int = 20
    ) -> dict[str, object]:
        """Run a simple text search over products."""
        fields = list(_PRODUCT_FIELDS)
        if self.localized_language:
            fields.append(f"product_name_{self.localized_language}")
        response = await self.http_client.get(
            self.search_url,
            params={
                "search_terms": query,
                "search_simple": "1",
                "action": "process",
                "json": "1",
                "page_size": str(page_size),
                "fields": ",".join(fields),
            },
            headers={"User-Agent": self.user_agent, "Accept": "application/json"},
            timeout=self.timeout_seconds,
        )
        response.raise_for_status()
        return response.json()

    async def close(self) -> None:
        """Close the underlying HTTP session."""
        await self.http_client.aclose()
