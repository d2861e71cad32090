"""Open Food Facts product API client."""

from dataclasses import dataclass
from typing import Protocol

import httpx


class OpenFoodFactsClient(Protocol):
    """Interface for Open Food Facts API interactions."""

    async def get_product(self, barcode: str) -> dict[str, object]:
        """Fetch a product by barcode and return raw API data."""


@dataclass
class HttpxOpenFoodFactsClient(OpenFoodFactsClient):
    """HTTPX-backed Open Food Facts client."""

    base_url: str
    http_client: httpx.AsyncClient
    timeout_seconds: float = 8.0

    @classmethod
    def create(
        cls, base_url: str, user_agent: str, timeout_seconds: float = 8.0
    ) -> "HttpxOpenFoodFactsClient":
        """Create a client with a managed httpx session."""
        return cls(
            base_url=base_url.rstrip("/"),
            http_client=httpx.AsyncClient(headers={"User-Agent": user_agent}),
            timeout_seconds=timeout_seconds,
        )

    async def get_product(self, barcode: str) -> dict[str, object]:
        """Fetch a product by barcode.

        A 404 is returned as a regular payload with ``status`` 0, which is how
        the API reports unknown barcodes on its 200 responses too.
        """
        url = f"{self.base_url}/api/v2/product/{barcode}.json"
        response = await self.http_client.get(url, timeout=self.timeout_seconds)
        if response.status_code == httpx.codes.NOT_FOUND:
            return {"status": 0, "code": barcode}
        response.raise_for_status()
        return response.json()

    async def close(self) -> None:
        """Close the underlying HTTP session."""
        await self.http_client.aclose()
