"""
CardTrader marketplace client.

Source of truth for live prices only. Listings are fetched per
marketplace expansion id; nothing is cached.

API docs: https://www.cardtrader.com/docs/api/full/reference
"""

import asyncio
import logging
from typing import Any

import httpx

from cardex.models.failure import UpstreamError
from cardex.models.listing import Listing, MarketplaceExpansion

logger = logging.getLogger(__name__)

SERVICE_NAME = "marketplace"


class CardTraderClient:
    """Async client for the marketplace API (bearer token auth)."""

    def __init__(
        self,
        base_url: str,
        token: str = "",
        timeout: float = 30.0,
        retries: int = 2,
        max_concurrency: int = 8,
        client: httpx.AsyncClient | None = None,
    ) -> None:
        headers = {"User-Agent": "Cardex/1.0", "Content-Type": "application/json"}
        if token:
            headers["Authorization"] = f"Bearer {token}"

        self._client = client or httpx.AsyncClient(
            base_url=base_url,
            headers=headers,
            timeout=timeout,
            transport=httpx.AsyncHTTPTransport(retries=retries),
        )
        self._semaphore = asyncio.Semaphore(max_concurrency)

    async def aclose(self) -> None:
        await self._client.aclose()

    async def _get(self, path: str, params: dict[str, Any] | None = None) -> Any:
        async with self._semaphore:
            try:
                response = await self._client.get(path, params=params)
                response.raise_for_status()
                return response.json()
            except httpx.HTTPError as e:
                logger.error("Marketplace request %s failed: %s", path, e)
                raise UpstreamError(SERVICE_NAME, str(e)) from e

    async def fetch_expansions(self) -> list[MarketplaceExpansion]:
        """
        Fetch every expansion known to the marketplace, all games included.

        Raises:
            UpstreamError: If the request fails
        """
        data = await self._get("/expansions")
        return [
            MarketplaceExpansion(id=int(item["id"]), code=item.get("code", ""), name=item["name"])
            for item in data
        ]

    async def fetch_listings(self, expansion_id: int) -> list[Listing]:
        """
        Fetch all listings of one marketplace expansion.

        The API groups listings by blueprint id; the groups are flattened.

        Raises:
            UpstreamError: If the request fails
        """
        data: dict[str, list[dict[str, Any]]] = await self._get(
            "/marketplace/products", params={"expansion_id": expansion_id}
        )
        listings = [Listing.from_api(product) for group in data.values() for product in group]
        logger.info("Fetched %d listings for marketplace expansion %d", len(listings), expansion_id)
        return listings
