"""
Pokémon TCG API client.

Source of truth for expansions, card names, images and rarities.

API docs: https://docs.pokemontcg.io/
"""

import asyncio
import logging
from typing import Any

import httpx

from cardex.config import (
    EXCLUDED_EXPANSIONS,
    ILLUSTRATION_RARE,
    RARITY_TYPES,
    TRACKED_SERIES_PREFIX,
)
from cardex.models.card import Card, Expansion
from cardex.models.failure import UpstreamError

logger = logging.getLogger(__name__)

SERVICE_NAME = "card catalog"
PAGE_SIZE = 250  # Maximum allowed by the API


def _expansion_from_api(data: dict[str, Any]) -> Expansion:
    set_id = str(data["id"])
    images = data.get("images") or {}
    return Expansion(
        id=set_id,
        name=data.get("name", set_id),
        slug=set_id.lower(),
        logo=images.get("logo"),
        release_date=data.get("releaseDate"),
    )


def _card_from_api(data: dict[str, Any]) -> Card:
    images = data.get("images") or {}
    # Hi-res scans are several MB each; the plain variant shares the URL
    image_url = str(images.get("large") or images.get("small") or "").replace("_hires", "")
    card_set = data.get("set") or {}
    return Card(
        id=str(data["id"]),
        name=data.get("name", ""),
        image_url=image_url,
        expansion=str(card_set.get("id", "")).lower(),
        card_type=RARITY_TYPES.get(data.get("rarity", "")),
    )


def filter_tracked_expansions(expansions: list[Expansion]) -> list[Expansion]:
    """
    Keep Scarlet & Violet expansions that are not explicitly excluded.

    Returns them newest first.
    """
    tracked = [
        exp
        for exp in expansions
        if exp.id.lower().startswith(TRACKED_SERIES_PREFIX)
        and exp.id.lower() not in EXCLUDED_EXPANSIONS
    ]
    return sorted(tracked, key=lambda exp: exp.release_date or "", reverse=True)


class PokemonTCGClient:
    """
    Async client for the catalog API.

    Concurrent calls share a semaphore so a fan-out over many expansions
    never opens more than `max_concurrency` requests at once.
    """

    def __init__(
        self,
        base_url: str,
        api_key: str = "",
        timeout: float = 30.0,
        retries: int = 2,
        max_concurrency: int = 8,
        client: httpx.AsyncClient | None = None,
    ) -> None:
        headers = {"User-Agent": "Cardex/1.0"}
        if api_key:
            headers["X-Api-Key"] = api_key

        self._client = client or httpx.AsyncClient(
            base_url=base_url,
            headers=headers,
            timeout=timeout,
            transport=httpx.AsyncHTTPTransport(retries=retries),
        )
        self._semaphore = asyncio.Semaphore(max_concurrency)

    async def aclose(self) -> None:
        await self._client.aclose()

    async def _get(self, path: str, params: dict[str, Any] | None = None) -> dict[str, Any]:
        async with self._semaphore:
            try:
                response = await self._client.get(path, params=params)
                response.raise_for_status()
                data: dict[str, Any] = response.json()
            except httpx.HTTPError as e:
                logger.error("Catalog request %s failed: %s", path, e)
                raise UpstreamError(SERVICE_NAME, str(e)) from e
        return data

    async def fetch_expansions(self) -> list[Expansion]:
        """
        Fetch every expansion, newest first.

        Raises:
            UpstreamError: If the catalog request fails
        """
        data = await self._get("/sets", params={"orderBy": "-releaseDate"})
        expansions = [_expansion_from_api(item) for item in data.get("data", [])]
        logger.info("Fetched %d expansions from catalog", len(expansions))
        return expansions

    async def fetch_cards_by_expansion(
        self, set_id: str, rarity: str | None = ILLUSTRATION_RARE
    ) -> list[Card]:
        """
        Fetch the cards of one expansion, optionally restricted to a rarity.

        Follows pagination until the reported total is reached.

        Args:
            set_id: Catalog set id (e.g., "sv1")
            rarity: Rarity to keep, or None for every card

        Raises:
            UpstreamError: If any page request fails
        """
        raw_cards: list[dict[str, Any]] = []
        page = 1
        while True:
            data = await self._get(
                "/cards",
                params={
                    "q": f"set.id:{set_id}",
                    "orderBy": "number",
                    "pageSize": PAGE_SIZE,
                    "page": page,
                },
            )
            batch = data.get("data", [])
            raw_cards.extend(batch)
            total = int(data.get("totalCount", len(raw_cards)))
            if not batch or len(raw_cards) >= total:
                break
            page += 1

        if rarity is not None:
            selected = [card for card in raw_cards if card.get("rarity") == rarity]
        else:
            selected = raw_cards

        logger.info(
            "Set %s: %d cards, %d selected (rarity=%s)",
            set_id,
            len(raw_cards),
            len(selected),
            rarity,
        )
        return [_card_from_api(card) for card in selected]

    async def fetch_card(self, card_id: str) -> Card | None:
        """
        Fetch one card by catalog id.

        Returns None if the catalog does not know the id.
        """
        async with self._semaphore:
            try:
                response = await self._client.get(f"/cards/{card_id}")
                if response.status_code == httpx.codes.NOT_FOUND:
                    return None
                response.raise_for_status()
                data = response.json()
            except httpx.HTTPError as e:
                logger.error("Catalog lookup of card %s failed: %s", card_id, e)
                raise UpstreamError(SERVICE_NAME, str(e)) from e
        return _card_from_api(data["data"])

    async def fetch_tracked_expansions(self) -> list[Expansion]:
        """Fetch expansions and keep only the tracked ones."""
        return filter_tracked_expansions(await self.fetch_expansions())
