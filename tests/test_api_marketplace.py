"""Tests for marketplace API endpoints."""

from unittest.mock import MagicMock

from httpx import AsyncClient

from cardex.models.failure import UpstreamError
from cardex.models.listing import MarketplaceExpansion
from sample_data import auth, make_listing

CHARMANDER = {"id": "sv3pt5-168", "name": "Charmander", "expansion": "sv3pt5"}


class TestPriceSearch:
    async def test_best_price(self, client: AsyncClient, marketplace: MagicMock) -> None:
        """The cheapest acceptable listing is returned."""
        marketplace.fetch_listings.return_value = [
            make_listing(1, "Charmander - Illustration Rare", 900),
            make_listing(2, "Charmander - Illustration Rare", 650),
            make_listing(3, "Charmander", 200),
            make_listing(4, "Charmander - Illustration Rare", 300, condition="Heavily Played"),
        ]

        response = await client.post("/marketplace/search", json=CHARMANDER, headers=auth())

        assert response.status_code == 200
        data = response.json()["data"]
        assert data["best_price"]["id"] == 2
        assert data["best_price"]["price_cents"] == 650
        assert data["total_found"] == 2
        assert data["card"]["name"] == "Charmander"
        marketplace.fetch_listings.assert_awaited_once_with(3387)

    async def test_unmapped_expansion(self, client: AsyncClient, marketplace: MagicMock) -> None:
        """Cards from unmapped expansions have no price."""
        response = await client.post(
            "/marketplace/search",
            json={"name": "Eevee", "expansion": "sv8pt5"},
            headers=auth(),
        )

        assert response.status_code == 200
        assert response.json()["data"]["best_price"] is None
        assert response.json()["data"]["total_found"] == 0
        marketplace.fetch_listings.assert_not_awaited()

    async def test_marketplace_down(self, client: AsyncClient, marketplace: MagicMock) -> None:
        """Marketplace failures answer 502."""
        marketplace.fetch_listings.side_effect = UpstreamError("marketplace", "503 from upstream")

        response = await client.post("/marketplace/search", json=CHARMANDER, headers=auth())

        assert response.status_code == 502
        body = response.json()
        assert body["failure"]["message"] == "The marketplace service is unavailable"
        assert "503 from upstream" not in response.text

    async def test_missing_name(self, client: AsyncClient) -> None:
        """A card without a name is rejected."""
        response = await client.post(
            "/marketplace/search", json={"expansion": "sv3pt5"}, headers=auth()
        )

        assert response.status_code == 400


class TestExpansionMatches:
    async def test_proposes_matches(
        self, seeded_client: AsyncClient, marketplace: MagicMock
    ) -> None:
        """Stored expansions are matched against marketplace expansions."""
        marketplace.fetch_expansions.return_value = [
            MarketplaceExpansion(id=3387, code="sv2a", name="Pokémon Card 151"),
            MarketplaceExpansion(id=3239, code="svi", name="Scarlet & Violet"),
            MarketplaceExpansion(id=1, code="mh3", name="Modern Horizons 3"),
        ]

        response = await seeded_client.get("/marketplace/expansions", headers=auth())

        assert response.status_code == 200
        data = response.json()["data"]
        assert [exp["id"] for exp in data["pokemon_expansions"]] == [3387, 3239]
        matches = {m["expansion_name"]: [c["id"] for c in m["candidates"]] for m in data["matches"]}
        assert matches == {"151": [3387], "Scarlet & Violet": [3239]}
