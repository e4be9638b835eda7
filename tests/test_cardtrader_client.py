"""Tests for the marketplace client."""

import httpx
import pytest
import respx

from cardex.clients.cardtrader import CardTraderClient
from cardex.models.failure import UpstreamError

BASE_URL = "https://marketplace.test/api/v2"


def product(product_id: int, name: str, cents: int, hub: bool = True) -> dict:
    return {
        "id": product_id,
        "blueprint_id": 900 + product_id,
        "name_en": name,
        "quantity": 2,
        "price": {"cents": cents, "currency": "EUR", "formatted": f"€{cents / 100:.2f}"},
        "description": "Pack fresh",
        "properties_hash": {"condition": "Near Mint", "pokemon_language": "en"},
        "expansion": {"id": 3387, "code": "sv2a", "name_en": "Pokémon Card 151"},
        "user": {
            "username": "pallet-town-cards",
            "can_sell_via_hub": hub,
            "country_code": "DE",
        },
    }


@pytest.fixture
async def marketplace_client():
    client = CardTraderClient(BASE_URL, token="jwt-token", retries=0)
    yield client
    await client.aclose()


class TestFetchListings:
    @respx.mock
    async def test_flattens_blueprint_groups(self, marketplace_client: CardTraderClient) -> None:
        """Listings grouped by blueprint are returned as one list."""
        route = respx.get(f"{BASE_URL}/marketplace/products").mock(
            return_value=httpx.Response(
                200,
                json={
                    "9001": [product(1, "Charmander", 450), product(2, "Charmander", 700)],
                    "9002": [product(3, "Bulbasaur", 300, hub=False)],
                },
            )
        )

        listings = await marketplace_client.fetch_listings(3387)

        assert [listing.id for listing in listings] == [1, 2, 3]
        request = route.calls.last.request
        assert request.url.params["expansion_id"] == "3387"
        assert request.headers["Authorization"] == "Bearer jwt-token"

    @respx.mock
    async def test_parses_listing(self, marketplace_client: CardTraderClient) -> None:
        """Listing fields are read from the product payload."""
        respx.get(f"{BASE_URL}/marketplace/products").mock(
            return_value=httpx.Response(200, json={"9001": [product(1, "Charmander", 450)]})
        )

        [listing] = await marketplace_client.fetch_listings(3387)

        assert listing.name == "Charmander"
        assert listing.price_cents == 450
        assert listing.currency == "EUR"
        assert listing.condition == "Near Mint"
        assert listing.can_sell_via_hub is True
        assert listing.seller == "pallet-town-cards"
        assert listing.expansion_name == "Pokémon Card 151"
        assert listing.quantity == 2

    @respx.mock
    async def test_empty_expansion(self, marketplace_client: CardTraderClient) -> None:
        """An expansion without listings yields an empty list."""
        respx.get(f"{BASE_URL}/marketplace/products").mock(
            return_value=httpx.Response(200, json={})
        )

        assert await marketplace_client.fetch_listings(3387) == []

    @respx.mock
    async def test_unauthorized(self, marketplace_client: CardTraderClient) -> None:
        """A rejected token surfaces as UpstreamError."""
        respx.get(f"{BASE_URL}/marketplace/products").mock(return_value=httpx.Response(401))

        with pytest.raises(UpstreamError) as exc_info:
            await marketplace_client.fetch_listings(3387)

        assert exc_info.value.service == "marketplace"


class TestFetchExpansions:
    @respx.mock
    async def test_parses_expansions(self, marketplace_client: CardTraderClient) -> None:
        """Every marketplace expansion is returned."""
        respx.get(f"{BASE_URL}/expansions").mock(
            return_value=httpx.Response(
                200,
                json=[
                    {"id": 3387, "game_id": 5, "code": "sv2a", "name": "Pokémon Card 151"},
                    {"id": 1, "game_id": 1, "code": "mh3", "name": "Modern Horizons 3"},
                ],
            )
        )

        expansions = await marketplace_client.fetch_expansions()

        assert [(exp.id, exp.code) for exp in expansions] == [(3387, "sv2a"), (1, "mh3")]

    @respx.mock
    async def test_timeout(self, marketplace_client: CardTraderClient) -> None:
        """Timeouts surface as UpstreamError."""
        respx.get(f"{BASE_URL}/expansions").mock(side_effect=httpx.ReadTimeout("slow"))

        with pytest.raises(UpstreamError):
            await marketplace_client.fetch_expansions()
