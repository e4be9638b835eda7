"""Tests for marketplace listing matching."""

from unittest.mock import AsyncMock, MagicMock

import pytest

from cardex.clients.cardtrader import CardTraderClient
from cardex.models.card import Card
from cardex.models.listing import Listing, MarketplaceExpansion
from cardex.services.marketplace_matcher import (
    EXPANSION_MAPPING,
    find_best_price,
    find_expansion_matches,
    get_marketplace_expansion_id,
    is_acceptable,
    looks_special,
    match_listings,
    search_listings,
)
from sample_data import make_card, make_listing


@pytest.fixture
def charmander() -> Card:
    return make_card("sv3pt5-168", "Charmander", "sv3pt5")


@pytest.fixture
def listings() -> list[Listing]:
    return [
        make_listing(1, "Charmander - Illustration Rare", 900),
        make_listing(2, "Charmander", 300),
        make_listing(3, "Charmander", 650),
        make_listing(4, "Charmander", 200, description="Illustration Rare 168/165"),
        make_listing(5, "Charmander - Illustration Rare", 400, condition="Heavily Played"),
        make_listing(6, "Charmander - Illustration Rare", 350, can_sell_via_hub=False),
        make_listing(7, "Charmeleon - Illustration Rare", 100),
    ]


@pytest.fixture
def marketplace(listings: list[Listing]) -> MagicMock:
    marketplace = MagicMock(spec=CardTraderClient)
    marketplace.fetch_listings = AsyncMock(return_value=listings)
    return marketplace


class TestExpansionMapping:
    def test_known_expansion(self) -> None:
        """Mapped slugs resolve to the marketplace id."""
        assert get_marketplace_expansion_id("sv3pt5") == 3387
        assert get_marketplace_expansion_id("SV1") == 3239

    def test_unknown_expansion(self) -> None:
        """Unmapped slugs resolve to None."""
        assert get_marketplace_expansion_id("sv8pt5") is None

    def test_mapping_ids_are_unique(self) -> None:
        """No two expansions share a marketplace id."""
        ids = [mapped.id for mapped in EXPANSION_MAPPING.values()]
        assert len(ids) == len(set(ids))


class TestListingFilters:
    def test_rarity_marker_in_name(self) -> None:
        """A rarity marker in the name is special."""
        assert looks_special(make_listing(1, "Mew - Illustration Rare", 100))

    def test_rarity_marker_in_description(self) -> None:
        """A rarity marker in the description is special."""
        assert looks_special(make_listing(1, "Mew", 100, description="illustration rare"))

    def test_price_alone_is_special(self) -> None:
        """A price above the threshold qualifies without any marker."""
        assert looks_special(make_listing(1, "Mew", 501))
        assert not looks_special(make_listing(1, "Mew", 500))

    @pytest.mark.parametrize("condition", ["Near Mint", "NM", "Mint", "Mint/Near Mint"])
    def test_accepted_conditions(self, condition: str) -> None:
        """Near mint or better is accepted."""
        assert is_acceptable(make_listing(1, "Mew", 100, condition=condition))

    @pytest.mark.parametrize("condition", ["Heavily Played", "Slightly Played", None])
    def test_rejected_conditions(self, condition: str | None) -> None:
        """Worn or unknown conditions are rejected."""
        assert not is_acceptable(make_listing(1, "Mew", 100, condition=condition))

    def test_requires_hub(self) -> None:
        """Listings not sold through the hub are rejected."""
        assert not is_acceptable(make_listing(1, "Mew", 100, can_sell_via_hub=False))


class TestMatchListings:
    def test_filters_and_sorts(self, charmander: Card, listings: list[Listing]) -> None:
        """Only matching, special, acceptable listings remain, cheapest first."""
        matched = match_listings(charmander, listings)

        assert [listing.id for listing in matched] == [4, 3, 1]

    def test_unrestricted_card_skips_rarity_filter(self, listings: list[Listing]) -> None:
        """Cards outside the rarity-restricted types keep cheap plain listings."""
        card = Card(id="sv3pt5-4", name="Charmander", image_url="", expansion="sv3pt5")

        matched = match_listings(card, listings)

        assert [listing.id for listing in matched] == [4, 2, 3, 1]

    def test_no_matches(self, charmander: Card) -> None:
        """Returns an empty list when nothing matches."""
        assert match_listings(charmander, [make_listing(1, "Pikachu", 900)]) == []

    def test_blank_name_matches_nothing(self, listings: list[Listing]) -> None:
        """A card whose name normalizes to nothing matches no listing."""
        card = Card(id="x", name="???", image_url="", expansion="sv3pt5")

        assert match_listings(card, [*listings, make_listing(8, "!!!", 900)]) == []


class TestSearchListings:
    async def test_fetches_mapped_expansion(
        self, charmander: Card, marketplace: MagicMock
    ) -> None:
        """Listings are fetched for the mapped marketplace expansion."""
        matched = await search_listings(charmander, marketplace)

        marketplace.fetch_listings.assert_awaited_once_with(3387)
        assert [listing.id for listing in matched] == [4, 3, 1]

    async def test_unmapped_expansion_returns_empty(self, marketplace: MagicMock) -> None:
        """Unmapped expansions yield no listings and no request."""
        card = make_card("sv8pt5-150", "Eevee", "sv8pt5")

        assert await search_listings(card, marketplace) == []
        marketplace.fetch_listings.assert_not_awaited()

    async def test_best_price(self, charmander: Card, marketplace: MagicMock) -> None:
        """The best price is the cheapest acceptable listing."""
        best = await find_best_price(charmander, marketplace)

        assert best is not None
        assert best.id == 4
        assert best.price_cents == 200

    async def test_best_price_none(self, charmander: Card) -> None:
        """No acceptable listing means no price."""
        marketplace = MagicMock(spec=CardTraderClient)
        marketplace.fetch_listings = AsyncMock(return_value=[])

        assert await find_best_price(charmander, marketplace) is None


class TestFindExpansionMatches:
    async def test_proposes_candidates(self) -> None:
        """Pokémon expansions are proposed for names they contain."""
        marketplace = MagicMock(spec=CardTraderClient)
        marketplace.fetch_expansions = AsyncMock(
            return_value=[
                MarketplaceExpansion(id=3387, code="sv2a", name="Pokémon Card 151"),
                MarketplaceExpansion(id=1, code="mh3", name="Modern Horizons 3"),
                MarketplaceExpansion(id=3316, code="pal", name="Paldea Evolved"),
            ]
        )

        pokemon, matches = await find_expansion_matches(marketplace, ["151", "Paldea Evolved"])

        assert [exp.id for exp in pokemon] == [3387, 3316]
        assert matches[0].expansion_name == "151"
        assert [exp.id for exp in matches[0].candidates] == [3387]
        assert [exp.id for exp in matches[1].candidates] == [3316]
