"""
Marketplace matcher.

Finds the cheapest acceptable marketplace listing for a catalog card:

1. Map the card's expansion to a marketplace expansion id
2. Fetch every listing of that expansion
3. Keep listings whose normalized name contains, or is contained in, the
   card's normalized name
4. For rarity-restricted cards, keep listings that look special: an
   explicit rarity marker in name or description, OR a price above the
   threshold
5. Keep near-mint listings sold through the hub
6. Sort by price, cheapest first

Every call re-fetches; nothing is cached.
"""

import logging
from dataclasses import dataclass

from cardex.clients.cardtrader import CardTraderClient
from cardex.models.card import Card
from cardex.models.listing import Listing, MarketplaceExpansion
from cardex.services.name_normalizer import names_match

logger = logging.getLogger(__name__)


@dataclass(frozen=True, slots=True)
class MappedExpansion:
    """Marketplace identity of one of our expansions."""

    id: int
    name: str
    code: str


# Expansion slug -> marketplace expansion
EXPANSION_MAPPING: dict[str, MappedExpansion] = {
    "sv1": MappedExpansion(3239, "Scarlet & Violet", "svi"),
    "sv2": MappedExpansion(3316, "Paldea Evolved", "pal"),
    "sv3": MappedExpansion(3371, "Obsidian Flames", "obf"),
    "sv3pt5": MappedExpansion(3387, "Pokémon Card 151", "sv2a"),
    "sv4": MappedExpansion(3468, "Paradox Rift", "par"),
    "sv4pt5": MappedExpansion(3561, "Paldean Fates", "paf"),
    "sv6": MappedExpansion(3674, "Twilight Masquerade", "twm"),
    "sv6pt5": MappedExpansion(3763, "Shrouded Fable", "sfa"),
    "sv7": MappedExpansion(3787, "Stellar Crown", "scr"),
    "sv8": MappedExpansion(3878, "Surging Sparks", "ssp"),
    "sv9": MappedExpansion(4008, "Journey Together", "jtg"),
}

RARITY_RESTRICTED_TYPES = frozenset({"illustration_rare", "special_illustration_rare"})
RARITY_MARKER = "illustration rare"

# Listings above this price (minor units) count as special even without a
# rarity marker
SPECIAL_PRICE_THRESHOLD_CENTS = 500

ACCEPTED_CONDITIONS = frozenset({"near mint", "nm", "mint", "mint/near mint"})

# Words that suggest a marketplace expansion is a Pokémon one
POKEMON_EXPANSION_HINTS = (
    "pokemon",
    "pok",
    "paldea",
    "scarlet",
    "violet",
    "rift",
    "obsidian",
    "flames",
    "fates",
    "journey",
    "spark",
    "stellar",
    "crown",
    "shroud",
    "fable",
    "twilight",
    "masquerade",
)


def get_marketplace_expansion_id(expansion_slug: str) -> int | None:
    """Marketplace expansion id for one of our expansions, or None if unmapped."""
    mapping = EXPANSION_MAPPING.get(expansion_slug.lower())
    return mapping.id if mapping else None


def looks_special(listing: Listing) -> bool:
    """
    Heuristic rarity check for a listing.

    A rarity marker in the name or description qualifies; so does a price
    above the threshold on its own.
    """
    name = listing.name.lower()
    description = (listing.description or "").lower()

    if RARITY_MARKER in name:
        return True
    return RARITY_MARKER in description or listing.price_cents > SPECIAL_PRICE_THRESHOLD_CENTS


def is_acceptable(listing: Listing) -> bool:
    """Near mint (or better) and fulfilled through the hub."""
    condition = (listing.condition or "").lower()
    return condition in ACCEPTED_CONDITIONS and listing.can_sell_via_hub


def match_listings(card: Card, listings: list[Listing]) -> list[Listing]:
    """
    Filter and sort listings for a card (steps 3-6).

    Returns:
        Matching acceptable listings, cheapest first
    """
    matching = [listing for listing in listings if names_match(card.name, listing.name)]
    logger.debug("%d listings match name %r", len(matching), card.name)

    if card.card_type in RARITY_RESTRICTED_TYPES:
        matching = [listing for listing in matching if looks_special(listing)]
        logger.debug("%d listings left after rarity filter", len(matching))

    acceptable = [listing for listing in matching if is_acceptable(listing)]
    return sorted(acceptable, key=lambda listing: listing.price_cents)


async def search_listings(card: Card, client: CardTraderClient) -> list[Listing]:
    """
    All acceptable listings for a card, cheapest first.

    Returns an empty list when the card's expansion is not mapped.

    Raises:
        UpstreamError: If the marketplace request fails
    """
    expansion_id = get_marketplace_expansion_id(card.expansion)
    if expansion_id is None:
        logger.warning("Expansion %s is not mapped to the marketplace", card.expansion)
        return []

    listings = await client.fetch_listings(expansion_id)
    matched = match_listings(card, listings)
    logger.info(
        "Marketplace search for %s (%s): %d of %d listings",
        card.name,
        card.expansion,
        len(matched),
        len(listings),
    )
    return matched


async def find_best_price(card: Card, client: CardTraderClient) -> Listing | None:
    """The cheapest acceptable listing for a card, or None."""
    listings = await search_listings(card, client)
    return listings[0] if listings else None


@dataclass(frozen=True, slots=True)
class ExpansionMatch:
    """Marketplace expansions that may correspond to one of ours."""

    expansion_name: str
    candidates: list[MarketplaceExpansion]


async def find_expansion_matches(
    client: CardTraderClient, expansion_names: list[str]
) -> tuple[list[MarketplaceExpansion], list[ExpansionMatch]]:
    """
    Propose marketplace expansions for our expansion names.

    Used to maintain EXPANSION_MAPPING when new sets are released.

    Returns:
        Tuple of (pokemon_expansions, matches)
    """
    expansions = await client.fetch_expansions()
    pokemon = [
        exp
        for exp in expansions
        if any(hint in exp.name.lower() for hint in POKEMON_EXPANSION_HINTS)
    ]

    matches = []
    for name in expansion_names:
        ours = name.lower()
        candidates = [
            exp for exp in pokemon if ours in exp.name.lower() or exp.name.lower() in ours
        ]
        matches.append(ExpansionMatch(expansion_name=name, candidates=candidates))

    return pokemon, matches
