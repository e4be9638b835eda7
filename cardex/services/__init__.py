"""
Cardex services.

Business logic for collection tracking, binders, wishlists and pricing.
"""

from cardex.services.binders import (
    FilledSlot,
    create_user_binder,
    delete_user_binder,
    get_owned_binder,
    list_slots,
    place_card,
    remove_card,
)
from cardex.services.card_search import search_cards
from cardex.services.catalog_merger import merge_catalog_cards, merge_expansion_cards
from cardex.services.collection import (
    CollectionUpdate,
    CollectionUpdateResult,
    apply_collection_updates,
    set_collected,
)
from cardex.services.expansions import list_expansions
from cardex.services.marketplace_matcher import (
    EXPANSION_MAPPING,
    find_best_price,
    find_expansion_matches,
    match_listings,
    search_listings,
)
from cardex.services.name_normalizer import names_match, normalize_card_name
from cardex.services.stats import (
    CardStats,
    ExpansionStats,
    completion_percentage,
    get_card_stats,
    get_expansion_stats,
)
from cardex.services.wishlist import clear_items, list_items, remove_item, upsert_item

__all__ = [
    "EXPANSION_MAPPING",
    "CardStats",
    "CollectionUpdate",
    "CollectionUpdateResult",
    "ExpansionStats",
    "FilledSlot",
    "apply_collection_updates",
    "clear_items",
    "completion_percentage",
    "create_user_binder",
    "delete_user_binder",
    "find_best_price",
    "find_expansion_matches",
    "get_card_stats",
    "get_expansion_stats",
    "get_owned_binder",
    "list_expansions",
    "list_items",
    "list_slots",
    "match_listings",
    "merge_catalog_cards",
    "merge_expansion_cards",
    "names_match",
    "normalize_card_name",
    "place_card",
    "remove_card",
    "remove_item",
    "search_cards",
    "search_listings",
    "set_collected",
    "upsert_item",
]
