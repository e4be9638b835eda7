from cardex.db.database import Database, get_session
from cardex.db.operations import (
    card_exists,
    card_to_model,
    clear_wishlist,
    count_collected_by_expansion,
    create_binder,
    create_user_card,
    create_wishlist_item,
    delete_binder,
    delete_slot,
    delete_wishlist_item,
    expansion_to_model,
    get_binder,
    get_binder_by_name,
    get_binders,
    get_cards_by_ids,
    get_collected_card_ids,
    get_collected_cards,
    get_expansion_by_slug,
    get_slot,
    get_slots,
    get_stats,
    get_template_card,
    get_template_cards,
    get_tracked_expansions,
    get_user_card,
    get_user_cards,
    get_wishlist_item_by_card,
    get_wishlist_items,
    get_wishlisted_card_ids,
    search_template_cards,
    upsert_expansion,
    upsert_slot,
    upsert_stats,
    upsert_template_card,
)

__all__ = [
    "Database",
    "card_exists",
    "card_to_model",
    "clear_wishlist",
    "count_collected_by_expansion",
    "create_binder",
    "create_user_card",
    "create_wishlist_item",
    "delete_binder",
    "delete_slot",
    "delete_wishlist_item",
    "expansion_to_model",
    "get_binder",
    "get_binder_by_name",
    "get_binders",
    "get_cards_by_ids",
    "get_collected_card_ids",
    "get_collected_cards",
    "get_expansion_by_slug",
    "get_session",
    "get_slot",
    "get_slots",
    "get_stats",
    "get_template_card",
    "get_template_cards",
    "get_tracked_expansions",
    "get_user_card",
    "get_user_cards",
    "get_wishlist_item_by_card",
    "get_wishlist_items",
    "get_wishlisted_card_ids",
    "search_template_cards",
    "upsert_expansion",
    "upsert_slot",
    "upsert_stats",
    "upsert_template_card",
]
