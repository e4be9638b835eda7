"""Global card search for picking cards to wishlist."""

from sqlalchemy.ext.asyncio import AsyncSession

from cardex.db.operations import (
    card_to_model,
    get_collected_card_ids,
    get_wishlisted_card_ids,
    search_template_cards,
)
from cardex.models.card import Card

DEFAULT_SEARCH_LIMIT = 30


async def search_cards(
    session: AsyncSession,
    user_id: str,
    query: str = "",
    limit: int = DEFAULT_SEARCH_LIMIT,
) -> list[Card]:
    """
    Search every expansion for cards the user neither owns nor wants yet.

    An empty query lists the most recently synced cards.
    """
    excluded = await get_collected_card_ids(session, user_id)
    excluded |= await get_wishlisted_card_ids(session, user_id)

    results = await search_template_cards(session, query.strip(), excluded, limit)
    return [card_to_model(card) for card in results]
