"""
Wishlist reconciliation.

A user has at most one wishlist entry per card. Adding a card that is
already listed refreshes its price instead of duplicating it.
"""

import logging
from datetime import UTC, datetime
from typing import Any

from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from cardex.db.operations import (
    clear_wishlist,
    create_wishlist_item,
    delete_wishlist_item,
    get_wishlist_item_by_card,
    get_wishlist_items,
)
from cardex.models.db import WishlistItemDB
from cardex.models.failure import NotFoundError

logger = logging.getLogger(__name__)


async def _update_price(
    session: AsyncSession, item: WishlistItemDB, price: float
) -> WishlistItemDB:
    item.price = price
    await session.flush()
    logger.info("Updated wishlist price of %s for %s", item.card_id, item.user_id)
    return item


async def upsert_item(
    session: AsyncSession,
    user_id: str,
    card: dict[str, Any],
    price: float,
    now: datetime | None = None,
) -> tuple[WishlistItemDB, bool]:
    """
    Add a card to the wishlist or update its price.

    Args:
        card: Card snapshot with at least an "id" key
        price: Latest known price

    Returns:
        Tuple of (item, created) where created is True if new.
    """
    existing = await get_wishlist_item_by_card(session, user_id, card["id"])
    if existing:
        return await _update_price(session, existing, price), False

    try:
        item = await create_wishlist_item(
            session, user_id, card, price, now or datetime.now(UTC)
        )
    except IntegrityError:
        # a concurrent request listed the card after the lookup above
        await session.rollback()
        existing = await get_wishlist_item_by_card(session, user_id, card["id"])
        if existing is None:
            raise
        return await _update_price(session, existing, price), False

    logger.info("Added %s to wishlist of %s", card["id"], user_id)
    return item, True


async def remove_item(session: AsyncSession, user_id: str, item_id: str) -> None:
    """
    Remove one entry from the user's wishlist.

    Raises:
        NotFoundError: If the entry does not exist or belongs to someone else
    """
    if not await delete_wishlist_item(session, user_id, item_id):
        raise NotFoundError("Wishlist item not found")


async def clear_items(session: AsyncSession, user_id: str) -> int:
    """Remove every entry of the user's wishlist and return how many there were."""
    count = await clear_wishlist(session, user_id)
    logger.info("Cleared %d wishlist items for %s", count, user_id)
    return count


async def list_items(session: AsyncSession, user_id: str) -> list[WishlistItemDB]:
    """The user's wishlist, cheapest first."""
    return await get_wishlist_items(session, user_id)
