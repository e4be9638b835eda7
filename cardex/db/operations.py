"""
Database CRUD operations.

Provides async functions for creating, reading, updating, and deleting
cards, expansions, binders, binder slots, wishlist items and cached stats.
Functions flush but never commit; the session owner commits.
"""

from collections.abc import Iterable
from datetime import datetime
from typing import Any

from sqlalchemy import delete, func, select
from sqlalchemy.ext.asyncio import AsyncSession

from cardex.config import (
    EXCLUDED_EXPANSIONS,
    ILLUSTRATION_RARE_TYPE,
    TRACKED_SERIES_PREFIX,
)
from cardex.models.card import Card, Expansion
from cardex.models.db import (
    BinderDB,
    BinderSlotDB,
    CardDB,
    ExpansionDB,
    StatsDB,
    WishlistItemDB,
)

# --- Card Operations ---


async def get_template_cards(
    session: AsyncSession,
    expansion: str,
    card_type: str = ILLUSTRATION_RARE_TYPE,
) -> list[CardDB]:
    """Get template cards of one type for an expansion, in sync order."""
    result = await session.execute(
        select(CardDB)
        .where(
            CardDB.user_id.is_(None),
            CardDB.expansion == expansion,
            CardDB.card_type == card_type,
        )
        .order_by(CardDB.id)
    )
    return list(result.scalars().all())


async def get_template_card(session: AsyncSession, card_id: str) -> CardDB | None:
    """Get the template record for a catalog card id."""
    result = await session.execute(
        select(CardDB).where(CardDB.card_id == card_id, CardDB.user_id.is_(None))
    )
    return result.scalar_one_or_none()


async def get_user_card(session: AsyncSession, user_id: str, card_id: str) -> CardDB | None:
    """Get a user's copy of a card."""
    result = await session.execute(
        select(CardDB).where(CardDB.card_id == card_id, CardDB.user_id == user_id)
    )
    return result.scalar_one_or_none()


async def get_user_cards(
    session: AsyncSession, user_id: str, card_ids: Iterable[str]
) -> list[CardDB]:
    """Get a user's copies for the given card ids."""
    ids = list(card_ids)
    if not ids:
        return []
    result = await session.execute(
        select(CardDB).where(CardDB.user_id == user_id, CardDB.card_id.in_(ids))
    )
    return list(result.scalars().all())


async def get_collected_cards(session: AsyncSession, user_id: str) -> list[CardDB]:
    """Get every card the user has marked collected."""
    result = await session.execute(
        select(CardDB)
        .where(CardDB.user_id == user_id, CardDB.is_collected.is_(True))
        .order_by(CardDB.expansion, CardDB.card_id)
    )
    return list(result.scalars().all())


async def card_exists(session: AsyncSession, card_id: str) -> bool:
    """True if any record (template or user copy) exists for a card id."""
    result = await session.execute(select(CardDB.id).where(CardDB.card_id == card_id).limit(1))
    return result.first() is not None


async def get_cards_by_ids(session: AsyncSession, card_ids: Iterable[str]) -> dict[str, CardDB]:
    """
    Map card ids to a card record, preferring templates over user copies.
    """
    ids = list(card_ids)
    if not ids:
        return {}
    result = await session.execute(
        select(CardDB).where(CardDB.card_id.in_(ids)).order_by(CardDB.user_id.is_(None).desc())
    )
    cards: dict[str, CardDB] = {}
    for card in result.scalars().all():
        cards.setdefault(card.card_id, card)
    return cards


async def create_user_card(
    session: AsyncSession,
    user_id: str,
    card: Card,
) -> CardDB:
    """
    Create a user's copy of a card.

    Raises IntegrityError if the user already has a copy.
    """
    db_card = CardDB(
        card_id=card.id,
        user_id=user_id,
        name=card.name,
        image_url=card.image_url,
        expansion=card.expansion,
        card_type=card.card_type,
        is_collected=card.is_collected,
        date_collected=card.date_collected,
    )
    session.add(db_card)
    await session.flush()
    return db_card


async def upsert_template_card(session: AsyncSession, card: Card) -> CardDB:
    """
    Insert or update a template card.

    Template fields are overwritten from the catalog; collected flags are
    never set on templates.
    """
    existing = await get_template_card(session, card.id)

    if existing:
        existing.name = card.name
        existing.image_url = card.image_url
        existing.expansion = card.expansion
        existing.card_type = card.card_type
        await session.flush()
        return existing

    db_card = CardDB(
        card_id=card.id,
        user_id=None,
        name=card.name,
        image_url=card.image_url,
        expansion=card.expansion,
        card_type=card.card_type,
        is_collected=False,
    )
    session.add(db_card)
    await session.flush()
    return db_card


async def count_collected_by_expansion(session: AsyncSession, user_id: str) -> dict[str, int]:
    """Count the user's collected cards grouped by expansion slug."""
    result = await session.execute(
        select(CardDB.expansion, func.count(CardDB.id))
        .where(CardDB.user_id == user_id, CardDB.is_collected.is_(True))
        .group_by(CardDB.expansion)
    )
    return {expansion: int(count) for expansion, count in result.all()}


async def get_collected_card_ids(session: AsyncSession, user_id: str) -> set[str]:
    """Ids of the cards the user has collected."""
    result = await session.execute(
        select(CardDB.card_id).where(CardDB.user_id == user_id, CardDB.is_collected.is_(True))
    )
    return set(result.scalars().all())


def _escape_like(value: str) -> str:
    return value.replace("\\", "\\\\").replace("%", "\\%").replace("_", "\\_")


async def search_template_cards(
    session: AsyncSession,
    query: str,
    exclude_ids: Iterable[str],
    limit: int = 30,
) -> list[CardDB]:
    """
    Search template cards by name, skipping excluded ids.

    With an empty query, returns the most recently synced templates.
    """
    excluded = list(exclude_ids)
    stmt = select(CardDB).where(CardDB.user_id.is_(None))
    if excluded:
        stmt = stmt.where(CardDB.card_id.not_in(excluded))

    if query:
        pattern = f"%{_escape_like(query)}%"
        stmt = stmt.where(CardDB.name.ilike(pattern, escape="\\")).order_by(CardDB.name)
    else:
        stmt = stmt.order_by(CardDB.id.desc())

    result = await session.execute(stmt.limit(limit))
    return list(result.scalars().all())


def card_to_model(db_card: CardDB) -> Card:
    """Convert a database card to a domain model."""
    return Card(
        id=db_card.card_id,
        name=db_card.name,
        image_url=db_card.image_url,
        expansion=db_card.expansion,
        is_collected=db_card.is_collected,
        date_collected=db_card.date_collected,
        card_type=db_card.card_type,
    )


# --- Expansion Operations ---


async def get_tracked_expansions(
    session: AsyncSession, limit: int | None = None
) -> list[ExpansionDB]:
    """Get tracked expansions, newest first."""
    stmt = (
        select(ExpansionDB)
        .where(
            ExpansionDB.id.startswith(TRACKED_SERIES_PREFIX),
            ExpansionDB.id.not_in(sorted(EXCLUDED_EXPANSIONS)),
        )
        .order_by(ExpansionDB.release_date.desc())
    )
    if limit is not None:
        stmt = stmt.limit(limit)
    result = await session.execute(stmt)
    return list(result.scalars().all())


async def get_expansion_by_slug(session: AsyncSession, slug: str) -> ExpansionDB | None:
    """Get an expansion by its slug."""
    result = await session.execute(select(ExpansionDB).where(ExpansionDB.slug == slug.lower()))
    return result.scalar_one_or_none()


async def upsert_expansion(session: AsyncSession, expansion: Expansion) -> ExpansionDB:
    """Insert or update an expansion keyed by catalog id."""
    existing = await session.get(ExpansionDB, expansion.id)

    if existing:
        existing.name = expansion.name
        existing.slug = expansion.slug
        existing.logo = expansion.logo
        existing.release_date = expansion.release_date
        await session.flush()
        return existing

    db_expansion = ExpansionDB(
        id=expansion.id,
        name=expansion.name,
        slug=expansion.slug,
        logo=expansion.logo,
        release_date=expansion.release_date,
    )
    session.add(db_expansion)
    await session.flush()
    return db_expansion


def expansion_to_model(db_expansion: ExpansionDB) -> Expansion:
    """Convert a database expansion to a domain model."""
    return Expansion(
        id=db_expansion.id,
        name=db_expansion.name,
        slug=db_expansion.slug,
        logo=db_expansion.logo,
        release_date=db_expansion.release_date,
    )


# --- Binder Operations ---


async def get_binders(session: AsyncSession, user_id: str) -> list[BinderDB]:
    """Get a user's binders, newest first."""
    result = await session.execute(
        select(BinderDB).where(BinderDB.user_id == user_id).order_by(BinderDB.created_at.desc())
    )
    return list(result.scalars().all())


async def get_binder(session: AsyncSession, binder_id: str) -> BinderDB | None:
    """Get a binder by id, regardless of owner."""
    return await session.get(BinderDB, binder_id)


async def get_binder_by_name(session: AsyncSession, user_id: str, name: str) -> BinderDB | None:
    """Get a user's binder by name."""
    result = await session.execute(
        select(BinderDB).where(BinderDB.user_id == user_id, BinderDB.name == name)
    )
    return result.scalar_one_or_none()


async def create_binder(
    session: AsyncSession,
    user_id: str,
    name: str,
    color: str,
    slot_count: int,
) -> BinderDB:
    """
    Create a binder.

    Raises IntegrityError if the user already has a binder with this name.
    """
    binder = BinderDB(name=name, color=color, slot_count=slot_count, user_id=user_id)
    session.add(binder)
    await session.flush()
    return binder


async def delete_binder(session: AsyncSession, binder: BinderDB) -> None:
    """Delete a binder together with its slots."""
    await session.execute(delete(BinderSlotDB).where(BinderSlotDB.binder_id == binder.id))
    await session.delete(binder)
    await session.flush()


async def get_slot(session: AsyncSession, binder_id: str, slot_number: int) -> BinderSlotDB | None:
    """Get the slot record for one pocket of a binder."""
    result = await session.execute(
        select(BinderSlotDB).where(
            BinderSlotDB.binder_id == binder_id,
            BinderSlotDB.slot_number == slot_number,
        )
    )
    return result.scalar_one_or_none()


async def get_slots(session: AsyncSession, binder_id: str) -> list[BinderSlotDB]:
    """Get all occupied slots of a binder, in pocket order."""
    result = await session.execute(
        select(BinderSlotDB)
        .where(BinderSlotDB.binder_id == binder_id)
        .order_by(BinderSlotDB.slot_number)
    )
    return list(result.scalars().all())


async def upsert_slot(
    session: AsyncSession,
    binder_id: str,
    slot_number: int,
    card_id: str,
    user_id: str,
) -> tuple[BinderSlotDB, bool]:
    """
    Put a card into a binder pocket, replacing whatever was there.

    Returns:
        Tuple of (slot, created) where created is True if new.
    """
    existing = await get_slot(session, binder_id, slot_number)

    if existing:
        existing.card_id = card_id
        await session.flush()
        return existing, False

    slot = BinderSlotDB(
        binder_id=binder_id,
        slot_number=slot_number,
        card_id=card_id,
        user_id=user_id,
    )
    session.add(slot)
    await session.flush()
    return slot, True


async def delete_slot(
    session: AsyncSession, binder_id: str, slot_number: int, user_id: str
) -> bool:
    """
    Empty a binder pocket.

    Returns True if deleted, False if not found.
    """
    result = await session.execute(
        delete(BinderSlotDB).where(
            BinderSlotDB.binder_id == binder_id,
            BinderSlotDB.slot_number == slot_number,
            BinderSlotDB.user_id == user_id,
        )
    )
    # rowcount is available on DELETE results; type stubs incomplete for async
    return int(result.rowcount) > 0  # type: ignore[attr-defined]


# --- Wishlist Operations ---


async def get_wishlist_items(session: AsyncSession, user_id: str) -> list[WishlistItemDB]:
    """Get a user's wishlist, cheapest first."""
    result = await session.execute(
        select(WishlistItemDB)
        .where(WishlistItemDB.user_id == user_id)
        .order_by(WishlistItemDB.price, WishlistItemDB.date_added)
    )
    return list(result.scalars().all())


async def get_wishlist_item_by_card(
    session: AsyncSession, user_id: str, card_id: str
) -> WishlistItemDB | None:
    """Get a user's wishlist entry for a card."""
    result = await session.execute(
        select(WishlistItemDB).where(
            WishlistItemDB.user_id == user_id,
            WishlistItemDB.card_id == card_id,
        )
    )
    return result.scalar_one_or_none()


async def create_wishlist_item(
    session: AsyncSession,
    user_id: str,
    card: dict[str, Any],
    price: float,
    date_added: datetime,
) -> WishlistItemDB:
    """
    Create a wishlist entry.

    Raises IntegrityError if the card is already on the user's wishlist.
    """
    item = WishlistItemDB(
        user_id=user_id,
        card_id=card["id"],
        card=card,
        price=price,
        date_added=date_added,
    )
    session.add(item)
    await session.flush()
    return item


async def delete_wishlist_item(session: AsyncSession, user_id: str, item_id: str) -> bool:
    """
    Delete one of the user's wishlist entries.

    Returns True if deleted, False if not found or owned by someone else.
    """
    result = await session.execute(
        delete(WishlistItemDB).where(
            WishlistItemDB.id == item_id,
            WishlistItemDB.user_id == user_id,
        )
    )
    return int(result.rowcount) > 0  # type: ignore[attr-defined]


async def clear_wishlist(session: AsyncSession, user_id: str) -> int:
    """
    Delete every wishlist entry of a user.

    Returns the number of deleted records.
    """
    result = await session.execute(delete(WishlistItemDB).where(WishlistItemDB.user_id == user_id))
    return int(result.rowcount)  # type: ignore[attr-defined]


async def get_wishlisted_card_ids(session: AsyncSession, user_id: str) -> set[str]:
    """Ids of the cards on the user's wishlist."""
    result = await session.execute(
        select(WishlistItemDB.card_id).where(WishlistItemDB.user_id == user_id)
    )
    return set(result.scalars().all())


# --- Stats Operations ---


async def get_stats(session: AsyncSession, stats_type: str) -> StatsDB | None:
    """Get a cached aggregate by type."""
    result = await session.execute(select(StatsDB).where(StatsDB.type == stats_type))
    return result.scalar_one_or_none()


async def upsert_stats(
    session: AsyncSession,
    stats_type: str,
    counts: dict[str, int],
    last_updated: datetime,
) -> StatsDB:
    """Store a freshly computed aggregate."""
    existing = await get_stats(session, stats_type)
    total = sum(counts.values())

    if existing:
        existing.counts = counts
        existing.total_count = total
        existing.last_updated = last_updated
        await session.flush()
        return existing

    stats = StatsDB(
        type=stats_type,
        counts=counts,
        total_count=total,
        last_updated=last_updated,
    )
    session.add(stats)
    await session.flush()
    return stats
