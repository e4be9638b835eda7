"""
Collected-flag updates.

A user's ownership of a card is a per-user copy of the card record. The
copy is created the first time the user toggles the card and mutated
afterwards.
"""

import logging
from collections.abc import Iterable
from dataclasses import dataclass
from datetime import UTC, datetime

from sqlalchemy.ext.asyncio import AsyncSession

from cardex.db.operations import create_user_card, get_template_card, get_user_card
from cardex.models.card import Card
from cardex.models.db import CardDB

logger = logging.getLogger(__name__)


@dataclass(frozen=True, slots=True)
class CollectionUpdate:
    """
    One requested change to a user's collection.

    name/image_url/expansion are only used when the card has no template.
    """

    card_id: str
    is_collected: bool
    name: str | None = None
    image_url: str | None = None
    expansion: str | None = None


@dataclass(frozen=True, slots=True)
class CollectionUpdateResult:
    """Outcome of a bulk update."""

    updated: int
    skipped: list[str]

    @property
    def total(self) -> int:
        return self.updated + len(self.skipped)


async def set_collected(
    session: AsyncSession,
    user_id: str,
    update: CollectionUpdate,
    now: datetime | None = None,
) -> CardDB | None:
    """
    Apply one update to the user's copy of a card.

    Returns:
        The user's card record, or None when the card is unknown and the
        update does not carry enough data to create it
    """
    now = now or datetime.now(UTC)
    date_collected = now if update.is_collected else None

    existing = await get_user_card(session, user_id, update.card_id)
    if existing:
        existing.is_collected = update.is_collected
        existing.date_collected = date_collected
        await session.flush()
        return existing

    template = await get_template_card(session, update.card_id)
    if template:
        card = Card(
            id=template.card_id,
            name=template.name,
            image_url=template.image_url,
            expansion=template.expansion,
            card_type=template.card_type,
            is_collected=update.is_collected,
            date_collected=date_collected,
        )
    elif update.name and update.image_url and update.expansion:
        logger.info("Creating card %s for %s without a template", update.card_id, user_id)
        card = Card(
            id=update.card_id,
            name=update.name,
            image_url=update.image_url,
            expansion=update.expansion.lower(),
            is_collected=update.is_collected,
            date_collected=date_collected,
        )
    else:
        logger.warning("Skipping update of unknown card %s", update.card_id)
        return None

    return await create_user_card(session, user_id, card)


async def apply_collection_updates(
    session: AsyncSession,
    user_id: str,
    updates: Iterable[CollectionUpdate],
    now: datetime | None = None,
) -> CollectionUpdateResult:
    """
    Apply a batch of collected-flag updates for one user.

    Updates are applied in order; a later update of the same card wins.
    """
    now = now or datetime.now(UTC)
    updated = 0
    skipped: list[str] = []

    for update in updates:
        result = await set_collected(session, user_id, update, now=now)
        if result is None:
            skipped.append(update.card_id)
        else:
            updated += 1

    logger.info("Applied %d card updates for %s (%d skipped)", updated, user_id, len(skipped))
    return CollectionUpdateResult(updated=updated, skipped=skipped)
