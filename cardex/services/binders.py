"""
Binders and slot assignment.

A binder is owned by exactly one user and is always looked up by its id.
Each slot holds a reference to one card; the same card may sit in
several slots.
"""

import logging
from dataclasses import dataclass

from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from cardex.config import ALLOWED_SLOT_COUNTS
from cardex.db.operations import (
    card_exists,
    card_to_model,
    create_binder,
    delete_binder,
    delete_slot,
    get_binder,
    get_binder_by_name,
    get_cards_by_ids,
    get_slots,
    upsert_slot,
)
from cardex.models.card import Card
from cardex.models.db import BinderDB, BinderSlotDB
from cardex.models.failure import (
    ConflictError,
    FailureKind,
    ForbiddenError,
    InvalidInputError,
    NotFoundError,
)

logger = logging.getLogger(__name__)


@dataclass(frozen=True, slots=True)
class FilledSlot:
    """A slot together with the card it holds (None if the card vanished)."""

    slot: BinderSlotDB
    card: Card | None


async def create_user_binder(
    session: AsyncSession,
    user_id: str,
    name: str,
    color: str,
    slot_count: int = ALLOWED_SLOT_COUNTS[0],
) -> BinderDB:
    """
    Create a binder for a user.

    Raises:
        InvalidInputError: If name is blank or slot_count is not allowed
        ConflictError: If the user already has a binder with this name
    """
    name = name.strip()
    if not name:
        raise InvalidInputError("Binder name is required", kind=FailureKind.MISSING_REQUIRED)
    if slot_count not in ALLOWED_SLOT_COUNTS:
        raise InvalidInputError(
            f"Slot count must be one of {', '.join(map(str, ALLOWED_SLOT_COUNTS))}"
        )
    if await get_binder_by_name(session, user_id, name):
        raise ConflictError("A binder with this name already exists")

    try:
        binder = await create_binder(session, user_id, name, color, slot_count)
    except IntegrityError as e:
        # a concurrent request took the name after the check above
        await session.rollback()
        raise ConflictError("A binder with this name already exists") from e
    logger.info("Created binder %s (%d slots) for %s", binder.id, slot_count, user_id)
    return binder


async def get_owned_binder(session: AsyncSession, binder_id: str, user_id: str) -> BinderDB:
    """
    Fetch a binder and check ownership.

    Raises:
        NotFoundError: If no binder has this id
        ForbiddenError: If the binder belongs to another user
    """
    binder = await get_binder(session, binder_id)
    if binder is None:
        raise NotFoundError("Binder not found")
    if binder.user_id != user_id:
        raise ForbiddenError()
    return binder


async def delete_user_binder(session: AsyncSession, binder_id: str, user_id: str) -> None:
    """Delete one of the user's binders and everything in it."""
    binder = await get_owned_binder(session, binder_id, user_id)
    await delete_binder(session, binder)
    logger.info("Deleted binder %s for %s", binder_id, user_id)


async def place_card(
    session: AsyncSession,
    binder_id: str,
    user_id: str,
    slot_number: int,
    card_id: str,
) -> tuple[BinderSlotDB, bool]:
    """
    Put a card into a slot, replacing the card already there.

    Returns:
        Tuple of (slot, created)

    Raises:
        NotFoundError: If the binder or the card does not exist
        ForbiddenError: If the binder belongs to another user
        InvalidInputError: If the slot is outside the binder
    """
    binder = await get_owned_binder(session, binder_id, user_id)

    if not 1 <= slot_number <= binder.slot_count:
        raise InvalidInputError(
            f"Slot number must be between 1 and {binder.slot_count}",
        )
    if not await card_exists(session, card_id):
        raise NotFoundError("Card not found")

    return await upsert_slot(session, binder.id, slot_number, card_id, user_id)


async def remove_card(
    session: AsyncSession, binder_id: str, slot_number: int, user_id: str
) -> None:
    """
    Empty a slot.

    Raises:
        NotFoundError: If the slot is empty or not the user's
    """
    if not await delete_slot(session, binder_id, slot_number, user_id):
        raise NotFoundError("Slot not found or already empty")


async def list_slots(session: AsyncSession, binder_id: str, user_id: str) -> list[FilledSlot]:
    """Occupied slots of one of the user's binders with their cards, in order."""
    binder = await get_owned_binder(session, binder_id, user_id)
    slots = await get_slots(session, binder.id)
    cards = await get_cards_by_ids(session, {slot.card_id for slot in slots})

    filled = []
    for slot in slots:
        db_card = cards.get(slot.card_id)
        filled.append(FilledSlot(slot=slot, card=card_to_model(db_card) if db_card else None))
    return filled
