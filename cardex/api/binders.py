"""
Binder API endpoints.

Binders are always addressed by id and only their owner may touch them.
"""

import uuid
from datetime import datetime
from typing import Annotated

from fastapi import APIRouter, Depends, Path, Response, status
from pydantic import BaseModel, Field
from sqlalchemy.ext.asyncio import AsyncSession

from cardex.api.deps import get_current_user_id
from cardex.api.schemas import CardResponse, MessageResponse
from cardex.config import ALLOWED_SLOT_COUNTS
from cardex.db import get_binders
from cardex.db.database import get_session
from cardex.models.db import BinderDB, BinderSlotDB
from cardex.models.failure import ApiResponse
from cardex.services.binders import (
    FilledSlot,
    create_user_binder,
    delete_user_binder,
    get_owned_binder,
    list_slots,
    place_card,
    remove_card,
)

router = APIRouter(prefix="/binders", tags=["binders"])


class BinderCreateRequest(BaseModel):
    """Request model for creating a binder."""

    name: str = Field(..., max_length=100, examples=["Trade binder"])
    color: str = Field(default="#3b82f6", max_length=32)
    slot_count: int = Field(
        default=ALLOWED_SLOT_COUNTS[0],
        description=f"One of {', '.join(map(str, ALLOWED_SLOT_COUNTS))}",
    )


class BinderResponse(BaseModel):
    """A binder without its slots."""

    id: str
    name: str
    color: str
    slot_count: int
    created_at: datetime

    @classmethod
    def from_db(cls, binder: BinderDB) -> "BinderResponse":
        return cls(
            id=binder.id,
            name=binder.name,
            color=binder.color,
            slot_count=binder.slot_count,
            created_at=binder.created_at,
        )


class SlotAssignRequest(BaseModel):
    """Request model for putting a card into a slot."""

    slot_number: int = Field(..., ge=1)
    card_id: str = Field(..., min_length=1)


class SlotResponse(BaseModel):
    """An occupied slot."""

    slot_number: int
    card_id: str
    added_at: datetime
    card: CardResponse | None = None

    @classmethod
    def from_db(cls, slot: BinderSlotDB, card: CardResponse | None = None) -> "SlotResponse":
        return cls(
            slot_number=slot.slot_number,
            card_id=slot.card_id,
            added_at=slot.added_at,
            card=card,
        )

    @classmethod
    def from_filled(cls, filled: FilledSlot) -> "SlotResponse":
        card = CardResponse.from_model(filled.card) if filled.card else None
        return cls.from_db(filled.slot, card)


BinderId = Annotated[uuid.UUID, Path(description="Binder id")]


@router.get("", response_model=ApiResponse[list[BinderResponse]])
async def list_binders(
    user_id: Annotated[str, Depends(get_current_user_id)],
    session: Annotated[AsyncSession, Depends(get_session)],
) -> ApiResponse[list[BinderResponse]]:
    """The caller's binders, newest first."""
    binders = await get_binders(session, user_id)
    return ApiResponse.success([BinderResponse.from_db(b) for b in binders])


@router.post(
    "",
    response_model=ApiResponse[BinderResponse],
    status_code=status.HTTP_201_CREATED,
)
async def create_binder(
    request: BinderCreateRequest,
    user_id: Annotated[str, Depends(get_current_user_id)],
    session: Annotated[AsyncSession, Depends(get_session)],
) -> ApiResponse[BinderResponse]:
    """
    Create a binder.

    Names are unique per user; a duplicate name is rejected with 409.
    """
    binder = await create_user_binder(
        session, user_id, request.name, request.color, request.slot_count
    )
    return ApiResponse.success(BinderResponse.from_db(binder))


@router.get("/{binder_id}", response_model=ApiResponse[BinderResponse])
async def get_binder(
    binder_id: BinderId,
    user_id: Annotated[str, Depends(get_current_user_id)],
    session: Annotated[AsyncSession, Depends(get_session)],
) -> ApiResponse[BinderResponse]:
    """One of the caller's binders."""
    binder = await get_owned_binder(session, binder_id.hex, user_id)
    return ApiResponse.success(BinderResponse.from_db(binder))


@router.delete("/{binder_id}", response_model=ApiResponse[MessageResponse])
async def delete_binder(
    binder_id: BinderId,
    user_id: Annotated[str, Depends(get_current_user_id)],
    session: Annotated[AsyncSession, Depends(get_session)],
) -> ApiResponse[MessageResponse]:
    """Delete a binder together with its slots."""
    await delete_user_binder(session, binder_id.hex, user_id)
    return ApiResponse.success(MessageResponse(message="Binder deleted"))


@router.get("/{binder_id}/slots", response_model=ApiResponse[list[SlotResponse]])
async def get_slots(
    binder_id: BinderId,
    user_id: Annotated[str, Depends(get_current_user_id)],
    session: Annotated[AsyncSession, Depends(get_session)],
) -> ApiResponse[list[SlotResponse]]:
    """Occupied slots in order, each with its card."""
    filled = await list_slots(session, binder_id.hex, user_id)
    return ApiResponse.success([SlotResponse.from_filled(f) for f in filled])


@router.post("/{binder_id}/slots", response_model=ApiResponse[SlotResponse])
async def assign_slot(
    binder_id: BinderId,
    request: SlotAssignRequest,
    response: Response,
    user_id: Annotated[str, Depends(get_current_user_id)],
    session: Annotated[AsyncSession, Depends(get_session)],
) -> ApiResponse[SlotResponse]:
    """
    Put a card into a slot.

    An occupied slot is overwritten (200); an empty one is filled (201).
    """
    slot, created = await place_card(
        session, binder_id.hex, user_id, request.slot_number, request.card_id
    )
    if created:
        response.status_code = status.HTTP_201_CREATED
    return ApiResponse.success(SlotResponse.from_db(slot))


@router.delete(
    "/{binder_id}/slots/{slot_number}",
    response_model=ApiResponse[MessageResponse],
)
async def clear_slot(
    binder_id: BinderId,
    slot_number: Annotated[int, Path(ge=1)],
    user_id: Annotated[str, Depends(get_current_user_id)],
    session: Annotated[AsyncSession, Depends(get_session)],
) -> ApiResponse[MessageResponse]:
    """Empty a slot; 404 if it is already empty."""
    await get_owned_binder(session, binder_id.hex, user_id)
    await remove_card(session, binder_id.hex, slot_number, user_id)
    return ApiResponse.success(MessageResponse(message="Card removed from slot"))
