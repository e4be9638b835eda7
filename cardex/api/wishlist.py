"""
Wishlist API endpoints.

One entry per card per user; posting a listed card refreshes its price.
"""

import uuid
from datetime import datetime
from typing import Annotated

from fastapi import APIRouter, Depends, Path, Response, status
from pydantic import BaseModel, Field
from sqlalchemy.ext.asyncio import AsyncSession

from cardex.api.deps import get_current_user_id
from cardex.api.schemas import MessageResponse
from cardex.db.database import get_session
from cardex.models.db import WishlistItemDB
from cardex.models.failure import ApiResponse
from cardex.services.wishlist import clear_items, list_items, remove_item, upsert_item

router = APIRouter(prefix="/wishlist", tags=["wishlist"])


class WishlistCard(BaseModel):
    """Snapshot of the card stored with the entry."""

    id: str = Field(..., min_length=1, examples=["sv3pt5-166"])
    name: str = Field(..., min_length=1)
    image_url: str
    expansion: str


class WishlistAddRequest(BaseModel):
    """Request model for adding a card or refreshing its price."""

    card: WishlistCard
    price: float = Field(..., ge=0, description="Latest known price")


class WishlistItemResponse(BaseModel):
    """A wishlist entry."""

    id: str
    card: WishlistCard
    price: float
    date_added: datetime

    @classmethod
    def from_db(cls, item: WishlistItemDB) -> "WishlistItemResponse":
        return cls(
            id=item.id,
            card=WishlistCard.model_validate(item.card),
            price=item.price,
            date_added=item.date_added,
        )


class ClearResponse(BaseModel):
    """Response model for clearing the wishlist."""

    message: str
    deleted_count: int


@router.get("", response_model=ApiResponse[list[WishlistItemResponse]])
async def get_wishlist(
    user_id: Annotated[str, Depends(get_current_user_id)],
    session: Annotated[AsyncSession, Depends(get_session)],
) -> ApiResponse[list[WishlistItemResponse]]:
    """The caller's wishlist, cheapest first."""
    items = await list_items(session, user_id)
    return ApiResponse.success([WishlistItemResponse.from_db(item) for item in items])


@router.post("", response_model=ApiResponse[WishlistItemResponse])
async def add_to_wishlist(
    request: WishlistAddRequest,
    response: Response,
    user_id: Annotated[str, Depends(get_current_user_id)],
    session: Annotated[AsyncSession, Depends(get_session)],
) -> ApiResponse[WishlistItemResponse]:
    """
    Add a card, or update the price of a card already listed.

    Answers 201 for a new entry and 200 for a price update.
    """
    item, created = await upsert_item(session, user_id, request.card.model_dump(), request.price)
    if created:
        response.status_code = status.HTTP_201_CREATED
    return ApiResponse.success(WishlistItemResponse.from_db(item))


@router.delete("", response_model=ApiResponse[ClearResponse])
async def clear_wishlist(
    user_id: Annotated[str, Depends(get_current_user_id)],
    session: Annotated[AsyncSession, Depends(get_session)],
) -> ApiResponse[ClearResponse]:
    """Remove every entry of the caller's wishlist."""
    count = await clear_items(session, user_id)
    return ApiResponse.success(ClearResponse(message="Wishlist cleared", deleted_count=count))


@router.delete("/{item_id}", response_model=ApiResponse[MessageResponse])
async def delete_wishlist_item(
    item_id: Annotated[uuid.UUID, Path(description="Wishlist entry id")],
    user_id: Annotated[str, Depends(get_current_user_id)],
    session: Annotated[AsyncSession, Depends(get_session)],
) -> ApiResponse[MessageResponse]:
    """Remove one entry; 404 if it is absent or belongs to someone else."""
    await remove_item(session, user_id, item_id.hex)
    return ApiResponse.success(MessageResponse(message="Item removed from wishlist"))
