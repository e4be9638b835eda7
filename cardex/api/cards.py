"""
Card API endpoints.

Merged expansion views, collected-flag updates, search and overall stats.
"""

from datetime import datetime
from typing import Annotated

from fastapi import APIRouter, Depends, Query
from pydantic import BaseModel, Field
from sqlalchemy.ext.asyncio import AsyncSession

from cardex.api.deps import get_catalog, get_current_user_id
from cardex.api.schemas import CardResponse
from cardex.clients.pokemon_tcg import PokemonTCGClient
from cardex.db import card_to_model, get_collected_cards, get_expansion_by_slug, get_user_cards
from cardex.db.database import get_session
from cardex.models.failure import ApiResponse
from cardex.services.card_search import DEFAULT_SEARCH_LIMIT, search_cards
from cardex.services.catalog_merger import merge_catalog_cards, merge_expansion_cards
from cardex.services.collection import CollectionUpdate, apply_collection_updates
from cardex.services.stats import get_card_stats

router = APIRouter(prefix="/cards", tags=["cards"])


class CardUpdateRequest(BaseModel):
    """One collected-flag change."""

    id: str = Field(..., min_length=1, description="Catalog card id", examples=["sv1-203"])
    is_collected: bool
    name: str | None = Field(default=None, description="Only used for cards without a template")
    image_url: str | None = None
    expansion: str | None = None


class CollectionUpdateResponse(BaseModel):
    """Result of a bulk update."""

    updated: int
    total: int
    skipped: list[str] = Field(
        default_factory=list,
        description="Card ids that could not be created (unknown card, no details given)",
    )


class CardStatsResponse(BaseModel):
    """Overall completion for the caller."""

    total_count: int
    collected_count: int
    last_updated: datetime


@router.get("", response_model=ApiResponse[list[CardResponse]])
async def list_collected_cards(
    user_id: Annotated[str, Depends(get_current_user_id)],
    session: Annotated[AsyncSession, Depends(get_session)],
) -> ApiResponse[list[CardResponse]]:
    """Every card the caller has marked collected."""
    cards = await get_collected_cards(session, user_id)
    return ApiResponse.success([CardResponse.from_model(card_to_model(c)) for c in cards])


@router.post("", response_model=ApiResponse[CollectionUpdateResponse])
async def update_cards(
    updates: list[CardUpdateRequest],
    user_id: Annotated[str, Depends(get_current_user_id)],
    session: Annotated[AsyncSession, Depends(get_session)],
) -> ApiResponse[CollectionUpdateResponse]:
    """
    Set collected flags for a batch of cards.

    Collecting a card stamps today's date; uncollecting clears it.
    """
    result = await apply_collection_updates(
        session,
        user_id,
        [
            CollectionUpdate(
                card_id=update.id,
                is_collected=update.is_collected,
                name=update.name,
                image_url=update.image_url,
                expansion=update.expansion,
            )
            for update in updates
        ],
    )
    return ApiResponse.success(
        CollectionUpdateResponse(updated=result.updated, total=result.total, skipped=result.skipped)
    )


@router.get("/search", response_model=ApiResponse[list[CardResponse]])
async def search(
    user_id: Annotated[str, Depends(get_current_user_id)],
    session: Annotated[AsyncSession, Depends(get_session)],
    q: Annotated[str, Query(max_length=100)] = "",
    limit: Annotated[int, Query(ge=1, le=100)] = DEFAULT_SEARCH_LIMIT,
) -> ApiResponse[list[CardResponse]]:
    """
    Search all expansions by card name.

    Cards the caller already owns or has on the wishlist are left out.
    """
    cards = await search_cards(session, user_id, q, limit)
    return ApiResponse.success([CardResponse.from_model(card) for card in cards])


@router.get("/stats", response_model=ApiResponse[CardStatsResponse])
async def card_stats(
    user_id: Annotated[str, Depends(get_current_user_id)],
    session: Annotated[AsyncSession, Depends(get_session)],
    catalog: Annotated[PokemonTCGClient, Depends(get_catalog)],
) -> ApiResponse[CardStatsResponse]:
    """How many tracked cards exist and how many the caller owns."""
    stats = await get_card_stats(session, catalog, user_id)
    return ApiResponse.success(
        CardStatsResponse(
            total_count=stats.total_count,
            collected_count=stats.collected_count,
            last_updated=stats.last_updated,
        )
    )


@router.get("/direct/{expansion}", response_model=ApiResponse[list[CardResponse]])
async def list_expansion_cards_direct(
    expansion: str,
    user_id: Annotated[str, Depends(get_current_user_id)],
    session: Annotated[AsyncSession, Depends(get_session)],
) -> ApiResponse[list[CardResponse]]:
    """
    Tracked cards of an expansion from the stored templates.

    An unknown expansion yields an empty list.
    """
    cards = await merge_expansion_cards(session, expansion, user_id)
    return ApiResponse.success([CardResponse.from_model(card) for card in cards])


@router.get("/{expansion}", response_model=ApiResponse[list[CardResponse]])
async def list_expansion_cards(
    expansion: str,
    user_id: Annotated[str, Depends(get_current_user_id)],
    session: Annotated[AsyncSession, Depends(get_session)],
    catalog: Annotated[PokemonTCGClient, Depends(get_catalog)],
) -> ApiResponse[list[CardResponse]]:
    """
    Tracked cards of an expansion straight from the catalog.

    Nothing is stored; the caller's collected flags are overlaid.
    """
    stored = await get_expansion_by_slug(session, expansion)
    set_id = stored.id if stored else expansion.lower()

    catalog_cards = await catalog.fetch_cards_by_expansion(set_id)
    user_cards = await get_user_cards(session, user_id, (card.id for card in catalog_cards))
    merged = merge_catalog_cards(catalog_cards, user_cards)
    return ApiResponse.success([CardResponse.from_model(card) for card in merged])
