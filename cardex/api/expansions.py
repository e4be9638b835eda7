"""Expansion API endpoints."""

from typing import Annotated

from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession

from cardex.api.deps import get_catalog
from cardex.api.schemas import ExpansionResponse
from cardex.clients.pokemon_tcg import PokemonTCGClient
from cardex.db.database import get_session
from cardex.models.failure import ApiResponse
from cardex.services.expansions import list_expansions

router = APIRouter(prefix="/expansions", tags=["expansions"])


@router.get("", response_model=ApiResponse[list[ExpansionResponse]])
async def get_expansions(
    session: Annotated[AsyncSession, Depends(get_session)],
    catalog: Annotated[PokemonTCGClient, Depends(get_catalog)],
) -> ApiResponse[list[ExpansionResponse]]:
    """Tracked expansions, newest first. Does not require a user."""
    expansions = await list_expansions(session, catalog)
    return ApiResponse.success([ExpansionResponse.from_model(exp) for exp in expansions])
