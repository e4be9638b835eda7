"""
Statistics API endpoints.

Per-expansion completion for the calling user.
"""

from typing import Annotated

from fastapi import APIRouter, Depends
from pydantic import BaseModel
from sqlalchemy.ext.asyncio import AsyncSession

from cardex.api.deps import get_catalog, get_current_user_id
from cardex.clients.pokemon_tcg import PokemonTCGClient
from cardex.db.database import get_session
from cardex.models.failure import ApiResponse, ForbiddenError
from cardex.services.stats import get_expansion_stats

router = APIRouter(tags=["stats"])


class ExpansionStatsResponse(BaseModel):
    """Completion of one expansion."""

    name: str
    total: int
    collected: int
    percentage: int


async def _stats_for(
    session: AsyncSession, catalog: PokemonTCGClient, user_id: str
) -> ApiResponse[dict[str, ExpansionStatsResponse]]:
    stats = await get_expansion_stats(session, catalog, user_id)
    return ApiResponse.success(
        {
            slug: ExpansionStatsResponse(
                name=s.name, total=s.total, collected=s.collected, percentage=s.percentage
            )
            for slug, s in stats.items()
        }
    )


@router.get("/stats/expansions", response_model=ApiResponse[dict[str, ExpansionStatsResponse]])
async def my_expansion_stats(
    user_id: Annotated[str, Depends(get_current_user_id)],
    session: Annotated[AsyncSession, Depends(get_session)],
    catalog: Annotated[PokemonTCGClient, Depends(get_catalog)],
) -> ApiResponse[dict[str, ExpansionStatsResponse]]:
    """Completion per expansion slug for the caller."""
    return await _stats_for(session, catalog, user_id)


@router.get(
    "/users/{user_id}/stats",
    response_model=ApiResponse[dict[str, ExpansionStatsResponse]],
)
async def user_expansion_stats(
    user_id: str,
    current_user_id: Annotated[str, Depends(get_current_user_id)],
    session: Annotated[AsyncSession, Depends(get_session)],
    catalog: Annotated[PokemonTCGClient, Depends(get_catalog)],
) -> ApiResponse[dict[str, ExpansionStatsResponse]]:
    """Completion per expansion for a user; only the user themselves may ask."""
    if user_id != current_user_id:
        raise ForbiddenError("Cannot read another user's statistics")
    return await _stats_for(session, catalog, user_id)
