"""Tracked expansions, read from the database and topped up from the catalog."""

import logging

from sqlalchemy.ext.asyncio import AsyncSession

from cardex.clients.pokemon_tcg import PokemonTCGClient
from cardex.config import MAX_LISTED_EXPANSIONS
from cardex.db.operations import expansion_to_model, get_tracked_expansions, upsert_expansion
from cardex.models.card import Expansion

logger = logging.getLogger(__name__)


async def list_expansions(
    session: AsyncSession,
    catalog: PokemonTCGClient,
    limit: int = MAX_LISTED_EXPANSIONS,
) -> list[Expansion]:
    """
    Tracked expansions, newest first.

    Served from the database when it already holds `limit` of them;
    otherwise fetched from the catalog and stored.
    """
    stored = await get_tracked_expansions(session, limit=limit)
    if len(stored) >= limit:
        return [expansion_to_model(exp) for exp in stored]

    logger.info("Only %d expansions stored, fetching from catalog", len(stored))
    expansions = await catalog.fetch_tracked_expansions()
    for expansion in expansions:
        await upsert_expansion(session, expansion)
    return expansions[:limit]
