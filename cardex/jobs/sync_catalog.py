"""
Scheduled job to sync the card catalog.

Fetches the tracked expansions and their Illustration Rare cards from the
catalog API and stores them as template cards. Can be run as a standalone
script or called from a scheduler.
"""

import asyncio
import logging

from sqlalchemy.exc import SQLAlchemyError

from cardex.clients.pokemon_tcg import PokemonTCGClient
from cardex.config import settings
from cardex.db.database import Database
from cardex.db.operations import upsert_expansion, upsert_template_card
from cardex.models.card import Expansion
from cardex.models.failure import UpstreamError

logger = logging.getLogger(__name__)


async def sync_expansion(
    database: Database, catalog: PokemonTCGClient, expansion: Expansion
) -> int:
    """
    Sync the tracked cards of a single expansion.

    Returns:
        Number of cards stored, 0 if the expansion failed
    """
    logger.info("Fetching cards for %s (%s)...", expansion.name, expansion.id)

    try:
        cards = await catalog.fetch_cards_by_expansion(expansion.id)

        async with database.session_factory() as session:
            await upsert_expansion(session, expansion)
            for card in cards:
                await upsert_template_card(session, card)
            await session.commit()

        logger.info("Synced %d cards for %s", len(cards), expansion.id)
        return len(cards)

    except UpstreamError as e:
        logger.error("Catalog error fetching %s: %s", expansion.id, e.cause)
        return 0
    except SQLAlchemyError as e:
        logger.error("Database error storing %s: %s", expansion.id, e)
        return 0


async def run_catalog_sync(
    database: Database,
    catalog: PokemonTCGClient,
    expansion_ids: list[str] | None = None,
) -> dict[str, int]:
    """
    Sync all tracked expansions, or only the given ones.

    Returns:
        Dict mapping expansion id to number of cards synced
    """
    await database.init()
    expansions = await catalog.fetch_tracked_expansions()

    if expansion_ids is not None:
        wanted = {exp_id.lower() for exp_id in expansion_ids}
        for exp_id in wanted - {exp.id.lower() for exp in expansions}:
            logger.warning("Skipping untracked expansion: %s", exp_id)
        expansions = [exp for exp in expansions if exp.id.lower() in wanted]

    results: dict[str, int] = {}
    for expansion in expansions:
        results[expansion.id] = await sync_expansion(database, catalog, expansion)

    total = sum(results.values())
    logger.info("Catalog sync complete. Total cards synced: %d", total)
    return results


async def _run() -> dict[str, int]:
    database = Database(settings.database_url, echo=settings.debug)
    catalog = PokemonTCGClient(
        settings.pokemon_tcg_api_url,
        api_key=settings.pokemon_tcg_api_key,
        timeout=settings.http_timeout_seconds,
        retries=settings.http_retries,
        max_concurrency=settings.max_concurrent_requests,
    )
    try:
        return await run_catalog_sync(database, catalog)
    finally:
        await catalog.aclose()
        await database.dispose()


def main() -> None:
    """CLI entry point for running the catalog sync."""
    logging.basicConfig(
        level=settings.log_level,
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
    )
    asyncio.run(_run())


if __name__ == "__main__":
    main()
