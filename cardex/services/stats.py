"""
Collection statistics.

Totals (how many tracked cards each expansion has) are expensive: every
expansion's card list must be fetched from the catalog. They are cached
in the stats table and recomputed only when older than the TTL.
Collected counts are always counted fresh for the requesting user.
"""

import asyncio
import logging
from dataclasses import dataclass
from datetime import UTC, datetime, timedelta

from sqlalchemy.ext.asyncio import AsyncSession

from cardex.clients.pokemon_tcg import PokemonTCGClient
from cardex.config import STATS_TYPE, settings
from cardex.db.operations import (
    count_collected_by_expansion,
    get_stats,
    get_tracked_expansions,
    upsert_expansion,
    upsert_stats,
)

logger = logging.getLogger(__name__)


@dataclass(frozen=True, slots=True)
class ExpansionStats:
    """Completion of one expansion for one user."""

    name: str
    total: int
    collected: int
    percentage: int


@dataclass(frozen=True, slots=True)
class CardStats:
    """Completion across every tracked expansion for one user."""

    total_count: int
    collected_count: int
    last_updated: datetime


@dataclass(frozen=True, slots=True)
class ExpansionTotals:
    counts: dict[str, int]
    names: dict[str, str]
    last_updated: datetime


def completion_percentage(collected: int, total: int) -> int:
    """Percentage rounded half up; 0 for an empty expansion."""
    if total <= 0:
        return 0
    return int(100 * collected / total + 0.5)


def _as_utc(value: datetime) -> datetime:
    # SQLite hands back naive datetimes
    return value if value.tzinfo else value.replace(tzinfo=UTC)


async def recompute_totals(
    session: AsyncSession,
    catalog: PokemonTCGClient,
    now: datetime,
) -> ExpansionTotals:
    """
    Count tracked cards per expansion from the catalog and cache the result.

    Expansion card lists are fetched concurrently; the client bounds how
    many requests run at once. The first failure cancels the remaining
    fetches and is raised as is.
    """
    expansions = await catalog.fetch_tracked_expansions()
    logger.info("Recomputing totals over %d expansions", len(expansions))

    try:
        async with asyncio.TaskGroup() as group:
            tasks = [
                group.create_task(catalog.fetch_cards_by_expansion(expansion.id))
                for expansion in expansions
            ]
    except ExceptionGroup as errors:
        logger.warning(
            "%d of %d expansion fetches failed", len(errors.exceptions), len(expansions)
        )
        raise errors.exceptions[0] from None
    card_lists = [task.result() for task in tasks]

    counts: dict[str, int] = {}
    names: dict[str, str] = {}
    for expansion, cards in zip(expansions, card_lists, strict=True):
        await upsert_expansion(session, expansion)
        counts[expansion.slug] = len(cards)
        names[expansion.slug] = expansion.name

    await upsert_stats(session, STATS_TYPE, counts, now)
    return ExpansionTotals(counts=counts, names=names, last_updated=now)


async def get_expansion_totals(
    session: AsyncSession,
    catalog: PokemonTCGClient,
    now: datetime | None = None,
    ttl: timedelta | None = None,
) -> ExpansionTotals:
    """Cached totals when fresh, otherwise a recompute."""
    now = now or datetime.now(UTC)
    ttl = ttl if ttl is not None else timedelta(hours=settings.stats_ttl_hours)

    cached = await get_stats(session, STATS_TYPE)
    if cached is not None and now - _as_utc(cached.last_updated) < ttl:
        names = {exp.slug: exp.name for exp in await get_tracked_expansions(session)}
        return ExpansionTotals(
            counts=dict(cached.counts),
            names=names,
            last_updated=_as_utc(cached.last_updated),
        )

    return await recompute_totals(session, catalog, now)


async def get_expansion_stats(
    session: AsyncSession,
    catalog: PokemonTCGClient,
    user_id: str,
    now: datetime | None = None,
    ttl: timedelta | None = None,
) -> dict[str, ExpansionStats]:
    """
    Per-expansion completion for a user.

    Returns:
        Dict mapping expansion slug to its stats
    """
    totals = await get_expansion_totals(session, catalog, now=now, ttl=ttl)
    collected = await count_collected_by_expansion(session, user_id)

    return {
        slug: ExpansionStats(
            name=totals.names.get(slug, slug),
            total=total,
            collected=collected.get(slug, 0),
            percentage=completion_percentage(collected.get(slug, 0), total),
        )
        for slug, total in totals.counts.items()
    }


async def get_card_stats(
    session: AsyncSession,
    catalog: PokemonTCGClient,
    user_id: str,
    now: datetime | None = None,
    ttl: timedelta | None = None,
) -> CardStats:
    """Overall completion for a user across tracked expansions."""
    totals = await get_expansion_totals(session, catalog, now=now, ttl=ttl)
    collected = await count_collected_by_expansion(session, user_id)

    return CardStats(
        total_count=sum(totals.counts.values()),
        collected_count=sum(collected.get(slug, 0) for slug in totals.counts),
        last_updated=totals.last_updated,
    )
