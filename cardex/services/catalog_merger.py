"""
Catalog merger.

Combines catalog cards (the template baseline shared by every user) with
one user's collected flags. Reads only: no card is created while merging.
"""

import logging
from collections.abc import Iterable

from sqlalchemy.ext.asyncio import AsyncSession

from cardex.config import ILLUSTRATION_RARE_TYPE
from cardex.db.operations import card_to_model, get_template_cards, get_user_cards
from cardex.models.card import Card
from cardex.models.db import CardDB

logger = logging.getLogger(__name__)


def merge_catalog_cards(catalog_cards: Iterable[Card], user_cards: Iterable[CardDB]) -> list[Card]:
    """
    Overlay a user's collected flags onto catalog cards.

    Catalog fields (name, image, expansion, type) always come from the
    catalog card; only is_collected and date_collected come from the
    user's copy. Cards without a copy are uncollected.

    Returns:
        A new list in catalog order
    """
    owned = {card.card_id: card for card in user_cards}
    merged: list[Card] = []

    for card in catalog_cards:
        user_card = owned.get(card.id)
        merged.append(
            Card(
                id=card.id,
                name=card.name,
                image_url=card.image_url,
                expansion=card.expansion,
                card_type=card.card_type,
                is_collected=user_card.is_collected if user_card else False,
                date_collected=user_card.date_collected if user_card else None,
            )
        )

    return merged


async def merge_expansion_cards(
    session: AsyncSession,
    expansion_slug: str,
    user_id: str,
    card_type: str = ILLUSTRATION_RARE_TYPE,
) -> list[Card]:
    """
    Merged view of one expansion from stored templates.

    Args:
        session: Database session
        expansion_slug: Expansion slug (case-insensitive)
        user_id: Requesting user
        card_type: Tracked subset to list

    Returns:
        Template cards with the user's collected state; empty for an
        unknown expansion
    """
    slug = expansion_slug.lower()
    templates = await get_template_cards(session, slug, card_type)
    if not templates:
        logger.info("No %s templates for expansion %s", card_type, slug)
        return []

    user_cards = await get_user_cards(session, user_id, (t.card_id for t in templates))
    logger.debug(
        "Expansion %s: %d templates, %d user copies for %s",
        slug,
        len(templates),
        len(user_cards),
        user_id,
    )
    return merge_catalog_cards((card_to_model(t) for t in templates), user_cards)
