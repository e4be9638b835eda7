"""Tests for database CRUD operations."""

from datetime import UTC, datetime

import pytest
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from cardex.db.operations import (
    card_to_model,
    count_collected_by_expansion,
    create_user_card,
    get_cards_by_ids,
    get_collected_cards,
    get_expansion_by_slug,
    get_template_cards,
    get_tracked_expansions,
    search_template_cards,
    upsert_expansion,
    upsert_stats,
    upsert_template_card,
)
from cardex.models.card import Card, Expansion
from cardex.models.db import CardDB
from sample_data import OTHER_USER, SV1, USER, make_card

NOW = datetime(2025, 3, 1, tzinfo=UTC)


def collected(card_id: str, expansion: str = "sv1") -> Card:
    return Card(
        id=card_id,
        name=card_id,
        image_url="",
        expansion=expansion,
        is_collected=True,
        date_collected=NOW,
    )


class TestTemplateOperations:
    async def test_upsert_updates_existing(self, session: AsyncSession) -> None:
        """Syncing a card twice updates the template in place."""
        first = await upsert_template_card(session, make_card("sv1-199", "Spidops"))
        second = await upsert_template_card(session, make_card("sv1-199", "Spidops ex"))

        assert second.id == first.id
        assert second.name == "Spidops ex"
        assert len(await get_template_cards(session, "sv1")) == 1

    async def test_template_ids_are_unique(self, seeded_session: AsyncSession) -> None:
        """A second template with the same card id is rejected."""
        seeded_session.add(
            CardDB(card_id="sv1-199", name="Spidops", image_url="", expansion="sv1")
        )

        with pytest.raises(IntegrityError):
            await seeded_session.flush()

    async def test_user_copies_share_template_id(self, seeded_session: AsyncSession) -> None:
        """Each user may hold a copy of the same card."""
        await create_user_card(seeded_session, USER, collected("sv1-199"))
        await create_user_card(seeded_session, OTHER_USER, collected("sv1-199"))

        assert set(await get_cards_by_ids(seeded_session, ["sv1-199"])) == {"sv1-199"}

    async def test_templates_filtered_by_type(self, seeded_session: AsyncSession) -> None:
        """Only templates of the requested type are listed."""
        await upsert_template_card(
            seeded_session,
            Card(
                id="sv1-250",
                name="Miraidon",
                image_url="",
                expansion="sv1",
                card_type="special_illustration_rare",
            ),
        )

        cards = await get_template_cards(seeded_session, "sv1")

        assert "sv1-250" not in {card.card_id for card in cards}
        special = await get_template_cards(seeded_session, "sv1", "special_illustration_rare")
        assert len(special) == 1

    async def test_card_to_model(self, seeded_session: AsyncSession) -> None:
        """Database records convert to domain cards keyed by catalog id."""
        cards = await get_template_cards(seeded_session, "sv1")

        model = card_to_model(cards[0])

        assert model.id == "sv1-199"
        assert model.is_collected is False

    async def test_get_cards_by_ids_prefers_templates(self, seeded_session: AsyncSession) -> None:
        """Lookups by id return the template when one exists."""
        await create_user_card(seeded_session, USER, collected("sv1-199"))
        await create_user_card(seeded_session, USER, collected("custom-1", "sv2"))

        cards = await get_cards_by_ids(seeded_session, ["sv1-199", "custom-1", "nope"])

        assert set(cards) == {"sv1-199", "custom-1"}
        assert cards["sv1-199"].user_id is None
        assert cards["custom-1"].user_id == USER

    async def test_search_excludes_ids(self, seeded_session: AsyncSession) -> None:
        """Excluded ids never appear in search results."""
        results = await search_template_cards(seeded_session, "ar", {"sv1-200"})

        names = [card.name for card in results]
        assert "Armarouge" not in names
        assert "Arcanine" in names


class TestCollectedCounts:
    async def test_counts(self, seeded_session: AsyncSession) -> None:
        """Collected cards are counted per user and per expansion."""
        await create_user_card(seeded_session, USER, collected("sv1-199"))
        await create_user_card(seeded_session, USER, collected("sv3pt5-168", "sv3pt5"))
        await create_user_card(seeded_session, OTHER_USER, collected("sv1-200"))
        uncollected = collected("sv1-201")
        uncollected.is_collected = False
        await create_user_card(seeded_session, USER, uncollected)

        assert await count_collected_by_expansion(seeded_session, USER) == {"sv1": 1, "sv3pt5": 1}
        assert [c.card_id for c in await get_collected_cards(seeded_session, USER)] == [
            "sv1-199",
            "sv3pt5-168",
        ]


class TestExpansionOperations:
    async def test_tracked_expansions(self, session: AsyncSession) -> None:
        """Excluded and non Scarlet & Violet sets are not tracked."""
        await upsert_expansion(session, SV1)
        await upsert_expansion(
            session,
            Expansion(
                id="sv8pt5", name="Prismatic Evolutions", slug="sv8pt5", release_date="2025/01/17"
            ),
        )
        await upsert_expansion(
            session,
            Expansion(id="swsh12", name="Silver Tempest", slug="swsh12", release_date="2022/11/11"),
        )

        tracked = await get_tracked_expansions(session)

        assert [exp.id for exp in tracked] == ["sv1"]

    async def test_lookup_by_slug(self, session: AsyncSession) -> None:
        """Slugs are looked up case-insensitively."""
        await upsert_expansion(session, SV1)

        found = await get_expansion_by_slug(session, "SV1")

        assert found is not None
        assert found.name == "Scarlet & Violet"


class TestStatsOperations:
    async def test_upsert_stats(self, session: AsyncSession) -> None:
        """Totals are the sum of the per-expansion counts."""
        stats = await upsert_stats(session, "illustration_rare_count", {"sv1": 4, "sv2": 6}, NOW)
        updated = await upsert_stats(session, "illustration_rare_count", {"sv1": 5}, NOW)

        assert updated.id == stats.id
        assert updated.total_count == 5
        assert updated.counts == {"sv1": 5}
