"""Shared fixtures: in-memory database, fake upstream clients and the test client."""

from unittest.mock import AsyncMock, MagicMock

import pytest
from httpx import ASGITransport, AsyncClient
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine

from cardex.api.deps import get_catalog, get_marketplace
from cardex.clients.cardtrader import CardTraderClient
from cardex.clients.pokemon_tcg import PokemonTCGClient
from cardex.config import ILLUSTRATION_RARE
from cardex.db.database import get_session
from cardex.main import app
from cardex.models.card import Card
from cardex.models.db import Base
from sample_data import CATALOG_CARDS, SV1, SV3PT5, seed_catalog


@pytest.fixture
async def async_engine():
    """Create an in-memory SQLite engine for testing."""
    engine = create_async_engine("sqlite+aiosqlite:///:memory:", echo=False)
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    yield engine
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.drop_all)
    await engine.dispose()


@pytest.fixture
async def session(async_engine) -> AsyncSession:
    """Provide a database session for tests."""
    async_session = async_sessionmaker(async_engine, class_=AsyncSession, expire_on_commit=False)
    async with async_session() as session:
        yield session


@pytest.fixture
async def seeded_session(session: AsyncSession) -> AsyncSession:
    """A session over a database holding the sample catalog."""
    await seed_catalog(session)
    return session


@pytest.fixture
def catalog() -> MagicMock:
    """Catalog client serving the sample expansions without network access."""
    catalog = MagicMock(spec=PokemonTCGClient)
    catalog.fetch_tracked_expansions = AsyncMock(return_value=[SV3PT5, SV1])
    catalog.fetch_expansions = AsyncMock(return_value=[SV3PT5, SV1])

    def cards_for(set_id: str, rarity: str | None = ILLUSTRATION_RARE) -> list[Card]:
        return list(CATALOG_CARDS.get(set_id.lower(), []))

    catalog.fetch_cards_by_expansion = AsyncMock(side_effect=cards_for)
    return catalog


@pytest.fixture
def marketplace() -> MagicMock:
    """Marketplace client with no listings unless a test adds some."""
    marketplace = MagicMock(spec=CardTraderClient)
    marketplace.fetch_listings = AsyncMock(return_value=[])
    marketplace.fetch_expansions = AsyncMock(return_value=[])
    return marketplace


@pytest.fixture
async def client(async_engine, catalog: MagicMock, marketplace: MagicMock):
    """Provide an async test client with overridden database session and upstream clients."""
    async_session = async_sessionmaker(async_engine, class_=AsyncSession, expire_on_commit=False)

    async def override_get_session():
        async with async_session() as session:
            try:
                yield session
                await session.commit()
            except Exception:
                await session.rollback()
                raise

    app.dependency_overrides[get_session] = override_get_session
    app.dependency_overrides[get_catalog] = lambda: catalog
    app.dependency_overrides[get_marketplace] = lambda: marketplace

    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as client:
        yield client

    app.dependency_overrides.clear()


@pytest.fixture
async def seeded_client(client: AsyncClient, async_engine) -> AsyncClient:
    """Test client over a database holding the sample catalog."""
    async_session = async_sessionmaker(async_engine, class_=AsyncSession, expire_on_commit=False)
    async with async_session() as session:
        await seed_catalog(session)
    return client
