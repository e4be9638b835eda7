"""
Database engine and session management.

A Database owns one async SQLAlchemy engine and its session factory. The
application lifespan creates it, calls init() once and dispose() on
shutdown; request handlers receive sessions through get_session.
"""

from collections.abc import AsyncGenerator

from fastapi import Request
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import (
    AsyncEngine,
    AsyncSession,
    async_sessionmaker,
    create_async_engine,
)

from cardex.models.db import Base


class Database:
    """Async engine plus session factory with an explicit lifecycle."""

    def __init__(self, url: str, echo: bool = False) -> None:
        self.url = url
        kwargs = {"echo": echo}
        if not url.startswith("sqlite"):
            kwargs["pool_pre_ping"] = True
        self.engine: AsyncEngine = create_async_engine(url, **kwargs)
        self.session_factory = async_sessionmaker(
            self.engine,
            class_=AsyncSession,
            expire_on_commit=False,
        )
        self._initialized = False

    async def init(self) -> None:
        """
        Initialize database tables.

        Creates all tables defined in the ORM models. Subsequent calls are
        no-ops.
        """
        if self._initialized:
            return
        async with self.engine.begin() as conn:
            await conn.run_sync(Base.metadata.create_all)
        self._initialized = True

    async def drop(self) -> None:
        """
        Drop all database tables.

        WARNING: Destroys all data. Use only for testing.
        """
        async with self.engine.begin() as conn:
            await conn.run_sync(Base.metadata.drop_all)
        self._initialized = False

    async def dispose(self) -> None:
        """Close every pooled connection."""
        await self.engine.dispose()
        self._initialized = False

    async def session(self) -> AsyncGenerator[AsyncSession, None]:
        """Yield a session that commits on success and rolls back on error."""
        async with self.session_factory() as session:
            try:
                yield session
                await session.commit()
            except SQLAlchemyError:
                await session.rollback()
                raise


async def get_session(request: Request) -> AsyncGenerator[AsyncSession, None]:
    """
    Dependency that provides a database session.

    Usage in FastAPI:
        @app.get("/items")
        async def get_items(session: AsyncSession = Depends(get_session)):
            ...
    """
    database: Database = request.app.state.database
    async for session in database.session():
        yield session
