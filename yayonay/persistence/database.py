"""Database connection and session management.

Provides async database engines and session factories for the shared
document store (PostgreSQL) and the local marker store (SQLite).
"""

from sqlalchemy.ext.asyncio import (
    AsyncEngine,
    AsyncSession,
    async_sessionmaker,
    create_async_engine,
)

from yayonay.config import Settings
from yayonay.persistence.tables import local_metadata


def create_engine(settings: Settings) -> AsyncEngine:
    """Create async engine for the shared document store.

    Args:
        settings: Application settings with store URL

    Returns:
        Configured async engine
    """
    if settings.store.url.startswith("sqlite"):
        # SQLite has no connection pool sizing
        return create_async_engine(settings.store.url, echo=settings.debug)
    return create_async_engine(
        settings.store.url,
        echo=settings.debug,
        pool_pre_ping=True,
        pool_size=settings.store.pool_size,
        max_overflow=settings.store.max_overflow,
    )


def create_local_engine(settings: Settings) -> AsyncEngine:
    """Create async engine for the local cooldown marker store.

    Args:
        settings: Application settings with local store URL

    Returns:
        Configured async engine
    """
    return create_async_engine(settings.local_store.url, echo=settings.debug)


async def create_local_schema(engine: AsyncEngine) -> None:
    """Create the local store tables if they do not exist yet."""
    async with engine.begin() as conn:
        await conn.run_sync(local_metadata.create_all)


def create_session_factory(engine: AsyncEngine) -> async_sessionmaker[AsyncSession]:
    """Session factory; every store write opens its own transaction."""
    return async_sessionmaker(
        engine,
        class_=AsyncSession,
        expire_on_commit=False,
        autoflush=False,
    )
