"""Persistence infrastructure providers."""

from collections.abc import AsyncIterator
from typing import NewType

from dishka import Scope, provide
import logfire
from sqlalchemy.ext.asyncio import AsyncEngine, AsyncSession, async_sessionmaker

from yayonay.config import Settings
from yayonay.domain.repository import CooldownMarkerRepository, DocumentStore
from yayonay.persistence.database import (
    create_engine,
    create_local_engine,
    create_local_schema,
    create_session_factory,
)
from yayonay.persistence.repository import SqlCooldownMarkerRepository, SqlDocumentStore
from yayonay.util.di.base import ProviderBase
from yayonay.util.observability import instrument_sqlalchemy

# The local marker store has its own engine
LocalEngine = NewType("LocalEngine", AsyncEngine)


class PersistenceProvider(ProviderBase):
    """Persistence component base."""

    __mock_component__ = "persistence"


class ProdPersistenceProvider(PersistenceProvider):
    """Shared store on SQLAlchemy plus the local sqlite marker store."""

    __is_mock__ = False

    scope = Scope.APP

    @provide(scope=Scope.APP)
    async def get_engine(self, settings: Settings) -> AsyncIterator[AsyncEngine]:
        """Provide shared store engine."""
        engine = create_engine(settings)
        instrument_sqlalchemy(engine)
        yield engine
        await engine.dispose()
        logfire.info("Store engine disposed")

    @provide(scope=Scope.APP)
    async def get_local_engine(self, settings: Settings) -> AsyncIterator[LocalEngine]:
        """Provide local marker store engine, creating its tables."""
        engine = create_local_engine(settings)
        await create_local_schema(engine)
        yield LocalEngine(engine)
        await engine.dispose()

    @provide(scope=Scope.APP)
    def get_session_factory(
        self, engine: AsyncEngine
    ) -> async_sessionmaker[AsyncSession]:
        """Provide session factory."""
        return create_session_factory(engine)

    @provide(scope=Scope.APP)
    def get_document_store(
        self, session_factory: async_sessionmaker[AsyncSession], settings: Settings
    ) -> DocumentStore:
        """Provide document store."""
        return SqlDocumentStore(session_factory, poll_interval=settings.store.poll_interval)

    @provide(scope=Scope.APP)
    def get_cooldown_marker_repository(
        self, local_engine: LocalEngine
    ) -> CooldownMarkerRepository:
        """Provide cooldown marker repository."""
        return SqlCooldownMarkerRepository(create_session_factory(local_engine))
