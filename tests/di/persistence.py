"""Mock persistence providers for testing."""

from dishka import Scope, provide

from yayonay.domain.repository import CooldownMarkerRepository, DocumentStore
from yayonay.persistence.repository.inmemory import (
    InMemoryCooldownMarkerRepository,
    InMemoryDocumentStore,
)
from yayonay.util.di.infrastructure.persistence import PersistenceProvider


class MockPersistenceProvider(PersistenceProvider):
    """Mock persistence provider using in-memory stores.

    Uses APP scope like the engine itself; each test builds its own
    container, so each test gets fresh stores.
    """

    __is_mock__ = True

    @provide(scope=Scope.APP)
    def get_in_memory_document_store(self) -> InMemoryDocumentStore:
        """Provide in-memory document store."""
        return InMemoryDocumentStore()

    @provide(scope=Scope.APP)
    def get_document_store(self, store: InMemoryDocumentStore) -> DocumentStore:
        """Expose the in-memory store as the shared document store."""
        return store

    @provide(scope=Scope.APP)
    def get_in_memory_marker_repository(self) -> InMemoryCooldownMarkerRepository:
        """Provide in-memory cooldown marker repository."""
        return InMemoryCooldownMarkerRepository()

    @provide(scope=Scope.APP)
    def get_cooldown_marker_repository(
        self, repository: InMemoryCooldownMarkerRepository
    ) -> CooldownMarkerRepository:
        """Expose the in-memory markers as the cooldown marker repository."""
        return repository
