"""In-memory repository implementations for testing."""

from .cooldown_marker import InMemoryCooldownMarkerRepository
from .document_store import InMemoryDocumentStore

__all__ = [
    "InMemoryCooldownMarkerRepository",
    "InMemoryDocumentStore",
]
