"""SQL repository implementations."""

from yayonay.persistence.repository.cooldown_marker import SqlCooldownMarkerRepository
from yayonay.persistence.repository.document_store import SqlDocumentStore

__all__ = [
    "SqlCooldownMarkerRepository",
    "SqlDocumentStore",
]
