"""Repository interfaces for the YayoNay domain.

Repository interfaces are defined in the domain layer (dependency inversion).
Implementations live in the persistence layer.
"""

from yayonay.domain.repository.cooldown_marker import CooldownMarkerRepository
from yayonay.domain.repository.document_store import (
    DeleteFieldOp,
    DeleteOp,
    DocOp,
    DocumentSnapshot,
    DocumentStore,
    IncrementOp,
    Query,
    QuerySnapshot,
    RequireOp,
    SetOp,
    Snapshot,
    WriteResult,
)

__all__ = [
    "CooldownMarkerRepository",
    "DeleteFieldOp",
    "DeleteOp",
    "DocOp",
    "DocumentSnapshot",
    "DocumentStore",
    "IncrementOp",
    "Query",
    "QuerySnapshot",
    "RequireOp",
    "SetOp",
    "Snapshot",
    "WriteResult",
]
