"""Document store interface.

The shared store holds the aggregate documents, the vote ledger and the
comments. It is consumed through a deliberately small contract:

- ``atomic_write``: a batch of operations applied all-or-nothing
- ``get`` / ``query``: point and collection reads
- ``subscribe``: an ordered push stream of snapshots, until cancelled

Field names inside operations may be dotted paths into nested maps
(``votesMetadata.totalVotes``, ``likedBy.<uid>``).
"""

from abc import ABC, abstractmethod
from datetime import datetime
from typing import Any, AsyncIterator, Literal, Optional, Union

from pydantic import Field

from yayonay.domain.value.common import ValueObject


class SetOp(ValueObject):
    """Write fields of a document.

    Without ``merge`` the document body is replaced by ``fields``. With
    ``merge`` each (possibly dotted) field is written into the existing body,
    creating the document when missing.
    """

    kind: Literal["set"] = "set"
    path: str
    fields: dict[str, Any]
    merge: bool = False


class IncrementOp(ValueObject):
    """Add ``delta`` to a numeric field (missing fields count as 0)."""

    kind: Literal["increment"] = "increment"
    path: str
    field: str
    delta: int


class DeleteOp(ValueObject):
    """Delete a document. Deleting a missing document is not an error."""

    kind: Literal["delete"] = "delete"
    path: str


class DeleteFieldOp(ValueObject):
    """Remove a (possibly dotted) field from a document."""

    kind: Literal["delete_field"] = "delete_field"
    path: str
    field: str


class RequireOp(ValueObject):
    """Precondition evaluated before any operation of the batch applies.

    - ``field`` None, ``absent`` False: the document must exist
    - ``field`` None, ``absent`` True: the document must not exist
    - ``field`` set, ``absent`` True: the field must not exist
    - ``field`` set, ``absent`` False: the field must equal ``value``
    """

    kind: Literal["require"] = "require"
    path: str
    field: Optional[str] = None
    value: Any = None
    absent: bool = False


DocOp = Union[SetOp, IncrementOp, DeleteOp, DeleteFieldOp, RequireOp]


class WriteResult(ValueObject):
    """Acknowledgement of an atomic write."""

    version: int
    committed_at: datetime
    paths: tuple[str, ...] = ()


class DocumentSnapshot(ValueObject):
    """State of one document at a store version."""

    path: str
    version: int
    data: Optional[dict[str, Any]] = None

    @property
    def exists(self) -> bool:
        return self.data is not None

    @property
    def id(self) -> str:
        """Last path segment (the document id)."""
        return self.path.rsplit("/", 1)[-1]


class Query(ValueObject):
    """Equality query over the documents of one collection.

    ``collection`` is a collection path (``comments``,
    ``categories/c1/subcategories``). With ``group`` it is a collection id
    and every collection with that id matches, wherever it is nested.
    """

    collection: str
    where: tuple[tuple[str, Any], ...] = ()
    group: bool = False

    def matches_collection(self, path: str) -> bool:
        """Whether a document path belongs to the queried collection."""
        parent, _, _ = path.rpartition("/")
        if self.group:
            return parent.rsplit("/", 1)[-1] == self.collection
        return parent == self.collection

    @property
    def key(self) -> str:
        """Stable textual key for this query."""
        clauses = ",".join(f"{field}={value}" for field, value in self.where)
        prefix = "group:" if self.group else ""
        return f"{prefix}{self.collection}?{clauses}"


class QuerySnapshot(ValueObject):
    """Result of a query at a store version."""

    query: Query
    version: int
    documents: tuple[DocumentSnapshot, ...] = Field(default_factory=tuple)


Snapshot = Union[DocumentSnapshot, QuerySnapshot]


class DocumentStore(ABC):
    """Shared document store.

    Defines the contract for the backing store of the engagement engine.
    Implementations live in the persistence layer.
    """

    @abstractmethod
    async def atomic_write(self, ops: list[DocOp]) -> WriteResult:
        """Apply all operations or none of them.

        Args:
            ops: Operations to apply, preconditions included

        Returns:
            The store version the batch was committed at

        Raises:
            PreconditionFailedError: If a RequireOp does not hold
            StoreUnavailableError: If the store cannot be reached
        """
        pass

    @abstractmethod
    async def get(self, path: str) -> DocumentSnapshot:
        """Read one document.

        Raises:
            StoreUnavailableError: If the store cannot be reached
        """
        pass

    @abstractmethod
    async def query(self, query: Query) -> QuerySnapshot:
        """Read all documents matching a query.

        Raises:
            StoreUnavailableError: If the store cannot be reached
        """
        pass

    @abstractmethod
    def subscribe(self, source: Union[str, Query]) -> AsyncIterator[Snapshot]:
        """Stream snapshots of a document or query.

        The first snapshot reflects the current state. Later snapshots are
        delivered in store order whenever a write touches the source. The
        stream runs until the consumer stops iterating (or its task is
        cancelled).
        """
        pass
