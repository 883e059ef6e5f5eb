"""In-memory document store for testing."""

import asyncio
import copy
from datetime import datetime, timezone
from typing import Any, AsyncIterator, Optional, Union

from yayonay.domain.error import StoreUnavailableError
from yayonay.domain.repository import (
    DocOp,
    DocumentSnapshot,
    DocumentStore,
    Query,
    QuerySnapshot,
    Snapshot,
    WriteResult,
)
from yayonay.persistence.documents import affected_paths, apply_ops, matches_where


class _Subscriber:
    def __init__(self, source: Union[str, Query]) -> None:
        self.source = source
        self.queue: asyncio.Queue[Snapshot] = asyncio.Queue()


class InMemoryDocumentStore(DocumentStore):
    """In-memory implementation of DocumentStore for testing.

    Besides the store contract it can simulate an unreachable backend
    (``go_offline``) and hold writes in flight (``pause_writes``).
    """

    def __init__(self) -> None:
        self._documents: dict[str, dict[str, Any]] = {}
        self._version = 0
        self._subscribers: list[_Subscriber] = []
        self._online = True
        self._write_gate = asyncio.Event()
        self._write_gate.set()
        self.writes: list[list[DocOp]] = []

    # -- test controls -------------------------------------------------------

    def go_offline(self) -> None:
        """Make every read and write raise StoreUnavailableError."""
        self._online = False

    def go_online(self) -> None:
        """Undo go_offline."""
        self._online = True

    def pause_writes(self) -> None:
        """Hold atomic writes until resume_writes is called."""
        self._write_gate.clear()

    def resume_writes(self) -> None:
        """Release held writes."""
        self._write_gate.set()

    def seed(self, path: str, data: dict[str, Any]) -> None:
        """Put a document in place without notifying subscribers."""
        self._documents[path] = copy.deepcopy(data)

    @property
    def version(self) -> int:
        return self._version

    # -- contract ------------------------------------------------------------

    def _ensure_online(self) -> None:
        if not self._online:
            raise StoreUnavailableError("In-memory store is offline")

    async def atomic_write(self, ops: list[DocOp]) -> WriteResult:
        """Apply all operations or none of them."""
        await self._write_gate.wait()
        self._ensure_online()

        paths = affected_paths(ops)
        current = {path: self._documents.get(path) for path in paths}
        updated = apply_ops(current, ops)

        for path, data in updated.items():
            if data is None:
                self._documents.pop(path, None)
            else:
                self._documents[path] = data
        self._version += 1
        self.writes.append(list(ops))

        self._notify(paths)
        return WriteResult(
            version=self._version,
            committed_at=datetime.now(timezone.utc),
            paths=tuple(paths),
        )

    async def get(self, path: str) -> DocumentSnapshot:
        """Read one document."""
        self._ensure_online()
        return self._document_snapshot(path)

    async def query(self, query: Query) -> QuerySnapshot:
        """Read all documents matching a query."""
        self._ensure_online()
        return self._query_snapshot(query)

    async def subscribe(self, source: Union[str, Query]) -> AsyncIterator[Snapshot]:
        """Stream snapshots of a document or query."""
        subscriber = _Subscriber(source)
        self._subscribers.append(subscriber)
        try:
            yield self._snapshot(source)
            while True:
                yield await subscriber.queue.get()
        finally:
            self._subscribers.remove(subscriber)

    # -- helpers -------------------------------------------------------------

    def _document_snapshot(self, path: str) -> DocumentSnapshot:
        data: Optional[dict[str, Any]] = self._documents.get(path)
        return DocumentSnapshot(
            path=path,
            version=self._version,
            data=copy.deepcopy(data) if data is not None else None,
        )

    def _query_snapshot(self, query: Query) -> QuerySnapshot:
        documents = tuple(
            DocumentSnapshot(path=path, version=self._version, data=copy.deepcopy(data))
            for path, data in sorted(self._documents.items())
            if query.matches_collection(path) and matches_where(data, query.where)
        )
        return QuerySnapshot(query=query, version=self._version, documents=documents)

    def _snapshot(self, source: Union[str, Query]) -> Snapshot:
        if isinstance(source, Query):
            return self._query_snapshot(source)
        return self._document_snapshot(source)

    def _notify(self, paths: list[str]) -> None:
        for subscriber in list(self._subscribers):
            source = subscriber.source
            if isinstance(source, Query):
                touched = any(source.matches_collection(path) for path in paths)
            else:
                touched = source in paths
            if touched:
                subscriber.queue.put_nowait(self._snapshot(source))
