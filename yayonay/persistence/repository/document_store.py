"""SQL implementation of the document store."""

import asyncio
from datetime import datetime, timezone
from typing import Any, AsyncIterator, Optional, Union

import logfire
from sqlalchemy import insert, select, update
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

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
from yayonay.persistence.documents import (
    affected_paths,
    apply_ops,
    collection_id,
    matches_where,
    split_path,
)
from yayonay.persistence.tables import (
    STORE_REVISION_ROW_ID,
    documents_table,
    store_revision_table,
)


class SqlDocumentStore(DocumentStore):
    """Document store on a relational database.

    Every write bumps a single store revision row inside its transaction.
    The row lock serializes writers, which is what orders snapshots. Each
    document row carries the revision of its last write, so subscribers can
    cheaply ask whether anything they watch changed since they last looked.
    Subscribers in this process are woken right after a commit; writes from
    other processes are picked up by polling.
    """

    def __init__(
        self,
        session_factory: async_sessionmaker[AsyncSession],
        poll_interval: float = 1.0,
    ) -> None:
        """Initialize store with a session factory.

        Args:
            session_factory: SQLAlchemy async session factory
            poll_interval: Seconds between polls for foreign writes
        """
        self.session_factory = session_factory
        self.poll_interval = poll_interval
        self._wakeups: set[asyncio.Event] = set()

    async def atomic_write(self, ops: list[DocOp]) -> WriteResult:
        """Apply all operations or none of them in one transaction."""
        paths = affected_paths(ops)
        with logfire.span("document_store.atomic_write", ops=len(ops), paths=len(paths)):
            try:
                async with self.session_factory() as session:
                    async with session.begin():
                        revision = await self._next_revision(session)
                        current = await self._load_for_update(session, paths)
                        # Raises domain errors; the transaction rolls back
                        updated = apply_ops(
                            {path: current.get(path) for path in paths}, ops
                        )
                        for path, data in updated.items():
                            await self._write_row(
                                session, path, data, revision, exists=path in current
                            )
            except SQLAlchemyError as e:
                logfire.error("Document store write failed", error=str(e))
                raise StoreUnavailableError(f"Document store write failed: {e}") from e

            self._wake_subscribers()
            logfire.info("Batch committed", revision=revision, paths=len(paths))
            return WriteResult(
                version=revision,
                committed_at=datetime.now(timezone.utc),
                paths=tuple(paths),
            )

    async def get(self, path: str) -> DocumentSnapshot:
        """Read one document."""
        try:
            async with self.session_factory() as session:
                async with session.begin():
                    return await self._read_document(session, path)
        except SQLAlchemyError as e:
            logfire.error("Document store read failed", path=path, error=str(e))
            raise StoreUnavailableError(f"Document store read failed: {e}") from e

    async def query(self, query: Query) -> QuerySnapshot:
        """Read all documents matching a query."""
        try:
            async with self.session_factory() as session:
                async with session.begin():
                    return await self._read_query(session, query)
        except SQLAlchemyError as e:
            logfire.error("Document store query failed", query=query.key, error=str(e))
            raise StoreUnavailableError(f"Document store query failed: {e}") from e

    async def subscribe(self, source: Union[str, Query]) -> AsyncIterator[Snapshot]:
        """Stream snapshots of a document or query."""
        wakeup = asyncio.Event()
        self._wakeups.add(wakeup)
        try:
            snapshot = await self._read(source)
            seen = snapshot.version
            yield snapshot
            while True:
                try:
                    await asyncio.wait_for(wakeup.wait(), timeout=self.poll_interval)
                except asyncio.TimeoutError:
                    pass
                wakeup.clear()
                try:
                    changed, latest = await self._changed_since(source, seen)
                except StoreUnavailableError as e:
                    # Keep the stream alive; the next poll retries
                    logfire.warn("Subscription poll failed", error=str(e))
                    continue
                if not changed:
                    seen = latest
                    continue
                snapshot = await self._read(source)
                seen = snapshot.version
                yield snapshot
        finally:
            self._wakeups.discard(wakeup)

    # -- helpers -------------------------------------------------------------

    def _wake_subscribers(self) -> None:
        for wakeup in list(self._wakeups):
            wakeup.set()

    async def _next_revision(self, session: AsyncSession) -> int:
        stmt = (
            update(store_revision_table)
            .where(store_revision_table.c.id == STORE_REVISION_ROW_ID)
            .values(revision=store_revision_table.c.revision + 1)
        )
        result = await session.execute(stmt)
        if result.rowcount == 0:  # type: ignore[attr-defined]
            await session.execute(
                insert(store_revision_table).values(id=STORE_REVISION_ROW_ID, revision=1)
            )
            return 1
        return await self._current_revision(session)

    async def _current_revision(self, session: AsyncSession) -> int:
        stmt = select(store_revision_table.c.revision).where(
            store_revision_table.c.id == STORE_REVISION_ROW_ID
        )
        result = await session.execute(stmt)
        revision = result.scalar_one_or_none()
        return revision or 0

    async def _load_for_update(
        self, session: AsyncSession, paths: list[str]
    ) -> dict[str, Optional[dict[str, Any]]]:
        """Load existing rows (tombstones included, as None) with row locks."""
        if not paths:
            return {}
        stmt = (
            select(documents_table.c.path, documents_table.c.data)
            .where(documents_table.c.path.in_(paths))
            .with_for_update()
        )
        result = await session.execute(stmt)
        return {row.path: row.data for row in result.fetchall()}

    async def _write_row(
        self,
        session: AsyncSession,
        path: str,
        data: Optional[dict[str, Any]],
        revision: int,
        exists: bool,
    ) -> None:
        if exists:
            stmt = (
                update(documents_table)
                .where(documents_table.c.path == path)
                .values(data=data, revision=revision)
            )
        else:
            collection, _ = split_path(path)
            stmt = insert(documents_table).values(
                path=path,
                collection=collection,
                collection_id=collection_id(path),
                data=data,
                revision=revision,
            )
        await session.execute(stmt)

    async def _read(self, source: Union[str, Query]) -> Snapshot:
        if isinstance(source, Query):
            return await self.query(source)
        return await self.get(source)

    async def _read_document(self, session: AsyncSession, path: str) -> DocumentSnapshot:
        revision = await self._current_revision(session)
        stmt = select(documents_table.c.data).where(documents_table.c.path == path)
        result = await session.execute(stmt)
        data = result.scalar_one_or_none()
        return DocumentSnapshot(path=path, version=revision, data=data)

    def _collection_clause(self, query: Query):
        if query.group:
            return documents_table.c.collection_id == query.collection
        return documents_table.c.collection == query.collection

    async def _read_query(self, session: AsyncSession, query: Query) -> QuerySnapshot:
        revision = await self._current_revision(session)
        stmt = (
            select(documents_table.c.path, documents_table.c.data)
            .where(self._collection_clause(query))
            .where(documents_table.c.data.is_not(None))
            .order_by(documents_table.c.path)
        )
        result = await session.execute(stmt)
        documents = tuple(
            DocumentSnapshot(path=row.path, version=revision, data=row.data)
            for row in result.fetchall()
            if matches_where(row.data, query.where)
        )
        return QuerySnapshot(query=query, version=revision, documents=documents)

    async def _changed_since(
        self, source: Union[str, Query], revision: int
    ) -> tuple[bool, int]:
        """Whether a watched document changed after ``revision``.

        Returns:
            (changed, current store revision)
        """
        if isinstance(source, Query):
            clause = self._collection_clause(source)
        else:
            clause = documents_table.c.path == source
        try:
            async with self.session_factory() as session:
                async with session.begin():
                    current = await self._current_revision(session)
                    if current <= revision:
                        return False, current
                    stmt = (
                        select(documents_table.c.path)
                        .where(clause)
                        .where(documents_table.c.revision > revision)
                        .limit(1)
                    )
                    result = await session.execute(stmt)
                    return result.first() is not None, current
        except SQLAlchemyError as e:
            raise StoreUnavailableError(f"Document store poll failed: {e}") from e
