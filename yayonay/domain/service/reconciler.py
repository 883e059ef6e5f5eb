"""Realtime reconciler.

Keeps an in-memory projection per subscribed entity and merges two inputs
into it: snapshots pushed by the document store, and optimistic mutations
applied locally before their write is acknowledged.

The projection of an entity is always derived the same way::

    projection = last remote snapshot, overlaid with the ``after`` values of
                 every live mutation, oldest first

so a rollback is just dropping a mutation. If no snapshot arrived since the
mutation was applied, that restores exactly the values it replaced; if one
did, the snapshot is already the truth.

A committed mutation stays overlaid until a snapshot at or past its commit
version arrives (then its effect is part of the remote state) or until it is
older than ``pending_timeout`` (then the remote state is trusted as is).
"""

import asyncio
import contextlib
from typing import Any, Callable, Optional, Union
from uuid import uuid4

import logfire

from yayonay.domain.error import NotFoundError, StoreUnavailableError
from yayonay.domain.model.mutation import PendingMutation
from yayonay.domain.repository import DocumentStore, Query, Snapshot
from yayonay.domain.value import MutationId, MutationKind, MutationState, SubscriptionState
from yayonay.util.clock import Clock

from .base import Service

Source = Union[str, Query]
Decoder = Callable[[Snapshot], dict[str, Any]]


class _Subscription:
    """State of one subscribed entity."""

    def __init__(self, entity: str, source: Source, decode: Decoder) -> None:
        self.entity = entity
        self.source = source
        self.decode = decode
        self.state = SubscriptionState.SUBSCRIBED
        self.remote: dict[str, Any] = {}
        self.version = -1
        self.mutations: dict[MutationId, PendingMutation] = {}
        self.projection: dict[str, Any] = {}
        self.changed = asyncio.Condition()
        self.task: Optional[asyncio.Task] = None


class RealtimeReconciler(Service):
    """Merges remote snapshots and optimistic mutations into projections."""

    def __init__(
        self,
        document_store: DocumentStore,
        clock: Clock,
        pending_timeout: float = 30.0,
    ) -> None:
        """Initialize reconciler.

        Args:
            document_store: Shared document store
            clock: Time source for mutation expiry
            pending_timeout: Seconds a mutation may stay unobserved
        """
        self.document_store = document_store
        self.clock = clock
        self.pending_timeout = pending_timeout
        self._subscriptions: dict[str, _Subscription] = {}

    # -- subscriptions -------------------------------------------------------

    def subscribe(self, entity: str, source: Source, decode: Decoder) -> None:
        """Start listening to a document or query.

        Subscribing an entity that is already subscribed does nothing.

        Args:
            entity: Name of the projection
            source: Document path or query to listen to
            decode: Turns a snapshot into a record id -> model map
        """
        if entity in self._subscriptions:
            return
        subscription = _Subscription(entity, source, decode)
        self._subscriptions[entity] = subscription
        subscription.task = asyncio.create_task(
            self._listen(subscription), name=f"reconciler:{entity}"
        )
        logfire.info("Subscribed", entity=entity)

    async def unsubscribe(self, entity: str) -> None:
        """Stop listening and drop the projection and all pending state."""
        subscription = self._subscriptions.pop(entity, None)
        if subscription is None:
            return
        subscription.state = SubscriptionState.IDLE
        if subscription.task is not None:
            subscription.task.cancel()
            with contextlib.suppress(asyncio.CancelledError):
                await subscription.task
        async with subscription.changed:
            subscription.changed.notify_all()
        logfire.info(
            "Unsubscribed",
            entity=entity,
            dropped_mutations=len(subscription.mutations),
        )

    async def close(self) -> None:
        """Unsubscribe every entity."""
        for entity in list(self._subscriptions):
            await self.unsubscribe(entity)

    async def _listen(self, subscription: _Subscription) -> None:
        try:
            async for snapshot in self.document_store.subscribe(subscription.source):
                await self._receive(subscription, snapshot)
        except StoreUnavailableError as e:
            # The projection keeps its last state; refresh() can re-read later
            logfire.error(
                "Subscription lost", entity=subscription.entity, error=str(e)
            )

    async def refresh(self, entity: str) -> int:
        """Re-read an entity's source once and merge the result.

        Returns:
            Version of the snapshot read

        Raises:
            NotFoundError: If the entity is not subscribed
            StoreUnavailableError: If the store cannot be reached
        """
        subscription = self._require(entity)
        with logfire.span("reconciler.refresh", entity=entity):
            if isinstance(subscription.source, Query):
                snapshot: Snapshot = await self.document_store.query(subscription.source)
            else:
                snapshot = await self.document_store.get(subscription.source)
            await self._receive(subscription, snapshot)
            return snapshot.version

    async def _receive(self, subscription: _Subscription, snapshot: Snapshot) -> None:
        if self._subscriptions.get(subscription.entity) is not subscription:
            return  # Unsubscribed while the snapshot was in flight
        if snapshot.version < subscription.version:
            return  # Older than what we already have
        subscription.remote = subscription.decode(snapshot)
        subscription.version = snapshot.version
        subscription.state = SubscriptionState.RECEIVING

        for mutation in list(subscription.mutations.values()):
            if (
                mutation.state == MutationState.COMMITTED
                and mutation.committed_version is not None
                and mutation.committed_version <= snapshot.version
            ):
                self._finish(subscription, mutation, MutationState.OBSERVED)
        self._expire(subscription)
        self._rebuild(subscription)

        async with subscription.changed:
            subscription.changed.notify_all()

    # -- optimistic mutations ------------------------------------------------

    def apply_optimistic(
        self,
        entity: str,
        kind: MutationKind,
        changes: dict[str, Optional[Any]],
        mutation_id: Optional[MutationId] = None,
    ) -> PendingMutation:
        """Apply a local change to a projection before it is written.

        Args:
            entity: Name of the projection
            kind: What kind of change this is
            changes: Record id -> new model (None deletes the record)
            mutation_id: Correlation id (generated if omitted)

        Returns:
            The pending mutation, holding the values it replaced

        Raises:
            NotFoundError: If the entity is not subscribed
        """
        subscription = self._require(entity)
        self._expire(subscription)
        mutation = PendingMutation(
            id=mutation_id or MutationId(uuid4().hex),
            entity=entity,
            kind=kind,
            before={
                record_id: subscription.projection.get(record_id) for record_id in changes
            },
            after=dict(changes),
            base_version=subscription.version,
            applied_at=self.clock.now(),
        )
        subscription.mutations[mutation.id] = mutation
        self._rebuild(subscription)
        logfire.info(
            "Optimistic change applied",
            entity=entity,
            mutation_id=mutation.id,
            kind=kind.value,
            records=len(changes),
        )
        return mutation

    def commit(self, mutation: PendingMutation, version: int) -> None:
        """Mark a mutation's write as acknowledged at ``version``.

        The overlay is kept until a snapshot at or past ``version`` arrives.
        Does nothing if the entity was unsubscribed or the mutation is gone.
        """
        subscription = self._subscriptions.get(mutation.entity)
        if subscription is None:
            return
        current = subscription.mutations.get(mutation.id)
        if current is None:
            return
        if subscription.version >= version:
            self._finish(subscription, current, MutationState.OBSERVED)
            self._rebuild(subscription)
            return
        subscription.mutations[current.id] = current.model_copy(
            update={"state": MutationState.COMMITTED, "committed_version": version}
        )
        logfire.info(
            "Optimistic change committed",
            entity=mutation.entity,
            mutation_id=mutation.id,
            version=version,
        )

    def rollback(self, mutation: PendingMutation) -> bool:
        """Undo a mutation whose write failed.

        Returns:
            True if the prior values were restored exactly, False if a remote
            snapshot arrived in between (or the entity is gone) and the remote
            state was kept instead
        """
        subscription = self._subscriptions.get(mutation.entity)
        if subscription is None:
            return False
        current = subscription.mutations.get(mutation.id)
        if current is None:
            return False
        self._finish(subscription, current, MutationState.ROLLED_BACK)
        self._rebuild(subscription)
        exact = subscription.version == current.base_version
        logfire.info(
            "Optimistic change rolled back",
            entity=mutation.entity,
            mutation_id=mutation.id,
            exact=exact,
        )
        return exact

    def _finish(
        self, subscription: _Subscription, mutation: PendingMutation, state: MutationState
    ) -> None:
        subscription.mutations.pop(mutation.id, None)
        if state == MutationState.EXPIRED:
            logfire.warn(
                "Optimistic change expired unobserved",
                entity=subscription.entity,
                mutation_id=mutation.id,
            )

    def _expire(self, subscription: _Subscription) -> None:
        now = self.clock.now()
        expired = [
            mutation
            for mutation in subscription.mutations.values()
            if (now - mutation.applied_at).total_seconds() > self.pending_timeout
        ]
        for mutation in expired:
            self._finish(subscription, mutation, MutationState.EXPIRED)
        if expired:
            self._rebuild(subscription)

    def _rebuild(self, subscription: _Subscription) -> None:
        projection = dict(subscription.remote)
        for mutation in subscription.mutations.values():
            for record_id, value in mutation.after.items():
                if value is None:
                    projection.pop(record_id, None)
                else:
                    projection[record_id] = value
        subscription.projection = projection

    # -- reads ---------------------------------------------------------------

    def _require(self, entity: str) -> _Subscription:
        subscription = self._subscriptions.get(entity)
        if subscription is None:
            raise NotFoundError("subscription", entity)
        return subscription

    def is_subscribed(self, entity: str) -> bool:
        return entity in self._subscriptions

    def entities(self, prefix: str = "") -> list[str]:
        """Subscribed entity names starting with ``prefix``."""
        return [entity for entity in self._subscriptions if entity.startswith(prefix)]

    def state(self, entity: str) -> SubscriptionState:
        """Lifecycle state of an entity (IDLE when not subscribed)."""
        subscription = self._subscriptions.get(entity)
        return subscription.state if subscription else SubscriptionState.IDLE

    def version(self, entity: str) -> int:
        """Version of the last snapshot merged (-1 before the first)."""
        subscription = self._subscriptions.get(entity)
        return subscription.version if subscription else -1

    def projection(self, entity: str) -> Optional[dict[str, Any]]:
        """Current projection of an entity (None when not subscribed)."""
        subscription = self._subscriptions.get(entity)
        if subscription is None:
            return None
        self._expire(subscription)
        return dict(subscription.projection)

    def record(self, entity: str, record_id: str) -> Optional[Any]:
        """One record of a projection (None when missing or not subscribed)."""
        projection = self.projection(entity)
        return projection.get(record_id) if projection is not None else None

    def pending(self, entity: str) -> list[PendingMutation]:
        """Live mutations of an entity, oldest first."""
        subscription = self._subscriptions.get(entity)
        if subscription is None:
            return []
        self._expire(subscription)
        return list(subscription.mutations.values())

    def has_pending(self, entity: str) -> bool:
        return bool(self.pending(entity))

    async def wait_for_version(
        self, entity: str, version: int, timeout: float = 5.0
    ) -> bool:
        """Wait until a snapshot at or past ``version`` has been merged.

        Returns:
            True once reached, False on timeout or if the entity is
            unsubscribed meanwhile
        """
        subscription = self._subscriptions.get(entity)
        if subscription is None:
            return False

        def reached() -> bool:
            return (
                subscription.version >= version
                or self._subscriptions.get(entity) is not subscription
            )

        try:
            async with subscription.changed:
                await asyncio.wait_for(subscription.changed.wait_for(reached), timeout)
        except asyncio.TimeoutError:
            return False
        return self._subscriptions.get(entity) is subscription
