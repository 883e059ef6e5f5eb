"""Cast vote use case."""

from typing import Optional

import logfire
from pydantic import BaseModel, field_validator

from yayonay.application.projections import Projections, item_entity
from yayonay.application.usecase.base import BaseUseCase, reason_for
from yayonay.domain.error import (
    ConcurrentMutationInProgressError,
    CooldownActiveError,
    DomainError,
    StoreUnavailableError,
)
from yayonay.domain.model import CooldownMarker, ItemAggregateView, PendingMutation, VoteOutcome
from yayonay.domain.repository import CooldownMarkerRepository
from yayonay.domain.service import (
    AggregateCounterStore,
    CooldownPolicy,
    IdentityService,
    RealtimeReconciler,
    VoteService,
    ledger_key,
)
from yayonay.domain.value import AttributeName, ItemRef, MutationKind, UserId
from yayonay.util.clock import Clock


class CastVoteRequest(BaseModel):
    """Cast vote request."""

    item: ItemRef
    is_yay: bool
    attribute: Optional[str] = None

    @field_validator("attribute")
    @classmethod
    def validate_attribute(cls, v: Optional[str]) -> Optional[str]:
        """Validate the attribute name."""
        if v is None:
            return v
        return AttributeName(v).root


class CastVoteUseCase(BaseUseCase):
    """Use case for voting on an item, a sub-question or an attribute.

    IDLE -> COOLDOWN_CHECK -> (REJECTED | WRITING) -> (COMMITTED | ROLLED_BACK)

    The local cooldown marker is checked before anything touches the
    network. An eligible vote is projected optimistically, then written as
    one batch; a failed write reverts the projection and leaves the marker
    as it was. Only one vote per item may be in flight, attribute votes
    included, since they overlay the same aggregate record.
    """

    def __init__(
        self,
        identity_service: IdentityService,
        vote_service: VoteService,
        counter_store: AggregateCounterStore,
        cooldown_policy: CooldownPolicy,
        marker_repository: CooldownMarkerRepository,
        reconciler: RealtimeReconciler,
        projections: Projections,
        clock: Clock,
    ) -> None:
        """Initialize cast vote use case.

        Args:
            identity_service: Identity domain service
            vote_service: Vote domain service
            counter_store: Aggregate counter store (optimistic projection)
            cooldown_policy: Cooldown policy
            marker_repository: Local cooldown markers
            reconciler: Realtime reconciler
            projections: Open projections
            clock: Time source
        """
        self.identity_service = identity_service
        self.vote_service = vote_service
        self.counter_store = counter_store
        self.cooldown_policy = cooldown_policy
        self.marker_repository = marker_repository
        self.reconciler = reconciler
        self.projections = projections
        self.clock = clock
        self._in_flight: set[str] = set()

    def is_in_flight(self, item: ItemRef) -> bool:
        return item_entity(item) in self._in_flight

    async def execute(self, request: CastVoteRequest) -> VoteOutcome:
        """Execute vote flow.

        Args:
            request: Cast vote request

        Returns:
            Committed, rejected_cooldown or failed outcome; never raises for
            domain failures
        """
        key = ledger_key(request.item, request.attribute)
        try:
            user_id = self.identity_service.require_user("vote")
        except DomainError as e:
            return VoteOutcome.failed(key, reason_for(e), str(e))

        entity = item_entity(request.item)
        if entity in self._in_flight:
            busy = ConcurrentMutationInProgressError(key)
            logfire.warn("Vote rejected, another vote in flight", item=key)
            return VoteOutcome.failed(key, reason_for(busy), str(busy))

        self._in_flight.add(entity)
        try:
            return await self._vote(user_id, request, key)
        finally:
            self._in_flight.discard(entity)

    async def _vote(
        self, user_id: UserId, request: CastVoteRequest, key: str
    ) -> VoteOutcome:
        item = request.item
        with logfire.span("cast_vote", item=key, user_id=str(user_id), is_yay=request.is_yay):
            # COOLDOWN_CHECK, local only
            now = self.clock.now()
            try:
                marker = await self.marker_repository.get(user_id, key)
            except StoreUnavailableError as e:
                return VoteOutcome.failed(key, reason_for(e), str(e))
            if marker is not None and not self.cooldown_policy.can_vote(
                marker.last_vote_at, now
            ):
                remaining = self.cooldown_policy.cooldown_remaining(marker.last_vote_at, now)
                logfire.info(
                    "Vote rejected by local cooldown",
                    item=key,
                    remaining_seconds=remaining.total_seconds(),
                )
                return VoteOutcome.rejected_cooldown(key, remaining)

            # WRITING
            guess = marker.last_vote if marker is not None else None
            view = self.projections.item_view(item)
            mutation = self._project(item, view, guess, request, now)
            title = view.name if view is not None and view.name else None

            try:
                receipt = await self.vote_service.cast_vote(
                    user_id,
                    item,
                    request.is_yay,
                    attribute=request.attribute,
                    mutation_id=mutation.id if mutation is not None else None,
                    title=title,
                )
            except CooldownActiveError as e:
                self._rollback(mutation)
                return VoteOutcome.rejected_cooldown(key, e.remaining)
            except DomainError as e:
                self._rollback(mutation)
                logfire.warn("Vote failed", item=key, error=str(e))
                return VoteOutcome.failed(key, reason_for(e), str(e))

            # COMMITTED
            if mutation is not None:
                if receipt.changed and receipt.previous == guess:
                    self.reconciler.commit(mutation, receipt.version)
                else:
                    # The projection guessed the previous vote wrong (or
                    # nothing moved); redo it from what was actually written
                    self._rollback(mutation)
                    if receipt.changed:
                        corrected = self._project(
                            item,
                            self.projections.item_view(item),
                            receipt.previous,
                            request,
                            receipt.record.timestamp,
                        )
                        if corrected is not None:
                            self.reconciler.commit(corrected, receipt.version)

            try:
                await self.marker_repository.save(
                    CooldownMarker(
                        user_id=user_id,
                        item_key=key,
                        last_vote_at=receipt.record.timestamp,
                        last_vote=request.is_yay,
                    )
                )
            except StoreUnavailableError as e:
                # The ledger record still enforces the cooldown remotely
                logfire.error("Cooldown marker not saved", item=key, error=str(e))

            return VoteOutcome.committed_with(key, receipt.record, receipt.changed)

    def _project(
        self,
        item: ItemRef,
        view: Optional[ItemAggregateView],
        previous: Optional[bool],
        request: CastVoteRequest,
        now,
    ) -> Optional[PendingMutation]:
        entity = item_entity(item)
        if not self.reconciler.is_subscribed(entity):
            return None
        if view is None:
            view = ItemAggregateView(item=item, exists=False)
        projected = self.counter_store.project_vote(
            view, previous, request.is_yay, now, request.attribute
        )
        return self.reconciler.apply_optimistic(
            entity, MutationKind.VOTE, {item.key: projected}
        )

    def _rollback(self, mutation: Optional[PendingMutation]) -> None:
        if mutation is not None:
            self.reconciler.rollback(mutation)
