"""Vote domain service."""

from dataclasses import dataclass
from typing import Optional
from uuid import uuid4

import logfire

from yayonay.domain.error import CooldownActiveError
from yayonay.domain.model.user import Activity
from yayonay.domain.model.vote import VoteRecord
from yayonay.domain.repository import DocOp, DocumentStore, IncrementOp, SetOp
from yayonay.domain.value import ItemRef, UserId
from yayonay.util.clock import Clock

from .base import Service
from .cooldown_policy import CooldownPolicy
from .counter_store import AggregateCounterStore
from .vote_ledger import VoteLedger, ledger_key


@dataclass
class VoteReceipt:
    """What a committed vote did."""

    previous: Optional[bool]
    record: VoteRecord
    changed: bool
    version: int


class VoteService(Service):
    """Domain service for casting votes.

    One vote is one atomic batch: the ledger record, the counter moves, the
    voter's activity and the daily bucket all commit or none do.
    """

    def __init__(
        self,
        document_store: DocumentStore,
        vote_ledger: VoteLedger,
        counter_store: AggregateCounterStore,
        cooldown_policy: CooldownPolicy,
        clock: Clock,
    ) -> None:
        """Initialize vote service.

        Args:
            document_store: Shared document store
            vote_ledger: Vote ledger
            counter_store: Aggregate counter store
            cooldown_policy: Cooldown policy
            clock: Time source
        """
        self.document_store = document_store
        self.vote_ledger = vote_ledger
        self.counter_store = counter_store
        self.cooldown_policy = cooldown_policy
        self.clock = clock

    async def cast_vote(
        self,
        user_id: UserId,
        item: ItemRef,
        is_yay: bool,
        attribute: Optional[str] = None,
        mutation_id: Optional[str] = None,
        title: Optional[str] = None,
    ) -> VoteReceipt:
        """Cast or change a user's vote on an item.

        The ledger record is the authoritative cooldown witness: if it shows
        a vote inside the cooldown window nothing is written.

        Args:
            user_id: Voter
            item: Voted item
            is_yay: The vote
            attribute: Attribute facet, for attribute votes
            mutation_id: Correlation id (names the activity record)
            title: Item title for the activity feed

        Returns:
            Receipt of the committed vote

        Raises:
            CooldownActiveError: If the user voted on the item too recently
            PreconditionFailedError: If a concurrent vote changed the record
            StoreUnavailableError: If the store cannot be reached
        """
        key = ledger_key(item, attribute)
        with logfire.span(
            "vote_service.cast_vote", user_id=str(user_id), item=key, is_yay=is_yay
        ):
            now = self.clock.now()
            existing = await self.vote_ledger.get_vote(user_id, item, attribute)

            if existing is not None and not self.cooldown_policy.can_vote(
                existing.timestamp, now
            ):
                remaining = self.cooldown_policy.cooldown_remaining(existing.timestamp, now)
                logfire.warn(
                    "Vote rejected by ledger cooldown",
                    item=key,
                    user_id=str(user_id),
                    remaining_seconds=remaining.total_seconds(),
                )
                raise CooldownActiveError(key, remaining)

            previous = existing.is_yay if existing is not None else None
            counter_ops = self.counter_store.ops_for_vote(
                item, previous, is_yay, now, attribute
            )
            companion_ops = list(counter_ops)
            if counter_ops and attribute is None:
                companion_ops.extend(
                    self._activity_ops(
                        user_id, item, now, previous is None, mutation_id, title
                    )
                )

            previous, record, version = await self.vote_ledger.upsert_vote(
                user_id,
                item,
                is_yay,
                now,
                companion_ops=companion_ops,
                attribute=attribute,
                existing=existing,
            )

            changed = bool(counter_ops)
            logfire.info(
                "Vote committed",
                item=key,
                user_id=str(user_id),
                previous=previous,
                is_yay=is_yay,
                changed=changed,
                version=version,
            )
            return VoteReceipt(
                previous=previous, record=record, changed=changed, version=version
            )

    def _activity_ops(
        self,
        user_id: UserId,
        item: ItemRef,
        now,
        first_vote: bool,
        mutation_id: Optional[str],
        title: Optional[str],
    ) -> list[DocOp]:
        """Voter profile, activity feed and daily bucket updates."""
        user_path = f"users/{user_id}"
        activity = Activity(
            type="vote",
            item_id=item.key,
            title=title or item.key,
            timestamp=now,
        )
        day = self.cooldown_policy.calendar_day(now).isoformat()
        daily_path = f"dailyVotes/{day}"

        ops: list[DocOp] = []
        if first_vote:
            ops.append(IncrementOp(path=user_path, field="votesCount", delta=1))
        ops.append(
            SetOp(path=user_path, fields={"lastVoteDate": now.isoformat()}, merge=True)
        )
        ops.append(
            SetOp(
                path=f"{user_path}/activity/{mutation_id or uuid4().hex}",
                fields=activity.to_document(),
            )
        )
        ops.append(IncrementOp(path=daily_path, field="totalVotes", delta=1))
        ops.append(IncrementOp(path=daily_path, field=f"items.{item.key}", delta=1))
        return ops
