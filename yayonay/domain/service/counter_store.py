"""Aggregate counter store.

Counters on item documents are only ever moved by atomic increments, never
rewritten from a value read earlier. The ``ops_*`` builders return the
operations without submitting them so they can be committed in the same
batch as the ledger record that justifies them.
"""

from datetime import datetime
from typing import Optional

import logfire

from yayonay.domain.model.item import AttributeVoteTally, ItemAggregateView, VotesMetadata
from yayonay.domain.repository import DocOp, DocumentStore, IncrementOp, SetOp, WriteResult
from yayonay.domain.value import ItemRef, VoteField

from .base import Service

TOTAL_VOTES = "votesMetadata.totalVotes"
UNIQUE_VOTERS = "votesMetadata.uniqueVoters"
LAST_VOTE_AT = "votesMetadata.lastVoteAt"


def vote_deltas(previous: Optional[bool], is_yay: bool) -> dict[VoteField, int]:
    """Counter deltas for moving a user's vote from ``previous`` to ``is_yay``.

    Args:
        previous: The user's current vote (None if they never voted)
        is_yay: The new vote

    Returns:
        Field to delta mapping; empty when the vote is unchanged
    """
    if previous is None:
        return {VoteField.for_vote(is_yay): 1}
    if previous == is_yay:
        return {}
    return {VoteField.for_vote(previous): -1, VoteField.for_vote(is_yay): 1}


def attribute_field(attribute: str, field: VoteField) -> str:
    """Dotted path of an attribute tally counter."""
    return f"attributes.{attribute}.{field.value}"


class AggregateCounterStore(Service):
    """Writes the yay/nay counters and vote metadata of item documents."""

    def __init__(self, document_store: DocumentStore) -> None:
        """Initialize counter store.

        Args:
            document_store: Shared document store
        """
        self.document_store = document_store

    # -- operation builders --------------------------------------------------

    def ops_for_vote_delta(
        self, item: ItemRef, field: VoteField, delta: int
    ) -> list[DocOp]:
        return [IncrementOp(path=item.path, field=field.value, delta=delta)]

    def ops_for_vote_change(
        self, item: ItemRef, from_yay: bool, to_yay: bool
    ) -> list[DocOp]:
        if from_yay == to_yay:
            return []
        return [
            IncrementOp(path=item.path, field=VoteField.for_vote(from_yay).value, delta=-1),
            IncrementOp(path=item.path, field=VoteField.for_vote(to_yay).value, delta=1),
        ]

    def ops_for_metadata_touch(
        self, item: ItemRef, now: datetime, first_vote: bool
    ) -> list[DocOp]:
        ops: list[DocOp] = []
        if first_vote:
            ops.append(IncrementOp(path=item.path, field=TOTAL_VOTES, delta=1))
            ops.append(IncrementOp(path=item.path, field=UNIQUE_VOTERS, delta=1))
        ops.append(
            SetOp(path=item.path, fields={LAST_VOTE_AT: now.isoformat()}, merge=True)
        )
        return ops

    def ops_for_vote(
        self,
        item: ItemRef,
        previous: Optional[bool],
        is_yay: bool,
        now: datetime,
        attribute: Optional[str] = None,
    ) -> list[DocOp]:
        """Operations that move the counters for one user's vote.

        Attribute votes only touch the attribute tally. Item votes move the
        yay/nay counters and touch the metadata; ``totalVotes`` and
        ``uniqueVoters`` grow only on the user's first vote.

        Args:
            item: Voted item
            previous: The user's current vote (None if they never voted)
            is_yay: The new vote
            now: Time of the vote
            attribute: Attribute facet, if this is an attribute vote

        Returns:
            Operations to submit; empty when the vote is unchanged
        """
        deltas = vote_deltas(previous, is_yay)
        if not deltas:
            return []

        if attribute is not None:
            return [
                IncrementOp(
                    path=item.path, field=attribute_field(attribute, field), delta=delta
                )
                for field, delta in deltas.items()
            ]

        ops: list[DocOp] = []
        for field, delta in deltas.items():
            ops.extend(self.ops_for_vote_delta(item, field, delta))
        ops.extend(self.ops_for_metadata_touch(item, now, first_vote=previous is None))
        return ops

    # -- direct writes -------------------------------------------------------

    async def apply_vote_delta(
        self, item: ItemRef, field: VoteField, delta: int
    ) -> WriteResult:
        """Atomically add ``delta`` to one counter of an item.

        Raises:
            StoreUnavailableError: If the store cannot be reached
        """
        with logfire.span(
            "counter_store.apply_vote_delta", item=item.key, field=field.value, delta=delta
        ):
            return await self.document_store.atomic_write(
                self.ops_for_vote_delta(item, field, delta)
            )

    async def apply_vote_change(
        self, item: ItemRef, from_yay: bool, to_yay: bool
    ) -> Optional[WriteResult]:
        """Move one vote between the yay and nay counters in one write.

        Returns:
            The write result, or None if nothing changed

        Raises:
            StoreUnavailableError: If the store cannot be reached
        """
        with logfire.span(
            "counter_store.apply_vote_change", item=item.key, from_yay=from_yay, to_yay=to_yay
        ):
            ops = self.ops_for_vote_change(item, from_yay, to_yay)
            if not ops:
                logfire.info("Vote unchanged, counters untouched", item=item.key)
                return None
            return await self.document_store.atomic_write(ops)

    async def apply_metadata_touch(
        self, item: ItemRef, now: datetime, first_vote: bool
    ) -> WriteResult:
        """Update the vote metadata of an item.

        Raises:
            StoreUnavailableError: If the store cannot be reached
        """
        with logfire.span(
            "counter_store.apply_metadata_touch", item=item.key, first_vote=first_vote
        ):
            return await self.document_store.atomic_write(
                self.ops_for_metadata_touch(item, now, first_vote)
            )

    # -- optimistic projection -----------------------------------------------

    def project_vote(
        self,
        view: ItemAggregateView,
        previous: Optional[bool],
        is_yay: bool,
        now: datetime,
        attribute: Optional[str] = None,
    ) -> ItemAggregateView:
        """The view as it will look once ``ops_for_vote`` has applied."""
        deltas = vote_deltas(previous, is_yay)
        if not deltas:
            return view

        if attribute is not None:
            tally = view.attribute(attribute)
            updated = AttributeVoteTally(
                yay_count=tally.yay_count + deltas.get(VoteField.YAY, 0),
                nay_count=tally.nay_count + deltas.get(VoteField.NAY, 0),
            )
            return view.model_copy(
                update={"attributes": {**view.attributes, attribute: updated}}
            )

        metadata = view.votes_metadata
        first_vote = previous is None
        return view.model_copy(
            update={
                "exists": True,
                "yay_count": view.yay_count + deltas.get(VoteField.YAY, 0),
                "nay_count": view.nay_count + deltas.get(VoteField.NAY, 0),
                "votes_metadata": VotesMetadata(
                    last_vote_at=now,
                    total_votes=metadata.total_votes + (1 if first_vote else 0),
                    unique_voters=metadata.unique_voters + (1 if first_vote else 0),
                ),
            }
        )
