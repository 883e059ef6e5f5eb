"""Vote ledger.

The ledger keeps one record per (user, item[, attribute]) under
``users/<uid>/votes/<key>``. The set of records for an item is its set of
voters, so a missing record is what makes a vote a first vote.
"""

from datetime import datetime
from typing import Optional, Sequence

import logfire

from yayonay.domain.model.vote import VoteRecord
from yayonay.domain.repository import DocOp, DocumentStore, RequireOp, SetOp
from yayonay.domain.value import ItemRef, UserId

from .base import Service

_UNSET = object()


def ledger_key(item: ItemRef, attribute: Optional[str] = None) -> str:
    """Key of a ledger record (and of the matching cooldown marker)."""
    if attribute is None:
        return item.key
    return f"{item.key}@{attribute}"


def ledger_path(user_id: UserId, item: ItemRef, attribute: Optional[str] = None) -> str:
    """Document path of a ledger record."""
    return f"users/{user_id}/votes/{ledger_key(item, attribute)}"


class VoteLedger(Service):
    """Per-user vote records."""

    def __init__(self, document_store: DocumentStore) -> None:
        """Initialize vote ledger.

        Args:
            document_store: Shared document store
        """
        self.document_store = document_store

    async def get_vote(
        self, user_id: UserId, item: ItemRef, attribute: Optional[str] = None
    ) -> Optional[VoteRecord]:
        """Find a user's vote on an item.

        Args:
            user_id: Voter
            item: Voted item
            attribute: Attribute facet, for attribute votes

        Returns:
            The record if the user voted, None otherwise

        Raises:
            StoreUnavailableError: If the store cannot be reached
        """
        snapshot = await self.document_store.get(ledger_path(user_id, item, attribute))
        if not snapshot.exists:
            return None
        return VoteRecord.model_validate(snapshot.data)

    def build_record(
        self,
        user_id: UserId,
        item: ItemRef,
        is_yay: bool,
        now: datetime,
        existing: Optional[VoteRecord],
        attribute: Optional[str] = None,
    ) -> VoteRecord:
        """The record that replaces ``existing`` after a vote.

        A changed vote remembers the old value and the time of the change.
        A re-affirmed vote only refreshes the timestamp.
        """
        previous_vote = existing.previous_vote if existing else None
        last_change_at = existing.last_change_at if existing else None
        if existing is not None and existing.is_yay != is_yay:
            previous_vote = existing.is_yay
            last_change_at = now

        return VoteRecord(
            user_id=user_id,
            item_key=ledger_key(item, attribute),
            category_id=item.category_id,
            sub_category_id=item.subcategory_id,
            sub_question_id=item.sub_question_id,
            attribute=attribute,
            is_yay=is_yay,
            timestamp=now,
            previous_vote=previous_vote,
            last_change_at=last_change_at,
        )

    def guard(
        self,
        user_id: UserId,
        item: ItemRef,
        existing: Optional[VoteRecord],
        attribute: Optional[str] = None,
    ) -> RequireOp:
        """Precondition that the record is still as it was read."""
        path = ledger_path(user_id, item, attribute)
        if existing is None:
            return RequireOp(path=path, absent=True)
        return RequireOp(
            path=path, field="timestamp", value=existing.to_document()["timestamp"]
        )

    async def upsert_vote(
        self,
        user_id: UserId,
        item: ItemRef,
        is_yay: bool,
        now: datetime,
        companion_ops: Sequence[DocOp] = (),
        attribute: Optional[str] = None,
        existing=_UNSET,
    ) -> tuple[Optional[bool], VoteRecord, int]:
        """Write a user's vote together with the counter operations it implies.

        The record, the companion operations and a precondition on the
        record's prior state go out as one atomic batch.

        Args:
            user_id: Voter
            item: Voted item
            is_yay: The vote
            now: Time of the vote
            companion_ops: Operations committed in the same batch
            attribute: Attribute facet, for attribute votes
            existing: The record as already read (read from the store if omitted)

        Returns:
            (previous vote or None, the written record, store version)

        Raises:
            PreconditionFailedError: If the record changed since it was read
            StoreUnavailableError: If the store cannot be reached
        """
        with logfire.span(
            "vote_ledger.upsert_vote",
            user_id=str(user_id),
            item=ledger_key(item, attribute),
            is_yay=is_yay,
        ):
            if existing is _UNSET:
                existing = await self.get_vote(user_id, item, attribute)

            record = self.build_record(user_id, item, is_yay, now, existing, attribute)
            ops: list[DocOp] = [
                self.guard(user_id, item, existing, attribute),
                SetOp(path=ledger_path(user_id, item, attribute), fields=record.to_document()),
                *companion_ops,
            ]
            result = await self.document_store.atomic_write(ops)

            previous = existing.is_yay if existing is not None else None
            logfire.info(
                "Vote recorded",
                item=record.item_key,
                previous=previous,
                is_yay=is_yay,
                version=result.version,
            )
            return previous, record, result.version
