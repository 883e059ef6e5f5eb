"""Structured results returned to callers of the engine."""

from datetime import timedelta
from typing import Optional

from yayonay.domain.model.comment import Comment
from yayonay.domain.model.common import DomainModel
from yayonay.domain.model.vote import VoteRecord
from yayonay.domain.value import FailureReason, OutcomeStatus


class VoteOutcome(DomainModel):
    """Result of a vote attempt: committed, rejected by cooldown, or failed."""

    status: OutcomeStatus
    item_key: str
    record: Optional[VoteRecord] = None
    changed: bool = False
    remaining: Optional[timedelta] = None
    reason: Optional[FailureReason] = None
    message: Optional[str] = None

    @property
    def committed(self) -> bool:
        return self.status == OutcomeStatus.COMMITTED

    @classmethod
    def committed_with(
        cls, item_key: str, record: VoteRecord, changed: bool
    ) -> "VoteOutcome":
        return cls(
            status=OutcomeStatus.COMMITTED,
            item_key=item_key,
            record=record,
            changed=changed,
        )

    @classmethod
    def rejected_cooldown(cls, item_key: str, remaining: timedelta) -> "VoteOutcome":
        return cls(
            status=OutcomeStatus.REJECTED_COOLDOWN,
            item_key=item_key,
            remaining=remaining,
        )

    @classmethod
    def failed(
        cls, item_key: str, reason: FailureReason, message: str | None = None
    ) -> "VoteOutcome":
        return cls(
            status=OutcomeStatus.FAILED,
            item_key=item_key,
            reason=reason,
            message=message,
        )


class CommentResult(DomainModel):
    """Result of a comment action."""

    ok: bool
    comment: Optional[Comment] = None
    reason: Optional[FailureReason] = None
    message: Optional[str] = None

    @classmethod
    def success(cls, comment: Comment | None = None) -> "CommentResult":
        return cls(ok=True, comment=comment)

    @classmethod
    def failure(cls, reason: FailureReason, message: str | None = None) -> "CommentResult":
        return cls(ok=False, reason=reason, message=message)
