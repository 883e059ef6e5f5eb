"""Domain value objects for YayoNay."""

from yayonay.domain.value.identifiers import (
    CategoryId,
    CommentId,
    MutationId,
    SubCategoryId,
    SubQuestionId,
    UserId,
)
from yayonay.domain.value.types import (
    AttributeName,
    FailureReason,
    ItemRef,
    MutationKind,
    MutationState,
    OutcomeStatus,
    SubscriptionState,
    VoteField,
)

__all__ = [
    # Identifiers
    "UserId",
    "CategoryId",
    "SubCategoryId",
    "SubQuestionId",
    "CommentId",
    "MutationId",
    # Types
    "AttributeName",
    "FailureReason",
    "ItemRef",
    "MutationKind",
    "MutationState",
    "OutcomeStatus",
    "SubscriptionState",
    "VoteField",
]
