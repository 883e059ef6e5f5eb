"""Domain model entities for YayoNay."""

from yayonay.domain.model.category import CategoryAttribute, attributes_for_category
from yayonay.domain.model.comment import Comment, CommentThread
from yayonay.domain.model.cooldown import CooldownMarker, CooldownStatus
from yayonay.domain.model.item import AttributeVoteTally, ItemAggregateView, VotesMetadata
from yayonay.domain.model.mutation import PendingMutation
from yayonay.domain.model.outcome import CommentResult, VoteOutcome
from yayonay.domain.model.stats import DailyVoteBucket, HotItem, TopCategory
from yayonay.domain.model.user import Activity, UserProfile
from yayonay.domain.model.vote import VoteRecord

__all__ = [
    "Activity",
    "AttributeVoteTally",
    "CategoryAttribute",
    "Comment",
    "CommentResult",
    "CommentThread",
    "CooldownMarker",
    "CooldownStatus",
    "DailyVoteBucket",
    "HotItem",
    "ItemAggregateView",
    "PendingMutation",
    "TopCategory",
    "UserProfile",
    "VoteOutcome",
    "VoteRecord",
    "attributes_for_category",
]
