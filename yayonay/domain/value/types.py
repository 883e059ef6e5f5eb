"""Domain value objects for YayoNay.

Value objects are immutable and defined by their values, not identity.
They encapsulate validation rules and business logic.
"""

import re
from enum import Enum

from pydantic import field_validator

from yayonay.domain.value.common import RootValueObject, ValueObject
from yayonay.domain.value.identifiers import CategoryId, SubCategoryId, SubQuestionId

# Path segments become document ids and dotted field names in the store,
# so they may not contain the separators used by either.
_SEGMENT_PATTERN = re.compile(r"^[^/.~@\s][^/.~@]{0,127}$")


def validate_segment(value: str, label: str) -> str:
    """Validate a string that is used as a document path segment."""
    if not _SEGMENT_PATTERN.match(value):
        raise ValueError(
            f"{label} must be 1-128 characters without '/', '.', '~' or '@'"
        )
    return value


class VoteField(str, Enum):
    """Counter field a vote lands on."""

    YAY = "yayCount"
    NAY = "nayCount"

    @classmethod
    def for_vote(cls, is_yay: bool) -> "VoteField":
        """Return the counter field for a yay/nay vote."""
        return cls.YAY if is_yay else cls.NAY


class OutcomeStatus(str, Enum):
    """Terminal status of a vote attempt."""

    COMMITTED = "committed"
    REJECTED_COOLDOWN = "rejected_cooldown"
    FAILED = "failed"


class FailureReason(str, Enum):
    """Structured reason attached to failed outcomes."""

    UNAUTHENTICATED = "unauthenticated"
    STORE_UNAVAILABLE = "store_unavailable"
    CONFLICT = "conflict"
    UNAUTHORIZED = "unauthorized"
    NOT_FOUND = "not_found"
    CONCURRENT_MUTATION_IN_PROGRESS = "concurrent_mutation_in_progress"
    INVALID = "invalid"


class MutationKind(str, Enum):
    """Kind of optimistic mutation tracked by the reconciler."""

    VOTE = "vote"
    ADD_COMMENT = "add_comment"
    LIKE_COMMENT = "like_comment"
    UNLIKE_COMMENT = "unlike_comment"
    DELETE_COMMENT = "delete_comment"
    RESTORE_COMMENT = "restore_comment"


class MutationState(str, Enum):
    """Lifecycle of a pending mutation."""

    PENDING = "pending"  # Applied locally, write not acknowledged
    COMMITTED = "committed"  # Acknowledged, waiting to be observed remotely
    OBSERVED = "observed"
    ROLLED_BACK = "rolled_back"
    EXPIRED = "expired"


class SubscriptionState(str, Enum):
    """Lifecycle of a reconciler subscription."""

    IDLE = "idle"
    SUBSCRIBED = "subscribed"
    RECEIVING = "receiving"


class AttributeName(RootValueObject[str]):
    """Name of an attribute facet of an item (e.g. 'Taste', 'Skill Level')."""

    @field_validator("root")
    @classmethod
    def validate_attribute_name(cls, v: str) -> str:
        """Validate attribute name is usable as a field path segment."""
        v = v.strip()
        if len(v) < 1 or len(v) > 50:
            raise ValueError("Attribute name must be 1-50 characters")
        if any(ch in v for ch in "./~@"):
            raise ValueError("Attribute name may not contain '.', '/', '~' or '@'")
        return v


class ItemRef(ValueObject):
    """Reference to a votable item.

    An item is a subcategory (``sub_question_id`` is None) or one of its
    sub-questions. The reference knows where the item's aggregate document
    lives and which key identifies it in the vote ledger.
    """

    category_id: CategoryId
    subcategory_id: SubCategoryId
    sub_question_id: SubQuestionId | None = None

    @field_validator("category_id", "subcategory_id", "sub_question_id")
    @classmethod
    def validate_ids(cls, v: str | None) -> str | None:
        """Validate ids are usable as path segments."""
        if v is None:
            return v
        return validate_segment(v, "Item id")

    @property
    def is_sub_question(self) -> bool:
        """Whether this reference points at a sub-question."""
        return self.sub_question_id is not None

    @property
    def subcategory_path(self) -> str:
        """Document path of the owning subcategory."""
        return f"categories/{self.category_id}/subcategories/{self.subcategory_id}"

    @property
    def path(self) -> str:
        """Document path of the item's aggregate document."""
        if self.sub_question_id is None:
            return self.subcategory_path
        return f"{self.subcategory_path}/subquestions/{self.sub_question_id}"

    @property
    def key(self) -> str:
        """Stable key of the item, unique across the hierarchy."""
        if self.sub_question_id is None:
            return str(self.subcategory_id)
        return f"{self.subcategory_id}~{self.sub_question_id}"

    def subcategory(self) -> "ItemRef":
        """Return the reference of the owning subcategory."""
        return ItemRef(
            category_id=self.category_id, subcategory_id=self.subcategory_id
        )

    def sub_question(self, sub_question_id: SubQuestionId) -> "ItemRef":
        """Return a reference to a sub-question of this subcategory."""
        return ItemRef(
            category_id=self.category_id,
            subcategory_id=self.subcategory_id,
            sub_question_id=sub_question_id,
        )

    def __str__(self) -> str:
        return self.path
