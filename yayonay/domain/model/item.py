"""Item aggregate.

An item is a subcategory or one of its sub-questions. Its aggregate document
carries the yay/nay counters, the vote metadata and the per-attribute tallies.
Counters are written only through atomic increments; this model is the read
side of that document.
"""

from datetime import datetime
from typing import Any, Optional

from pydantic import Field

from yayonay.domain.model.common import DocumentModel
from yayonay.domain.value import ItemRef


class VotesMetadata(DocumentModel):
    """Derived metadata of an item's votes."""

    last_vote_at: Optional[datetime] = None
    total_votes: int = 0
    unique_voters: int = 0


class AttributeVoteTally(DocumentModel):
    """Yay/nay tally of one attribute facet of an item."""

    yay_count: int = 0
    nay_count: int = 0

    @property
    def total(self) -> int:
        """Total votes in this tally."""
        return self.yay_count + self.nay_count


class ItemAggregateView(DocumentModel):
    """Read-only view of an item's aggregate counters.

    Invariant at rest: ``yay_count + nay_count == votes_metadata.total_votes``.
    The invariant may be broken transiently while an optimistic mutation is
    pending.
    """

    item: ItemRef = Field(exclude=True)
    exists: bool = Field(default=True, exclude=True)
    name: Optional[str] = None
    question: Optional[str] = None
    image_url: Optional[str] = Field(default=None, alias="imageURL")
    yay_count: int = 0
    nay_count: int = 0
    votes_metadata: VotesMetadata = Field(default_factory=VotesMetadata)
    attributes: dict[str, AttributeVoteTally] = Field(default_factory=dict)

    @classmethod
    def from_document(
        cls, item: ItemRef, data: Optional[dict[str, Any]]
    ) -> "ItemAggregateView":
        """Build the view from a stored document (None if it does not exist)."""
        if data is None:
            return cls(item=item, exists=False)
        return cls.model_validate({**data, "item": item, "exists": True})

    @property
    def total_votes(self) -> int:
        """Total votes recorded in the metadata."""
        return self.votes_metadata.total_votes

    @property
    def is_balanced(self) -> bool:
        """Whether the counters agree with the metadata total."""
        return self.yay_count + self.nay_count == self.votes_metadata.total_votes

    @property
    def yay_percentage(self) -> float:
        """Share of yay votes in percent (0 when nobody voted)."""
        total = self.yay_count + self.nay_count
        return self.yay_count / total * 100 if total > 0 else 0.0

    def attribute(self, name: str) -> AttributeVoteTally:
        """Return the tally of an attribute (empty if never voted)."""
        return self.attributes.get(name, AttributeVoteTally())
