"""Read models for engagement statistics."""

from pydantic import Field

from yayonay.domain.model.common import DomainModel
from yayonay.domain.value import ItemRef


class HotItem(DomainModel):
    """An item ranked by its vote count."""

    item: ItemRef
    name: str
    image_url: str | None = None
    yay_count: int
    nay_count: int

    @property
    def total_votes(self) -> int:
        return self.yay_count + self.nay_count


class TopCategory(DomainModel):
    """A category ranked by the summed votes of its subcategories."""

    category_id: str
    total_votes: int


class DailyVoteBucket(DomainModel):
    """Votes counted during one calendar day."""

    day: str
    total_votes: int = 0
    items: dict[str, int] = Field(default_factory=dict)

    def top_items(self, limit: int) -> list[tuple[str, int]]:
        """Return the ``limit`` item keys with the most votes that day."""
        ranked = sorted(self.items.items(), key=lambda kv: (-kv[1], kv[0]))
        return ranked[:limit]
