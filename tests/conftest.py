"""Test configuration and fixtures."""

from typing import Any, Optional

from yayonay.domain.value import CategoryId, ItemRef, SubCategoryId, SubQuestionId
from yayonay.persistence.repository.inmemory import InMemoryDocumentStore


def make_item(
    category: str = "food",
    subcategory: str = "pizza",
    sub_question: Optional[str] = None,
) -> ItemRef:
    """Helper function to build item references for tests."""
    return ItemRef(
        category_id=CategoryId(category),
        subcategory_id=SubCategoryId(subcategory),
        sub_question_id=SubQuestionId(sub_question) if sub_question else None,
    )


def seed_item(
    store: InMemoryDocumentStore,
    item: ItemRef,
    yay: int = 0,
    nay: int = 0,
    **extra: Any,
) -> None:
    """Put an item aggregate document in place with balanced counters."""
    data: dict[str, Any] = {
        "name": item.subcategory_id,
        "categoryId": item.category_id,
        "yayCount": yay,
        "nayCount": nay,
        "votesMetadata": {"totalVotes": yay + nay, "uniqueVoters": yay + nay},
    }
    data.update(extra)
    store.seed(item.path, data)
