"""Named projections over the reconciler.

Maps items and comment sections onto reconciler entities and knows how to
decode their snapshots into domain models.
"""

from typing import Optional

import logfire

from yayonay.domain.model.comment import Comment
from yayonay.domain.model.item import ItemAggregateView
from yayonay.domain.repository import DocumentSnapshot, QuerySnapshot, Snapshot
from yayonay.domain.service import RealtimeReconciler
from yayonay.domain.service.comment_service import comments_query
from yayonay.domain.value import CommentId, ItemRef, SubCategoryId


def item_entity(item: ItemRef) -> str:
    return f"item:{item.path}"


def comments_entity(subcategory_id: SubCategoryId) -> str:
    return f"comments:{subcategory_id}"


def decode_item(item: ItemRef, snapshot: Snapshot) -> dict[str, ItemAggregateView]:
    """Record key -> aggregate view for an item document snapshot."""
    if not isinstance(snapshot, DocumentSnapshot):
        raise TypeError(f"Expected a document snapshot, got {type(snapshot).__name__}")
    return {item.key: ItemAggregateView.from_document(item, snapshot.data)}


def decode_comments(snapshot: Snapshot) -> dict[str, Comment]:
    """Record id -> Comment for a comments query snapshot."""
    if not isinstance(snapshot, QuerySnapshot):
        raise TypeError(f"Expected a query snapshot, got {type(snapshot).__name__}")
    return {
        doc.id: Comment.model_validate({**doc.data, "id": doc.id})
        for doc in snapshot.documents
    }


class Projections:
    """Opens, closes and reads the projections the engine exposes."""

    def __init__(self, reconciler: RealtimeReconciler, settle_timeout: float = 5.0) -> None:
        """Initialize projections.

        Args:
            reconciler: Realtime reconciler
            settle_timeout: Seconds to wait for the first snapshot on open
        """
        self.reconciler = reconciler
        self.settle_timeout = settle_timeout

    # -- items ---------------------------------------------------------------

    async def open_item(self, item: ItemRef) -> bool:
        """Subscribe to an item's aggregate document.

        Returns:
            True once the first snapshot has been merged
        """

        def decode(snapshot: Snapshot) -> dict[str, ItemAggregateView]:
            return decode_item(item, snapshot)

        entity = item_entity(item)
        self.reconciler.subscribe(entity, item.path, decode)
        ready = await self.reconciler.wait_for_version(entity, 0, self.settle_timeout)
        if not ready:
            logfire.warn("Item projection not ready", item=item.key)
        return ready

    async def close_item(self, item: ItemRef) -> None:
        await self.reconciler.unsubscribe(item_entity(item))

    def item_view(self, item: ItemRef) -> Optional[ItemAggregateView]:
        """Projected aggregate of an item (None when not open)."""
        return self.reconciler.record(item_entity(item), item.key)

    # -- comments ------------------------------------------------------------

    async def open_comments(self, subcategory: ItemRef) -> bool:
        """Subscribe to the comments of a subcategory.

        Returns:
            True once the first snapshot has been merged
        """
        entity = comments_entity(subcategory.subcategory_id)
        self.reconciler.subscribe(
            entity, comments_query(subcategory.subcategory_id), decode_comments
        )
        ready = await self.reconciler.wait_for_version(entity, 0, self.settle_timeout)
        if not ready:
            logfire.warn("Comment projection not ready", subcategory=subcategory.key)
        return ready

    async def close_comments(self, subcategory: ItemRef) -> None:
        await self.reconciler.unsubscribe(comments_entity(subcategory.subcategory_id))

    def comments(self, subcategory_id: SubCategoryId) -> Optional[list[Comment]]:
        """Projected comments of a subcategory (None when not open)."""
        projection = self.reconciler.projection(comments_entity(subcategory_id))
        if projection is None:
            return None
        return list(projection.values())

    def find_comment(
        self, comment_id: CommentId, subcategory_id: Optional[SubCategoryId] = None
    ) -> Optional[tuple[str, Comment]]:
        """Locate a comment in the open comment projections.

        Returns:
            (entity, comment) or None if no open projection holds it
        """
        if subcategory_id is not None:
            entities = [comments_entity(subcategory_id)]
        else:
            entities = self.reconciler.entities(prefix="comments:")
        for entity in entities:
            comment = self.reconciler.record(entity, comment_id)
            if comment is not None:
                return entity, comment
        return None
