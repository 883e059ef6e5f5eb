"""Engagement engine facade.

The single entry point callers use. Every operation returns a structured
result; domain failures never escape as exceptions.
"""

from typing import Optional

import logfire
from pydantic import ValidationError as RequestValidationError

from yayonay.application.projections import Projections, comments_entity, item_entity
from yayonay.application.usecase.comment import (
    AddCommentRequest,
    AddCommentUseCase,
    DeleteCommentRequest,
    DeleteCommentUseCase,
    GetCommentThreadsRequest,
    GetCommentThreadsUseCase,
    LikeCommentRequest,
    LikeCommentUseCase,
    UndoDeleteCommentUseCase,
)
from yayonay.application.usecase.stats import (
    GetHotItemsRequest,
    GetHotItemsUseCase,
    GetTodaysTopRequest,
    GetTodaysTopUseCase,
    GetTopCategoriesRequest,
    GetTopCategoriesUseCase,
    TodaysTopEntry,
)
from yayonay.application.usecase.vote import (
    CastVoteRequest,
    CastVoteUseCase,
    GetCooldownStatusRequest,
    GetCooldownStatusUseCase,
)
from yayonay.domain.error import DomainError
from yayonay.domain.model import (
    CategoryAttribute,
    CommentResult,
    CommentThread,
    CooldownStatus,
    HotItem,
    ItemAggregateView,
    TopCategory,
    VoteOutcome,
    attributes_for_category,
)
from yayonay.domain.service import RealtimeReconciler, ledger_key
from yayonay.domain.value import CategoryId, CommentId, FailureReason, ItemRef


class EngagementEngine:
    """Votes, comments and live aggregates for one signed-in client."""

    def __init__(
        self,
        cast_vote: CastVoteUseCase,
        get_cooldown_status: GetCooldownStatusUseCase,
        add_comment: AddCommentUseCase,
        like_comment: LikeCommentUseCase,
        delete_comment: DeleteCommentUseCase,
        undo_delete_comment: UndoDeleteCommentUseCase,
        get_comment_threads: GetCommentThreadsUseCase,
        get_hot_items: GetHotItemsUseCase,
        get_top_categories: GetTopCategoriesUseCase,
        get_todays_top: GetTodaysTopUseCase,
        projections: Projections,
        reconciler: RealtimeReconciler,
    ) -> None:
        self._cast_vote = cast_vote
        self._get_cooldown_status = get_cooldown_status
        self._add_comment = add_comment
        self._like_comment = like_comment
        self._delete_comment = delete_comment
        self._undo_delete_comment = undo_delete_comment
        self._get_comment_threads = get_comment_threads
        self._get_hot_items = get_hot_items
        self._get_top_categories = get_top_categories
        self._get_todays_top = get_todays_top
        self.projections = projections
        self.reconciler = reconciler

    # -- voting --------------------------------------------------------------

    async def vote(self, item: ItemRef, is_yay: bool) -> VoteOutcome:
        """Vote yay or nay on an item (subcategory or sub-question)."""
        return await self._cast_vote.execute(CastVoteRequest(item=item, is_yay=is_yay))

    async def vote_for_sub_question(self, item: ItemRef, is_yay: bool) -> VoteOutcome:
        """Vote on a sub-question; ``item`` must reference one."""
        if not item.is_sub_question:
            return VoteOutcome.failed(
                item.key, FailureReason.INVALID, "Item is not a sub-question"
            )
        return await self.vote(item, is_yay)

    async def vote_for_attribute(
        self, item: ItemRef, attribute: str, is_yay: bool
    ) -> VoteOutcome:
        """Vote on one attribute facet of an item."""
        try:
            request = CastVoteRequest(item=item, is_yay=is_yay, attribute=attribute)
        except RequestValidationError as e:
            return VoteOutcome.failed(
                ledger_key(item, attribute), FailureReason.INVALID, str(e)
            )
        return await self._cast_vote.execute(request)

    def attributes_for(self, category_name: str) -> list[CategoryAttribute]:
        """Attribute facets users can vote on for a category."""
        return attributes_for_category(category_name)

    async def cooldown_status(
        self, item: ItemRef, attribute: Optional[str] = None
    ) -> CooldownStatus:
        """When the signed-in user may vote on an item again."""
        try:
            return await self._get_cooldown_status.execute(
                GetCooldownStatusRequest(item=item, attribute=attribute)
            )
        except DomainError as e:
            logfire.warn("Cooldown status unavailable", item=item.key, error=str(e))
            return CooldownStatus(item_key=ledger_key(item, attribute), can_vote=True)

    # -- comments ------------------------------------------------------------

    async def add_comment(
        self, subcategory: ItemRef, text: str, parent_id: Optional[CommentId] = None
    ) -> CommentResult:
        """Post a comment, or a reply when ``parent_id`` is given."""
        return await self._add_comment.execute(
            AddCommentRequest(subcategory=subcategory, text=text, parent_id=parent_id)
        )

    async def like_comment(self, comment_id: CommentId) -> CommentResult:
        return await self._like_comment.execute(
            LikeCommentRequest(comment_id=comment_id, action="like")
        )

    async def unlike_comment(self, comment_id: CommentId) -> CommentResult:
        return await self._like_comment.execute(
            LikeCommentRequest(comment_id=comment_id, action="unlike")
        )

    async def toggle_like(self, comment_id: CommentId) -> CommentResult:
        return await self._like_comment.execute(
            LikeCommentRequest(comment_id=comment_id, action="toggle")
        )

    async def delete_comment(self, comment_id: CommentId) -> CommentResult:
        """Delete an own comment; a top-level comment takes its replies along."""
        return await self._delete_comment.execute(
            DeleteCommentRequest(comment_id=comment_id)
        )

    async def undo_delete_comment(self) -> CommentResult:
        """Restore the most recently deleted comment."""
        return await self._undo_delete_comment.execute()

    async def comment_threads(self, subcategory: ItemRef) -> list[CommentThread]:
        """Threaded comments of a subcategory (empty if unavailable)."""
        try:
            return await self._get_comment_threads.execute(
                GetCommentThreadsRequest(subcategory=subcategory)
            )
        except DomainError as e:
            logfire.warn("Comment threads unavailable", subcategory=subcategory.key, error=str(e))
            return []

    # -- projections ---------------------------------------------------------

    def projection(self, item: ItemRef) -> Optional[ItemAggregateView]:
        """Live aggregate of an open item (None if not open or not loaded)."""
        return self.projections.item_view(item)

    async def open_item(self, item: ItemRef) -> bool:
        return await self.projections.open_item(item)

    async def close_item(self, item: ItemRef) -> None:
        await self.projections.close_item(item)

    async def open_comments(self, subcategory: ItemRef) -> bool:
        return await self.projections.open_comments(subcategory)

    async def close_comments(self, subcategory: ItemRef) -> None:
        await self.projections.close_comments(subcategory)

    async def refresh_item(self, item: ItemRef) -> bool:
        """Re-read an open item from the store."""
        return await self._refresh(item_entity(item))

    async def refresh_comments(self, subcategory: ItemRef) -> bool:
        """Re-read the open comments of a subcategory from the store."""
        return await self._refresh(comments_entity(subcategory.subcategory_id))

    async def _refresh(self, entity: str) -> bool:
        try:
            await self.reconciler.refresh(entity)
        except DomainError as e:
            logfire.warn("Refresh failed", entity=entity, error=str(e))
            return False
        return True

    # -- stats ---------------------------------------------------------------

    async def hot_items(
        self, category_id: Optional[CategoryId] = None, limit: int = 10
    ) -> list[HotItem]:
        try:
            return await self._get_hot_items.execute(
                GetHotItemsRequest(category_id=category_id, limit=limit)
            )
        except DomainError as e:
            logfire.warn("Hot items unavailable", error=str(e))
            return []

    async def top_categories(self, limit: int = 5) -> list[TopCategory]:
        try:
            return await self._get_top_categories.execute(
                GetTopCategoriesRequest(limit=limit)
            )
        except DomainError as e:
            logfire.warn("Top categories unavailable", error=str(e))
            return []

    async def todays_top(self, limit: int = 5) -> list[TodaysTopEntry]:
        try:
            return await self._get_todays_top.execute(GetTodaysTopRequest(limit=limit))
        except DomainError as e:
            logfire.warn("Today's top unavailable", error=str(e))
            return []

    async def close(self) -> None:
        """Stop every subscription."""
        await self.reconciler.close()
