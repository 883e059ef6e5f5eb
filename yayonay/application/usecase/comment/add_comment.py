"""Add comment use case."""

from typing import Optional

import logfire
from pydantic import BaseModel

from yayonay.application.projections import Projections, comments_entity
from yayonay.application.usecase.base import BaseUseCase, reason_for
from yayonay.domain.error import DomainError
from yayonay.domain.model import CommentResult
from yayonay.domain.service import CommentService, IdentityService, RealtimeReconciler
from yayonay.domain.value import CommentId, ItemRef, MutationKind


class AddCommentRequest(BaseModel):
    """Add comment request."""

    subcategory: ItemRef
    text: str
    parent_id: Optional[CommentId] = None


class AddCommentUseCase(BaseUseCase):
    """Use case for posting a comment or a reply."""

    def __init__(
        self,
        identity_service: IdentityService,
        comment_service: CommentService,
        reconciler: RealtimeReconciler,
        projections: Projections,
    ) -> None:
        """Initialize add comment use case.

        Args:
            identity_service: Identity domain service
            comment_service: Comment domain service
            reconciler: Realtime reconciler
            projections: Open projections
        """
        self.identity_service = identity_service
        self.comment_service = comment_service
        self.reconciler = reconciler
        self.projections = projections

    async def execute(self, request: AddCommentRequest) -> CommentResult:
        """Execute add comment flow.

        The author's display fields are read once and copied into the
        comment. When the subcategory's comments are open the new comment
        shows up immediately and disappears again if the write fails.
        """
        subcategory = request.subcategory.subcategory()
        mutation = None
        try:
            user_id = self.identity_service.require_user("comment")
            author = await self.identity_service.get_profile(user_id)

            parent = None
            if request.parent_id is not None:
                found = self.projections.find_comment(
                    request.parent_id, subcategory.subcategory_id
                )
                if found is not None:
                    parent = found[1]
                else:
                    parent = await self.comment_service.get_comment(request.parent_id)

            comment = self.comment_service.new_comment(
                subcategory, author, request.text, parent
            )

            entity = comments_entity(subcategory.subcategory_id)
            if self.reconciler.is_subscribed(entity):
                mutation = self.reconciler.apply_optimistic(
                    entity, MutationKind.ADD_COMMENT, {comment.id: comment}
                )

            version = await self.comment_service.write_comment(comment)
        except DomainError as e:
            if mutation is not None:
                self.reconciler.rollback(mutation)
            logfire.warn("Add comment failed", subcategory=subcategory.key, error=str(e))
            return CommentResult.failure(reason_for(e), str(e))

        if mutation is not None:
            self.reconciler.commit(mutation, version)
        return CommentResult.success(comment)
