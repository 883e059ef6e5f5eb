"""Delete comment use case."""

from typing import Optional

import logfire
from pydantic import BaseModel

from yayonay.application.projections import Projections
from yayonay.application.usecase.base import BaseUseCase, reason_for
from yayonay.domain.error import DomainError
from yayonay.domain.model import Comment, CommentResult, PendingMutation
from yayonay.domain.service import CommentService, IdentityService, RealtimeReconciler
from yayonay.domain.value import CommentId, MutationKind


class DeleteCommentRequest(BaseModel):
    """Delete comment request."""

    comment_id: CommentId


class DeleteCommentUseCase(BaseUseCase):
    """Use case for deleting a comment (and its replies)."""

    def __init__(
        self,
        identity_service: IdentityService,
        comment_service: CommentService,
        reconciler: RealtimeReconciler,
        projections: Projections,
    ) -> None:
        """Initialize delete comment use case.

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

    async def execute(self, request: DeleteCommentRequest) -> CommentResult:
        """Execute delete flow.

        When the comment is in an open projection the author check happens
        there, before any network call, and the comment and its replies
        vanish from the projection right away.
        """
        mutation: Optional[PendingMutation] = None
        try:
            user_id = self.identity_service.require_user("delete a comment")

            found = self.projections.find_comment(request.comment_id)
            comment: Optional[Comment] = found[1] if found else None
            if comment is not None:
                self.comment_service.authorize_delete(comment, user_id)
                entity = found[0]
                removed = [comment.id]
                if not comment.is_reply:
                    projection = self.reconciler.projection(entity) or {}
                    removed.extend(
                        c.id for c in projection.values() if c.parent_id == comment.id
                    )
                mutation = self.reconciler.apply_optimistic(
                    entity,
                    MutationKind.DELETE_COMMENT,
                    {comment_id: None for comment_id in removed},
                )

            deleted, version = await self.comment_service.delete_comment(
                request.comment_id, user_id, comment=comment
            )
        except DomainError as e:
            if mutation is not None:
                self.reconciler.rollback(mutation)
            logfire.warn("Delete comment failed", comment_id=request.comment_id, error=str(e))
            return CommentResult.failure(reason_for(e), str(e))

        if mutation is not None:
            self.reconciler.commit(mutation, version)
        logfire.info("Comment delete done", comment_id=request.comment_id, count=len(deleted))
        return CommentResult.success(self.comment_service.recently_deleted)
