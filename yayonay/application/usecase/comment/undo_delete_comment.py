"""Undo delete comment use case."""

from typing import Optional

import logfire

from yayonay.application.projections import Projections, comments_entity
from yayonay.application.usecase.base import BaseUseCase, reason_for
from yayonay.domain.error import DomainError, NotFoundError
from yayonay.domain.model import CommentResult, PendingMutation
from yayonay.domain.service import CommentService, IdentityService, RealtimeReconciler
from yayonay.domain.value import MutationKind


class UndoDeleteCommentUseCase(BaseUseCase):
    """Use case for restoring the most recently deleted comment."""

    def __init__(
        self,
        identity_service: IdentityService,
        comment_service: CommentService,
        reconciler: RealtimeReconciler,
        projections: Projections,
    ) -> None:
        """Initialize undo delete comment use case.

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

    async def execute(self, request: None = None) -> CommentResult:
        """Execute undo flow.

        Only the deleted comment comes back; replies removed with it do not.
        """
        mutation: Optional[PendingMutation] = None
        try:
            self.identity_service.require_user("restore a comment")
            snapshot = self.comment_service.recently_deleted
            if snapshot is None:
                raise NotFoundError("deleted comment", "most recent")

            entity = comments_entity(snapshot.sub_category_id)
            if self.reconciler.is_subscribed(entity):
                mutation = self.reconciler.apply_optimistic(
                    entity, MutationKind.RESTORE_COMMENT, {snapshot.id: snapshot}
                )

            comment, version = await self.comment_service.undo_delete_comment()
        except DomainError as e:
            if mutation is not None:
                self.reconciler.rollback(mutation)
            logfire.warn("Undo delete failed", error=str(e))
            return CommentResult.failure(reason_for(e), str(e))

        if mutation is not None:
            self.reconciler.commit(mutation, version)
        return CommentResult.success(comment)
