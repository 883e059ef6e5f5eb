"""Like comment use case."""

from typing import Literal, Optional

import logfire
from pydantic import BaseModel

from yayonay.application.projections import Projections
from yayonay.application.usecase.base import BaseUseCase, reason_for
from yayonay.domain.error import DomainError
from yayonay.domain.model import Comment, CommentResult, PendingMutation
from yayonay.domain.service import CommentService, IdentityService, RealtimeReconciler
from yayonay.domain.value import CommentId, MutationKind, UserId

LikeAction = Literal["like", "unlike", "toggle"]


class LikeCommentRequest(BaseModel):
    """Like comment request."""

    comment_id: CommentId
    action: LikeAction = "toggle"


def with_like(comment: Comment, user_id: UserId, liked: bool) -> Comment:
    """The comment after ``user_id`` liked (or unliked) it."""
    if comment.is_liked_by(user_id) == liked:
        return comment
    liked_by = dict(comment.liked_by)
    if liked:
        liked_by[user_id] = True
        likes = comment.likes + 1
    else:
        liked_by.pop(user_id, None)
        likes = comment.likes - 1
    return comment.model_copy(update={"liked_by": liked_by, "likes": likes})


class LikeCommentUseCase(BaseUseCase):
    """Use case for liking, unliking and toggling likes on comments."""

    def __init__(
        self,
        identity_service: IdentityService,
        comment_service: CommentService,
        reconciler: RealtimeReconciler,
        projections: Projections,
    ) -> None:
        """Initialize like comment use case.

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

    async def execute(self, request: LikeCommentRequest) -> CommentResult:
        """Execute like flow.

        Liking a liked comment and unliking one that is not liked succeed
        without writing anything.
        """
        mutation: Optional[PendingMutation] = None
        try:
            user_id = self.identity_service.require_user("like a comment")

            found = self.projections.find_comment(request.comment_id)
            local: Optional[Comment] = found[1] if found else None
            if request.action == "toggle":
                current = local or await self.comment_service.get_comment(request.comment_id)
                liked = not current.is_liked_by(user_id)
            else:
                liked = request.action == "like"

            updated: Optional[Comment] = None
            if found is not None and local is not None:
                updated = with_like(local, user_id, liked)
                if updated is not local:
                    kind = MutationKind.LIKE_COMMENT if liked else MutationKind.UNLIKE_COMMENT
                    mutation = self.reconciler.apply_optimistic(
                        found[0], kind, {local.id: updated}
                    )

            if liked:
                version = await self.comment_service.like_comment(request.comment_id, user_id)
            else:
                version = await self.comment_service.unlike_comment(request.comment_id, user_id)
        except DomainError as e:
            if mutation is not None:
                self.reconciler.rollback(mutation)
            logfire.warn("Like failed", comment_id=request.comment_id, error=str(e))
            return CommentResult.failure(reason_for(e), str(e))

        if mutation is not None:
            if version is None:
                # Already in the requested state remotely
                self.reconciler.rollback(mutation)
            else:
                self.reconciler.commit(mutation, version)
        return CommentResult.success(updated)
