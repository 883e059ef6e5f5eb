"""Get comment threads use case."""

from pydantic import BaseModel

from yayonay.application.projections import Projections
from yayonay.application.usecase.base import BaseUseCase
from yayonay.domain.model import CommentThread
from yayonay.domain.service import CommentService, IdentityService, build_threads
from yayonay.domain.value import ItemRef


class GetCommentThreadsRequest(BaseModel):
    """Get comment threads request."""

    subcategory: ItemRef


class GetCommentThreadsUseCase(BaseUseCase):
    """Use case for reading the threaded discussion of a subcategory."""

    def __init__(
        self,
        identity_service: IdentityService,
        comment_service: CommentService,
        projections: Projections,
    ) -> None:
        """Initialize get comment threads use case.

        Args:
            identity_service: Identity domain service
            comment_service: Comment domain service
            projections: Open projections
        """
        self.identity_service = identity_service
        self.comment_service = comment_service
        self.projections = projections

    async def execute(self, request: GetCommentThreadsRequest) -> list[CommentThread]:
        """Execute get threads flow.

        Reads the open projection (optimistic changes included) when there
        is one, the store otherwise.

        Raises:
            StoreUnavailableError: If the store must be read and cannot be
        """
        subcategory_id = request.subcategory.subcategory_id
        comments = self.projections.comments(subcategory_id)
        if comments is None:
            comments = await self.comment_service.get_comments(subcategory_id)
        return build_threads(comments, self.identity_service.current_user_id())
