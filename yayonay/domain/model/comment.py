"""Comment entity.

Comments are flat records attached to a subcategory. Threading is derived at
read time: records with a ``parent_id`` are replies grouped under their
top-level parent. Author display fields are copied in at post time and never
re-synced.
"""

from datetime import datetime
from typing import Optional

from pydantic import Field

from yayonay.domain.model.common import DocumentModel, DomainModel
from yayonay.domain.value import CategoryId, CommentId, SubCategoryId, UserId


class Comment(DocumentModel):
    """Comment entity.

    Represents a top-level comment (``parent_id`` is None) or a reply.
    ``liked_by`` is a set of user ids stored as a map, which lets a like be
    a single field write keyed by the liker's id.
    """

    id: CommentId = Field(exclude=True)
    category_id: CategoryId
    sub_category_id: SubCategoryId
    author_id: UserId = Field(alias="userId")
    username: str
    user_image: str = ""
    text: str = Field(min_length=1)
    date: datetime
    likes: int = 0
    liked_by: dict[str, bool] = Field(default_factory=dict)
    parent_id: Optional[CommentId] = None

    # Bumped by every reply written under this comment, never lowered; a
    # cascade delete requires it unchanged since it listed the replies
    reply_revision: int = 0

    @property
    def is_reply(self) -> bool:
        """Whether this comment is a reply to another comment."""
        return self.parent_id is not None

    def is_liked_by(self, user_id: Optional[UserId]) -> bool:
        """Whether the given user has liked this comment."""
        if user_id is None:
            return False
        return bool(self.liked_by.get(user_id))


class CommentThread(DomainModel):
    """A comment prepared for display with its replies attached."""

    comment: Comment
    is_liked: bool = False
    replies: list["CommentThread"] = Field(default_factory=list)
