"""Comment domain service."""

from typing import Iterable, Optional
from uuid import uuid4

import logfire

from yayonay.domain.error import (
    NotAuthorizedError,
    NotFoundError,
    PreconditionFailedError,
    ValidationError,
)
from yayonay.domain.model.comment import Comment, CommentThread
from yayonay.domain.model.user import UserProfile
from yayonay.domain.repository import (
    DeleteFieldOp,
    DeleteOp,
    DocOp,
    DocumentStore,
    IncrementOp,
    Query,
    RequireOp,
    SetOp,
)
from yayonay.domain.value import CommentId, ItemRef, SubCategoryId, UserId
from yayonay.util.clock import Clock

from .base import Service

COMMENTS = "comments"
REPLY_REVISION = "replyRevision"

# Cascade deletes re-list the replies this many times before giving up
CASCADE_ATTEMPTS = 2


def comment_path(comment_id: CommentId) -> str:
    """Document path of a comment."""
    return f"{COMMENTS}/{comment_id}"


def comments_query(subcategory_id: SubCategoryId) -> Query:
    """Query for all comments (top-level and replies) of a subcategory."""
    return Query(collection=COMMENTS, where=(("subCategoryId", subcategory_id),))


def replies_query(parent_id: CommentId) -> Query:
    """Query for the replies of a top-level comment."""
    return Query(collection=COMMENTS, where=(("parentId", parent_id),))


def build_threads(
    comments: Iterable[Comment], viewer_id: Optional[UserId] = None
) -> list[CommentThread]:
    """Group flat comment records into threads.

    Top-level comments come newest first; replies are attached to their
    parent oldest first. Replies whose parent is not present are dropped.

    Args:
        comments: Top-level comments and replies, in any order
        viewer_id: User whose likes set ``is_liked``

    Returns:
        One thread per top-level comment
    """
    comments = list(comments)
    replies: dict[CommentId, list[Comment]] = {}
    for comment in comments:
        if comment.parent_id is not None:
            replies.setdefault(comment.parent_id, []).append(comment)

    top_level = sorted(
        (c for c in comments if c.parent_id is None),
        key=lambda c: (c.date, c.id),
        reverse=True,
    )
    return [
        CommentThread(
            comment=comment,
            is_liked=comment.is_liked_by(viewer_id),
            replies=[
                CommentThread(comment=reply, is_liked=reply.is_liked_by(viewer_id))
                for reply in sorted(
                    replies.get(comment.id, []), key=lambda r: (r.date, r.id)
                )
            ],
        )
        for comment in top_level
    ]


class CommentService(Service):
    """Domain service for comment operations.

    Holds the snapshot of the most recently deleted comment so the delete
    can be undone.
    """

    def __init__(
        self,
        document_store: DocumentStore,
        clock: Clock,
        max_length: int = 2000,
    ) -> None:
        """Initialize comment service.

        Args:
            document_store: Shared document store
            clock: Time source for comment dates
            max_length: Maximum comment length in characters
        """
        self.document_store = document_store
        self.clock = clock
        self.max_length = max_length
        self._recently_deleted: Optional[Comment] = None

    @property
    def recently_deleted(self) -> Optional[Comment]:
        """The comment an undo would restore, if any."""
        return self._recently_deleted

    async def get_comment(self, comment_id: CommentId) -> Comment:
        """Get a comment by ID.

        Raises:
            NotFoundError: If the comment does not exist
            StoreUnavailableError: If the store cannot be reached
        """
        snapshot = await self.document_store.get(comment_path(comment_id))
        if not snapshot.exists:
            logfire.warn("Comment not found", comment_id=str(comment_id))
            raise NotFoundError("comment", str(comment_id))
        return Comment.model_validate({**snapshot.data, "id": comment_id})

    async def get_comments(self, subcategory_id: SubCategoryId) -> list[Comment]:
        """Get all comments of a subcategory (flat)."""
        with logfire.span("comment_service.get_comments", subcategory_id=subcategory_id):
            snapshot = await self.document_store.query(comments_query(subcategory_id))
            return [
                Comment.model_validate({**doc.data, "id": doc.id})
                for doc in snapshot.documents
            ]

    def new_comment(
        self,
        subcategory: ItemRef,
        author: UserProfile,
        text: str,
        parent: Optional[Comment] = None,
    ) -> Comment:
        """Build (but do not write) a comment by ``author``.

        Author display fields are copied in now. A reply to a reply is
        attached to the top-level comment of the thread.

        Raises:
            ValidationError: If the text is empty or too long, or the parent
                belongs to another subcategory
        """
        text = text.strip()
        if not text:
            raise ValidationError("Comment text must not be empty")
        if len(text) > self.max_length:
            raise ValidationError(
                f"Comment text must be at most {self.max_length} characters"
            )

        parent_id: Optional[CommentId] = None
        if parent is not None:
            if parent.sub_category_id != subcategory.subcategory_id:
                raise ValidationError("Parent comment does not belong to this subcategory")
            parent_id = parent.parent_id or parent.id

        return Comment(
            id=CommentId(uuid4().hex),
            category_id=subcategory.category_id,
            sub_category_id=subcategory.subcategory_id,
            author_id=author.id,
            username=author.username,
            user_image=author.image_url or "",
            text=text,
            date=self.clock.now(),
            parent_id=parent_id,
        )

    async def add_comment(
        self,
        subcategory: ItemRef,
        author: UserProfile,
        text: str,
        parent_id: Optional[CommentId] = None,
    ) -> tuple[Comment, int]:
        """Create a comment or a reply.

        Args:
            subcategory: Subcategory the discussion belongs to
            author: Profile of the author
            text: Comment text
            parent_id: Comment being replied to (None for top-level)

        Returns:
            (created comment, store version)

        Raises:
            ValidationError: If the text or the parent is invalid
            NotFoundError: If the parent does not exist
            StoreUnavailableError: If the store cannot be reached
        """
        with logfire.span(
            "comment_service.add_comment",
            subcategory=subcategory.key,
            author_id=str(author.id),
            parent_id=parent_id,
        ):
            parent = await self.get_comment(parent_id) if parent_id else None
            comment = self.new_comment(subcategory, author, text, parent)
            return comment, await self.write_comment(comment)

    async def write_comment(self, comment: Comment) -> int:
        """Write a built comment, requiring its parent to still exist.

        Returns:
            Store version of the write

        Raises:
            NotFoundError: If the parent was deleted meanwhile
            StoreUnavailableError: If the store cannot be reached
        """
        ops = self._parent_ops(comment)
        ops.append(SetOp(path=comment_path(comment.id), fields=comment.to_document()))
        try:
            result = await self.document_store.atomic_write(ops)
        except PreconditionFailedError:
            logfire.warn("Parent comment gone", parent_id=comment.parent_id)
            raise NotFoundError("comment", str(comment.parent_id))
        logfire.info(
            "Comment created",
            comment_id=comment.id,
            subcategory_id=comment.sub_category_id,
            is_reply=comment.is_reply,
        )
        return result.version

    def _parent_ops(self, comment: Comment) -> list[DocOp]:
        """Ops tying a reply write to its parent.

        The parent must exist, and its reply revision moves so that a cascade
        delete which listed the replies before this write fails.
        """
        if comment.parent_id is None:
            return []
        parent = comment_path(comment.parent_id)
        return [
            RequireOp(path=parent),
            IncrementOp(path=parent, field=REPLY_REVISION, delta=1),
        ]

    async def like_comment(
        self, comment_id: CommentId, user_id: UserId
    ) -> Optional[int]:
        """Like a comment. Liking twice is a no-op.

        Returns:
            Store version of the write, or None if already liked

        Raises:
            NotFoundError: If the comment does not exist
            StoreUnavailableError: If the store cannot be reached
        """
        path = comment_path(comment_id)
        field = f"likedBy.{user_id}"
        with logfire.span(
            "comment_service.like_comment", comment_id=comment_id, user_id=str(user_id)
        ):
            ops: list[DocOp] = [
                RequireOp(path=path),
                RequireOp(path=path, field=field, absent=True),
                IncrementOp(path=path, field="likes", delta=1),
                SetOp(path=path, fields={field: True}, merge=True),
            ]
            return await self._write_like(comment_id, ops, "already liked")

    async def unlike_comment(
        self, comment_id: CommentId, user_id: UserId
    ) -> Optional[int]:
        """Remove a like. Unliking a comment not liked is a no-op.

        Returns:
            Store version of the write, or None if not liked

        Raises:
            NotFoundError: If the comment does not exist
            StoreUnavailableError: If the store cannot be reached
        """
        path = comment_path(comment_id)
        field = f"likedBy.{user_id}"
        with logfire.span(
            "comment_service.unlike_comment", comment_id=comment_id, user_id=str(user_id)
        ):
            ops: list[DocOp] = [
                RequireOp(path=path),
                RequireOp(path=path, field=field, value=True),
                IncrementOp(path=path, field="likes", delta=-1),
                DeleteFieldOp(path=path, field=field),
            ]
            return await self._write_like(comment_id, ops, "not liked")

    async def _write_like(
        self, comment_id: CommentId, ops: list[DocOp], noop: str
    ) -> Optional[int]:
        try:
            result = await self.document_store.atomic_write(ops)
        except PreconditionFailedError as e:
            if e.field is None:
                raise NotFoundError("comment", str(comment_id))
            logfire.info("Like unchanged", comment_id=comment_id, reason=noop)
            return None
        return result.version

    async def toggle_like(
        self, comment_id: CommentId, user_id: UserId
    ) -> tuple[bool, Optional[int]]:
        """Like or unlike depending on whether the user likes the comment now.

        Returns:
            (liked afterwards, store version or None if nothing was written)
        """
        comment = await self.get_comment(comment_id)
        if comment.is_liked_by(user_id):
            return False, await self.unlike_comment(comment_id, user_id)
        return True, await self.like_comment(comment_id, user_id)

    def authorize_delete(self, comment: Comment, user_id: UserId) -> None:
        """Only the author may delete a comment.

        Raises:
            NotAuthorizedError: If ``user_id`` is not the author
        """
        if comment.author_id != user_id:
            logfire.warn(
                "Unauthorized comment delete attempt",
                comment_id=comment.id,
                user_id=str(user_id),
            )
            raise NotAuthorizedError("comment", str(comment.id), str(user_id))

    async def delete_comment(
        self,
        comment_id: CommentId,
        user_id: UserId,
        comment: Optional[Comment] = None,
    ) -> tuple[list[CommentId], int]:
        """Delete a comment, and its replies if it is a top-level comment.

        The comment itself is kept as the undo snapshot; its replies are not.
        A cascade requires the parent's reply revision to be unchanged since
        its replies were listed, so a reply written meanwhile makes the batch
        fail instead of surviving its parent. The replies are then listed
        again, up to ``CASCADE_ATTEMPTS`` times.

        Args:
            comment_id: Comment to delete
            user_id: User asking for the delete
            comment: The comment as already known locally (read if omitted)

        Returns:
            (ids of every deleted comment, store version)

        Raises:
            NotAuthorizedError: If the user is not the author
            NotFoundError: If the comment does not exist
            PreconditionFailedError: If replies kept arriving during the delete
            StoreUnavailableError: If the store cannot be reached
        """
        with logfire.span(
            "comment_service.delete_comment", comment_id=comment_id, user_id=str(user_id)
        ):
            if comment is None:
                comment = await self.get_comment(comment_id)
            self.authorize_delete(comment, user_id)

            previous_snapshot = self._recently_deleted
            self._recently_deleted = comment
            try:
                deleted, version = await self._write_delete(comment)
            except Exception:
                self._recently_deleted = previous_snapshot
                raise

            logfire.info(
                "Comment deleted",
                comment_id=comment.id,
                cascaded_replies=len(deleted) - 1,
            )
            return deleted, version

    async def _write_delete(self, comment: Comment) -> tuple[list[CommentId], int]:
        path = comment_path(comment.id)
        if comment.is_reply:
            result = await self.document_store.atomic_write([DeleteOp(path=path)])
            return [comment.id], result.version

        attempt = 1
        while True:
            parent = await self.document_store.get(path)
            if not parent.exists:
                raise NotFoundError("comment", str(comment.id))
            revision = parent.data.get(REPLY_REVISION)
            if revision is None:
                guard = RequireOp(path=path, field=REPLY_REVISION, absent=True)
            else:
                guard = RequireOp(path=path, field=REPLY_REVISION, value=revision)

            replies = await self.document_store.query(replies_query(comment.id))
            deleted = [comment.id, *(CommentId(doc.id) for doc in replies.documents)]
            ops: list[DocOp] = [guard]
            ops.extend(DeleteOp(path=comment_path(cid)) for cid in deleted)
            try:
                result = await self.document_store.atomic_write(ops)
            except PreconditionFailedError as e:
                if e.field is None:
                    raise NotFoundError("comment", str(comment.id))
                if attempt >= CASCADE_ATTEMPTS:
                    logfire.warn("Replies kept changing during delete", comment_id=comment.id)
                    raise
                logfire.info("Replies changed during delete, listing again", comment_id=comment.id)
                attempt += 1
                continue
            return deleted, result.version

    async def undo_delete_comment(self) -> tuple[Comment, int]:
        """Restore the most recently deleted comment (without its replies).

        A restored reply needs its parent to still exist. The snapshot is
        consumed by a successful restore.

        Returns:
            (restored comment, store version)

        Raises:
            NotFoundError: If there is nothing to restore, or the restored
                reply's parent is gone
            StoreUnavailableError: If the store cannot be reached
        """
        with logfire.span("comment_service.undo_delete_comment"):
            comment = self._recently_deleted
            if comment is None:
                raise NotFoundError("deleted comment", "most recent")
            ops = self._parent_ops(comment)
            ops.append(SetOp(path=comment_path(comment.id), fields=comment.to_document()))
            try:
                result = await self.document_store.atomic_write(ops)
            except PreconditionFailedError:
                logfire.warn("Parent comment gone", parent_id=comment.parent_id)
                raise NotFoundError("comment", str(comment.parent_id))
            self._recently_deleted = None
            logfire.info("Comment restored", comment_id=comment.id)
            return comment, result.version
