"""Comment use cases."""

from .add_comment import AddCommentRequest, AddCommentUseCase
from .delete_comment import DeleteCommentRequest, DeleteCommentUseCase
from .get_comment_threads import GetCommentThreadsRequest, GetCommentThreadsUseCase
from .like_comment import LikeCommentRequest, LikeCommentUseCase
from .undo_delete_comment import UndoDeleteCommentUseCase

__all__ = [
    "AddCommentRequest",
    "AddCommentUseCase",
    "DeleteCommentRequest",
    "DeleteCommentUseCase",
    "GetCommentThreadsRequest",
    "GetCommentThreadsUseCase",
    "LikeCommentRequest",
    "LikeCommentUseCase",
    "UndoDeleteCommentUseCase",
]
