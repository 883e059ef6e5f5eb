"""Strongly typed identifiers for YayoNay domain entities.

Document store ids are opaque strings (the shared store keys documents by
path segments), so the identifiers wrap ``str`` rather than ``UUID``.
"""

from typing import NewType

# Core domain entity identifiers
UserId = NewType("UserId", str)
CategoryId = NewType("CategoryId", str)
SubCategoryId = NewType("SubCategoryId", str)
SubQuestionId = NewType("SubQuestionId", str)
CommentId = NewType("CommentId", str)
MutationId = NewType("MutationId", str)
