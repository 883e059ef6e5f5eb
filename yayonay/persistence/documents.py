"""Document operation semantics shared by the store implementations.

Both the SQL and the in-memory store load the affected documents, run the
batch through ``apply_ops`` and persist the result only if it returned
without raising. That is what makes a batch all-or-nothing.
"""

import copy
from typing import Any, Iterable, Optional

from yayonay.domain.error import PreconditionFailedError, ValidationError
from yayonay.domain.repository import (
    DeleteFieldOp,
    DeleteOp,
    DocOp,
    IncrementOp,
    RequireOp,
    SetOp,
)

_MISSING = object()

Documents = dict[str, Optional[dict[str, Any]]]


def split_path(path: str) -> tuple[str, str]:
    """Split a document path into (collection path, document id)."""
    collection, _, doc_id = path.rpartition("/")
    if not collection or not doc_id:
        raise ValidationError(f"Invalid document path: {path!r}")
    return collection, doc_id


def collection_id(path: str) -> str:
    """Id of the collection a document belongs to (last collection segment)."""
    collection, _ = split_path(path)
    return collection.rsplit("/", 1)[-1]


def affected_paths(ops: Iterable[DocOp]) -> list[str]:
    """Distinct document paths touched by a batch, in first-seen order."""
    seen: dict[str, None] = {}
    for op in ops:
        seen.setdefault(op.path, None)
    return list(seen)


def get_field(data: Optional[dict[str, Any]], field: str) -> Any:
    """Read a dotted field; returns the module's missing sentinel if absent."""
    node: Any = data
    for part in field.split("."):
        if not isinstance(node, dict) or part not in node:
            return _MISSING
        node = node[part]
    return node


def has_field(data: Optional[dict[str, Any]], field: str) -> bool:
    """Whether a dotted field exists."""
    return get_field(data, field) is not _MISSING


def set_field(data: dict[str, Any], field: str, value: Any) -> None:
    """Write a dotted field, creating intermediate maps."""
    parts = field.split(".")
    node = data
    for part in parts[:-1]:
        child = node.get(part)
        if not isinstance(child, dict):
            child = {}
            node[part] = child
        node = child
    node[parts[-1]] = value


def delete_field(data: dict[str, Any], field: str) -> None:
    """Remove a dotted field if present."""
    parts = field.split(".")
    node: Any = data
    for part in parts[:-1]:
        node = node.get(part) if isinstance(node, dict) else None
        if node is None:
            return
    if isinstance(node, dict):
        node.pop(parts[-1], None)


def check_require(documents: Documents, op: RequireOp) -> None:
    """Raise PreconditionFailedError if a RequireOp does not hold."""
    data = documents.get(op.path)
    if op.field is None:
        holds = (data is None) if op.absent else (data is not None)
    elif op.absent:
        holds = not has_field(data, op.field)
    else:
        current = get_field(data, op.field)
        holds = current is not _MISSING and current == op.value
    if not holds:
        raise PreconditionFailedError(op.path, op.field)


def apply_ops(documents: Documents, ops: list[DocOp]) -> Documents:
    """Apply a batch to the given documents and return the new state.

    ``documents`` must contain an entry (None when missing) for every path the
    batch touches. The input is not modified. Preconditions are checked
    against the state before any operation ran.

    Raises:
        PreconditionFailedError: If a RequireOp does not hold
        ValidationError: If an increment targets a non-numeric field
    """
    for op in ops:
        if isinstance(op, RequireOp):
            check_require(documents, op)

    result: Documents = {path: copy.deepcopy(data) for path, data in documents.items()}
    for op in ops:
        if isinstance(op, RequireOp):
            continue
        current = result.get(op.path)
        if isinstance(op, DeleteOp):
            result[op.path] = None
        elif isinstance(op, SetOp):
            if op.merge:
                body = current if current is not None else {}
                for field, value in op.fields.items():
                    set_field(body, field, copy.deepcopy(value))
                result[op.path] = body
            else:
                result[op.path] = copy.deepcopy(op.fields)
        elif isinstance(op, IncrementOp):
            body = current if current is not None else {}
            existing = get_field(body, op.field)
            if existing is _MISSING or existing is None:
                existing = 0
            if isinstance(existing, bool) or not isinstance(existing, (int, float)):
                raise ValidationError(
                    f"Cannot increment non-numeric field {op.field} of {op.path}"
                )
            set_field(body, op.field, existing + op.delta)
            result[op.path] = body
        elif isinstance(op, DeleteFieldOp):
            if current is not None:
                delete_field(current, op.field)
    return result


def matches_where(data: Optional[dict[str, Any]], where: Iterable[tuple[str, Any]]) -> bool:
    """Whether a document satisfies every equality clause."""
    if data is None:
        return False
    for field, value in where:
        current = get_field(data, field)
        if current is _MISSING or current != value:
            return False
    return True
