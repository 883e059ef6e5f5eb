"""Unit tests for document operation semantics."""

import pytest

from yayonay.domain.error import PreconditionFailedError, ValidationError
from yayonay.domain.repository import (
    DeleteFieldOp,
    DeleteOp,
    IncrementOp,
    RequireOp,
    SetOp,
)
from yayonay.persistence.documents import affected_paths, apply_ops, collection_id, split_path


class TestPaths:
    """Tests for path helpers."""

    def test_split_path(self):
        assert split_path("categories/c1/subcategories/s1") == (
            "categories/c1/subcategories",
            "s1",
        )

    def test_collection_id(self):
        assert collection_id("categories/c1/subcategories/s1") == "subcategories"

    def test_invalid_path(self):
        with pytest.raises(ValidationError):
            split_path("lonely")

    def test_affected_paths_keep_order(self):
        ops = [
            IncrementOp(path="b/1", field="x", delta=1),
            SetOp(path="a/1", fields={}),
            DeleteOp(path="b/1"),
        ]
        assert affected_paths(ops) == ["b/1", "a/1"]


class TestApplyOps:
    """Tests for apply_ops."""

    def test_increment_creates_missing_document_and_fields(self):
        result = apply_ops(
            {"items/a": None},
            [IncrementOp(path="items/a", field="votesMetadata.totalVotes", delta=1)],
        )

        assert result["items/a"] == {"votesMetadata": {"totalVotes": 1}}

    def test_merge_set_writes_dotted_fields(self):
        result = apply_ops(
            {"items/a": {"name": "A", "likedBy": {"u1": True}}},
            [SetOp(path="items/a", fields={"likedBy.u2": True}, merge=True)],
        )

        assert result["items/a"] == {"name": "A", "likedBy": {"u1": True, "u2": True}}

    def test_plain_set_replaces_body(self):
        result = apply_ops(
            {"items/a": {"name": "A", "old": 1}},
            [SetOp(path="items/a", fields={"name": "B"})],
        )

        assert result["items/a"] == {"name": "B"}

    def test_delete_and_delete_field(self):
        result = apply_ops(
            {"items/a": {"x": {"y": 1, "z": 2}}, "items/b": {"k": 1}},
            [
                DeleteFieldOp(path="items/a", field="x.y"),
                DeleteOp(path="items/b"),
            ],
        )

        assert result == {"items/a": {"x": {"z": 2}}, "items/b": None}

    def test_input_is_not_modified(self):
        documents = {"items/a": {"count": 1}}

        apply_ops(documents, [IncrementOp(path="items/a", field="count", delta=1)])

        assert documents == {"items/a": {"count": 1}}

    def test_failed_precondition_applies_nothing(self):
        """Preconditions are checked before any operation runs."""
        with pytest.raises(PreconditionFailedError) as exc_info:
            apply_ops(
                {"items/a": {"count": 1}, "votes/v": {"ts": "t1"}},
                [
                    IncrementOp(path="items/a", field="count", delta=1),
                    RequireOp(path="votes/v", field="ts", value="t0"),
                ],
            )
        assert exc_info.value.field == "ts"

    @pytest.mark.parametrize(
        "op,data,holds",
        [
            (RequireOp(path="d/1"), {"a": 1}, True),
            (RequireOp(path="d/1"), None, False),
            (RequireOp(path="d/1", absent=True), None, True),
            (RequireOp(path="d/1", field="a", absent=True), {"b": 1}, True),
            (RequireOp(path="d/1", field="a", absent=True), {"a": 1}, False),
            (RequireOp(path="d/1", field="a", value=1), {"a": 1}, True),
            (RequireOp(path="d/1", field="a", value=1), {"a": 2}, False),
        ],
    )
    def test_require(self, op, data, holds):
        if holds:
            apply_ops({"d/1": data}, [op])
        else:
            with pytest.raises(PreconditionFailedError):
                apply_ops({"d/1": data}, [op])

    def test_increment_non_numeric_field_fails(self):
        with pytest.raises(ValidationError):
            apply_ops(
                {"items/a": {"name": "A"}},
                [IncrementOp(path="items/a", field="name", delta=1)],
            )
