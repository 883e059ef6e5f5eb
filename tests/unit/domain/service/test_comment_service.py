"""Unit tests for CommentService."""

from datetime import timedelta

import pytest

from yayonay.domain.error import (
    NotAuthorizedError,
    NotFoundError,
    PreconditionFailedError,
    StoreUnavailableError,
    ValidationError,
)
from yayonay.domain.model import UserProfile
from yayonay.domain.repository import DeleteOp
from yayonay.domain.service import CommentService, build_threads, replies_query
from yayonay.domain.value import CommentId, UserId
from yayonay.persistence.repository.inmemory import InMemoryDocumentStore
from yayonay.util.clock import FixedClock
from tests.conftest import make_item
from tests.harness import create_env_fixture

unit_env = create_env_fixture()

ALICE = UserProfile(id=UserId("alice"), username="Alice", image_url="https://img/alice")
BOB = UserProfile(id=UserId("bob"), username="Bob")


class TestAddComment:
    """Tests for add_comment method."""

    @pytest.mark.asyncio
    async def test_add_comment_copies_author_fields(self, unit_env):
        # Arrange
        comment_service = await unit_env.get(CommentService)
        store = await unit_env.get(InMemoryDocumentStore)

        # Act
        comment, version = await comment_service.add_comment(
            make_item(), ALICE, "  Best pizza in town  "
        )

        # Assert
        assert version == 1
        assert comment.text == "Best pizza in town"
        doc = (await store.get(f"comments/{comment.id}")).data
        assert doc["userId"] == "alice"
        assert doc["username"] == "Alice"
        assert doc["userImage"] == "https://img/alice"
        assert doc["subCategoryId"] == "pizza"
        assert doc["likes"] == 0
        assert doc["parentId"] is None

    @pytest.mark.asyncio
    async def test_empty_text_is_rejected(self, unit_env):
        comment_service = await unit_env.get(CommentService)

        with pytest.raises(ValidationError):
            await comment_service.add_comment(make_item(), ALICE, "   ")

    @pytest.mark.asyncio
    async def test_too_long_text_is_rejected(self, unit_env):
        comment_service = await unit_env.get(CommentService)

        with pytest.raises(ValidationError):
            await comment_service.add_comment(
                make_item(), ALICE, "x" * (comment_service.max_length + 1)
            )

    @pytest.mark.asyncio
    async def test_reply_to_reply_attaches_to_top_level(self, unit_env):
        """Threads are one level deep."""
        # Arrange
        comment_service = await unit_env.get(CommentService)
        item = make_item()
        root, _ = await comment_service.add_comment(item, ALICE, "Root")
        reply, _ = await comment_service.add_comment(item, BOB, "Reply", root.id)

        # Act
        nested, _ = await comment_service.add_comment(item, ALICE, "Nested", reply.id)

        # Assert
        assert nested.parent_id == root.id

    @pytest.mark.asyncio
    async def test_reply_to_missing_parent_raises(self, unit_env):
        comment_service = await unit_env.get(CommentService)

        with pytest.raises(NotFoundError):
            await comment_service.add_comment(
                make_item(), ALICE, "Hello?", CommentId("missing")
            )

    @pytest.mark.asyncio
    async def test_reply_across_subcategories_is_rejected(self, unit_env):
        comment_service = await unit_env.get(CommentService)
        root, _ = await comment_service.add_comment(make_item(), ALICE, "Root")

        with pytest.raises(ValidationError):
            await comment_service.add_comment(
                make_item(subcategory="sushi"), BOB, "Wrong thread", root.id
            )


class TestLikes:
    """Tests for like, unlike and toggle."""

    @pytest.mark.asyncio
    async def test_like_twice_counts_once(self, unit_env):
        # Arrange
        comment_service = await unit_env.get(CommentService)
        comment, _ = await comment_service.add_comment(make_item(), ALICE, "Hi")

        # Act
        first = await comment_service.like_comment(comment.id, BOB.id)
        second = await comment_service.like_comment(comment.id, BOB.id)

        # Assert
        assert first is not None
        assert second is None
        liked = await comment_service.get_comment(comment.id)
        assert liked.likes == 1
        assert liked.is_liked_by(BOB.id)

    @pytest.mark.asyncio
    async def test_like_then_unlike_restores(self, unit_env):
        comment_service = await unit_env.get(CommentService)
        comment, _ = await comment_service.add_comment(make_item(), ALICE, "Hi")

        await comment_service.like_comment(comment.id, BOB.id)
        await comment_service.unlike_comment(comment.id, BOB.id)

        restored = await comment_service.get_comment(comment.id)
        assert restored.likes == 0
        assert restored.liked_by == {}

    @pytest.mark.asyncio
    async def test_unlike_without_like_is_noop(self, unit_env):
        comment_service = await unit_env.get(CommentService)
        comment, _ = await comment_service.add_comment(make_item(), ALICE, "Hi")

        assert await comment_service.unlike_comment(comment.id, BOB.id) is None
        assert (await comment_service.get_comment(comment.id)).likes == 0

    @pytest.mark.asyncio
    async def test_like_missing_comment_raises(self, unit_env):
        comment_service = await unit_env.get(CommentService)

        with pytest.raises(NotFoundError):
            await comment_service.like_comment(CommentId("missing"), BOB.id)

    @pytest.mark.asyncio
    async def test_toggle_like_flips(self, unit_env):
        comment_service = await unit_env.get(CommentService)
        comment, _ = await comment_service.add_comment(make_item(), ALICE, "Hi")

        liked, _ = await comment_service.toggle_like(comment.id, BOB.id)
        unliked, _ = await comment_service.toggle_like(comment.id, BOB.id)

        assert liked is True
        assert unliked is False
        assert (await comment_service.get_comment(comment.id)).likes == 0


class TestDeleteComment:
    """Tests for delete and undo."""

    @pytest.mark.asyncio
    async def test_delete_top_level_cascades_to_replies(self, unit_env):
        # Arrange
        comment_service = await unit_env.get(CommentService)
        item = make_item()
        root, _ = await comment_service.add_comment(item, ALICE, "Root")
        r1, _ = await comment_service.add_comment(item, BOB, "Reply 1", root.id)
        r2, _ = await comment_service.add_comment(item, ALICE, "Reply 2", root.id)
        other, _ = await comment_service.add_comment(item, BOB, "Other")

        # Act
        deleted, _ = await comment_service.delete_comment(root.id, ALICE.id)

        # Assert
        assert set(deleted) == {root.id, r1.id, r2.id}
        remaining = await comment_service.get_comments(item.subcategory_id)
        assert [c.id for c in remaining] == [other.id]

    @pytest.mark.asyncio
    async def test_delete_reply_keeps_siblings(self, unit_env):
        comment_service = await unit_env.get(CommentService)
        item = make_item()
        root, _ = await comment_service.add_comment(item, ALICE, "Root")
        r1, _ = await comment_service.add_comment(item, BOB, "Reply 1", root.id)
        r2, _ = await comment_service.add_comment(item, BOB, "Reply 2", root.id)

        deleted, _ = await comment_service.delete_comment(r1.id, BOB.id)

        assert deleted == [r1.id]
        remaining = {c.id for c in await comment_service.get_comments(item.subcategory_id)}
        assert remaining == {root.id, r2.id}

    @pytest.mark.asyncio
    async def test_only_author_may_delete(self, unit_env):
        comment_service = await unit_env.get(CommentService)
        comment, _ = await comment_service.add_comment(make_item(), ALICE, "Mine")

        with pytest.raises(NotAuthorizedError):
            await comment_service.delete_comment(comment.id, BOB.id)

        assert (await comment_service.get_comment(comment.id)).text == "Mine"

    @pytest.mark.asyncio
    async def test_undo_restores_parent_without_replies(self, unit_env):
        """Undo brings back the deleted comment only."""
        # Arrange
        comment_service = await unit_env.get(CommentService)
        item = make_item()
        root, _ = await comment_service.add_comment(item, ALICE, "Root")
        await comment_service.add_comment(item, BOB, "Reply", root.id)
        await comment_service.delete_comment(root.id, ALICE.id)

        # Act
        restored, _ = await comment_service.undo_delete_comment()

        # Assert
        assert (restored.id, restored.text) == (root.id, root.text)
        remaining = await comment_service.get_comments(item.subcategory_id)
        assert [c.id for c in remaining] == [root.id]

    @pytest.mark.asyncio
    async def test_reply_bumps_parent_reply_revision(self, unit_env):
        comment_service = await unit_env.get(CommentService)
        item = make_item()
        root, _ = await comment_service.add_comment(item, ALICE, "Root")

        await comment_service.add_comment(item, BOB, "Reply 1", root.id)
        await comment_service.add_comment(item, BOB, "Reply 2", root.id)

        assert (await comment_service.get_comment(root.id)).reply_revision == 2

    @pytest.mark.asyncio
    async def test_reply_written_during_cascade_is_deleted_too(self, unit_env, monkeypatch):
        """A reply landing between listing and deleting does not outlive its parent."""
        # Arrange
        comment_service = await unit_env.get(CommentService)
        store = await unit_env.get(InMemoryDocumentStore)
        item = make_item()
        root, _ = await comment_service.add_comment(item, ALICE, "Root")
        early, _ = await comment_service.add_comment(item, BOB, "Early", root.id)
        late: list = []
        list_replies = store.query

        async def query_then_reply(query):
            snapshot = await list_replies(query)
            if query == replies_query(root.id) and not late:
                late.append((await comment_service.add_comment(item, BOB, "Late", root.id))[0])
            return snapshot

        monkeypatch.setattr(store, "query", query_then_reply)

        # Act
        deleted, _ = await comment_service.delete_comment(root.id, ALICE.id)

        # Assert
        assert set(deleted) == {root.id, early.id, late[0].id}
        monkeypatch.undo()
        assert await comment_service.get_comments(item.subcategory_id) == []

    @pytest.mark.asyncio
    async def test_cascade_gives_up_when_replies_keep_arriving(self, unit_env, monkeypatch):
        # Arrange
        comment_service = await unit_env.get(CommentService)
        store = await unit_env.get(InMemoryDocumentStore)
        item = make_item()
        earlier, _ = await comment_service.add_comment(item, ALICE, "Earlier")
        await comment_service.delete_comment(earlier.id, ALICE.id)
        root, _ = await comment_service.add_comment(item, ALICE, "Root")
        list_replies = store.query

        async def query_then_reply(query):
            snapshot = await list_replies(query)
            if query == replies_query(root.id):
                await comment_service.add_comment(item, BOB, "Another", root.id)
            return snapshot

        monkeypatch.setattr(store, "query", query_then_reply)

        # Act
        with pytest.raises(PreconditionFailedError):
            await comment_service.delete_comment(root.id, ALICE.id)

        # Assert
        monkeypatch.undo()
        remaining = await comment_service.get_comments(item.subcategory_id)
        assert root.id in {c.id for c in remaining}
        assert all(c.parent_id == root.id for c in remaining if c.is_reply)
        assert comment_service.recently_deleted == earlier

    @pytest.mark.asyncio
    async def test_undo_reply_after_parent_deleted_raises_not_found(self, unit_env):
        """A restored reply would be orphaned without its parent."""
        # Arrange
        comment_service = await unit_env.get(CommentService)
        store = await unit_env.get(InMemoryDocumentStore)
        item = make_item()
        root, _ = await comment_service.add_comment(item, ALICE, "Root")
        reply, _ = await comment_service.add_comment(item, BOB, "Reply", root.id)
        await comment_service.delete_comment(reply.id, BOB.id)
        await store.atomic_write([DeleteOp(path=f"comments/{root.id}")])

        # Act
        with pytest.raises(NotFoundError):
            await comment_service.undo_delete_comment()

        # Assert
        assert (await store.get(f"comments/{reply.id}")).data is None
        assert comment_service.recently_deleted == reply

    @pytest.mark.asyncio
    async def test_undo_twice_raises_not_found(self, unit_env):
        comment_service = await unit_env.get(CommentService)
        comment, _ = await comment_service.add_comment(make_item(), ALICE, "Oops")
        await comment_service.delete_comment(comment.id, ALICE.id)
        await comment_service.undo_delete_comment()

        with pytest.raises(NotFoundError):
            await comment_service.undo_delete_comment()

    @pytest.mark.asyncio
    async def test_failed_delete_keeps_previous_undo_snapshot(self, unit_env):
        # Arrange
        comment_service = await unit_env.get(CommentService)
        store = await unit_env.get(InMemoryDocumentStore)
        item = make_item()
        first, _ = await comment_service.add_comment(item, ALICE, "First")
        second, _ = await comment_service.add_comment(item, ALICE, "Second")
        await comment_service.delete_comment(first.id, ALICE.id)

        # Act
        store.go_offline()
        with pytest.raises(StoreUnavailableError):
            await comment_service.delete_comment(second.id, ALICE.id, comment=second)
        store.go_online()

        # Assert
        assert comment_service.recently_deleted == first


class TestBuildThreads:
    """Tests for build_threads function."""

    @pytest.mark.asyncio
    async def test_threads_order_and_likes(self, unit_env):
        # Arrange
        comment_service = await unit_env.get(CommentService)
        clock = await unit_env.get(FixedClock)
        item = make_item()
        old, _ = await comment_service.add_comment(item, ALICE, "Old")
        clock.advance(timedelta(minutes=1))
        new, _ = await comment_service.add_comment(item, BOB, "New")
        clock.advance(timedelta(minutes=1))
        reply, _ = await comment_service.add_comment(item, BOB, "Reply", old.id)
        await comment_service.like_comment(reply.id, ALICE.id)

        # Act
        threads = build_threads(
            await comment_service.get_comments(item.subcategory_id), viewer_id=ALICE.id
        )

        # Assert
        assert [t.comment.id for t in threads] == [new.id, old.id]
        assert [r.comment.id for r in threads[1].replies] == [reply.id]
        assert threads[1].replies[0].is_liked is True
        assert threads[0].is_liked is False
