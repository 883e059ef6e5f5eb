"""Unit tests for the cast vote flow."""

import asyncio
from datetime import timedelta

import pytest

from yayonay.adapter.identity import SessionIdentityProvider
from yayonay.application.engine import EngagementEngine
from yayonay.application.projections import item_entity
from yayonay.application.usecase.vote import CastVoteUseCase
from yayonay.domain.service import RealtimeReconciler
from yayonay.domain.value import FailureReason, OutcomeStatus
from yayonay.persistence.repository.inmemory import (
    InMemoryCooldownMarkerRepository,
    InMemoryDocumentStore,
)
from yayonay.util.clock import FixedClock
from tests.conftest import make_item, seed_item
from tests.di.identity import TEST_USER_ID
from tests.harness import create_env_fixture

unit_env = create_env_fixture()

WEEK = timedelta(days=7)


async def settle(env, item) -> None:
    """Wait until the item projection has seen the latest store version."""
    reconciler = await env.get(RealtimeReconciler)
    store = await env.get(InMemoryDocumentStore)
    await reconciler.wait_for_version(item_entity(item), store.version)


class TestCommittedVote:
    """Tests for votes that commit."""

    @pytest.mark.asyncio
    async def test_vote_commits_and_saves_marker(self, unit_env):
        # Arrange
        engine = await unit_env.get(EngagementEngine)
        markers = await unit_env.get(InMemoryCooldownMarkerRepository)
        clock = await unit_env.get(FixedClock)
        item = make_item()

        # Act
        outcome = await engine.vote(item, is_yay=True)

        # Assert
        assert outcome.status == OutcomeStatus.COMMITTED
        assert outcome.changed is True
        assert outcome.item_key == "pizza"
        marker = await markers.get(TEST_USER_ID, "pizza")
        assert marker.last_vote_at == clock.now()
        assert marker.last_vote is True

    @pytest.mark.asyncio
    async def test_open_projection_shows_vote_immediately(self, unit_env):
        """The projection moves before the write is acknowledged."""
        # Arrange
        engine = await unit_env.get(EngagementEngine)
        store = await unit_env.get(InMemoryDocumentStore)
        item = make_item()
        seed_item(store, item, yay=3, nay=2)
        assert await engine.open_item(item)
        store.pause_writes()

        # Act
        task = asyncio.create_task(engine.vote(item, is_yay=True))
        await asyncio.sleep(0)
        pending_view = engine.projection(item)
        store.resume_writes()
        outcome = await task
        await settle(unit_env, item)

        # Assert
        assert pending_view.yay_count == 4
        assert outcome.committed
        view = engine.projection(item)
        assert (view.yay_count, view.nay_count) == (4, 2)
        assert view.is_balanced

    @pytest.mark.asyncio
    async def test_changed_vote_on_open_item(self, unit_env):
        engine = await unit_env.get(EngagementEngine)
        clock = await unit_env.get(FixedClock)
        item = make_item()
        await engine.open_item(item)
        await engine.vote(item, is_yay=True)
        clock.advance(WEEK)

        outcome = await engine.vote(item, is_yay=False)
        await settle(unit_env, item)

        assert outcome.committed
        assert outcome.record.previous_vote is True
        view = engine.projection(item)
        assert (view.yay_count, view.nay_count, view.total_votes) == (0, 1, 1)

    @pytest.mark.asyncio
    async def test_lost_marker_is_corrected_from_ledger(self, unit_env):
        """A vote cast elsewhere is moved, not counted twice."""
        # Arrange
        engine = await unit_env.get(EngagementEngine)
        markers = await unit_env.get(InMemoryCooldownMarkerRepository)
        clock = await unit_env.get(FixedClock)
        item = make_item()
        await engine.open_item(item)
        await engine.vote(item, is_yay=True)
        await markers.delete(TEST_USER_ID, "pizza")
        clock.advance(WEEK)

        # Act
        outcome = await engine.vote(item, is_yay=False)
        await settle(unit_env, item)

        # Assert
        assert outcome.committed
        view = engine.projection(item)
        assert (view.yay_count, view.nay_count, view.total_votes) == (0, 1, 1)
        reconciler = await unit_env.get(RealtimeReconciler)
        assert not reconciler.has_pending(item_entity(item))

    @pytest.mark.asyncio
    async def test_sub_question_vote(self, unit_env):
        engine = await unit_env.get(EngagementEngine)
        store = await unit_env.get(InMemoryDocumentStore)
        item = make_item(sub_question="crust")

        outcome = await engine.vote_for_sub_question(item, is_yay=True)

        assert outcome.committed
        assert outcome.item_key == "pizza~crust"
        assert (await store.get(item.path)).data["yayCount"] == 1

    @pytest.mark.asyncio
    async def test_attribute_vote(self, unit_env):
        engine = await unit_env.get(EngagementEngine)
        item = make_item()
        await engine.open_item(item)

        outcome = await engine.vote_for_attribute(item, "Taste", is_yay=False)
        await settle(unit_env, item)

        assert outcome.committed
        assert outcome.item_key == "pizza@Taste"
        view = engine.projection(item)
        assert view.attribute("Taste").nay_count == 1
        assert view.total_votes == 0


class TestRejectedVote:
    """Tests for votes the cooldown rejects."""

    @pytest.mark.asyncio
    async def test_local_cooldown_rejects_without_network(self, unit_env):
        # Arrange
        engine = await unit_env.get(EngagementEngine)
        store = await unit_env.get(InMemoryDocumentStore)
        clock = await unit_env.get(FixedClock)
        item = make_item()
        await engine.vote(item, is_yay=True)
        clock.advance(timedelta(days=2))
        store.go_offline()

        # Act
        outcome = await engine.vote(item, is_yay=False)

        # Assert
        assert outcome.status == OutcomeStatus.REJECTED_COOLDOWN
        assert outcome.remaining == timedelta(days=5)
        assert len(store.writes) == 1

    @pytest.mark.asyncio
    async def test_ledger_cooldown_rejects_when_marker_lost(self, unit_env):
        """Without a marker the ledger still enforces the cooldown."""
        # Arrange
        engine = await unit_env.get(EngagementEngine)
        markers = await unit_env.get(InMemoryCooldownMarkerRepository)
        item = make_item()
        await engine.open_item(item)
        await engine.vote(item, is_yay=True)
        await settle(unit_env, item)
        await markers.delete(TEST_USER_ID, "pizza")

        # Act
        outcome = await engine.vote(item, is_yay=False)

        # Assert
        assert outcome.status == OutcomeStatus.REJECTED_COOLDOWN
        view = engine.projection(item)
        assert (view.yay_count, view.nay_count) == (1, 0)

    @pytest.mark.asyncio
    async def test_eligible_again_after_a_week(self, unit_env):
        engine = await unit_env.get(EngagementEngine)
        clock = await unit_env.get(FixedClock)
        item = make_item()
        await engine.vote(item, is_yay=True)
        clock.advance(WEEK)

        outcome = await engine.vote(item, is_yay=True)

        assert outcome.committed
        assert outcome.changed is False


class TestFailedVote:
    """Tests for votes that fail."""

    @pytest.mark.asyncio
    async def test_signed_out_user_cannot_vote(self, unit_env):
        engine = await unit_env.get(EngagementEngine)
        session = await unit_env.get(SessionIdentityProvider)
        store = await unit_env.get(InMemoryDocumentStore)
        session.sign_out()

        outcome = await engine.vote(make_item(), is_yay=True)

        assert outcome.status == OutcomeStatus.FAILED
        assert outcome.reason == FailureReason.UNAUTHENTICATED
        assert store.writes == []

    @pytest.mark.asyncio
    async def test_offline_store_rolls_back_and_keeps_marker(self, unit_env):
        """A failed write leaves neither the projection nor the marker moved."""
        # Arrange
        engine = await unit_env.get(EngagementEngine)
        store = await unit_env.get(InMemoryDocumentStore)
        markers = await unit_env.get(InMemoryCooldownMarkerRepository)
        item = make_item()
        seed_item(store, item, yay=3, nay=2)
        await engine.open_item(item)
        before = engine.projection(item)
        store.go_offline()

        # Act
        outcome = await engine.vote(item, is_yay=True)

        # Assert
        assert outcome.status == OutcomeStatus.FAILED
        assert outcome.reason == FailureReason.STORE_UNAVAILABLE
        assert engine.projection(item) == before
        assert await markers.get(TEST_USER_ID, "pizza") is None

    @pytest.mark.asyncio
    async def test_second_vote_while_first_in_flight(self, unit_env):
        """Only one vote per item may be in flight."""
        # Arrange
        engine = await unit_env.get(EngagementEngine)
        use_case = await unit_env.get(CastVoteUseCase)
        store = await unit_env.get(InMemoryDocumentStore)
        item = make_item()
        store.pause_writes()
        first = asyncio.create_task(engine.vote(item, is_yay=True))
        while not use_case.is_in_flight(item):
            await asyncio.sleep(0)

        # Act
        second = await engine.vote(item, is_yay=False)
        store.resume_writes()
        first_outcome = await first

        # Assert
        assert second.status == OutcomeStatus.FAILED
        assert second.reason == FailureReason.CONCURRENT_MUTATION_IN_PROGRESS
        assert first_outcome.committed
        assert not use_case.is_in_flight(item)

    @pytest.mark.asyncio
    async def test_sub_question_vote_needs_sub_question(self, unit_env):
        engine = await unit_env.get(EngagementEngine)

        outcome = await engine.vote_for_sub_question(make_item(), is_yay=True)

        assert outcome.reason == FailureReason.INVALID

    @pytest.mark.asyncio
    async def test_invalid_attribute_name(self, unit_env):
        engine = await unit_env.get(EngagementEngine)

        outcome = await engine.vote_for_attribute(make_item(), "a.b", is_yay=True)

        assert outcome.status == OutcomeStatus.FAILED
        assert outcome.reason == FailureReason.INVALID

    @pytest.mark.asyncio
    async def test_failed_item_vote_with_attribute_vote_attempted_meanwhile(self, unit_env):
        """An attribute vote cannot stack on an item vote still being written."""
        # Arrange
        engine = await unit_env.get(EngagementEngine)
        use_case = await unit_env.get(CastVoteUseCase)
        store = await unit_env.get(InMemoryDocumentStore)
        item = make_item()
        seed_item(store, item, yay=3, nay=2)
        await engine.open_item(item)
        before = engine.projection(item)
        store.pause_writes()
        first = asyncio.create_task(engine.vote(item, is_yay=True))
        while not use_case.is_in_flight(item):
            await asyncio.sleep(0)

        # Act
        attribute_outcome = await engine.vote_for_attribute(item, "Taste", is_yay=True)
        store.go_offline()
        store.resume_writes()
        item_outcome = await first

        # Assert
        assert attribute_outcome.reason == FailureReason.CONCURRENT_MUTATION_IN_PROGRESS
        assert item_outcome.reason == FailureReason.STORE_UNAVAILABLE
        assert engine.projection(item) == before
        assert engine.projection(item).attribute("Taste").yay_count == 0

    @pytest.mark.asyncio
    async def test_sub_questions_of_one_item_vote_independently(self, unit_env):
        # Arrange
        engine = await unit_env.get(EngagementEngine)
        store = await unit_env.get(InMemoryDocumentStore)
        store.pause_writes()
        first = asyncio.create_task(
            engine.vote_for_sub_question(make_item(sub_question="crust"), is_yay=True)
        )
        await asyncio.sleep(0)

        # Act
        second = asyncio.create_task(
            engine.vote_for_sub_question(make_item(sub_question="sauce"), is_yay=False)
        )
        await asyncio.sleep(0)
        store.resume_writes()

        # Assert
        assert (await first).committed
        assert (await second).committed
