"""Unit tests for VoteService."""

from datetime import timedelta

import pytest

from yayonay.domain.error import CooldownActiveError, StoreUnavailableError
from yayonay.domain.service import VoteService
from yayonay.persistence.repository.inmemory import InMemoryDocumentStore
from yayonay.util.clock import FixedClock
from tests.conftest import make_item, seed_item
from tests.di.identity import TEST_USER_ID
from tests.harness import create_env_fixture

# Unit test fixture - everything mocked
unit_env = create_env_fixture()

WEEK = timedelta(days=7)


class TestFirstVote:
    """Tests for a user's first vote on an item."""

    @pytest.mark.asyncio
    async def test_first_yay_moves_counters_and_metadata(self, unit_env):
        """A first vote adds to the counter, the total and the voters."""
        # Arrange
        vote_service = await unit_env.get(VoteService)
        store = await unit_env.get(InMemoryDocumentStore)
        item = make_item()
        seed_item(store, item, yay=3, nay=2)

        # Act
        receipt = await vote_service.cast_vote(TEST_USER_ID, item, is_yay=True)

        # Assert
        assert receipt.changed is True
        assert receipt.previous is None
        doc = (await store.get(item.path)).data
        assert doc["yayCount"] == 4
        assert doc["nayCount"] == 2
        assert doc["votesMetadata"]["totalVotes"] == 6
        assert doc["votesMetadata"]["uniqueVoters"] == 6
        assert doc["votesMetadata"]["lastVoteAt"] is not None

    @pytest.mark.asyncio
    async def test_first_vote_writes_ledger_record(self, unit_env):
        vote_service = await unit_env.get(VoteService)
        store = await unit_env.get(InMemoryDocumentStore)
        item = make_item()

        receipt = await vote_service.cast_vote(TEST_USER_ID, item, is_yay=False)

        record = (await store.get(f"users/{TEST_USER_ID}/votes/pizza")).data
        assert record is not None
        assert record["isYay"] is False
        assert record["itemKey"] == "pizza"
        assert receipt.record.is_yay is False

    @pytest.mark.asyncio
    async def test_first_vote_on_missing_document_creates_it(self, unit_env):
        """Voting on an item without an aggregate document creates one."""
        vote_service = await unit_env.get(VoteService)
        store = await unit_env.get(InMemoryDocumentStore)
        item = make_item(sub_question="crust")

        await vote_service.cast_vote(TEST_USER_ID, item, is_yay=True)

        doc = (await store.get(item.path)).data
        assert doc["yayCount"] == 1
        assert doc["votesMetadata"]["totalVotes"] == 1

    @pytest.mark.asyncio
    async def test_first_vote_updates_activity_and_daily_bucket(self, unit_env):
        """The voter's profile, feed and the daily bucket move with the vote."""
        # Arrange
        vote_service = await unit_env.get(VoteService)
        store = await unit_env.get(InMemoryDocumentStore)
        clock = await unit_env.get(FixedClock)
        item = make_item()

        # Act
        await vote_service.cast_vote(
            TEST_USER_ID, item, is_yay=True, mutation_id="m1", title="Pizza"
        )

        # Assert
        user = (await store.get(f"users/{TEST_USER_ID}")).data
        assert user["votesCount"] == 1
        assert user["lastVoteDate"] == clock.now().isoformat()

        activity = (await store.get(f"users/{TEST_USER_ID}/activity/m1")).data
        assert activity["type"] == "vote"
        assert activity["itemId"] == "pizza"
        assert activity["title"] == "Pizza"

        bucket = (await store.get(f"dailyVotes/{clock.now().date().isoformat()}")).data
        assert bucket["totalVotes"] == 1
        assert bucket["items"]["pizza"] == 1


class TestChangedVote:
    """Tests for changing an existing vote."""

    @pytest.mark.asyncio
    async def test_change_moves_vote_between_counters(self, unit_env):
        """Changing yay to nay keeps the total and the voters."""
        # Arrange
        vote_service = await unit_env.get(VoteService)
        store = await unit_env.get(InMemoryDocumentStore)
        clock = await unit_env.get(FixedClock)
        item = make_item()
        seed_item(store, item, yay=3, nay=2)
        await vote_service.cast_vote(TEST_USER_ID, item, is_yay=True)
        clock.advance(WEEK)

        # Act
        receipt = await vote_service.cast_vote(TEST_USER_ID, item, is_yay=False)

        # Assert
        assert receipt.changed is True
        assert receipt.previous is True
        assert receipt.record.previous_vote is True
        assert receipt.record.last_change_at == clock.now()
        doc = (await store.get(item.path)).data
        assert doc["yayCount"] == 3
        assert doc["nayCount"] == 3
        assert doc["votesMetadata"]["totalVotes"] == 6
        assert doc["votesMetadata"]["uniqueVoters"] == 6

    @pytest.mark.asyncio
    async def test_change_does_not_count_a_new_voter(self, unit_env):
        vote_service = await unit_env.get(VoteService)
        store = await unit_env.get(InMemoryDocumentStore)
        clock = await unit_env.get(FixedClock)
        item = make_item()
        await vote_service.cast_vote(TEST_USER_ID, item, is_yay=True)
        clock.advance(WEEK)

        await vote_service.cast_vote(TEST_USER_ID, item, is_yay=False)

        user = (await store.get(f"users/{TEST_USER_ID}")).data
        assert user["votesCount"] == 1

    @pytest.mark.asyncio
    async def test_reaffirmed_vote_leaves_counters_alone(self, unit_env):
        """Voting the same way again only refreshes the ledger record."""
        # Arrange
        vote_service = await unit_env.get(VoteService)
        store = await unit_env.get(InMemoryDocumentStore)
        clock = await unit_env.get(FixedClock)
        item = make_item()
        await vote_service.cast_vote(TEST_USER_ID, item, is_yay=True)
        before = (await store.get(item.path)).data
        clock.advance(WEEK)

        # Act
        receipt = await vote_service.cast_vote(TEST_USER_ID, item, is_yay=True)

        # Assert
        assert receipt.changed is False
        assert receipt.record.timestamp == clock.now()
        assert receipt.record.previous_vote is None
        assert (await store.get(item.path)).data == before


class TestCooldown:
    """The ledger record enforces the cooldown."""

    @pytest.mark.asyncio
    async def test_vote_inside_cooldown_is_rejected_without_writing(self, unit_env):
        # Arrange
        vote_service = await unit_env.get(VoteService)
        store = await unit_env.get(InMemoryDocumentStore)
        clock = await unit_env.get(FixedClock)
        item = make_item()
        await vote_service.cast_vote(TEST_USER_ID, item, is_yay=True)
        clock.advance(timedelta(days=6, hours=23))

        # Act & Assert
        with pytest.raises(CooldownActiveError) as exc_info:
            await vote_service.cast_vote(TEST_USER_ID, item, is_yay=False)
        assert exc_info.value.remaining == timedelta(hours=1)
        assert len(store.writes) == 1

    @pytest.mark.asyncio
    async def test_cooldown_is_per_item(self, unit_env):
        """A vote on one item does not block another item."""
        vote_service = await unit_env.get(VoteService)
        await vote_service.cast_vote(TEST_USER_ID, make_item(), is_yay=True)

        receipt = await vote_service.cast_vote(
            TEST_USER_ID, make_item(subcategory="sushi"), is_yay=True
        )

        assert receipt.changed is True


class TestAttributeVote:
    """Tests for attribute votes."""

    @pytest.mark.asyncio
    async def test_attribute_vote_moves_only_its_tally(self, unit_env):
        """Attribute votes leave the item counters and the metadata alone."""
        # Arrange
        vote_service = await unit_env.get(VoteService)
        store = await unit_env.get(InMemoryDocumentStore)
        item = make_item()
        seed_item(store, item, yay=1, nay=1)

        # Act
        await vote_service.cast_vote(TEST_USER_ID, item, is_yay=True, attribute="Taste")

        # Assert
        doc = (await store.get(item.path)).data
        assert doc["attributes"]["Taste"]["yayCount"] == 1
        assert doc["yayCount"] == 1
        assert doc["votesMetadata"]["totalVotes"] == 2
        assert (await store.get(f"users/{TEST_USER_ID}/votes/pizza@Taste")).exists

    @pytest.mark.asyncio
    async def test_attribute_vote_has_own_cooldown(self, unit_env):
        """Voting on an attribute does not start the item's cooldown."""
        vote_service = await unit_env.get(VoteService)
        item = make_item()
        await vote_service.cast_vote(TEST_USER_ID, item, is_yay=True, attribute="Taste")

        receipt = await vote_service.cast_vote(TEST_USER_ID, item, is_yay=True)

        assert receipt.changed is True


class TestStoreFailure:
    """Tests for an unreachable store."""

    @pytest.mark.asyncio
    async def test_offline_store_raises_and_writes_nothing(self, unit_env):
        vote_service = await unit_env.get(VoteService)
        store = await unit_env.get(InMemoryDocumentStore)
        store.go_offline()

        with pytest.raises(StoreUnavailableError):
            await vote_service.cast_vote(TEST_USER_ID, make_item(), is_yay=True)

        store.go_online()
        assert store.writes == []
