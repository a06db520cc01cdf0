"""Tests for voting_service — cast_vote checks, tallies and counters."""

from uuid import uuid4

import pytest

from aicgs.exceptions import (
    AgentNotFoundError,
    DuplicateVoteError,
    InvalidTraitError,
    NoTraitsSelectedError,
    QuotaExceededError,
    VotingClosedError,
)
from aicgs.models import AgentStatusEnum
from aicgs.services import voting_service
from tests.factories import AgentFactory, InMemoryVoteStore, UserFactory


class TestCastVoteHappyPath:
    """A valid vote writes exactly one vote, one activity and one count update."""

    @pytest.mark.asyncio
    async def test_records_vote_and_activity(self, store, voter, open_agent):
        result = await voting_service.cast_vote(
            store, voter.id, open_agent.id, ["Observation", "Foresight"]
        )

        assert result.vote.user_id == voter.id
        assert result.vote.agent_id == open_agent.id
        assert result.vote.selected_traits == ["Observation", "Foresight"]
        assert len(store.votes) == 1
        assert len(store.activities) == 1
        assert store.activities[0].activity_type == "VOTE"
        assert store.commits == 1

    @pytest.mark.asyncio
    async def test_increments_agent_count(self, store, voter, open_agent):
        result = await voting_service.cast_vote(store, voter.id, open_agent.id, ["Analysis"])

        assert result.agent.votes == 1
        assert result.agent.status == AgentStatusEnum.under_review.value

    @pytest.mark.asyncio
    async def test_returns_remaining_and_tally(self, store, voter, other_voter, open_agent):
        await voting_service.cast_vote(store, other_voter.id, open_agent.id, ["Analysis"])
        result = await voting_service.cast_vote(
            store, voter.id, open_agent.id, ["Analysis", "Foresight"]
        )

        assert result.remaining_votes == 99
        assert result.trait_stats == {"Analysis": 2, "Foresight": 1}

    @pytest.mark.asyncio
    async def test_duplicate_labels_collapsed(self, store, voter, open_agent):
        result = await voting_service.cast_vote(
            store, voter.id, open_agent.id, ["Analysis", "Analysis"]
        )

        assert result.vote.selected_traits == ["Analysis"]
        assert result.trait_stats == {"Analysis": 1}


class TestThresholdScenario:
    """The 749 → 750 walk-through: flip, then duplicate, then closed."""

    @pytest.mark.asyncio
    async def test_crossing_threshold_flips_status(self, store, voter, near_threshold_agent):
        result = await voting_service.cast_vote(
            store, voter.id, near_threshold_agent.id, ["Wisdom"]
        )

        assert result.remaining_votes == 99
        assert result.trait_stats == {"Wisdom": 1}
        assert result.agent.votes == 750
        assert result.agent.status == AgentStatusEnum.threshold_reached.value

    @pytest.mark.asyncio
    async def test_same_user_again_is_duplicate(self, store, voter, near_threshold_agent):
        await voting_service.cast_vote(store, voter.id, near_threshold_agent.id, ["Wisdom"])

        with pytest.raises(DuplicateVoteError):
            await voting_service.cast_vote(
                store, voter.id, near_threshold_agent.id, ["Pattern Recognition"]
            )

    @pytest.mark.asyncio
    async def test_new_user_after_threshold_is_closed(
        self, store, voter, other_voter, near_threshold_agent
    ):
        await voting_service.cast_vote(store, voter.id, near_threshold_agent.id, ["Wisdom"])

        with pytest.raises(VotingClosedError):
            await voting_service.cast_vote(
                store, other_voter.id, near_threshold_agent.id, ["Wisdom"]
            )
        assert near_threshold_agent.votes == 750


class TestValidationOrder:
    """First failing check wins."""

    @pytest.mark.asyncio
    async def test_quota_checked_before_duplicate(self, voter):
        agents = [AgentFactory.create(proposed_traits=["A"]) for _ in range(100)]
        store = InMemoryVoteStore(agents=agents, users=[voter])
        for agent in agents:
            await voting_service.cast_vote(store, voter.id, agent.id, ["A"])

        # Already voted on agents[0] too, but the quota check runs first
        with pytest.raises(QuotaExceededError):
            await voting_service.cast_vote(store, voter.id, agents[0].id, ["A"])

    @pytest.mark.asyncio
    async def test_duplicate_checked_before_closed(self, store, voter, near_threshold_agent):
        await voting_service.cast_vote(store, voter.id, near_threshold_agent.id, ["Wisdom"])

        with pytest.raises(DuplicateVoteError):
            await voting_service.cast_vote(store, voter.id, near_threshold_agent.id, [])

    @pytest.mark.asyncio
    async def test_unknown_agent(self, store, voter):
        with pytest.raises(AgentNotFoundError):
            await voting_service.cast_vote(store, voter.id, uuid4(), ["Wisdom"])

    @pytest.mark.asyncio
    async def test_closed_checked_before_traits(self, voter):
        agent = AgentFactory.create(status=AgentStatusEnum.active)
        store = InMemoryVoteStore(agents=[agent], users=[voter])

        with pytest.raises(VotingClosedError):
            await voting_service.cast_vote(store, voter.id, agent.id, [])

    @pytest.mark.asyncio
    async def test_empty_traits(self, store, voter, open_agent):
        with pytest.raises(NoTraitsSelectedError):
            await voting_service.cast_vote(store, voter.id, open_agent.id, [])

    @pytest.mark.asyncio
    async def test_invalid_trait_lists_offenders(self, store, voter, open_agent):
        with pytest.raises(InvalidTraitError) as exc_info:
            await voting_service.cast_vote(
                store, voter.id, open_agent.id, ["Analysis", "Telepathy"]
            )

        assert exc_info.value.invalid_traits == ["Telepathy"]


class TestVotingClosed:
    @pytest.mark.asyncio
    @pytest.mark.parametrize(
        "status",
        [AgentStatusEnum.active, AgentStatusEnum.threshold_reached],
    )
    async def test_non_votable_status(self, voter, status):
        agent = AgentFactory.create(status=status, votes=10)
        store = InMemoryVoteStore(agents=[agent], users=[voter])

        with pytest.raises(VotingClosedError):
            await voting_service.cast_vote(store, voter.id, agent.id, ["Wisdom"])

    @pytest.mark.asyncio
    async def test_under_review_but_at_threshold(self, voter):
        # Overshoot left by concurrent increments: status not yet flipped
        agent = AgentFactory.create(votes=751, votes_needed=750)
        store = InMemoryVoteStore(agents=[agent], users=[voter])

        with pytest.raises(VotingClosedError):
            await voting_service.cast_vote(store, voter.id, agent.id, ["Wisdom"])


class TestNoMutationOnRejection:
    @pytest.mark.asyncio
    @pytest.mark.parametrize("traits", [[], ["Telepathy"], ["Analysis", "Telepathy"]])
    async def test_rejected_vote_leaves_state_untouched(self, store, voter, open_agent, traits):
        with pytest.raises((NoTraitsSelectedError, InvalidTraitError)):
            await voting_service.cast_vote(store, voter.id, open_agent.id, traits)

        assert open_agent.votes == 0
        assert store.votes == []
        assert store.activities == []
        assert store.commits == 0


class TestQuota:
    @pytest.mark.asyncio
    async def test_hundred_and_first_vote_rejected(self, voter):
        agents = [AgentFactory.create(proposed_traits=["A"]) for _ in range(101)]
        store = InMemoryVoteStore(agents=agents, users=[voter])

        for agent in agents[:100]:
            await voting_service.cast_vote(store, voter.id, agent.id, ["A"])

        with pytest.raises(QuotaExceededError) as exc_info:
            await voting_service.cast_vote(store, voter.id, agents[100].id, ["A"])
        assert exc_info.value.limit == 100
        assert await voting_service.get_remaining_votes(store, voter.id) == 0

    @pytest.mark.asyncio
    async def test_custom_limit(self, store, voter, open_agent, near_threshold_agent):
        await voting_service.cast_vote(store, voter.id, open_agent.id, ["Analysis"], max_votes=1)

        with pytest.raises(QuotaExceededError):
            await voting_service.cast_vote(
                store, voter.id, near_threshold_agent.id, ["Wisdom"], max_votes=1
            )


class TestReadOperations:
    @pytest.mark.asyncio
    async def test_remaining_votes_tracks_successes(self, store, voter, open_agent, near_threshold_agent):
        assert await voting_service.get_remaining_votes(store, voter.id) == 100

        await voting_service.cast_vote(store, voter.id, open_agent.id, ["Analysis"])
        with pytest.raises(InvalidTraitError):
            await voting_service.cast_vote(store, voter.id, near_threshold_agent.id, ["Nope"])

        assert await voting_service.get_remaining_votes(store, voter.id) == 99

    @pytest.mark.asyncio
    async def test_tally_counts_votes_per_trait(self, open_agent):
        voters = [UserFactory.create() for _ in range(3)]
        store = InMemoryVoteStore(agents=[open_agent], users=voters)
        picks = [["Observation"], ["Observation", "Analysis"], ["Foresight", "Analysis"]]
        for user, traits in zip(voters, picks):
            await voting_service.cast_vote(store, user.id, open_agent.id, traits)

        tally = await voting_service.get_trait_tally(store, open_agent.id)

        assert tally == {"Observation": 2, "Analysis": 2, "Foresight": 1}
        # A vote may select several traits, so the sum exceeds the vote count
        assert sum(tally.values()) == 5
        assert open_agent.votes == 3

    @pytest.mark.asyncio
    async def test_tally_empty_for_unvoted_agent(self, store, open_agent):
        assert await voting_service.get_trait_tally(store, open_agent.id) == {}

    @pytest.mark.asyncio
    async def test_global_stats(self, store, voter, other_voter, open_agent, near_threshold_agent):
        await voting_service.cast_vote(store, voter.id, open_agent.id, ["Analysis"])
        await voting_service.cast_vote(store, voter.id, near_threshold_agent.id, ["Wisdom"])
        await voting_service.cast_vote(store, other_voter.id, open_agent.id, ["Foresight"])

        stats = await voting_service.get_global_stats(store)

        assert stats.total_votes == 3
        assert stats.unique_voters == 2
        assert stats.unique_voters <= stats.total_votes

    @pytest.mark.asyncio
    async def test_global_stats_empty(self, store):
        stats = await voting_service.get_global_stats(store)
        assert (stats.total_votes, stats.unique_voters) == (0, 0)
