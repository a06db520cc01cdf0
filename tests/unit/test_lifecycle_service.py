"""Tests for lifecycle_service — votability and threshold transitions."""

import pytest
from sqlalchemy.dialects import postgresql

from aicgs.models import Agent, AgentStatusEnum
from aicgs.services.lifecycle_service import (
    is_open_for_voting,
    status_after_vote,
    status_after_vote_clause,
    votes_remaining_to_threshold,
)
from tests.factories import AgentFactory


class TestIsOpenForVoting:
    def test_under_review_below_threshold(self):
        assert is_open_for_voting(AgentFactory.create(votes=0)) is True

    def test_one_short_of_threshold(self):
        assert is_open_for_voting(AgentFactory.create(votes=749, votes_needed=750)) is True

    def test_at_threshold(self):
        assert is_open_for_voting(AgentFactory.create(votes=750, votes_needed=750)) is False

    def test_active_is_closed(self):
        assert is_open_for_voting(AgentFactory.create(status=AgentStatusEnum.active)) is False

    def test_threshold_reached_is_closed(self):
        agent = AgentFactory.create(status=AgentStatusEnum.threshold_reached, votes=3)
        assert is_open_for_voting(agent) is False

    def test_unknown_status_is_closed(self):
        agent = AgentFactory.create()
        agent.status = "Conducting Community Sentiment Analysis"
        assert is_open_for_voting(agent) is False


class TestStatusAfterVote:
    def test_below_threshold_stays(self):
        assert status_after_vote("UnderReview", 10, 750) == AgentStatusEnum.under_review

    def test_reaching_threshold_flips(self):
        assert status_after_vote("UnderReview", 750, 750) == AgentStatusEnum.threshold_reached

    def test_overshoot_flips(self):
        assert status_after_vote("UnderReview", 752, 750) == AgentStatusEnum.threshold_reached

    @pytest.mark.parametrize("status", ["Active", "ThresholdReached"])
    def test_other_statuses_unchanged(self, status):
        assert status_after_vote(status, 10_000, 750) == AgentStatusEnum(status)


class TestStatusLabels:
    def test_labels(self):
        assert AgentStatusEnum.under_review.label == "Conducting Community Sentiment Analysis"
        assert AgentStatusEnum.threshold_reached.label == "Agent Migration Processing"
        assert AgentFactory.create(status=AgentStatusEnum.active).status_label == "Active"


def test_votes_remaining_to_threshold():
    assert votes_remaining_to_threshold(AgentFactory.create(votes=700, votes_needed=750)) == 50
    assert votes_remaining_to_threshold(AgentFactory.create(votes=760, votes_needed=750)) == 0


class TestStatusAfterVoteClause:
    """The SQL rendering the vote store uses for its atomic update."""

    def _sql(self, clause) -> str:
        return str(
            clause.compile(
                dialect=postgresql.dialect(), compile_kwargs={"literal_binds": True}
            )
        )

    def test_flip_condition_uses_post_increment_count(self):
        sql = self._sql(status_after_vote_clause(Agent.status, Agent.votes + 1, Agent.votes_needed))

        assert sql.startswith("CASE WHEN")
        assert "agents.status = 'UnderReview'" in sql
        assert "agents.votes + 1 >= agents.votes_needed" in sql
        assert "THEN 'ThresholdReached'" in sql
        assert sql.endswith("ELSE agents.status END")

    def test_only_under_review_can_flip(self):
        sql = self._sql(status_after_vote_clause(Agent.status, Agent.votes + 1, Agent.votes_needed))

        assert "'Active'" not in sql
        assert sql.count("WHEN") == 1

