"""Agent lifecycle — which statuses accept votes and when the threshold flips.

The threshold rule is written once here in two renderings: ``status_after_vote``
for Python values and ``status_after_vote_clause`` for the SQL ``UPDATE`` the
vote store issues. Both read ``THRESHOLD_FROM``/``THRESHOLD_TO`` and compare
the post-increment count with ``>=``.
"""

from sqlalchemy import and_, case
from sqlalchemy.sql.elements import ColumnElement

from aicgs.models import Agent, AgentStatusEnum

VOTABLE_STATUSES = frozenset({AgentStatusEnum.under_review})

THRESHOLD_FROM = AgentStatusEnum.under_review
THRESHOLD_TO = AgentStatusEnum.threshold_reached


def is_open_for_voting(agent: Agent) -> bool:
    """An agent accepts votes only while under review and below its threshold."""
    try:
        status = AgentStatusEnum(agent.status)
    except ValueError:
        return False
    return status in VOTABLE_STATUSES and agent.votes < agent.votes_needed


def status_after_vote(status: str, votes_after: int, votes_needed: int) -> AgentStatusEnum:
    """
    Return the status an agent should hold once a vote has been counted.

    The comparison is ``>=`` so an overshoot from concurrent increments still
    lands in ThresholdReached. ThresholdReached is terminal here: nothing moves
    an agent back to UnderReview.
    """
    current = AgentStatusEnum(status)
    if current == THRESHOLD_FROM and votes_after >= votes_needed:
        return THRESHOLD_TO
    return current


def status_after_vote_clause(
    status: ColumnElement, votes_after: ColumnElement, votes_needed: ColumnElement
) -> ColumnElement:
    """SQL form of ``status_after_vote`` over column expressions."""
    return case(
        (
            and_(status == THRESHOLD_FROM.value, votes_after >= votes_needed),
            THRESHOLD_TO.value,
        ),
        else_=status,
    )


def votes_remaining_to_threshold(agent: Agent) -> int:
    return max(0, agent.votes_needed - agent.votes)
