"""Vote ledger — validates and records votes, derives tallies."""

from collections import Counter
from dataclasses import dataclass
from uuid import UUID

from aicgs.exceptions import (
    AgentNotFoundError,
    DuplicateVoteError,
    InvalidTraitError,
    NoTraitsSelectedError,
    QuotaExceededError,
    VotingClosedError,
)
from aicgs.logging_config import get_logger
from aicgs.models import ActivityTypeEnum, Agent, AgentStatusEnum, Vote
from aicgs.services.activity_service import log_activity
from aicgs.services.lifecycle_service import (
    is_open_for_voting,
    votes_remaining_to_threshold,
)
from aicgs.services.vote_store import VoteStore

logger = get_logger(__name__)

MAX_VOTES_PER_USER = 100


@dataclass
class CastVoteResult:
    vote: Vote
    agent: Agent
    remaining_votes: int
    trait_stats: dict[str, int]


@dataclass
class GlobalStats:
    total_votes: int
    unique_voters: int


def _dedupe(traits: list[str]) -> list[str]:
    return list(dict.fromkeys(traits))


async def cast_vote(
    store: VoteStore,
    user_id: UUID,
    agent_id: UUID,
    selected_traits: list[str],
    max_votes: int = MAX_VOTES_PER_USER,
) -> CastVoteResult:
    """
    Record one user's vote for one agent.

    Checks run in a fixed order and the first failure wins: quota, duplicate,
    agent exists, agent open for voting, traits present, traits valid. On
    success exactly three writes happen (vote, activity, agent count/status)
    and are committed together.

    Raises:
        QuotaExceededError, DuplicateVoteError, AgentNotFoundError,
        VotingClosedError, NoTraitsSelectedError, InvalidTraitError,
        PersistenceFailureError
    """
    user_vote_count = await store.count_user_votes(user_id)
    if user_vote_count >= max_votes:
        raise QuotaExceededError(max_votes)

    if await store.find_vote(user_id, agent_id) is not None:
        raise DuplicateVoteError(agent_id)

    agent = await store.get_agent(agent_id)
    if agent is None:
        raise AgentNotFoundError(agent_id)

    # The count read here can be stale by the time of the increment below;
    # concurrent voters near the threshold may overshoot votes_needed.
    if not is_open_for_voting(agent):
        raise VotingClosedError(agent_id, agent.status)

    traits = _dedupe(selected_traits)
    if not traits:
        raise NoTraitsSelectedError()

    candidates = set(agent.proposed_traits or [])
    invalid = [t for t in traits if t not in candidates]
    if invalid:
        raise InvalidTraitError(invalid)

    try:
        vote = await store.add_vote(user_id, agent_id, traits)
        await log_activity(store, user_id, agent_id, ActivityTypeEnum.vote)
        updated_agent = await store.record_vote_and_maybe_advance(agent_id)
        await store.commit()
    except Exception:
        await store.rollback()
        raise

    if updated_agent.status == AgentStatusEnum.threshold_reached.value:
        logger.info(
            "agent_threshold_reached",
            agent_id=str(agent_id),
            votes=updated_agent.votes,
            votes_needed=updated_agent.votes_needed,
        )

    trait_stats = await get_trait_tally(store, agent_id)
    remaining = max_votes - (user_vote_count + 1)

    logger.info(
        "vote_cast",
        agent_id=str(agent_id),
        user_id=str(user_id),
        traits=traits,
        votes=updated_agent.votes,
        votes_to_threshold=votes_remaining_to_threshold(updated_agent),
        remaining_votes=remaining,
    )

    return CastVoteResult(
        vote=vote,
        agent=updated_agent,
        remaining_votes=remaining,
        trait_stats=trait_stats,
    )


async def get_trait_tally(store: VoteStore, agent_id: UUID) -> dict[str, int]:
    """Count, per trait, the votes on this agent that selected it."""
    tally: Counter[str] = Counter()
    for traits in await store.list_vote_traits(agent_id):
        tally.update(set(traits))
    return dict(tally)


async def get_remaining_votes(
    store: VoteStore, user_id: UUID, max_votes: int = MAX_VOTES_PER_USER
) -> int:
    return max_votes - await store.count_user_votes(user_id)


async def get_global_stats(store: VoteStore) -> GlobalStats:
    return GlobalStats(
        total_votes=await store.count_votes(),
        unique_voters=await store.count_unique_voters(),
    )
