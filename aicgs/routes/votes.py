"""Voting endpoints — cast votes and view tallies."""

from uuid import UUID

from fastapi import APIRouter, Depends

from aicgs.auth import get_current_user
from aicgs.config import Settings, get_settings
from aicgs.dependencies import get_vote_store
from aicgs.exceptions import VotingError
from aicgs.logging_config import get_logger
from aicgs.models import User
from aicgs.schemas import (
    AgentResponse,
    CastVoteResponse,
    GlobalStatsResponse,
    RemainingVotesResponse,
    TraitStatsResponse,
    VoteRequest,
    VoteResponse,
)
from aicgs.services import voting_service
from aicgs.services.vote_store import VoteStore

logger = get_logger(__name__)
router = APIRouter(prefix="/api/votes", tags=["votes"])


@router.post("", response_model=CastVoteResponse, status_code=201)
async def cast_vote(
    body: VoteRequest,
    store: VoteStore = Depends(get_vote_store),
    user: User = Depends(get_current_user),
    settings: Settings = Depends(get_settings),
):
    """Cast a trait-weighted vote. One vote per user per agent."""
    try:
        result = await voting_service.cast_vote(
            store,
            user.id,
            body.agent_id,
            body.selected_traits,
            max_votes=settings.max_votes_per_user,
        )
    except VotingError as e:
        logger.info(
            "vote_rejected",
            agent_id=str(body.agent_id),
            user_id=str(user.id),
            reason=e.error_type,
        )
        raise

    return CastVoteResponse(
        vote=VoteResponse.model_validate(result.vote),
        agent=AgentResponse.model_validate(result.agent),
        remaining_votes=result.remaining_votes,
        trait_stats=result.trait_stats,
    )


@router.get("/trait-stats/{agent_id}", response_model=TraitStatsResponse)
async def trait_stats(agent_id: UUID, store: VoteStore = Depends(get_vote_store)):
    """Per-trait vote counts for an agent."""
    tally = await voting_service.get_trait_tally(store, agent_id)
    return TraitStatsResponse(agent_id=agent_id, trait_stats=tally)


@router.get("/remaining", response_model=RemainingVotesResponse)
async def remaining_votes(
    store: VoteStore = Depends(get_vote_store),
    user: User = Depends(get_current_user),
    settings: Settings = Depends(get_settings),
):
    remaining = await voting_service.get_remaining_votes(
        store, user.id, max_votes=settings.max_votes_per_user
    )
    return RemainingVotesResponse(remaining_votes=remaining)


@router.get("/stats", response_model=GlobalStatsResponse)
async def global_stats(store: VoteStore = Depends(get_vote_store)):
    """Total votes cast and number of distinct voters."""
    stats = await voting_service.get_global_stats(store)
    return GlobalStatsResponse(
        total_votes=stats.total_votes, unique_voters=stats.unique_voters
    )
