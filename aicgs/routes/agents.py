"""Agent (proposal) endpoints — browse the catalogue."""

from uuid import UUID

from fastapi import APIRouter, Depends, HTTPException

from aicgs.dependencies import get_vote_store
from aicgs.logging_config import get_logger
from aicgs.schemas import AgentResponse
from aicgs.services.vote_store import VoteStore

logger = get_logger(__name__)
router = APIRouter(prefix="/api/agents", tags=["agents"])


@router.get("", response_model=list[AgentResponse])
async def list_agents(store: VoteStore = Depends(get_vote_store)):
    """List every agent with its current vote count and status."""
    agents = await store.list_agents()
    logger.debug("agents_listed", count=len(agents))
    return [AgentResponse.model_validate(a) for a in agents]


@router.get("/{agent_id}", response_model=AgentResponse)
async def get_agent(agent_id: UUID, store: VoteStore = Depends(get_vote_store)):
    agent = await store.get_agent(agent_id)
    if agent is None:
        raise HTTPException(status_code=404, detail="Agent not found")
    return AgentResponse.model_validate(agent)
