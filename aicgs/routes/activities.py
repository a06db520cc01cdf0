"""Recent activity feed."""

from fastapi import APIRouter, Depends, Query

from aicgs.dependencies import get_vote_store
from aicgs.schemas import ActivityResponse
from aicgs.services.activity_service import (
    DEFAULT_RECENT_LIMIT,
    MAX_RECENT_LIMIT,
    list_recent_activity,
)
from aicgs.services.vote_store import VoteStore

router = APIRouter(prefix="/api/activities", tags=["activity"])


@router.get("/recent", response_model=list[ActivityResponse])
async def recent_activity(
    limit: int = Query(DEFAULT_RECENT_LIMIT, ge=1, le=MAX_RECENT_LIMIT),
    store: VoteStore = Depends(get_vote_store),
):
    """Newest activity first, with voter and agent display attributes."""
    entries = await list_recent_activity(store, limit)
    return [ActivityResponse.model_validate(e) for e in entries]
