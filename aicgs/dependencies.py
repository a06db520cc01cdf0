"""FastAPI dependencies shared by the routers."""

from fastapi import Depends
from sqlalchemy.ext.asyncio import AsyncSession

from aicgs.database import get_db
from aicgs.services.vote_store import SqlVoteStore, VoteStore


async def get_vote_store(db: AsyncSession = Depends(get_db)) -> VoteStore:
    """Vote store bound to the request's database session."""
    return SqlVoteStore(db)
