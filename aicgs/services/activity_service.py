"""Activity log service — append-only feed of user actions."""

from uuid import UUID

from aicgs.logging_config import get_logger
from aicgs.models import Activity, ActivityTypeEnum
from aicgs.services.vote_store import VoteStore

logger = get_logger(__name__)

DEFAULT_RECENT_LIMIT = 10
MAX_RECENT_LIMIT = 50


async def log_activity(
    store: VoteStore,
    user_id: UUID,
    agent_id: UUID,
    activity_type: ActivityTypeEnum,
) -> Activity:
    """
    Append an activity entry. The caller owns the transaction.

    Args:
        store: Vote store bound to the current session
        user_id: User performing the action
        agent_id: Agent the action concerns
        activity_type: VOTE, COMMENT or PROPOSAL
    """
    entry = await store.add_activity(user_id, agent_id, activity_type)
    logger.debug(
        "activity_logged",
        user_id=str(user_id),
        agent_id=str(agent_id),
        activity_type=activity_type.value,
    )
    return entry


async def list_recent_activity(
    store: VoteStore, limit: int = DEFAULT_RECENT_LIMIT
) -> list[Activity]:
    """Most recent activity entries, newest first."""
    limit = max(1, min(limit, MAX_RECENT_LIMIT))
    return await store.recent_activities(limit)
