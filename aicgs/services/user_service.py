"""User accounts — created on first Discord login, refreshed on every later one."""

from datetime import datetime, timezone

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from aicgs.logging_config import get_logger
from aicgs.models import User
from aicgs.services.discord_client import DiscordProfile

logger = get_logger(__name__)


async def upsert_discord_user(db: AsyncSession, profile: DiscordProfile) -> User:
    """Create the user for this Discord id, or refresh its display attributes."""
    result = await db.execute(select(User).where(User.discord_id == profile.id))
    user = result.scalar_one_or_none()
    now = datetime.now(timezone.utc)

    if user is None:
        user = User(
            discord_id=profile.id,
            username=profile.username,
            email=profile.email,
            avatar=profile.avatar,
            last_login=now,
        )
        db.add(user)
        logger.info("user_created", discord_id=profile.id, username=profile.username)
    else:
        user.username = profile.username
        user.email = profile.email
        user.avatar = profile.avatar
        user.last_login = now
        user.updated_at = now
        logger.info("user_updated", user_id=str(user.id), username=profile.username)

    await db.commit()
    await db.refresh(user)
    return user
