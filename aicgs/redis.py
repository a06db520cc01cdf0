"""Redis access for AICGS.

One shared async client, opened in the app lifespan. Besides the rate
limiter, Redis holds the single live refresh token per user: a refresh JWT is
honoured only while it equals the stored copy, so rotating or revoking it is
a plain overwrite or delete.
"""

import redis.asyncio as aioredis

from aicgs.logging_config import get_logger

logger = get_logger(__name__)

REFRESH_KEY_PREFIX = "refresh:"

_client: aioredis.Redis | None = None


def get_redis() -> aioredis.Redis:
    """Shared client; raises until init_redis() has run."""
    if _client is None:
        raise RuntimeError("Redis not initialized, app not started")
    return _client


async def init_redis(url: str, socket_timeout: float = 5.0) -> aioredis.Redis:
    global _client
    client = aioredis.from_url(
        url,
        decode_responses=True,
        socket_timeout=socket_timeout,
        health_check_interval=30,
    )
    await client.ping()
    _client = client
    logger.info("redis_connected")
    return client


async def close_redis() -> None:
    global _client
    if _client is not None:
        await _client.aclose()
        _client = None


# ---------------------------------------------------------------------------
# Refresh tokens
# ---------------------------------------------------------------------------


def refresh_token_key(user_id: str) -> str:
    return f"{REFRESH_KEY_PREFIX}{user_id}"


async def store_refresh_token(user_id: str, token: str, ttl_seconds: int) -> None:
    """Replace the user's live refresh token; any earlier one stops working."""
    await get_redis().set(refresh_token_key(user_id), token, ex=ttl_seconds)


async def refresh_token_matches(user_id: str, token: str) -> bool:
    stored = await get_redis().get(refresh_token_key(user_id))
    return stored is not None and stored == token


async def revoke_refresh_token(user_id: str) -> None:
    await get_redis().delete(refresh_token_key(user_id))
    logger.debug("refresh_token_revoked", user_id=user_id)
