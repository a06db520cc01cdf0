"""Authentication endpoints — Discord login, token refresh, status, logout."""

from urllib.parse import urlencode, urlsplit
from uuid import UUID

from fastapi import APIRouter, Depends, HTTPException, Query, status
from fastapi.responses import RedirectResponse
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from aicgs.auth import (
    create_access_token,
    create_oauth_state,
    create_refresh_token,
    decode_jwt,
    get_current_user,
    get_current_user_optional,
)
from aicgs.config import Settings, get_settings
from aicgs.database import get_db
from aicgs.logging_config import get_logger
from aicgs.models import User
from aicgs.redis import refresh_token_matches, revoke_refresh_token, store_refresh_token
from aicgs.schemas import (
    AuthStatusResponse,
    MessageResponse,
    TokenPairResponse,
    TokenRefreshRequest,
    UserResponse,
)
from aicgs.services.discord_client import (
    DiscordAuthError,
    DiscordOAuthClient,
    get_discord_client,
)
from aicgs.services.user_service import upsert_discord_user

logger = get_logger(__name__)
router = APIRouter(prefix="/api/auth", tags=["auth"])


def _origin(url: str) -> str | None:
    parts = urlsplit(url)
    if parts.scheme not in ("http", "https") or not parts.netloc:
        return None
    return f"{parts.scheme}://{parts.netloc}".lower()


def trusted_return_url(url: str | None, settings: Settings) -> str:
    """
    ``url`` if its origin is the frontend or a configured CORS origin,
    otherwise the frontend URL. Tokens are appended to whatever this returns.
    """
    if not url:
        return settings.frontend_url
    allowed = {_origin(o) for o in [settings.frontend_url, *settings.cors_origin_list]}
    allowed.discard(None)
    if _origin(url) in allowed:
        return url
    logger.warning("untrusted_return_url_rejected", return_to=url)
    return settings.frontend_url


async def _issue_tokens(user: User, settings: Settings) -> tuple[str, str]:
    user_id = str(user.id)
    access_token = create_access_token(user_id)
    refresh_token = create_refresh_token(user_id)
    ttl = settings.jwt_refresh_token_expire_days * 24 * 3600
    await store_refresh_token(user_id, refresh_token, ttl)
    return access_token, refresh_token


@router.get("/discord")
async def discord_login(
    redirect: str | None = Query(None, max_length=2048),
    settings: Settings = Depends(get_settings),
    discord: DiscordOAuthClient = Depends(get_discord_client),
):
    """Start the Discord OAuth2 flow; ``redirect`` is where the user lands after."""
    return_to = trusted_return_url(redirect, settings)
    logger.info("discord_login_started", return_to=return_to)
    return RedirectResponse(discord.authorize_url(create_oauth_state(return_to)))


@router.get("/discord/callback")
async def discord_callback(
    code: str = Query(...),
    state: str = Query(...),
    db: AsyncSession = Depends(get_db),
    settings: Settings = Depends(get_settings),
    discord: DiscordOAuthClient = Depends(get_discord_client),
):
    """
    Finish the Discord flow: upsert the user and hand the token pair back to
    the frontend in the URL fragment.
    """
    state_payload = decode_jwt(state)
    if state_payload.get("type") != "oauth_state":
        raise HTTPException(status_code=400, detail="Invalid OAuth state")
    return_to = trusted_return_url(state_payload.get("return_to"), settings)

    try:
        discord_token = await discord.exchange_code(code)
        profile = await discord.fetch_profile(discord_token)
    except DiscordAuthError as e:
        logger.warning("discord_login_failed", error=str(e))
        return RedirectResponse(settings.frontend_url)

    user = await upsert_discord_user(db, profile)
    access_token, refresh_token = await _issue_tokens(user, settings)
    logger.info("user_login", user_id=str(user.id), username=user.username)

    fragment = urlencode({"access_token": access_token, "refresh_token": refresh_token})
    return RedirectResponse(f"{return_to}#{fragment}")


@router.get("/status", response_model=AuthStatusResponse)
async def auth_status(user: User | None = Depends(get_current_user_optional)):
    """Report whether the caller is authenticated. Never 401s."""
    if user is None:
        return AuthStatusResponse(is_authenticated=False)
    return AuthStatusResponse(is_authenticated=True, user=UserResponse.model_validate(user))


@router.post("/refresh", response_model=TokenPairResponse)
async def refresh(
    body: TokenRefreshRequest,
    db: AsyncSession = Depends(get_db),
    settings: Settings = Depends(get_settings),
):
    """Rotate the token pair if the refresh token is still the stored one."""
    payload = decode_jwt(body.refresh_token)
    if payload.get("type") != "refresh":
        raise HTTPException(status_code=401, detail="Invalid token type")

    user_id = payload.get("sub")
    if not user_id or not await refresh_token_matches(str(user_id), body.refresh_token):
        raise HTTPException(status_code=401, detail="Refresh token revoked or expired")

    result = await db.execute(select(User).where(User.id == UUID(user_id)))
    user = result.scalar_one_or_none()
    if user is None:
        raise HTTPException(status_code=status.HTTP_403_FORBIDDEN, detail="User not found")

    access_token, refresh_token = await _issue_tokens(user, settings)
    return TokenPairResponse(
        access_token=access_token,
        refresh_token=refresh_token,
        user=UserResponse.model_validate(user),
    )


@router.post("/logout", response_model=MessageResponse)
async def logout(user: User = Depends(get_current_user)):
    """Revoke the stored refresh token."""
    await revoke_refresh_token(str(user.id))
    logger.info("user_logout", user_id=str(user.id))
    return MessageResponse(message="Logged out")
