"""JWT bearer authentication for human users.

Discord proves who the user is once, at login; after that every request
carries an access token issued here. The refresh token is also a JWT, but it
is only honoured while it matches the copy stored in Redis.
"""

import secrets
from datetime import datetime, timedelta, timezone
from uuid import UUID

import jwt
from fastapi import Depends, HTTPException, Request, status
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from aicgs.config import get_settings
from aicgs.database import get_db
from aicgs.logging_config import bind_request_context, get_logger
from aicgs.models import User

logger = get_logger(__name__)

OAUTH_STATE_EXPIRE_MINUTES = 10


def _jwt_secret() -> str:
    secret = get_settings().jwt_secret_key
    if not secret:
        raise RuntimeError("AICGS_JWT_SECRET_KEY environment variable is required")
    return secret


def _encode(payload: dict) -> str:
    return jwt.encode(payload, _jwt_secret(), algorithm=get_settings().jwt_algorithm)


def create_access_token(user_id: str) -> str:
    settings = get_settings()
    expire = datetime.now(timezone.utc) + timedelta(
        minutes=settings.jwt_access_token_expire_minutes
    )
    return _encode({"sub": user_id, "exp": expire, "type": "access"})


def create_refresh_token(user_id: str) -> str:
    settings = get_settings()
    expire = datetime.now(timezone.utc) + timedelta(
        days=settings.jwt_refresh_token_expire_days
    )
    return _encode(
        {"sub": user_id, "exp": expire, "type": "refresh", "jti": secrets.token_urlsafe(16)}
    )


def create_oauth_state(return_to: str) -> str:
    """Signed, short-lived carrier for the post-login redirect target."""
    expire = datetime.now(timezone.utc) + timedelta(minutes=OAUTH_STATE_EXPIRE_MINUTES)
    return _encode(
        {
            "return_to": return_to,
            "exp": expire,
            "type": "oauth_state",
            "nonce": secrets.token_urlsafe(8),
        }
    )


def decode_jwt(token: str) -> dict:
    """Decode and validate a JWT token. Raises HTTPException on failure."""
    try:
        return jwt.decode(token, _jwt_secret(), algorithms=[get_settings().jwt_algorithm])
    except jwt.ExpiredSignatureError:
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail="Token expired")
    except jwt.InvalidTokenError:
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail="Invalid token")


def _bearer_token(request: Request) -> str:
    auth_header = request.headers.get("Authorization")
    if not auth_header or not auth_header.startswith("Bearer "):
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Authentication required",
        )
    token = auth_header.removeprefix("Bearer ").strip()
    if not token:
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail="Empty token")
    return token


async def get_current_user(
    request: Request,
    db: AsyncSession = Depends(get_db),
) -> User:
    """
    FastAPI dependency: resolve the bearer access token to a User.

    Raises 401 for a missing/invalid token, 403 if the user no longer exists.
    """
    payload = decode_jwt(_bearer_token(request))
    if payload.get("type") != "access":
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED, detail="Invalid token type"
        )

    user_id = payload.get("sub")
    try:
        user_uuid = UUID(user_id)
    except (TypeError, ValueError):
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED, detail="Invalid token payload"
        )

    result = await db.execute(select(User).where(User.id == user_uuid))
    user = result.scalar_one_or_none()
    if user is None:
        raise HTTPException(status_code=status.HTTP_403_FORBIDDEN, detail="User not found")

    request_id = getattr(request.state, "request_id", None)
    if request_id:
        bind_request_context(request_id, user_id=str(user.id))
    return user


async def get_current_user_optional(
    request: Request,
    db: AsyncSession = Depends(get_db),
) -> User | None:
    """Optional auth — returns User or None."""
    if not request.headers.get("Authorization", "").startswith("Bearer "):
        return None
    try:
        return await get_current_user(request, db)
    except HTTPException:
        return None
