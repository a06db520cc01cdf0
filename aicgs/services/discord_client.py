"""Discord OAuth2 client — authorize URL, code exchange and profile lookup."""

from collections.abc import AsyncGenerator
from dataclasses import dataclass
from urllib.parse import urlencode

import httpx

from aicgs.config import get_settings
from aicgs.logging_config import get_logger

logger = get_logger(__name__)

DISCORD_SCOPES = ("identify", "email")
REQUEST_TIMEOUT = 10.0


class DiscordAuthError(Exception):
    """Raised when Discord rejects the code exchange or profile lookup."""


@dataclass
class DiscordProfile:
    id: str
    username: str
    email: str
    avatar: str | None = None

    @classmethod
    def from_api(cls, data: dict) -> "DiscordProfile":
        if not data.get("id") or not data.get("email"):
            raise DiscordAuthError("Discord profile is missing id or email")
        return cls(
            id=str(data["id"]),
            username=data.get("global_name") or data.get("username") or "unknown",
            email=data["email"],
            avatar=data.get("avatar"),
        )


class DiscordOAuthClient:
    """Thin async client for the parts of Discord OAuth2 the login flow needs."""

    def __init__(self, client: httpx.AsyncClient | None = None):
        settings = get_settings()
        self._base_url = settings.discord_api_base.rstrip("/")
        self._client_id = settings.discord_client_id
        self._client_secret = settings.discord_client_secret
        self._redirect_uri = settings.discord_callback_url
        self._client = client

    async def _get_client(self) -> httpx.AsyncClient:
        if self._client is None:
            self._client = httpx.AsyncClient(timeout=REQUEST_TIMEOUT)
        return self._client

    def authorize_url(self, state: str) -> str:
        query = urlencode(
            {
                "client_id": self._client_id,
                "redirect_uri": self._redirect_uri,
                "response_type": "code",
                "scope": " ".join(DISCORD_SCOPES),
                "state": state,
                "prompt": "none",
            }
        )
        return f"{self._base_url}/oauth2/authorize?{query}"

    async def exchange_code(self, code: str) -> str:
        """Trade an authorization code for a Discord access token."""
        client = await self._get_client()
        try:
            response = await client.post(
                f"{self._base_url}/oauth2/token",
                data={
                    "client_id": self._client_id,
                    "client_secret": self._client_secret,
                    "grant_type": "authorization_code",
                    "code": code,
                    "redirect_uri": self._redirect_uri,
                },
                headers={"Content-Type": "application/x-www-form-urlencoded"},
            )
            response.raise_for_status()
        except httpx.HTTPError as e:
            logger.warning("discord_token_exchange_failed", error=str(e))
            raise DiscordAuthError("Discord token exchange failed") from e

        token = response.json().get("access_token")
        if not token:
            raise DiscordAuthError("Discord response did not include an access token")
        return token

    async def fetch_profile(self, access_token: str) -> DiscordProfile:
        client = await self._get_client()
        try:
            response = await client.get(
                f"{self._base_url}/users/@me",
                headers={"Authorization": f"Bearer {access_token}"},
            )
            response.raise_for_status()
        except httpx.HTTPError as e:
            logger.warning("discord_profile_fetch_failed", error=str(e))
            raise DiscordAuthError("Discord profile lookup failed") from e
        return DiscordProfile.from_api(response.json())

    async def close(self) -> None:
        if self._client is not None:
            await self._client.aclose()
            self._client = None


async def get_discord_client() -> AsyncGenerator[DiscordOAuthClient, None]:
    """FastAPI dependency; overridden in tests."""
    discord = DiscordOAuthClient()
    try:
        yield discord
    finally:
        await discord.close()
