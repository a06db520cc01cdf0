"""Pydantic v2 request/response schemas for all endpoints."""

from datetime import datetime
from uuid import UUID

from pydantic import BaseModel, ConfigDict, Field, field_validator


# ---------------------------------------------------------------------------
# Users / auth
# ---------------------------------------------------------------------------


class UserResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: UUID
    discord_id: str
    username: str
    email: str
    avatar: str | None
    created_at: datetime


class AuthStatusResponse(BaseModel):
    is_authenticated: bool
    user: UserResponse | None = None


class TokenPairResponse(BaseModel):
    access_token: str
    refresh_token: str
    token_type: str = "bearer"
    user: UserResponse


class TokenRefreshRequest(BaseModel):
    refresh_token: str


class MessageResponse(BaseModel):
    message: str


# ---------------------------------------------------------------------------
# Agents
# ---------------------------------------------------------------------------


class AgentResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: UUID
    name: str
    generation: str
    description: str
    status: str
    status_label: str
    votes: int
    votes_needed: int
    proposed_traits: list[str]
    token_ca: str | None = None
    market_cap: float | None = None
    evolution: float | None = None
    twitter_handle: str | None = None
    created_at: datetime | None = None
    updated_at: datetime | None = None


# ---------------------------------------------------------------------------
# Votes
# ---------------------------------------------------------------------------


class VoteRequest(BaseModel):
    agent_id: UUID
    selected_traits: list[str] = Field(default_factory=list, max_length=50)

    @field_validator("selected_traits")
    @classmethod
    def drop_blank_traits(cls, v: list[str]) -> list[str]:
        # Labels must match candidates exactly; only whitespace-only entries go
        return [t for t in v if t.strip()]


class VoteResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: UUID
    agent_id: UUID
    user_id: UUID
    selected_traits: list[str]
    created_at: datetime | None = None


class CastVoteResponse(BaseModel):
    vote: VoteResponse
    agent: AgentResponse
    remaining_votes: int
    trait_stats: dict[str, int]


class TraitStatsResponse(BaseModel):
    agent_id: UUID
    trait_stats: dict[str, int]


class RemainingVotesResponse(BaseModel):
    remaining_votes: int


class GlobalStatsResponse(BaseModel):
    total_votes: int
    unique_voters: int


# ---------------------------------------------------------------------------
# Activity
# ---------------------------------------------------------------------------


class ActivityUser(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: UUID
    username: str
    avatar: str | None
    discord_id: str


class ActivityAgent(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: UUID
    name: str


class ActivityResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: UUID
    activity_type: str
    user: ActivityUser | None
    agent: ActivityAgent | None
    created_at: datetime


# ---------------------------------------------------------------------------
# Monitoring
# ---------------------------------------------------------------------------


class HealthCheckResponse(BaseModel):
    status: str
    latency_ms: float


class SystemStatusResponse(BaseModel):
    status: str
    checks: dict[str, HealthCheckResponse]
    timestamp: str


class ErrorResponse(BaseModel):
    error: str
    detail: str
