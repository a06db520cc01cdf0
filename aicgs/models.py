"""SQLAlchemy ORM models — users, agents (proposals), votes and activity."""

import enum
from datetime import datetime
from uuid import UUID, uuid4

from sqlalchemy import (
    ARRAY,
    CheckConstraint,
    ForeignKey,
    Index,
    String,
    Text,
    UniqueConstraint,
    text,
)
from sqlalchemy.dialects.postgresql import UUID as PG_UUID
from sqlalchemy.orm import DeclarativeBase, Mapped, mapped_column, relationship
from sqlalchemy.types import DateTime, Float, Integer


class Base(DeclarativeBase):
    pass


# ---------------------------------------------------------------------------
# Enums
# ---------------------------------------------------------------------------


class AgentStatusEnum(str, enum.Enum):
    active = "Active"
    under_review = "UnderReview"
    threshold_reached = "ThresholdReached"

    @property
    def label(self) -> str:
        return _STATUS_LABELS[self]


_STATUS_LABELS = {
    AgentStatusEnum.active: "Active",
    AgentStatusEnum.under_review: "Conducting Community Sentiment Analysis",
    AgentStatusEnum.threshold_reached: "Agent Migration Processing",
}


class ActivityTypeEnum(str, enum.Enum):
    vote = "VOTE"
    comment = "COMMENT"
    proposal = "PROPOSAL"


# ---------------------------------------------------------------------------
# Users
# ---------------------------------------------------------------------------


class User(Base):
    __tablename__ = "users"
    __table_args__ = (Index("idx_users_discord_id", "discord_id"),)

    id: Mapped[UUID] = mapped_column(
        PG_UUID(as_uuid=True), primary_key=True, default=uuid4
    )
    discord_id: Mapped[str] = mapped_column(Text, unique=True, nullable=False)
    username: Mapped[str] = mapped_column(Text, nullable=False)
    email: Mapped[str] = mapped_column(Text, unique=True, nullable=False)
    avatar: Mapped[str | None] = mapped_column(Text)
    last_login: Mapped[datetime | None] = mapped_column(DateTime(timezone=True))
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), server_default=text("now()"), nullable=False
    )
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), server_default=text("now()"), nullable=False
    )

    votes: Mapped[list["Vote"]] = relationship(back_populates="user")


# ---------------------------------------------------------------------------
# Agents (proposals)
# ---------------------------------------------------------------------------


class Agent(Base):
    __tablename__ = "agents"
    __table_args__ = (
        Index("idx_agents_status", "status"),
        CheckConstraint(
            "status IN ('Active','UnderReview','ThresholdReached')",
            name="ck_agent_status",
        ),
        CheckConstraint("votes >= 0", name="ck_agent_votes_non_negative"),
        CheckConstraint("votes_needed > 0", name="ck_agent_votes_needed_positive"),
    )

    id: Mapped[UUID] = mapped_column(
        PG_UUID(as_uuid=True), primary_key=True, default=uuid4
    )
    name: Mapped[str] = mapped_column(Text, nullable=False)
    generation: Mapped[str] = mapped_column(Text, nullable=False)
    description: Mapped[str] = mapped_column(Text, nullable=False)
    status: Mapped[str] = mapped_column(
        Text, nullable=False, server_default=text("'UnderReview'")
    )
    votes: Mapped[int] = mapped_column(
        Integer, nullable=False, default=0, server_default=text("0")
    )
    votes_needed: Mapped[int] = mapped_column(
        Integer, nullable=False, default=750, server_default=text("750")
    )
    proposed_traits: Mapped[list[str]] = mapped_column(
        ARRAY(String), nullable=False, server_default=text("'{}'")
    )
    token_ca: Mapped[str | None] = mapped_column(Text)
    market_cap: Mapped[float | None] = mapped_column(Float)
    evolution: Mapped[float | None] = mapped_column(Float)
    twitter_handle: Mapped[str | None] = mapped_column(Text)
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), server_default=text("now()"), nullable=False
    )
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), server_default=text("now()"), nullable=False
    )

    votes_cast: Mapped[list["Vote"]] = relationship(back_populates="agent")

    @property
    def status_label(self) -> str:
        return AgentStatusEnum(self.status).label


# ---------------------------------------------------------------------------
# Votes
# ---------------------------------------------------------------------------


class Vote(Base):
    __tablename__ = "votes"
    __table_args__ = (
        UniqueConstraint("agent_id", "user_id", name="uq_votes_agent_user"),
        Index("idx_votes_user", "user_id"),
        CheckConstraint(
            "cardinality(selected_traits) > 0", name="ck_vote_traits_non_empty"
        ),
    )

    id: Mapped[UUID] = mapped_column(
        PG_UUID(as_uuid=True), primary_key=True, default=uuid4
    )
    agent_id: Mapped[UUID] = mapped_column(
        PG_UUID(as_uuid=True), ForeignKey("agents.id", ondelete="CASCADE"), nullable=False
    )
    user_id: Mapped[UUID] = mapped_column(
        PG_UUID(as_uuid=True), ForeignKey("users.id", ondelete="CASCADE"), nullable=False
    )
    selected_traits: Mapped[list[str]] = mapped_column(ARRAY(String), nullable=False)
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), server_default=text("now()"), nullable=False
    )

    agent: Mapped["Agent"] = relationship(back_populates="votes_cast")
    user: Mapped["User"] = relationship(back_populates="votes")


# ---------------------------------------------------------------------------
# Activity log
# ---------------------------------------------------------------------------


class Activity(Base):
    __tablename__ = "activities"
    __table_args__ = (
        Index("idx_activities_created", text("created_at DESC")),
        CheckConstraint(
            "activity_type IN ('VOTE','COMMENT','PROPOSAL')",
            name="ck_activity_type",
        ),
    )

    id: Mapped[UUID] = mapped_column(
        PG_UUID(as_uuid=True), primary_key=True, default=uuid4
    )
    user_id: Mapped[UUID] = mapped_column(
        PG_UUID(as_uuid=True), ForeignKey("users.id", ondelete="CASCADE"), nullable=False
    )
    agent_id: Mapped[UUID] = mapped_column(
        PG_UUID(as_uuid=True), ForeignKey("agents.id", ondelete="CASCADE"), nullable=False
    )
    activity_type: Mapped[str] = mapped_column(Text, nullable=False)
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), server_default=text("now()"), nullable=False
    )

    user: Mapped["User"] = relationship()
    agent: Mapped["Agent"] = relationship()
