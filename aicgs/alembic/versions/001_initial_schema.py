"""Initial schema: users, agents, votes, activities.

Revision ID: 001
Revises:
Create Date: 2026-10-19
"""
from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa
from sqlalchemy.dialects.postgresql import UUID

# revision identifiers, used by Alembic.
revision: str = "001"
down_revision: Union[str, None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def _timestamps() -> list[sa.Column]:
    return [
        sa.Column("created_at", sa.DateTime(timezone=True), server_default=sa.text("now()"), nullable=False),
        sa.Column("updated_at", sa.DateTime(timezone=True), server_default=sa.text("now()"), nullable=False),
    ]


def upgrade() -> None:
    op.create_table(
        "users",
        sa.Column("id", UUID(as_uuid=True), primary_key=True),
        sa.Column("discord_id", sa.Text(), nullable=False, unique=True),
        sa.Column("username", sa.Text(), nullable=False),
        sa.Column("email", sa.Text(), nullable=False, unique=True),
        sa.Column("avatar", sa.Text(), nullable=True),
        sa.Column("last_login", sa.DateTime(timezone=True), nullable=True),
        *_timestamps(),
    )
    op.create_index("idx_users_discord_id", "users", ["discord_id"])

    op.create_table(
        "agents",
        sa.Column("id", UUID(as_uuid=True), primary_key=True),
        sa.Column("name", sa.Text(), nullable=False),
        sa.Column("generation", sa.Text(), nullable=False),
        sa.Column("description", sa.Text(), nullable=False),
        sa.Column("status", sa.Text(), nullable=False, server_default=sa.text("'UnderReview'")),
        sa.Column("votes", sa.Integer(), nullable=False, server_default=sa.text("0")),
        sa.Column("votes_needed", sa.Integer(), nullable=False, server_default=sa.text("750")),
        sa.Column("proposed_traits", sa.ARRAY(sa.String), nullable=False, server_default=sa.text("'{}'")),
        sa.Column("token_ca", sa.Text(), nullable=True),
        sa.Column("market_cap", sa.Float(), nullable=True),
        sa.Column("evolution", sa.Float(), nullable=True),
        sa.Column("twitter_handle", sa.Text(), nullable=True),
        *_timestamps(),
        sa.CheckConstraint(
            "status IN ('Active','UnderReview','ThresholdReached')", name="ck_agent_status"
        ),
        sa.CheckConstraint("votes >= 0", name="ck_agent_votes_non_negative"),
        sa.CheckConstraint("votes_needed > 0", name="ck_agent_votes_needed_positive"),
    )
    op.create_index("idx_agents_status", "agents", ["status"])

    op.create_table(
        "votes",
        sa.Column("id", UUID(as_uuid=True), primary_key=True),
        sa.Column("agent_id", UUID(as_uuid=True), sa.ForeignKey("agents.id", ondelete="CASCADE"), nullable=False),
        sa.Column("user_id", UUID(as_uuid=True), sa.ForeignKey("users.id", ondelete="CASCADE"), nullable=False),
        sa.Column("selected_traits", sa.ARRAY(sa.String), nullable=False),
        sa.Column("created_at", sa.DateTime(timezone=True), server_default=sa.text("now()"), nullable=False),
        sa.UniqueConstraint("agent_id", "user_id", name="uq_votes_agent_user"),
        sa.CheckConstraint("cardinality(selected_traits) > 0", name="ck_vote_traits_non_empty"),
    )
    op.create_index("idx_votes_user", "votes", ["user_id"])

    op.create_table(
        "activities",
        sa.Column("id", UUID(as_uuid=True), primary_key=True),
        sa.Column("user_id", UUID(as_uuid=True), sa.ForeignKey("users.id", ondelete="CASCADE"), nullable=False),
        sa.Column("agent_id", UUID(as_uuid=True), sa.ForeignKey("agents.id", ondelete="CASCADE"), nullable=False),
        sa.Column("activity_type", sa.Text(), nullable=False),
        sa.Column("created_at", sa.DateTime(timezone=True), server_default=sa.text("now()"), nullable=False),
        sa.CheckConstraint("activity_type IN ('VOTE','COMMENT','PROPOSAL')", name="ck_activity_type"),
    )
    op.create_index("idx_activities_created", "activities", [sa.text("created_at DESC")])


def downgrade() -> None:
    op.drop_index("idx_activities_created", table_name="activities")
    op.drop_table("activities")
    op.drop_index("idx_votes_user", table_name="votes")
    op.drop_table("votes")
    op.drop_index("idx_agents_status", table_name="agents")
    op.drop_table("agents")
    op.drop_index("idx_users_discord_id", table_name="users")
    op.drop_table("users")
