"""Global pytest fixtures for the AICGS voting service.

This module provides shared fixtures for testing including:
- An in-memory vote store standing in for PostgreSQL
- Mock database session and Redis client
- An ASGI HTTP client with auth and storage dependencies overridden
"""

import os

# Settings are read once and cached; set the secret before anything imports aicgs
os.environ.setdefault("AICGS_JWT_SECRET_KEY", "test-secret-key-not-for-production")
os.environ.setdefault("AICGS_LOG_JSON", "false")

from collections.abc import AsyncGenerator
from typing import Any
from unittest.mock import AsyncMock, MagicMock

import pytest
import pytest_asyncio
from httpx import ASGITransport, AsyncClient

from tests.factories import AgentFactory, InMemoryVoteStore, UserFactory


# ===========================================
# DOMAIN FIXTURES
# ===========================================


@pytest.fixture
def voter() -> Any:
    return UserFactory.create(username="voter_one")


@pytest.fixture
def other_voter() -> Any:
    return UserFactory.create(username="voter_two")


@pytest.fixture
def near_threshold_agent() -> Any:
    """Metis-like proposal one vote short of its threshold."""
    return AgentFactory.create(
        name="Metis",
        votes=749,
        votes_needed=750,
        proposed_traits=["Wisdom", "Pattern Recognition"],
    )


@pytest.fixture
def open_agent() -> Any:
    return AgentFactory.create(
        name="Hyperion",
        proposed_traits=["Observation", "Analysis", "Foresight"],
    )


@pytest.fixture
def store(voter, other_voter, near_threshold_agent, open_agent) -> InMemoryVoteStore:
    return InMemoryVoteStore(
        agents=[near_threshold_agent, open_agent],
        users=[voter, other_voter],
    )


# ===========================================
# DATABASE / REDIS MOCK FIXTURES
# ===========================================


@pytest_asyncio.fixture
async def db_session() -> AsyncGenerator[AsyncMock, None]:
    """Create a mock async database session for unit tests."""
    session = AsyncMock()
    session.add = MagicMock()
    session.execute = AsyncMock()
    session.commit = AsyncMock()
    session.flush = AsyncMock()
    session.refresh = AsyncMock()
    session.rollback = AsyncMock()
    session.close = AsyncMock()
    yield session


@pytest.fixture
def mock_redis_client() -> MagicMock:
    """Create a mock Redis client for unit tests."""
    redis = MagicMock()
    redis.get = AsyncMock(return_value=None)
    redis.set = AsyncMock(return_value=True)
    redis.delete = AsyncMock(return_value=1)
    redis.ping = AsyncMock(return_value=True)
    return redis


# ===========================================
# HTTP CLIENT FIXTURES
# ===========================================


@pytest_asyncio.fixture
async def async_client(store, db_session) -> AsyncGenerator[AsyncClient, None]:
    """Anonymous client; storage goes to the in-memory store."""
    from aicgs.database import get_db
    from aicgs.dependencies import get_vote_store
    from aicgs.main import app

    async def _db():
        yield db_session

    app.dependency_overrides[get_vote_store] = lambda: store
    app.dependency_overrides[get_db] = _db

    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as client:
        yield client

    app.dependency_overrides.clear()


@pytest_asyncio.fixture
async def authenticated_client(async_client: AsyncClient, voter) -> AsyncClient:
    """Client whose requests resolve to ``voter``."""
    from aicgs.auth import get_current_user
    from aicgs.main import app

    app.dependency_overrides[get_current_user] = lambda: voter
    return async_client
