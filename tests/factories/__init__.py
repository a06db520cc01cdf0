"""Test data factories and fakes for the voting service."""

from tests.factories.agent_factory import AgentFactory
from tests.factories.user_factory import UserFactory
from tests.factories.vote_store import InMemoryVoteStore

__all__ = [
    "AgentFactory",
    "InMemoryVoteStore",
    "UserFactory",
]
