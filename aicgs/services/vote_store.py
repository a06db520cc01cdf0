"""Storage collaborator for the vote ledger.

``VoteStore`` is the narrow interface the ledger depends on; ``SqlVoteStore``
implements it over an async SQLAlchemy session. The ledger never issues SQL
itself, so it can be exercised against any store that honours the same
contract (uniqueness of (agent, user) votes and an atomic count update).
"""

import functools
from abc import ABC, abstractmethod
from collections.abc import Awaitable, Callable
from typing import ParamSpec, TypeVar
from uuid import UUID

from sqlalchemy import distinct, func, select, update
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import selectinload

from aicgs.exceptions import DuplicateVoteError, PersistenceFailureError
from aicgs.logging_config import get_logger
from aicgs.models import Activity, ActivityTypeEnum, Agent, Vote
from aicgs.services.lifecycle_service import status_after_vote_clause

logger = get_logger(__name__)

P = ParamSpec("P")
T = TypeVar("T")


class VoteStore(ABC):
    """Persistence operations needed by the vote ledger."""

    @abstractmethod
    async def count_user_votes(self, user_id: UUID) -> int: ...

    @abstractmethod
    async def find_vote(self, user_id: UUID, agent_id: UUID) -> Vote | None: ...

    @abstractmethod
    async def get_agent(self, agent_id: UUID) -> Agent | None: ...

    @abstractmethod
    async def list_agents(self) -> list[Agent]: ...

    @abstractmethod
    async def add_vote(
        self, user_id: UUID, agent_id: UUID, selected_traits: list[str]
    ) -> Vote:
        """Insert a vote. Raises DuplicateVoteError on a uniqueness violation."""

    @abstractmethod
    async def add_activity(
        self, user_id: UUID, agent_id: UUID, activity_type: ActivityTypeEnum
    ) -> Activity: ...

    @abstractmethod
    async def record_vote_and_maybe_advance(self, agent_id: UUID) -> Agent:
        """
        Increment the agent's vote count by one and, in the same update, move
        it to ThresholdReached if the new count meets its threshold.
        """

    @abstractmethod
    async def list_vote_traits(self, agent_id: UUID) -> list[list[str]]: ...

    @abstractmethod
    async def count_votes(self) -> int: ...

    @abstractmethod
    async def count_unique_voters(self) -> int: ...

    @abstractmethod
    async def recent_activities(self, limit: int) -> list[Activity]: ...

    @abstractmethod
    async def commit(self) -> None: ...

    @abstractmethod
    async def rollback(self) -> None: ...


def _storage_operation(
    name: str,
) -> Callable[[Callable[P, Awaitable[T]]], Callable[P, Awaitable[T]]]:
    """Translate driver errors into PersistenceFailureError."""

    def decorator(func_: Callable[P, Awaitable[T]]) -> Callable[P, Awaitable[T]]:
        @functools.wraps(func_)
        async def wrapper(*args: P.args, **kwargs: P.kwargs) -> T:
            try:
                return await func_(*args, **kwargs)
            except SQLAlchemyError as e:
                logger.error(
                    "storage_operation_failed",
                    operation=name,
                    error_type=type(e).__name__,
                )
                raise PersistenceFailureError(name) from e

        return wrapper

    return decorator


class SqlVoteStore(VoteStore):
    """VoteStore backed by PostgreSQL through SQLAlchemy."""

    def __init__(self, session: AsyncSession) -> None:
        self.session = session

    @_storage_operation("count_user_votes")
    async def count_user_votes(self, user_id: UUID) -> int:
        result = await self.session.execute(
            select(func.count()).select_from(Vote).where(Vote.user_id == user_id)
        )
        return result.scalar() or 0

    @_storage_operation("find_vote")
    async def find_vote(self, user_id: UUID, agent_id: UUID) -> Vote | None:
        result = await self.session.execute(
            select(Vote).where(Vote.user_id == user_id, Vote.agent_id == agent_id)
        )
        return result.scalar_one_or_none()

    @_storage_operation("get_agent")
    async def get_agent(self, agent_id: UUID) -> Agent | None:
        return await self.session.get(Agent, agent_id)

    @_storage_operation("list_agents")
    async def list_agents(self) -> list[Agent]:
        result = await self.session.execute(select(Agent).order_by(Agent.created_at))
        return list(result.scalars().all())

    async def add_vote(
        self, user_id: UUID, agent_id: UUID, selected_traits: list[str]
    ) -> Vote:
        vote = Vote(agent_id=agent_id, user_id=user_id, selected_traits=selected_traits)
        self.session.add(vote)
        try:
            await self.session.flush()
        except IntegrityError as e:
            # Lost a race with a concurrent vote by the same user
            await self.session.rollback()
            if "uq_votes_agent_user" in str(e.orig):
                raise DuplicateVoteError(agent_id) from e
            logger.error("vote_insert_failed", agent_id=str(agent_id), error=str(e.orig))
            raise PersistenceFailureError("add_vote") from e
        except SQLAlchemyError as e:
            await self.session.rollback()
            logger.error("vote_insert_failed", agent_id=str(agent_id), error=str(e))
            raise PersistenceFailureError("add_vote") from e
        return vote

    @_storage_operation("add_activity")
    async def add_activity(
        self, user_id: UUID, agent_id: UUID, activity_type: ActivityTypeEnum
    ) -> Activity:
        entry = Activity(
            user_id=user_id, agent_id=agent_id, activity_type=activity_type.value
        )
        self.session.add(entry)
        await self.session.flush()
        return entry

    @_storage_operation("record_vote_and_maybe_advance")
    async def record_vote_and_maybe_advance(self, agent_id: UUID) -> Agent:
        # SET expressions see the pre-update row, so votes + 1 is the new count
        stmt = (
            update(Agent)
            .where(Agent.id == agent_id)
            .values(
                votes=Agent.votes + 1,
                status=status_after_vote_clause(
                    Agent.status, Agent.votes + 1, Agent.votes_needed
                ),
                updated_at=func.now(),
            )
            .returning(Agent)
            .execution_options(populate_existing=True)
        )
        result = await self.session.execute(stmt)
        return result.scalar_one()

    @_storage_operation("list_vote_traits")
    async def list_vote_traits(self, agent_id: UUID) -> list[list[str]]:
        result = await self.session.execute(
            select(Vote.selected_traits).where(Vote.agent_id == agent_id)
        )
        return [list(row[0] or []) for row in result.all()]

    @_storage_operation("count_votes")
    async def count_votes(self) -> int:
        result = await self.session.execute(select(func.count()).select_from(Vote))
        return result.scalar() or 0

    @_storage_operation("count_unique_voters")
    async def count_unique_voters(self) -> int:
        result = await self.session.execute(select(func.count(distinct(Vote.user_id))))
        return result.scalar() or 0

    @_storage_operation("recent_activities")
    async def recent_activities(self, limit: int) -> list[Activity]:
        result = await self.session.execute(
            select(Activity)
            .options(selectinload(Activity.user), selectinload(Activity.agent))
            .order_by(Activity.created_at.desc())
            .limit(limit)
        )
        return list(result.scalars().all())

    @_storage_operation("commit")
    async def commit(self) -> None:
        await self.session.commit()

    async def rollback(self) -> None:
        await self.session.rollback()
