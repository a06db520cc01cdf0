"""User test data factory."""

from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Any
from uuid import UUID, uuid4

from aicgs.models import User


def _utcnow() -> datetime:
    """Return current UTC time with timezone info."""
    return datetime.now(timezone.utc)


@dataclass
class UserFactory:
    """Factory for creating transient User instances."""

    _counter: int = field(default=0, repr=False)

    @classmethod
    def create(
        cls,
        user_id: UUID | None = None,
        discord_id: str | None = None,
        username: str | None = None,
        email: str | None = None,
        avatar: str | None = None,
        **kwargs: Any,
    ) -> User:
        cls._counter = getattr(cls, "_counter", 0) + 1

        return User(
            id=user_id or uuid4(),
            discord_id=discord_id or f"10000000000000{cls._counter:04d}",
            username=username or f"voter_{cls._counter}",
            email=email or f"voter_{cls._counter}@example.com",
            avatar=avatar,
            created_at=_utcnow(),
            updated_at=_utcnow(),
            last_login=None,
            **kwargs,
        )
