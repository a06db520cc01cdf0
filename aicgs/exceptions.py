"""Error taxonomy for the vote ledger."""

from uuid import UUID


class VotingError(Exception):
    """Base exception for vote ledger errors."""

    status_code = 400

    def __init__(self, message: str, error_type: str = "voting_error"):
        self.message = message
        self.error_type = error_type
        super().__init__(message)


class QuotaExceededError(VotingError):
    """Raised when the caller has used every vote in their allowance."""

    def __init__(self, limit: int):
        super().__init__(
            f"You have reached the maximum limit of {limit} votes",
            "quota_exceeded",
        )
        self.limit = limit


class DuplicateVoteError(VotingError):
    """Raised when the caller already voted for this agent."""

    status_code = 409

    def __init__(self, agent_id: UUID):
        super().__init__("You have already voted for this agent", "duplicate_vote")
        self.agent_id = agent_id


class AgentNotFoundError(VotingError):
    """Raised when an agent reference does not resolve."""

    status_code = 404

    def __init__(self, agent_id: UUID):
        super().__init__(f"Agent '{agent_id}' not found", "not_found")
        self.agent_id = agent_id


class VotingClosedError(VotingError):
    """Raised when the agent is not accepting votes."""

    def __init__(self, agent_id: UUID, status: str):
        super().__init__(
            "This agent is no longer accepting votes", "voting_closed"
        )
        self.agent_id = agent_id
        self.status = status


class NoTraitsSelectedError(VotingError):
    def __init__(self):
        super().__init__("Must select at least one trait", "no_traits_selected")


class InvalidTraitError(VotingError):
    """Raised when a submitted trait is not a candidate trait of the agent."""

    def __init__(self, invalid_traits: list[str]):
        super().__init__(
            f"Invalid traits selected: {', '.join(invalid_traits)}",
            "invalid_trait",
        )
        self.invalid_traits = invalid_traits


class PersistenceFailureError(VotingError):
    """Raised when the underlying store fails a read or write."""

    status_code = 503

    def __init__(self, operation: str):
        super().__init__(
            f"Storage operation '{operation}' failed", "persistence_failure"
        )
        self.operation = operation
