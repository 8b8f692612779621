"""
Domain errors raised by the ledger, balancer, debt minimizer and services.

The route layer maps each family to an HTTP status:
- NotFoundError -> 404
- InvalidArgumentError -> 400
- InvalidStateError -> 409
- AllocationExhaustedError -> 503
- SettlementInvariantError -> 500
"""


class PotLogError(Exception):
    """Base class for all domain errors."""
    pass


class NotFoundError(PotLogError):
    """Referenced session, player, debt or transfer does not exist."""
    pass


class InvalidArgumentError(PotLogError):
    """Input rejected before any state mutation."""
    pass


class MissingCashOutError(InvalidArgumentError):
    """A player has no reported cash-out at settlement time."""

    def __init__(self, player_id: str, player_name: str = ""):
        self.player_id = player_id
        label = player_name or player_id
        super().__init__(f"Missing cash-out for player: {label}")


class InvalidStateError(PotLogError):
    """Operation not allowed in the session's current status."""
    pass


class AlreadySettledError(InvalidStateError):
    pass


class SessionNotSettledError(InvalidStateError):
    pass


class ConcurrentUpdateError(InvalidStateError):
    """The session changed between load and commit."""
    pass


class DuplicateNumericIdError(PotLogError):
    """insert_unique hit an existing numeric id."""
    pass


class AllocationExhaustedError(PotLogError):
    """No unique numeric id could be allocated within the retry budget."""
    pass


class SettlementInvariantError(PotLogError):
    """Computed amounts broke a sum invariant. Indicates a defect, never user error."""
    pass
