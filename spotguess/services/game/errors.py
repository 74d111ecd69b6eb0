class GameError(Exception):
    """Base class for rejected client actions.

    The session turns these into a private toast for the acting connection.
    A ``silent`` error is dropped without telling anyone.
    """

    def __init__(self, message: str = '', silent: bool = False):
        super().__init__(message)
        self.message = message
        self.silent = silent


class CapacityError(GameError):
    """Team or player limits reached."""


class TurnViolation(GameError):
    """The acting team is not the current turn team."""


class StateViolation(GameError):
    """The action does not fit the current round state."""


class InvalidCommand(GameError):
    """Malformed inbound payload."""
