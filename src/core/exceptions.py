"""
Errors raised by the domain and service layers.

Everything deriving from GameError is recoverable: the request was rejected and the game was left untouched.
InvariantViolationError signals a bug (in the caller or in the engine) and should not be caught to re-prompt a user.
"""


class GameError(Exception):
    """Base class for recoverable errors."""


class GameStateError(GameError):
    """The game is not in a state that allows the request (finished, corrupted transport data, ...)."""


class InvalidSelectionError(GameError):
    """Selected an empty square, an opponent's piece, or a piece without legal moves."""


class IllegalMoveError(GameError):
    """Destination not among the currently legal moves."""


class ForcedContinuationError(GameError):
    """Tried to switch pieces or end the turn while a capture chain is still open."""


class InvalidPositionError(GameError):
    """Position or move notation that cannot be parsed."""


class InvalidRequestError(GameError):
    """Structurally invalid request data."""


class RepositoryError(GameError):
    """Game could not be found / stored."""


class InvariantViolationError(RuntimeError):
    """Two pieces on one square, a piece off the board, ... Fatal."""


class StaleStateError(InvariantViolationError):
    """A commit was computed against a version of the game that has since been superseded."""
