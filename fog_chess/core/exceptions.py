"""
Custom exceptions.

Every error raised on purpose by this package derives from FogChessError, so callers can catch
a single top-level type and leave the specific types to the layer that raises them.
"""


class FogChessError(Exception):
    """Top-level error for anything going wrong while playing a game."""


class InvalidRequestError(FogChessError):
    """Request coming in from the boundary cannot be interpreted."""


class InvalidMoveError(FogChessError):
    """Move rejected locally: not legal on the mover's own view of the board (or session busy)."""


# --- SYNCHRONIZATION WITH THE PROVING ORACLE ---
class SyncError(FogChessError):
    """Something went wrong while synchronizing a half-move with the proving oracle."""


class OracleSubmissionError(SyncError):
    """Move submission failed, raised, or timed out. Nothing was committed."""


class OracleConsumptionError(SyncError):
    """
    Move consumption failed AFTER a successful submission.

    The mover's state has already been advanced; only the opponent's view is stale.
    """


class ChainContinuityError(SyncError):
    """The oracle reported input hashes that do not continue the session's recorded hash chains."""


# --- BOARD PROJECTION ---
class ProjectionError(FogChessError):
    """Revealed piece records cannot be turned into a board."""


class UnknownTagError(ProjectionError):
    """A piece or player identifier does not decode to anything known."""


# --- PERSISTENCE ---
class RepositoryError(FogChessError):
    """Record could not be found / stored."""
