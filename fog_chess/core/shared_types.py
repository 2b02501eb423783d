"""
Type definitions used across layers
"""

from enum import StrEnum


class Color(StrEnum):
    WHITE = "white"
    BLACK = "black"

    @property
    def opponent(self) -> "Color":
        return Color.BLACK if self == Color.WHITE else Color.WHITE


class PieceType(StrEnum):
    PAWN = "pawn"
    KNIGHT = "knight"
    BISHOP = "bishop"
    ROOK = "rook"
    QUEEN = "queen"
    KING = "king"


class MoveOutcome(StrEnum):
    """What happened to a move request, as reported to the presentation layer."""

    ACCEPTED = "accepted"
    IGNORED = "ignored"
    SELECTED = "selected"
    INVALID = "invalid"
    SYNC_FAILED = "synchronization failed"
    PARTIAL = "opponent view stale"


class TranscriptStatus(StrEnum):
    IN_PROGRESS = "in progress"
    OPPONENT_VIEW_STALE = "opponent view stale"
