"""Defines the chess pieces as seen on a (possibly partial) board"""

from dataclasses import dataclass
from typing import Self

from fog_chess.core.exceptions import UnknownTagError
from fog_chess.core.shared_types import Color, PieceType

CODE_TO_PIECE: dict[str, PieceType] = {
    "P": PieceType.PAWN,
    "N": PieceType.KNIGHT,
    "B": PieceType.BISHOP,
    "R": PieceType.ROOK,
    "Q": PieceType.QUEEN,
    "K": PieceType.KING,
}

PIECE_TO_CODE: dict[PieceType, str] = {value: key for key, value in CODE_TO_PIECE.items()}

CODE_TO_COLOR: dict[str, Color] = {"w": Color.WHITE, "b": Color.BLACK}
COLOR_TO_CODE: dict[Color, str] = {value: key for key, value in CODE_TO_COLOR.items()}


@dataclass(frozen=True)
class PieceRef:
    color: Color
    kind: PieceType

    @classmethod
    def from_code(cls, code: str) -> Self:
        """Two characters: color then piece letter. ex. 'wP' is a white pawn, 'bN' a black knight"""
        if len(code) != 2 or code[0] not in CODE_TO_COLOR or code[1] not in CODE_TO_PIECE:
            raise UnknownTagError(f"Cannot interpret {code!r} as a piece code.")
        return cls(CODE_TO_COLOR[code[0]], CODE_TO_PIECE[code[1]])

    def to_code(self) -> str:
        return f"{COLOR_TO_CODE[self.color]}{PIECE_TO_CODE[self.kind]}"
