"""
A player's view of the board: which piece they believe stands on which square.

Boards are immutable. Every update (a local move, a projection from revealed pieces) produces a new Board,
so a failed synchronization round can never leave a view half-updated.
"""

from dataclasses import dataclass
from typing import Optional, Self

from fog_chess.chess.moves import MoveRequest
from fog_chess.chess.pieces import PieceRef
from fog_chess.chess.square import BOARD_DIMENSIONS, Square
from fog_chess.core.exceptions import InvalidRequestError
from fog_chess.core.shared_types import Color, PieceType

Cells = tuple[tuple[Optional[PieceRef], ...], ...]
CodeRows = list[list[Optional[str]]]

BACK_RANK: list[PieceType] = [
    PieceType.ROOK,
    PieceType.KNIGHT,
    PieceType.BISHOP,
    PieceType.QUEEN,
    PieceType.KING,
    PieceType.BISHOP,
    PieceType.KNIGHT,
    PieceType.ROOK,
]

# (back rank row, pawn row) in display orientation
HOME_ROWS: dict[Color, tuple[int, int]] = {
    Color.WHITE: (7, 6),
    Color.BLACK: (0, 1),
}


@dataclass(frozen=True)
class Board:
    cells: Cells

    def __post_init__(self) -> None:
        rows, cols = BOARD_DIMENSIONS
        if len(self.cells) != rows or any(len(row) != cols for row in self.cells):
            raise InvalidRequestError(f"A board must be {rows}x{cols} cells.")

    @classmethod
    def empty(cls) -> Self:
        rows, cols = BOARD_DIMENSIONS
        return cls(tuple(tuple(None for _ in range(cols)) for _ in range(rows)))

    @classmethod
    def from_pieces(cls, pieces: dict[Square, PieceRef]) -> Self:
        """Build a board from a mapping of occupied squares. Every other square is empty."""
        rows, cols = BOARD_DIMENSIONS
        return cls(
            tuple(
                tuple(pieces.get(Square(row, col)) for col in range(cols))
                for row in range(rows)
            )
        )

    @classmethod
    def from_codes(cls, code_rows: CodeRows) -> Self:
        """
        Construct a board from rows of piece codes ('wP', 'bK', ...) or None for an empty square.
        Row 0 is black's home rank.
        """
        return cls(
            tuple(
                tuple(PieceRef.from_code(code) if code else None for code in row)
                for row in code_rows
            )
        )

    @classmethod
    def starting_view(cls, color: Color) -> Self:
        """At the start of the game a player only sees their own pieces."""
        back_row, pawn_row = HOME_ROWS[color]
        pieces: dict[Square, PieceRef] = {}
        for col, kind in enumerate(BACK_RANK):
            pieces[Square(back_row, col)] = PieceRef(color, kind)
            pieces[Square(pawn_row, col)] = PieceRef(color, PieceType.PAWN)
        return cls.from_pieces(pieces)

    @classmethod
    def starting_position(cls) -> Self:
        """Full standard starting position (both colors). Mostly useful for testing move rules."""
        white = cls.starting_view(Color.WHITE)
        black = cls.starting_view(Color.BLACK)
        return cls.from_pieces(white.occupied() | black.occupied())

    def to_codes(self) -> CodeRows:
        return [[piece.to_code() if piece else None for piece in row] for row in self.cells]

    def piece(self, square: Square) -> Optional[PieceRef]:
        return self.cells[square.row][square.col]

    def is_empty(self, square: Square) -> bool:
        return self.piece(square) is None

    def occupied(self) -> dict[Square, PieceRef]:
        return {
            Square(row, col): piece
            for row, cells in enumerate(self.cells)
            for col, piece in enumerate(cells)
            if piece is not None
        }

    def with_piece(self, square: Square, piece: Optional[PieceRef]) -> Self:
        """Copy of the board with a single square replaced."""
        pieces = self.occupied()
        if piece is None:
            pieces.pop(square, None)
        else:
            pieces[square] = piece
        return self.from_pieces(pieces)

    def with_move(self, move: MoveRequest) -> Self:
        """Copy of the board after moving the piece (capturing whatever stood on the target square)."""
        moving_piece = self.piece(move.from_square)
        return self.with_piece(move.from_square, None).with_piece(
            move.to_square, moving_piece
        )
