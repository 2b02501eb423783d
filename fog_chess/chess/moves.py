"""
Geometry/Base movement and capturing rules

Key idea: Use strategy pattern to define a legality check for each piece type.

These checks only look at the mover's own view of the board. Under fog of war that view may be incomplete:
whether the move is consistent with the hidden game state is decided later by the proving oracle.
There is no notion of check, castling, en passant or promotion here.
"""

from dataclasses import dataclass
from typing import Callable, Optional, Protocol, Self

from fog_chess.chess.pieces import PieceRef
from fog_chess.chess.square import Square
from fog_chess.core.exceptions import InvalidRequestError
from fog_chess.core.shared_types import Color, PieceType


class Board(Protocol):
    """Just the parts the legality rules need"""

    def piece(self, square: Square) -> Optional[PieceRef]: ...
    def is_empty(self, square: Square) -> bool: ...


Vector = tuple[int, int]


@dataclass(frozen=True)
class MoveRequest:
    """basic definition of a move to be made"""

    from_square: Square
    to_square: Square

    @classmethod
    def from_coordinates(
        cls, from_row: int, from_col: int, to_row: int, to_col: int
    ) -> Self:
        move = cls(Square(from_row, from_col), Square(to_row, to_col))
        if not (move.from_square.is_within_bounds() and move.to_square.is_within_bounds()):
            raise InvalidRequestError(
                f"Move coordinates must lie within the board: {(from_row, from_col, to_row, to_col)}"
            )
        return move

    @classmethod
    def from_uci(cls, uci: str) -> Self:
        """ex. 'e2e4': move the piece on e2 to e4"""
        return cls(Square.from_algebraic(uci[:2]), Square.from_algebraic(uci[2:4]))

    def to_uci(self) -> str:
        return f"{self.from_square.to_algebraic()}{self.to_square.to_algebraic()}"

    def deltas(self) -> Vector:
        """(delta row, delta column)"""
        return (
            self.to_square.row - self.from_square.row,
            self.to_square.col - self.from_square.col,
        )


# White moves "up" the display (decreasing row), black moves "down".
PAWN_DIRECTION: dict[Color, int] = {Color.WHITE: -1, Color.BLACK: 1}
PAWN_START_ROW: dict[Color, int] = {Color.WHITE: 6, Color.BLACK: 1}


def _sign(value: int) -> int:
    return (value > 0) - (value < 0)


def squares_between(from_square: Square, to_square: Square) -> list[Square]:
    """
    Find the squares strictly in between two squares on the same row, column or diagonal.

    Neither the starting square nor the destination square is included.
    """
    d_row = to_square.row - from_square.row
    d_col = to_square.col - from_square.col
    is_straight = d_row == 0 or d_col == 0
    is_diagonal = abs(d_row) == abs(d_col)
    if not (is_straight or is_diagonal):
        raise ValueError(
            f"squares_between requires both squares to lie on one line. \n from: {from_square}\n to:{to_square}"
        )

    step: Vector = (_sign(d_row), _sign(d_col))
    squares_found: list[Square] = []
    square = Square(from_square.row + step[0], from_square.col + step[1])
    while square != to_square:
        squares_found.append(square)
        square = Square(square.row + step[0], square.col + step[1])
    return squares_found


def is_path_clear(move: MoveRequest, board: Board) -> bool:
    return all(board.is_empty(square) for square in squares_between(move.from_square, move.to_square))


# --- LEGALITY RULES PER PIECE TYPE ---
def is_legal_pawn_move(move: MoveRequest, board: Board) -> bool:
    """
    A pawn:
    - moves a single square forward, onto an empty square
    - can move two squares forward from its starting row, if both squares are empty
    - takes diagonally (one square forward, one sideways), and only when capturing
    - never moves sideways or backwards
    """
    pawn = board.piece(move.from_square)
    if pawn is None:
        return False
    direction = PAWN_DIRECTION[pawn.color]
    d_row, d_col = move.deltas()

    if d_col == 0:
        if not board.is_empty(move.to_square):
            return False
        if d_row == direction:
            return True
        intermediate = Square(move.from_square.row + direction, move.from_square.col)
        return (
            move.from_square.row == PAWN_START_ROW[pawn.color]
            and d_row == 2 * direction
            and board.is_empty(intermediate)
        )

    if abs(d_col) == 1 and d_row == direction:
        target = board.piece(move.to_square)
        return target is not None and target.color != pawn.color
    return False


def is_legal_knight_move(move: MoveRequest, board: Board) -> bool:
    """Knights jump: the absolute deltas are 1 and 2, in either order"""
    d_row, d_col = move.deltas()
    return sorted((abs(d_row), abs(d_col))) == [1, 2]


def is_legal_bishop_move(move: MoveRequest, board: Board) -> bool:
    """Bishops move diagonally: |delta_row| = |delta_col|, nothing in between"""
    d_row, d_col = move.deltas()
    return abs(d_row) == abs(d_col) and is_path_clear(move, board)


def is_legal_rook_move(move: MoveRequest, board: Board) -> bool:
    """Rooks move either horizontally or vertically, nothing in between"""
    d_row, d_col = move.deltas()
    return (d_row == 0 or d_col == 0) and is_path_clear(move, board)


def is_legal_queen_move(move: MoveRequest, board: Board) -> bool:
    """
    The Queen combines the rook moves (horizontal + vertical movements) and bishop moves (diagonal movement)
    """
    return is_legal_bishop_move(move, board) or is_legal_rook_move(move, board)


def is_legal_king_move(move: MoveRequest, board: Board) -> bool:
    """The king can move by a single square at the time."""
    d_row, d_col = move.deltas()
    return abs(d_row) <= 1 and abs(d_col) <= 1 and (d_row, d_col) != (0, 0)


# -- STRATEGY PATTERN: LEGALITY RULES ---
IsLegalFn = Callable[[MoveRequest, Board], bool]
LEGALITY_RULES: dict[PieceType, IsLegalFn] = {
    PieceType.PAWN: is_legal_pawn_move,
    PieceType.KNIGHT: is_legal_knight_move,
    PieceType.BISHOP: is_legal_bishop_move,
    PieceType.ROOK: is_legal_rook_move,
    PieceType.QUEEN: is_legal_queen_move,
    PieceType.KING: is_legal_king_move,
}


def is_legal(board: Board, move: MoveRequest) -> bool:
    """
    Is the move legal on this view of the board?
    ----

    Pure function, total over all in-range moves:
    1. there must be a piece to move
    2. you cannot capture your own piece
    3. the rule for the piece type decides the rest
    """
    piece = board.piece(move.from_square)
    if piece is None:
        return False

    target = board.piece(move.to_square)
    if target is not None and target.color == piece.color:
        return False

    return LEGALITY_RULES[piece.kind](move, board)


def is_own_piece(board: Board, square: Square, color: Color) -> bool:
    piece = board.piece(square)
    return piece is not None and piece.color == color
