"""
A square on the board

(placed in its own module as multiple other modules need to import it)

Coordinates follow the display orientation of the board:
row 0 is black's home rank (the 8th rank), row 7 is white's home rank, column 0 is the a-file.
"""

from __future__ import annotations

from dataclasses import dataclass

# Chess board is always 8x8 (rows, columns).
BOARD_DIMENSIONS = (8, 8)
LAST_ROW = BOARD_DIMENSIONS[0] - 1


@dataclass(frozen=True)
class Square:
    row: int
    col: int

    @classmethod
    def from_algebraic(cls, sq: str) -> Square:
        """Algebraic notation: 'a8' is the top-left corner (0, 0), 'h1' the bottom-right (7, 7)"""
        col = ord(sq[0]) - ord("a")
        row = BOARD_DIMENSIONS[0] - int(sq[1])
        return cls(row, col)

    def to_algebraic(self) -> str:
        return f"{chr(self.col + ord('a'))}{BOARD_DIMENSIONS[0] - self.row}"

    @classmethod
    def from_position(cls, position: int) -> Square:
        """
        The oracle numbers squares 0..63 starting at a1, running along the rank first.
        So position // 8 counts ranks from white's side: mirror it to get the display row.
        """
        return cls(LAST_ROW - position // BOARD_DIMENSIONS[1], position % BOARD_DIMENSIONS[1])

    def to_position(self) -> int:
        return (LAST_ROW - self.row) * BOARD_DIMENSIONS[1] + self.col

    def to_oracle(self) -> tuple[int, int]:
        """(x, y) in the oracle's convention: x = column, y = 7 - row. Applied exactly once per move."""
        return self.col, LAST_ROW - self.row

    def is_within_bounds(self) -> bool:
        return (0 <= self.row < BOARD_DIMENSIONS[0]) and (
            0 <= self.col < BOARD_DIMENSIONS[1]
        )
