"""
Rebuild a player's visible board from the pieces the proving oracle chose to reveal.

The oracle hands back a list of piece records. Each record tags a piece kind and an owner with small integers
(encoded as field element strings such as '0x03'). Whatever has no record is not visible: an empty square on the board.
"""

import logging
from dataclasses import dataclass
from typing import Iterable, Optional

from fog_chess.chess.board import Board
from fog_chess.chess.pieces import PieceRef
from fog_chess.chess.square import BOARD_DIMENSIONS, Square
from fog_chess.core.exceptions import ProjectionError, UnknownTagError
from fog_chess.core.shared_types import Color, PieceType

log = logging.getLogger("fog_chess.projection")

Tag = str | int

NUMBER_OF_SQUARES = BOARD_DIMENSIONS[0] * BOARD_DIMENSIONS[1]


@dataclass(frozen=True)
class PieceRecord:
    """One revealed datum: which piece (id) of which player (player_id) stands on which square (position 0..63)."""

    id: Tag
    player_id: Tag
    position: int


# Owner tag -> color
PLAYER_TAGS: dict[int, Color] = {0: Color.WHITE, 1: Color.BLACK}

# Per owner: piece id -> piece kind. None is a placeholder (empty or hidden square).
# NOTE: a white pawn is id 1 and a black pawn is id 2. The other ids are shared.
PIECE_TAGS: dict[Color, list[Optional[PieceType]]] = {
    Color.WHITE: [
        None,
        PieceType.PAWN,
        None,
        PieceType.KNIGHT,
        PieceType.BISHOP,
        PieceType.ROOK,
        PieceType.QUEEN,
        PieceType.KING,
    ],
    Color.BLACK: [
        None,
        None,
        PieceType.PAWN,
        PieceType.KNIGHT,
        PieceType.BISHOP,
        PieceType.ROOK,
        PieceType.QUEEN,
        PieceType.KING,
    ],
}


def decode_tag(tag: Tag) -> int:
    """Field elements come back as hex strings ('0x03'), plain decimal strings are accepted too."""
    if isinstance(tag, bool):
        raise UnknownTagError(f"Cannot interpret {tag!r} as a tag.")
    if isinstance(tag, int):
        return tag
    try:
        text = tag.strip().lower()
        if text.startswith("0x"):
            return int(text[2:], 16)
        return int(text)
    except (AttributeError, ValueError) as exc:
        raise UnknownTagError(f"Cannot interpret {tag!r} as a tag.") from exc


def decode_player(player_id: Tag) -> Color:
    value = decode_tag(player_id)
    if value not in PLAYER_TAGS:
        raise UnknownTagError(f"Unknown player tag {player_id!r}.")
    return PLAYER_TAGS[value]


def decode_piece(piece_id: Tag, player_id: Tag) -> Optional[PieceRef]:
    """Returns None for the placeholder ids (nothing visible on the square)."""
    color = decode_player(player_id)
    value = decode_tag(piece_id)
    table = PIECE_TAGS[color]
    if not 0 <= value < len(table):
        raise UnknownTagError(f"Unknown piece tag {piece_id!r} for player {player_id!r}.")
    kind = table[value]
    return PieceRef(color, kind) if kind is not None else None


def project(piece_records: Iterable[PieceRecord], viewer: Color) -> Board:
    """
    Build a fresh board from the revealed piece records.
    ----

    Never looks at the viewer's previous board: the same list of records always gives the same board.
    Two records for the same square are an error, as is a position outside the board.
    """
    pieces: dict[Square, PieceRef] = {}
    seen_positions: set[int] = set()
    for record in piece_records:
        if not 0 <= record.position < NUMBER_OF_SQUARES:
            raise ProjectionError(f"Position {record.position} lies outside the board.")
        if record.position in seen_positions:
            raise ProjectionError(f"More than one record for position {record.position}.")
        seen_positions.add(record.position)

        piece = decode_piece(record.id, record.player_id)
        if piece is not None:
            pieces[Square.from_position(record.position)] = piece

    log.debug("Projected board for %s: %d visible pieces", viewer, len(pieces))
    return Board.from_pieces(pieces)
