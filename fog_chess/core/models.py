"""
Boundary layer data model(s).

These objects are used to communicate with the persistence layer.
The service converts a live GameSession into a TranscriptModel, the repository stores it.
(Oracle handles are opaque and never leave memory: only their hashes are recorded here.)
"""

from dataclasses import dataclass

# Type aliases to make TranscriptModel easier to read
PieceColor = str
Hash = str


@dataclass
class TranscriptModel:
    """Transport-safe record of a game: moves played and the hash chains that prove their ordering."""

    moves_uci: list[str]
    game_state_hashes: list[Hash]
    user_state_hashes: dict[PieceColor, list[Hash]]
    status: str
