"""
Contract with the proving oracle (protocol repository style: any implementation with these methods will do).

The oracle runs the hidden state transition of a half-move, proves it, and hands back opaque state handles.
This package never looks inside a handle: it threads handles through calls and compares the hashes that come with them.
"""

from dataclasses import dataclass
from typing import Any, Protocol, Self

from fog_chess.chess.moves import MoveRequest
from fog_chess.chess.projection import PieceRecord
from fog_chess.core.shared_types import Color

# Opaque values owned by the oracle
Handle = Any
Hash = str


@dataclass(frozen=True)
class HashRecord:
    """Hashes of the game/user state that went into and came out of one proven half-move"""

    input_game_state_hash: Hash
    input_user_state_hash: Hash
    output_game_state_hash: Hash
    output_user_state_hash: Hash


@dataclass(frozen=True)
class OracleMove:
    """A move in the oracle's coordinates: x = column, y = 7 - row"""

    x1: int
    y1: int
    x2: int
    y2: int

    @classmethod
    def from_move(cls, move: MoveRequest) -> Self:
        x1, y1 = move.from_square.to_oracle()
        x2, y2 = move.to_square.to_oracle()
        return cls(x1, y1, x2, y2)


@dataclass(frozen=True)
class OracleMoveResult:
    proof: bytes
    new_user_state_handle: Handle
    game_state_handle: Handle
    hash_record: HashRecord


@dataclass(frozen=True)
class PublicInputs:
    """What the opponent gets to see of a proven move"""

    game_state_handle: Handle
    hash_record: HashRecord


@dataclass(frozen=True)
class ConsumeResult:
    user_state_handle: Handle
    piece_records: list[PieceRecord]


@dataclass(frozen=True)
class InitialState:
    game_state_handle: Handle
    white_user_state_handle: Handle
    black_user_state_handle: Handle


class ProvingOracle(Protocol):
    """Executes and proves half-moves. Calls can take a long time: they are awaited."""

    async def submit_move(
        self,
        game_state_handle: Handle,
        user_state_handle: Handle,
        move: OracleMove,
        role: Color,
    ) -> OracleMoveResult:
        """Prove the mover's half-move. Fails if the move is inconsistent with the hidden game state."""
        ...

    async def consume_move(
        self,
        proof: bytes,
        public_inputs: PublicInputs,
        opponent_user_state_handle: Handle,
        role: Color,
    ) -> ConsumeResult:
        """Update the opponent's user state with a proven move (role = the opponent). Reveals the pieces they can now see."""
        ...


class StateInitializer(Protocol):
    """Creates the empty states of a new game and commits each player's secrets."""

    async def initialize(self) -> InitialState: ...

    async def commit_secrets(
        self,
        game_state_handle: Handle,
        encrypt_secret: str,
        mask_secret: str,
        role: Color,
    ) -> Handle: ...
