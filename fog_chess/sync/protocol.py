"""
Per-move synchronization protocol.

One half-move goes through these stages:

    IDLE -> SUBMITTED -> CHAIN_CHECKED -> CONSUMED -> IDLE

with ERROR reachable from any stage in between (after which the protocol is back to IDLE).

1. check the move locally against the mover's own view of the board
2. let the oracle prove the move (submission)
3. check the hashes the oracle reports continue the session's hash chains
4. commit the mover's side: hash chains + handles
5. let the oracle update the opponent's user state (consumption)
6. project the revealed pieces onto a fresh board for the opponent

The session-wide busy flag is taken for steps 2-6 and released on every exit path.
"""

import asyncio
import logging
from dataclasses import dataclass
from enum import Enum, auto
from typing import Awaitable, Optional, TypeVar

from fog_chess.chess.board import Board
from fog_chess.chess.moves import MoveRequest, is_legal, is_own_piece
from fog_chess.chess.projection import project
from fog_chess.core.exceptions import (
    ChainContinuityError,
    InvalidMoveError,
    OracleConsumptionError,
    OracleSubmissionError,
    SyncError,
)
from fog_chess.core.shared_types import Color
from fog_chess.sync.oracle import (
    HashRecord,
    OracleMove,
    OracleMoveResult,
    ProvingOracle,
    PublicInputs,
)
from fog_chess.sync.state import PendingConsumption, SessionState

log = logging.getLogger("fog_chess.sync")

T = TypeVar("T")


class SyncStage(Enum):
    IDLE = auto()
    SUBMITTED = auto()
    CHAIN_CHECKED = auto()
    CONSUMED = auto()
    ERROR = auto()


@dataclass(frozen=True)
class SyncResult:
    """A completed half-move: the hashes proving it and the opponent's new view of the board"""

    mover: Color
    hash_record: HashRecord
    opponent_board: Board


def verify_chain(hash_records: list[HashRecord]) -> bool:
    """Check the shared game-state chain of consecutive half-moves: output of move i is the input of move i+1."""
    return all(
        previous.output_game_state_hash == current.input_game_state_hash
        for previous, current in zip(hash_records, hash_records[1:])
    )


class StateSyncProtocol:
    """Runs half-moves against the proving oracle. Only this class writes to a SessionState."""

    def __init__(self, oracle: ProvingOracle, timeout_s: Optional[float] = None) -> None:
        self.oracle = oracle
        self.timeout_s = timeout_s
        self.stage = SyncStage.IDLE
        # stages visited during the most recent run (handy when something fails)
        self.trace: list[SyncStage] = [SyncStage.IDLE]

    async def run(
        self, mover: Color, move: MoveRequest, session: SessionState, board: Board
    ) -> SyncResult:
        """
        Synchronize one half-move of `mover`, checked against `board` (the mover's view before the move).
        ---

        Raises
        * InvalidMoveError: session busy, a consumption still to be retried, or the move is not legal. Nothing changed.
        * OracleSubmissionError / ChainContinuityError: nothing committed.
        * OracleConsumptionError: the mover's side is committed, the opponent's is not (see retry_consumption).
        """
        if session.busy:
            raise InvalidMoveError("Another move is still being synchronized.")
        if session.pending_consumption is not None:
            raise InvalidMoveError(
                "The previous move has not reached the opponent yet. Retry its synchronization first."
            )
        if not is_own_piece(board, move.from_square, mover) or not is_legal(board, move):
            raise InvalidMoveError(f"Move not allowed: {move.to_uci()}")

        session.busy = True
        self.trace = [SyncStage.IDLE]
        try:
            result = await self._submit(mover, move, session)
            self._check_continuity(mover, result.hash_record, session)
            self._commit_move(mover, result, session)
            public_inputs = PublicInputs(result.game_state_handle, result.hash_record)
            return await self._consume(mover, result.proof, public_inputs, session)
        except SyncError:
            self._enter(SyncStage.ERROR)
            raise
        finally:
            session.busy = False
            self._enter(SyncStage.IDLE)

    async def retry_consumption(self, session: SessionState) -> SyncResult:
        """Redo only the consumption step of a move whose submission already went through."""
        pending = session.pending_consumption
        if pending is None:
            raise InvalidMoveError("There is no move waiting to be consumed.")
        if session.busy:
            raise InvalidMoveError("Another move is still being synchronized.")

        session.busy = True
        self.trace = [SyncStage.IDLE]
        try:
            return await self._consume(
                pending.mover, pending.proof, pending.public_inputs, session
            )
        except SyncError:
            self._enter(SyncStage.ERROR)
            raise
        finally:
            session.busy = False
            self._enter(SyncStage.IDLE)

    # -- STAGES ---
    async def _submit(
        self, mover: Color, move: MoveRequest, session: SessionState
    ) -> OracleMoveResult:
        player = session.player_states[mover]
        oracle_move = OracleMove.from_move(move)
        try:
            result = await self._call_oracle(
                self.oracle.submit_move(
                    player.game_state_handle,
                    player.old_user_state_handle,
                    oracle_move,
                    mover,
                )
            )
        except Exception as exc:
            log.exception("Move submission failed for %s (%s)", mover, move.to_uci())
            raise OracleSubmissionError(
                f"The oracle did not accept {move.to_uci()}: {exc!r}"
            ) from exc

        self._enter(SyncStage.SUBMITTED)
        return result

    def _check_continuity(
        self, mover: Color, record: HashRecord, session: SessionState
    ) -> None:
        """The oracle must have started from exactly the state this session recorded last."""
        game_chain = session.game_state_hash_chain
        if game_chain and game_chain[-1] != record.input_game_state_hash:
            log.error(
                "Game state hash mismatch: recorded %s, oracle used %s",
                game_chain[-1],
                record.input_game_state_hash,
            )
            raise ChainContinuityError("Game state hashes do not match.")

        user_chain = session.player_states[mover].user_state_hash_chain
        if user_chain and user_chain[-1] != record.input_user_state_hash:
            log.error(
                "User state hash mismatch for %s: recorded %s, oracle used %s",
                mover,
                user_chain[-1],
                record.input_user_state_hash,
            )
            raise ChainContinuityError(f"User state hashes of {mover} do not match.")

        self._enter(SyncStage.CHAIN_CHECKED)

    def _commit_move(
        self, mover: Color, result: OracleMoveResult, session: SessionState
    ) -> None:
        """Hash chains and handles change together (no await in here)."""
        opponent = mover.opponent
        record = result.hash_record
        session.player_states = {
            mover: session.player_states[mover].after_own_move(
                result.game_state_handle,
                result.new_user_state_handle,
                record.output_user_state_hash,
            ),
            opponent: session.player_states[opponent].with_game_state(
                result.game_state_handle
            ),
        }
        session.game_state_hash_chain = [
            *session.game_state_hash_chain,
            record.output_game_state_hash,
        ]
        session.hash_records = [*session.hash_records, record]

    async def _consume(
        self,
        mover: Color,
        proof: bytes,
        public_inputs: PublicInputs,
        session: SessionState,
    ) -> SyncResult:
        opponent = mover.opponent
        try:
            consumed = await self._call_oracle(
                self.oracle.consume_move(
                    proof,
                    public_inputs,
                    session.player_states[opponent].user_state_handle,
                    opponent,
                )
            )
            opponent_board = project(consumed.piece_records, opponent)
        except Exception as exc:
            log.exception("Move consumption failed for %s; their view is stale", opponent)
            session.pending_consumption = PendingConsumption(mover, proof, public_inputs)
            raise OracleConsumptionError(
                f"The move reached the oracle but {opponent}'s view could not be updated: {exc!r}"
            ) from exc

        session.player_states = {
            **session.player_states,
            opponent: session.player_states[opponent].with_user_state(
                consumed.user_state_handle
            ),
        }
        session.pending_consumption = None
        self._enter(SyncStage.CONSUMED)
        log.info(
            "Half-move of %s synchronized (game state %s)",
            mover,
            public_inputs.hash_record.output_game_state_hash,
        )
        return SyncResult(mover, public_inputs.hash_record, opponent_board)

    # -- HELPERS ---
    async def _call_oracle(self, call: Awaitable[T]) -> T:
        """Wait for an oracle call. On timeout, the call in flight is cancelled and discarded."""
        if self.timeout_s is None:
            return await call
        return await asyncio.wait_for(call, timeout=self.timeout_s)

    def _enter(self, stage: SyncStage) -> None:
        self.stage = stage
        self.trace.append(stage)
