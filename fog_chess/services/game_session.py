"""
The GameSession is the entrypoint driven by the presentation layer.

It owns both players' boards, the synchronization state, the single message slot and the busy indicator.
Exceptions raised by the protocol are translated here (and only here) into a MoveOutcome plus a human-readable message.
"""

import logging
from typing import Optional, Self

from fog_chess.chess.board import Board
from fog_chess.chess.moves import MoveRequest, is_own_piece
from fog_chess.chess.square import Square
from fog_chess.core.config import SETTINGS, Settings
from fog_chess.core.exceptions import (
    InvalidMoveError,
    OracleConsumptionError,
    SyncError,
)
from fog_chess.core.shared_types import Color, MoveOutcome
from fog_chess.sync.oracle import InitialState, ProvingOracle, StateInitializer
from fog_chess.sync.protocol import StateSyncProtocol, SyncResult
from fog_chess.sync.state import SessionState

log = logging.getLogger("fog_chess.session")

INVALID_MOVE_MESSAGE = "Invalid move!"
SYNC_FAILED_MESSAGE = "Synchronization failed"
STALE_VIEW_MESSAGE = "Opponent view is stale"


class GameSession:
    def __init__(
        self,
        state: SessionState,
        protocol: StateSyncProtocol,
        boards: Optional[dict[Color, Board]] = None,
    ) -> None:
        self.state = state
        self.protocol = protocol
        self.boards: dict[Color, Board] = boards or {
            color: Board.starting_view(color) for color in Color
        }
        self.selected: dict[Color, Optional[Square]] = {color: None for color in Color}
        self.stale_views: set[Color] = set()
        self.move_history: list[MoveRequest] = []
        self.message = ""

    @classmethod
    async def create(
        cls,
        initializer: StateInitializer,
        oracle: ProvingOracle,
        settings: Settings = SETTINGS,
    ) -> Self:
        """
        Set up a new game
        ----

        1. empty game state + one empty user state per player
        2. commit each player's secrets to the game state (white first, then black)
        3. both players start from the committed game state, with empty hash chains
        """
        initial = await initializer.initialize()
        game_state = await initializer.commit_secrets(
            initial.game_state_handle,
            settings.white_encrypt_secret,
            settings.white_mask_secret,
            Color.WHITE,
        )
        game_state = await initializer.commit_secrets(
            game_state,
            settings.black_encrypt_secret,
            settings.black_mask_secret,
            Color.BLACK,
        )
        committed = InitialState(
            game_state_handle=game_state,
            white_user_state_handle=initial.white_user_state_handle,
            black_user_state_handle=initial.black_user_state_handle,
        )
        log.info("New game session initialized")
        return cls(
            SessionState.from_initial_state(committed),
            StateSyncProtocol(oracle, timeout_s=settings.oracle_timeout_s),
        )

    # --- READ-ONLY VIEW FOR PRESENTATION ---
    @property
    def busy(self) -> bool:
        return self.state.busy

    @property
    def game_state_hash_chain(self) -> list[str]:
        return list(self.state.game_state_hash_chain)

    def user_state_hash_chain(self, role: Color) -> list[str]:
        return list(self.state.player_states[role].user_state_hash_chain)

    def board(self, role: Color) -> Board:
        return self.boards[role]

    def selection(self, role: Color) -> Optional[Square]:
        return self.selected[role]

    # --- COMMANDS ---
    async def click(self, role: Color, square: Square) -> Optional[MoveOutcome]:
        """
        Click-equivalent input: the first click selects one of your own pieces, the second click tries to move it there.
        Returns None if the click did nothing at all.
        """
        if self.busy:
            return MoveOutcome.IGNORED

        selected = self.selected[role]
        if selected is None:
            if not is_own_piece(self.boards[role], square, role):
                return None
            self.selected[role] = square
            self.message = ""
            return MoveOutcome.SELECTED

        return await self.submit_move(role, MoveRequest(selected, square))

    async def submit_move(self, role: Color, move: MoveRequest) -> MoveOutcome:
        """
        Attempt a half-move for `role`
        -----

        * while another move is in flight: ignored, no observable effect.
        * the mover's board is updated right away (they know their own move), as a new snapshot.
        * the opponent's board is only replaced once the move has been consumed and projected.
        """
        if self.busy:
            log.warning("Move %s by %s ignored: a move is still in flight", move.to_uci(), role)
            return MoveOutcome.IGNORED

        self.selected[role] = None
        if self.state.pending_consumption is not None:
            self.message = f"{STALE_VIEW_MESSAGE}: retry the synchronization of the previous move first."
            return MoveOutcome.INVALID

        before = self.boards[role]
        try:
            if not move.from_square.is_within_bounds() or not move.to_square.is_within_bounds():
                raise InvalidMoveError(f"Move outside the board: {move}")
            self.boards[role] = before.with_move(move)
            self.message = ""
            result = await self.protocol.run(role, move, self.state, before)
        except InvalidMoveError as exc:
            log.warning("Invalid move by %s: %s", role, exc)
            self.boards[role] = before
            self.message = INVALID_MOVE_MESSAGE
            return MoveOutcome.INVALID
        except OracleConsumptionError as exc:
            # the mover's side went through: keep their board, flag the opponent's
            self.move_history.append(move)
            self.stale_views.add(role.opponent)
            self.message = f"{STALE_VIEW_MESSAGE}: {exc}"
            return MoveOutcome.PARTIAL
        except SyncError as exc:
            self.boards[role] = before
            self.message = f"{SYNC_FAILED_MESSAGE}: {exc}"
            return MoveOutcome.SYNC_FAILED

        self.move_history.append(move)
        self._apply(result)
        return MoveOutcome.ACCEPTED

    async def retry_consumption(self) -> MoveOutcome:
        """Try again to bring the opponent's view up to date after a PARTIAL outcome."""
        if self.busy:
            return MoveOutcome.IGNORED
        try:
            result = await self.protocol.retry_consumption(self.state)
        except InvalidMoveError as exc:
            self.message = f"{INVALID_MOVE_MESSAGE} {exc}"
            return MoveOutcome.INVALID
        except SyncError as exc:
            self.message = f"{STALE_VIEW_MESSAGE}: {exc}"
            return MoveOutcome.PARTIAL

        self._apply(result)
        return MoveOutcome.ACCEPTED

    def _apply(self, result: SyncResult) -> None:
        opponent = result.mover.opponent
        self.boards[opponent] = result.opponent_board
        self.stale_views.discard(opponent)
        self.message = ""
