"""Per-player and per-session state threaded through the proving oracle."""

from dataclasses import dataclass, field, replace
from typing import Optional, Self

from fog_chess.core.shared_types import Color
from fog_chess.sync.oracle import Handle, Hash, HashRecord, InitialState, PublicInputs


@dataclass(frozen=True)
class PlayerState:
    """
    One player's handles and user-state hash chain.

    old_user_state_handle: the handle submitted into this player's most recent oracle round.
    user_state_handle: the latest confirmed handle (also updated when consuming the opponent's moves).
    """

    game_state_handle: Handle
    user_state_handle: Handle
    old_user_state_handle: Handle
    user_state_hash_chain: tuple[Hash, ...] = ()

    @classmethod
    def initial(cls, game_state_handle: Handle, user_state_handle: Handle) -> Self:
        return cls(game_state_handle, user_state_handle, user_state_handle)

    def after_own_move(
        self, game_state_handle: Handle, user_state_handle: Handle, output_hash: Hash
    ) -> Self:
        return replace(
            self,
            game_state_handle=game_state_handle,
            user_state_handle=user_state_handle,
            old_user_state_handle=user_state_handle,
            user_state_hash_chain=(*self.user_state_hash_chain, output_hash),
        )

    def with_game_state(self, game_state_handle: Handle) -> Self:
        return replace(self, game_state_handle=game_state_handle)

    def with_user_state(self, user_state_handle: Handle) -> Self:
        return replace(self, user_state_handle=user_state_handle)


@dataclass(frozen=True)
class PendingConsumption:
    """A proven move the opponent has not consumed yet (consumption failed after a successful submission)."""

    mover: Color
    proof: bytes
    public_inputs: PublicInputs


@dataclass
class SessionState:
    player_states: dict[Color, PlayerState]
    game_state_hash_chain: list[Hash] = field(default_factory=list)
    hash_records: list[HashRecord] = field(default_factory=list)
    busy: bool = False
    pending_consumption: Optional[PendingConsumption] = None

    @classmethod
    def from_initial_state(cls, initial: InitialState) -> Self:
        """Both players start out tracking the same (secret-committed) game state handle."""
        return cls(
            player_states={
                Color.WHITE: PlayerState.initial(
                    initial.game_state_handle, initial.white_user_state_handle
                ),
                Color.BLACK: PlayerState.initial(
                    initial.game_state_handle, initial.black_user_state_handle
                ),
            }
        )
