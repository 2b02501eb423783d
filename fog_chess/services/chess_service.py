"""Orchestration of communication from the boundary models to the game sessions and persistence layer (and the reverse direction)."""

import logging
from typing import Optional
from uuid import UUID

import fog_chess.chess.moves as mv
from fog_chess.api.models import (
    ClickRequest,
    CreateGameRequest,
    DeleteGameRequest,
    GameResponse,
    GetGameRequest,
    MoveRequest,
    RetryRequest,
)
from fog_chess.chess.square import Square
from fog_chess.core.config import SETTINGS, Settings
from fog_chess.core.exceptions import RepositoryError
from fog_chess.core.models import TranscriptModel
from fog_chess.core.shared_types import Color, MoveOutcome, TranscriptStatus
from fog_chess.db.repository import TranscriptRepository
from fog_chess.services.game_session import GameSession
from fog_chess.sync.oracle import ProvingOracle, StateInitializer

log = logging.getLogger("fog_chess.service")

# outcomes after which the hash chains (and so the transcript) have changed
RECORDED_OUTCOMES = {MoveOutcome.ACCEPTED, MoveOutcome.PARTIAL}


class FogChessService:
    """
    Orchestration of layers for fog of war chess.

    Live sessions hold opaque oracle handles, so they stay in memory. The repository keeps the transcript:
    the moves played and the hash chains proving their order.
    """

    def __init__(
        self,
        repository: TranscriptRepository,
        initializer: StateInitializer,
        oracle: ProvingOracle,
        settings: Settings = SETTINGS,
    ) -> None:
        self.repo = repository
        self.initializer = initializer
        self.oracle = oracle
        self.settings = settings
        self.sessions: dict[UUID, GameSession] = {}

    # -- BOUNDARY LOGIC ---
    async def create_new_game(self, request: CreateGameRequest) -> GameResponse:
        """Initialize the oracle states, commit both players' secrets and start recording."""
        session = await GameSession.create(self.initializer, self.oracle, self.settings)
        _, game_id = self.repo.create_transcript(self._to_transcript(session))
        self.sessions[game_id] = session
        log.info("Created game %s", game_id)
        return self._create_game_response(game_id, session)

    async def make_move(self, request: MoveRequest) -> GameResponse:
        """Make a move attempt."""
        session = self._fetch_session(request.game_id)
        move = mv.MoveRequest.from_coordinates(
            request.from_row, request.from_col, request.to_row, request.to_col
        )
        outcome = await session.submit_move(request.role, move)
        self._record(request.game_id, session, outcome)
        return self._create_game_response(request.game_id, session, outcome)

    async def click(self, request: ClickRequest) -> GameResponse:
        """Select a piece / move the selected piece."""
        session = self._fetch_session(request.game_id)
        outcome = await session.click(request.role, Square(request.row, request.col))
        self._record(request.game_id, session, outcome)
        return self._create_game_response(request.game_id, session, outcome)

    async def retry_consumption(self, request: RetryRequest) -> GameResponse:
        session = self._fetch_session(request.game_id)
        outcome = await session.retry_consumption()
        self._record(request.game_id, session, outcome)
        return self._create_game_response(request.game_id, session, outcome)

    def get_game_state(self, request: GetGameRequest) -> GameResponse:
        """Used in a polling loop by the frontend (ex. to find out when proving is done)."""
        session = self._fetch_session(request.game_id)
        return self._create_game_response(request.game_id, session)

    def delete_game(self, request: DeleteGameRequest) -> None:
        self.sessions.pop(request.game_id, None)
        self.repo.delete_transcript(request.game_id)

    # -- Internal helpers --
    def _record(
        self, game_id: UUID, session: GameSession, outcome: Optional[MoveOutcome]
    ) -> None:
        if outcome not in RECORDED_OUTCOMES:
            return
        if self.repo.update_transcript(game_id, self._to_transcript(session)) is None:
            raise RepositoryError(f"Transcript of game {game_id=} not found.")

    def _to_transcript(self, session: GameSession) -> TranscriptModel:
        return TranscriptModel(
            moves_uci=[move.to_uci() for move in session.move_history],
            game_state_hashes=session.game_state_hash_chain,
            user_state_hashes={
                str(color): session.user_state_hash_chain(color) for color in Color
            },
            status=(
                TranscriptStatus.OPPONENT_VIEW_STALE
                if session.stale_views
                else TranscriptStatus.IN_PROGRESS
            ),
        )

    def _create_game_response(
        self,
        game_id: UUID,
        session: GameSession,
        outcome: Optional[MoveOutcome] = None,
    ) -> GameResponse:
        return GameResponse(
            game_id=game_id,
            outcome=outcome,
            message=session.message,
            busy=session.busy,
            boards={str(color): session.board(color).to_codes() for color in Color},
            stale_views=sorted(session.stale_views),
            game_state_hashes=session.game_state_hash_chain,
            move_history=[move.to_uci() for move in session.move_history],
        )

    def _fetch_session(self, game_id: UUID) -> GameSession:
        """Attempt to find the live session and raise error if it fails."""
        session = self.sessions.get(game_id)
        if session is None:
            raise RepositoryError(f"Game with {game_id=} not found.")
        return session
