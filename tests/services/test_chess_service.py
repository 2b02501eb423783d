"""Unit tests for fog_chess/services/chess_service.py"""

from typing import Generator
from uuid import UUID, uuid4

import pytest

import fog_chess.chess.moves as mv
from fog_chess.chess.board import Board
from fog_chess.core.exceptions import FogChessError, RepositoryError
from fog_chess.core.models import TranscriptModel
from fog_chess.core.shared_types import Color, MoveOutcome, TranscriptStatus
from fog_chess.services.chess_service import (
    ClickRequest,
    CreateGameRequest,
    DeleteGameRequest,
    FogChessService,
    GameResponse,
    GetGameRequest,
    MoveRequest,
    RetryRequest,
)


E2E4 = mv.MoveRequest.from_uci("e2e4")


# --- MOCK DEPENDENCIES ----
class MockRepository:
    """Mock the TranscriptRepository using a dictionary of transcript models."""

    def __init__(self) -> None:
        self._transcripts: dict[UUID, TranscriptModel] = {}

    def create_transcript(self, transcript: TranscriptModel) -> tuple[TranscriptModel, UUID]:
        game_id = uuid4()
        self._transcripts[game_id] = transcript
        return transcript, game_id

    def get_transcript(self, game_id: UUID) -> TranscriptModel | None:
        return self._transcripts.get(game_id)

    def update_transcript(
        self, game_id: UUID, transcript: TranscriptModel
    ) -> TranscriptModel | None:
        if game_id not in self._transcripts:
            return None
        self._transcripts[game_id] = transcript
        return transcript

    def delete_transcript(self, game_id: UUID) -> TranscriptModel | None:
        return self._transcripts.pop(game_id, None)

    def clear(self) -> None:
        """Clear the repository (useful in between tests)"""
        self._transcripts.clear()


@pytest.fixture
def mock_repository() -> Generator[MockRepository, None, None]:
    """Ensures to clear the repository between tests"""
    repo = MockRepository()
    try:
        yield repo
    finally:
        repo.clear()


@pytest.fixture
def service(mock_repository, initializer, oracle, settings) -> FogChessService:
    return FogChessService(mock_repository, initializer, oracle, settings)


async def new_game(service: FogChessService) -> UUID:
    return (await service.create_new_game(CreateGameRequest())).game_id


def move(game_id: UUID, role: Color, from_row: int, from_col: int, to_row: int, to_col: int) -> MoveRequest:
    return MoveRequest(
        game_id=game_id,
        role=role,
        from_row=from_row,
        from_col=from_col,
        to_row=to_row,
        to_col=to_col,
    )


# --- SERVICE - CREATE NEW GAME ----
@pytest.mark.asyncio
async def test_create_a_new_game(service: FogChessService, mock_repository: MockRepository) -> None:
    """Check that a new game is created, its transcript persisted, and the response has the appropriate information."""
    response = await service.create_new_game(CreateGameRequest())

    assert isinstance(response, GameResponse)
    assert isinstance(response.game_id, UUID)
    assert response.outcome is None
    assert response.busy is False
    assert response.boards["white"] == Board.starting_view(Color.WHITE).to_codes()
    assert response.boards["black"] == Board.starting_view(Color.BLACK).to_codes()
    assert response.game_state_hashes == []
    assert response.move_history == []

    stored = mock_repository.get_transcript(response.game_id)
    assert stored is not None
    assert stored.moves_uci == []
    assert stored.user_state_hashes == {"white": [], "black": []}
    assert stored.status == TranscriptStatus.IN_PROGRESS


# --- SERVICE - MOVES ----
@pytest.mark.asyncio
async def test_make_a_move(service: FogChessService, mock_repository: MockRepository, oracle, reveal) -> None:
    game_id = await new_game(service)
    oracle.revealed = reveal(Board.starting_position().with_move(E2E4))

    response = await service.make_move(move(game_id, Color.WHITE, 6, 4, 4, 4))

    assert response.outcome == MoveOutcome.ACCEPTED
    assert response.message == ""
    assert response.boards["white"][4][4] == "wP"
    assert response.boards["white"][6][4] is None
    assert response.boards["black"][4][4] == "wP"
    assert response.move_history == ["e2e4"]
    assert response.game_state_hashes == ["game-1"]

    stored = mock_repository.get_transcript(game_id)
    assert stored.moves_uci == ["e2e4"]
    assert stored.game_state_hashes == ["game-1"]
    assert stored.user_state_hashes == {"white": ["white-1"], "black": []}


@pytest.mark.asyncio
async def test_invalid_move_is_not_recorded(service: FogChessService, mock_repository: MockRepository) -> None:
    game_id = await new_game(service)
    before = mock_repository.get_transcript(game_id)

    response = await service.make_move(move(game_id, Color.WHITE, 7, 0, 5, 0))

    assert response.outcome == MoveOutcome.INVALID
    assert response.message == "Invalid move!"
    assert mock_repository.get_transcript(game_id) is before


@pytest.mark.asyncio
async def test_partial_move_is_recorded_as_stale(
    service: FogChessService, mock_repository: MockRepository, oracle, reveal
) -> None:
    game_id = await new_game(service)
    oracle.fail_consume = True

    response = await service.make_move(move(game_id, Color.WHITE, 6, 4, 4, 4))

    assert response.outcome == MoveOutcome.PARTIAL
    assert response.stale_views == [Color.BLACK]
    stored = mock_repository.get_transcript(game_id)
    assert stored.status == TranscriptStatus.OPPONENT_VIEW_STALE
    assert stored.moves_uci == ["e2e4"]

    # synchronize again
    oracle.fail_consume = False
    oracle.revealed = reveal(Board.starting_position().with_move(E2E4))
    response = await service.retry_consumption(RetryRequest(game_id=game_id))

    assert response.outcome == MoveOutcome.ACCEPTED
    assert response.stale_views == []
    assert mock_repository.get_transcript(game_id).status == TranscriptStatus.IN_PROGRESS


@pytest.mark.asyncio
async def test_click_to_move(service: FogChessService, mock_repository: MockRepository) -> None:
    game_id = await new_game(service)

    first = await service.click(ClickRequest(game_id=game_id, role=Color.WHITE, row=7, col=6))
    assert first.outcome == MoveOutcome.SELECTED
    assert mock_repository.get_transcript(game_id).moves_uci == []

    second = await service.click(ClickRequest(game_id=game_id, role=Color.WHITE, row=5, col=5))
    assert second.outcome == MoveOutcome.ACCEPTED
    assert mock_repository.get_transcript(game_id).moves_uci == ["g1f3"]


@pytest.mark.asyncio
async def test_synchronization_failure(service: FogChessService, mock_repository: MockRepository, oracle) -> None:
    game_id = await new_game(service)
    oracle.fail_submit = True

    response = await service.make_move(move(game_id, Color.WHITE, 6, 4, 4, 4))

    assert response.outcome == MoveOutcome.SYNC_FAILED
    assert response.message.startswith("Synchronization failed")
    assert response.boards["white"][6][4] == "wP"
    assert mock_repository.get_transcript(game_id).moves_uci == []


# --- SERVICE - GET / DELETE ----
@pytest.mark.asyncio
async def test_get_game_state(service: FogChessService) -> None:
    game_id = await new_game(service)
    await service.make_move(move(game_id, Color.WHITE, 6, 4, 4, 4))

    response = service.get_game_state(GetGameRequest(game_id=game_id))
    assert response.outcome is None
    assert response.move_history == ["e2e4"]


@pytest.mark.asyncio
async def test_unknown_game(service: FogChessService) -> None:
    """Any top-level custom exception will do (the specific one is the responsibility of the repository layer)"""
    with pytest.raises(FogChessError):
        service.get_game_state(GetGameRequest(game_id=uuid4()))
    with pytest.raises(RepositoryError):
        await service.make_move(move(uuid4(), Color.WHITE, 6, 4, 4, 4))


@pytest.mark.asyncio
async def test_delete_game(service: FogChessService, mock_repository: MockRepository) -> None:
    game_id = await new_game(service)
    service.delete_game(DeleteGameRequest(game_id=game_id))

    assert mock_repository.get_transcript(game_id) is None
    with pytest.raises(RepositoryError):
        service.get_game_state(GetGameRequest(game_id=game_id))


@pytest.mark.asyncio
async def test_lost_transcript(service: FogChessService, mock_repository: MockRepository) -> None:
    """The live game outlived its record: the move still happened, but reporting it fails loudly."""
    game_id = await new_game(service)
    mock_repository.clear()

    with pytest.raises(RepositoryError):
        await service.make_move(move(game_id, Color.WHITE, 6, 4, 4, 4))
