"""
Pytest will auto-discover / import this file called 'conftest.py'.
This file defines fixtures/variables required for testing multiple layers.
"""

import asyncio
from dataclasses import dataclass
from typing import Callable, Generator, Optional

import pytest
import pytest_asyncio
from sqlalchemy import StaticPool, create_engine
from sqlalchemy.orm import Session, sessionmaker

from fog_chess.chess.board import Board
from fog_chess.chess.projection import PIECE_TAGS, PieceRecord
from fog_chess.core.config import Settings
from fog_chess.core.shared_types import Color
from fog_chess.db.schema import Base
from fog_chess.services.game_session import GameSession
from fog_chess.sync.oracle import (
    ConsumeResult,
    HashRecord,
    InitialState,
    OracleMove,
    OracleMoveResult,
    PublicInputs,
)

# Setup an in-memory SQLite database for testing
DATABASE_URL = "sqlite:///:memory:"
engine = create_engine(
    DATABASE_URL,
    connect_args={"check_same_thread": False},
    poolclass=StaticPool,
)

TestingSessionLocal = sessionmaker(autoflush=False, bind=engine)


@pytest.fixture
def db_session_repo() -> Generator[Session, None, None]:
    """Connection to a test database. Tables are removed at teardown to make unit tests of repository independent of each other."""
    Base.metadata.create_all(bind=engine)
    db = TestingSessionLocal()
    try:
        yield db
    finally:
        Base.metadata.drop_all(bind=engine)
        db.close()


# --- MOCK ORACLE ---
@dataclass(frozen=True)
class FakeHandle:
    """Stands in for an opaque oracle handle. `version` counts proven moves, `consumed` counts opponent moves taken in."""

    owner: str
    version: int = 0
    consumed: int = 0


class FakeOracle:
    """
    Scripted proving oracle.

    Hashes are derived from the handles it is given, so the hash chains only continue
    when the session threads the handles through correctly.
    """

    def __init__(self) -> None:
        self.submitted: list[tuple[FakeHandle, FakeHandle, OracleMove, Color]] = []
        self.consumed: list[tuple[bytes, PublicInputs, FakeHandle, Color]] = []
        self.revealed: list[PieceRecord] = []
        self.fail_submit = False
        self.fail_consume = False
        self.tamper_game_hash = False
        self.tamper_user_hash = False
        # when set, submissions wait until the event fires (a long running proof)
        self.gate: Optional[asyncio.Event] = None
        # same for consumption
        self.consume_gate: Optional[asyncio.Event] = None

    async def submit_move(
        self,
        game_state_handle: FakeHandle,
        user_state_handle: FakeHandle,
        move: OracleMove,
        role: Color,
    ) -> OracleMoveResult:
        self.submitted.append((game_state_handle, user_state_handle, move, role))
        if self.gate is not None:
            await self.gate.wait()
        if self.fail_submit:
            raise RuntimeError("move inconsistent with the hidden game state")

        game_version = game_state_handle.version
        user_version = user_state_handle.version
        record = HashRecord(
            input_game_state_hash="tampered" if self.tamper_game_hash else f"game-{game_version}",
            input_user_state_hash="tampered" if self.tamper_user_hash else f"{role}-{user_version}",
            output_game_state_hash=f"game-{game_version + 1}",
            output_user_state_hash=f"{role}-{user_version + 1}",
        )
        return OracleMoveResult(
            proof=f"proof-{game_version + 1}".encode(),
            new_user_state_handle=FakeHandle(str(role), user_version + 1),
            game_state_handle=FakeHandle("game", game_version + 1),
            hash_record=record,
        )

    async def consume_move(
        self,
        proof: bytes,
        public_inputs: PublicInputs,
        opponent_user_state_handle: FakeHandle,
        role: Color,
    ) -> ConsumeResult:
        self.consumed.append((proof, public_inputs, opponent_user_state_handle, role))
        if self.consume_gate is not None:
            await self.consume_gate.wait()
        if self.fail_consume:
            raise RuntimeError("proof rejected")
        handle = opponent_user_state_handle
        return ConsumeResult(
            user_state_handle=FakeHandle(handle.owner, handle.version, handle.consumed + 1),
            piece_records=list(self.revealed),
        )


class FakeInitializer:
    def __init__(self) -> None:
        self.commits: list[tuple[Color, str, str]] = []

    async def initialize(self) -> InitialState:
        return InitialState(
            game_state_handle=FakeHandle("game"),
            white_user_state_handle=FakeHandle(str(Color.WHITE)),
            black_user_state_handle=FakeHandle(str(Color.BLACK)),
        )

    async def commit_secrets(
        self, game_state_handle: FakeHandle, encrypt_secret: str, mask_secret: str, role: Color
    ) -> FakeHandle:
        self.commits.append((role, encrypt_secret, mask_secret))
        return game_state_handle


@pytest.fixture
def reveal() -> Callable[[Board], list[PieceRecord]]:
    """Call the inner function with a board: returns the piece records an oracle would send to reveal all of it"""

    def _records(board: Board) -> list[PieceRecord]:
        return [
            PieceRecord(
                id=hex(PIECE_TAGS[piece.color].index(piece.kind)),
                player_id=color_tag(piece.color),
                position=square.to_position(),
            )
            for square, piece in board.occupied().items()
        ]

    return _records


def color_tag(color: Color) -> str:
    return "0x00" if color == Color.WHITE else "0x01"


@pytest.fixture
def settings() -> Settings:
    """NOTE: fixed secrets, only ever acceptable in tests."""
    return Settings(
        oracle_timeout_s=None,
        database_url=DATABASE_URL,
        log_level="DEBUG",
        white_encrypt_secret="1",
        white_mask_secret="2",
        black_encrypt_secret="3",
        black_mask_secret="4",
    )


@pytest.fixture
def oracle() -> FakeOracle:
    return FakeOracle()


@pytest.fixture
def initializer() -> FakeInitializer:
    return FakeInitializer()


@pytest_asyncio.fixture
async def session(
    initializer: FakeInitializer, oracle: FakeOracle, settings: Settings
) -> GameSession:
    """A freshly initialized game session talking to the fake oracle."""
    return await GameSession.create(initializer, oracle, settings)
