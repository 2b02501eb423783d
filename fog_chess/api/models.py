"""Requests and Response models"""

from typing import Optional
from uuid import UUID

from pydantic import BaseModel, field_validator

from fog_chess.chess.square import BOARD_DIMENSIONS
from fog_chess.core.exceptions import InvalidRequestError
from fog_chess.core.shared_types import Color, MoveOutcome

PieceColor = str
PieceCode = str


def _validate_coordinate(value: int) -> int:
    if not 0 <= value < BOARD_DIMENSIONS[0]:
        raise InvalidRequestError(
            f"Coordinate {value!r} lies outside the board (0-{BOARD_DIMENSIONS[0] - 1})."
        )
    return value


# --- REQUEST MODELS ---
class CreateGameRequest(BaseModel):
    """Nothing to choose yet: both players share one session. Secrets come from the settings."""


class MoveRequest(BaseModel):
    game_id: UUID
    role: Color
    from_row: int
    from_col: int
    to_row: int
    to_col: int

    @field_validator("from_row", "from_col", "to_row", "to_col")
    @classmethod
    def validate_coordinate(cls, value: int) -> int:
        return _validate_coordinate(value)


class ClickRequest(BaseModel):
    game_id: UUID
    role: Color
    row: int
    col: int

    @field_validator("row", "col")
    @classmethod
    def validate_coordinate(cls, value: int) -> int:
        return _validate_coordinate(value)


class RetryRequest(BaseModel):
    game_id: UUID


class GetGameRequest(BaseModel):
    game_id: UUID


class DeleteGameRequest(BaseModel):
    game_id: UUID


# --- RESPONSE MODELS ---
class GameResponse(BaseModel):
    game_id: UUID
    outcome: Optional[MoveOutcome]
    message: str
    busy: bool
    boards: dict[PieceColor, list[list[Optional[PieceCode]]]]
    stale_views: list[Color]
    game_state_hashes: list[str]
    move_history: list[str]
