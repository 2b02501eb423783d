"""Protocol repository (SQLAlchemy implementation in sql_repository.py, a dictionary will do for tests)"""

from typing import Protocol
from uuid import UUID

from fog_chess.core.models import TranscriptModel


class TranscriptRepository(Protocol):
    """Persistence layer orchestration"""

    def get_transcript(self, game_id: UUID) -> TranscriptModel | None:
        """Get transcript by game ID, if record exists."""
        ...

    def create_transcript(self, transcript: TranscriptModel) -> tuple[TranscriptModel, UUID]:
        """Store new transcript and return the stored data + newly created game ID."""
        ...

    def update_transcript(
        self, game_id: UUID, transcript: TranscriptModel
    ) -> TranscriptModel | None:
        """Replace the recorded transcript of an existing game."""
        ...

    def delete_transcript(self, game_id: UUID) -> TranscriptModel | None:
        """Remove a game's transcript."""
        ...
