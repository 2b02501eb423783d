"""Implementation of (Transcript)Repository using SQLAlchemy"""

from uuid import UUID, uuid4

from sqlalchemy import select
from sqlalchemy.orm import Session

from fog_chess.core.models import TranscriptModel
from fog_chess.db.schema import DBTranscript


class SQLTranscriptRepository:
    """Data stored using SQL / methods implemented using SQLAlchemy"""

    def __init__(self, db_session: Session) -> None:
        self.db = db_session

    def get_transcript(self, game_id: UUID) -> TranscriptModel | None:
        transcript_db = self._fetch_transcript(game_id)
        if transcript_db:
            return self._to_model(transcript_db)
        return None

    def create_transcript(self, transcript: TranscriptModel) -> tuple[TranscriptModel, UUID]:
        new_id = uuid4()
        transcript_db = DBTranscript(
            id=new_id,
            moves_uci=list(transcript.moves_uci),
            game_state_hashes=list(transcript.game_state_hashes),
            user_state_hashes={
                color: list(hashes) for color, hashes in transcript.user_state_hashes.items()
            },
            status=transcript.status,
        )
        self.db.add(transcript_db)
        self.db.commit()
        self.db.refresh(transcript_db)
        return self._to_model(transcript_db), new_id

    def update_transcript(
        self, game_id: UUID, transcript: TranscriptModel
    ) -> TranscriptModel | None:
        transcript_db = self._fetch_transcript(game_id)
        if not transcript_db:
            return None
        # NOTE: assign new containers, SQLAlchemy does not track in-place changes of JSON columns
        transcript_db.moves_uci = list(transcript.moves_uci)
        transcript_db.game_state_hashes = list(transcript.game_state_hashes)
        transcript_db.user_state_hashes = {
            color: list(hashes) for color, hashes in transcript.user_state_hashes.items()
        }
        transcript_db.status = transcript.status
        self.db.commit()
        self.db.refresh(transcript_db)
        return self._to_model(transcript_db)

    def delete_transcript(self, game_id: UUID) -> TranscriptModel | None:
        transcript_db = self._fetch_transcript(game_id)
        if not transcript_db:
            return None
        transcript_model = self._to_model(transcript_db)
        self.db.delete(transcript_db)
        self.db.commit()
        return transcript_model

    def _fetch_transcript(self, game_id: UUID) -> DBTranscript | None:
        query = select(DBTranscript).where(DBTranscript.id == game_id)
        return self.db.scalar(query)

    def _to_model(self, transcript_db: DBTranscript) -> TranscriptModel:
        """Convert SQLAlchemy model to data transfer model."""
        return TranscriptModel(
            moves_uci=list(transcript_db.moves_uci),
            game_state_hashes=list(transcript_db.game_state_hashes),
            user_state_hashes={
                color: list(hashes)
                for color, hashes in transcript_db.user_state_hashes.items()
            },
            status=transcript_db.status,
        )
