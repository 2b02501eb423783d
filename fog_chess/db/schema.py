"""Database tables / schema"""

from datetime import datetime, timezone
from uuid import UUID

from sqlalchemy import JSON
from sqlalchemy.orm import DeclarativeBase, Mapped, mapped_column


def utc_now() -> datetime:
    return datetime.now(timezone.utc)


class Base(DeclarativeBase):
    pass


class DBTranscript(Base):
    __tablename__ = "transcripts"
    id: Mapped[UUID] = mapped_column(primary_key=True)
    moves_uci: Mapped[list[str]] = mapped_column(JSON, default=list)
    game_state_hashes: Mapped[list[str]] = mapped_column(JSON, default=list)
    user_state_hashes: Mapped[dict[str, list[str]]] = mapped_column(JSON)
    status: Mapped[str]
    created_at: Mapped[datetime] = mapped_column(default=utc_now)
    updated_at: Mapped[datetime] = mapped_column(default=utc_now, onupdate=utc_now)
