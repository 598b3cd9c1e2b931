"""Flashcard study session rows."""

from __future__ import annotations

import uuid
from datetime import datetime

from sqlalchemy import DateTime, Float, ForeignKey, Integer, String, Uuid, func, text
from sqlalchemy.orm import Mapped, mapped_column

from breaddie.models.base import Base

SESSION_TYPES = ("new", "review", "mixed", "cram", "practice")


class StudySession(Base):
    __tablename__ = "study_sessions"

    id: Mapped[uuid.UUID] = mapped_column(Uuid(), primary_key=True, default=uuid.uuid4)
    user_id: Mapped[uuid.UUID] = mapped_column(
        Uuid(),
        ForeignKey("profiles.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    deck_id: Mapped[uuid.UUID | None] = mapped_column(
        Uuid(),
        ForeignKey("decks.id", ondelete="SET NULL"),
    )
    session_type: Mapped[str] = mapped_column(String(16), nullable=False, default="mixed")
    start_time: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        nullable=False,
        server_default=func.now(),
    )
    end_time: Mapped[datetime | None] = mapped_column(DateTime(timezone=True))
    cards_studied: Mapped[int] = mapped_column(Integer, nullable=False, default=0, server_default=text("0"))
    new_cards: Mapped[int] = mapped_column(Integer, nullable=False, default=0, server_default=text("0"))
    review_cards: Mapped[int] = mapped_column(Integer, nullable=False, default=0, server_default=text("0"))
    correct_answers: Mapped[int] = mapped_column(Integer, nullable=False, default=0, server_default=text("0"))
    total_time: Mapped[int | None] = mapped_column(Integer)
    average_response_time: Mapped[float | None] = mapped_column(Float)


__all__ = ["SESSION_TYPES", "StudySession"]
