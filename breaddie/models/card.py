"""Flashcards and the per-user spaced-repetition review state."""

from __future__ import annotations

import uuid
from datetime import datetime

from sqlalchemy import DateTime, Float, ForeignKey, Integer, String, Text, UniqueConstraint, Uuid, text
from sqlalchemy.orm import Mapped, mapped_column

from breaddie.models.base import Base, JSONType, TimestampMixin

CARD_STATES = ("new", "learning", "review", "relearning")


class Card(TimestampMixin, Base):
    __tablename__ = "cards"

    id: Mapped[uuid.UUID] = mapped_column(Uuid(), primary_key=True, default=uuid.uuid4)
    deck_id: Mapped[uuid.UUID] = mapped_column(
        Uuid(),
        ForeignKey("decks.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    front_text: Mapped[str] = mapped_column(Text, nullable=False)
    back_text: Mapped[str] = mapped_column(Text, nullable=False)
    card_type: Mapped[str | None] = mapped_column(String(32))
    difficulty_level: Mapped[int | None] = mapped_column(Integer)
    tags: Mapped[list[str] | None] = mapped_column(JSONType)
    created_by: Mapped[uuid.UUID | None] = mapped_column(
        Uuid(),
        ForeignKey("profiles.id", ondelete="SET NULL"),
    )


class CardReview(TimestampMixin, Base):
    """Scheduling state of one card for one learner."""

    __tablename__ = "card_reviews"
    __table_args__ = (UniqueConstraint("card_id", "user_id"),)

    id: Mapped[uuid.UUID] = mapped_column(Uuid(), primary_key=True, default=uuid.uuid4)
    card_id: Mapped[uuid.UUID] = mapped_column(
        Uuid(),
        ForeignKey("cards.id", ondelete="CASCADE"),
        nullable=False,
    )
    user_id: Mapped[uuid.UUID] = mapped_column(
        Uuid(),
        ForeignKey("profiles.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    ease_factor: Mapped[float] = mapped_column(Float, nullable=False, default=2.5, server_default=text("2.5"))
    interval: Mapped[int] = mapped_column(Integer, nullable=False, default=0, server_default=text("0"))
    repetitions: Mapped[int] = mapped_column(Integer, nullable=False, default=0, server_default=text("0"))
    next_review: Mapped[datetime | None] = mapped_column(DateTime(timezone=True))
    card_state: Mapped[str] = mapped_column(String(16), nullable=False, default="new", server_default=text("'new'"))
    total_reviews: Mapped[int] = mapped_column(Integer, nullable=False, default=0, server_default=text("0"))
    last_reviewed: Mapped[datetime | None] = mapped_column(DateTime(timezone=True))


__all__ = ["CARD_STATES", "Card", "CardReview"]
