"""Flashcard decks."""

from __future__ import annotations

import uuid

from sqlalchemy import Boolean, ForeignKey, Integer, String, Text, Uuid, text
from sqlalchemy.orm import Mapped, mapped_column

from breaddie.models.base import Base, TimestampMixin


class Deck(TimestampMixin, Base):
    __tablename__ = "decks"

    id: Mapped[uuid.UUID] = mapped_column(Uuid(), primary_key=True, default=uuid.uuid4)
    name: Mapped[str] = mapped_column(String(255), nullable=False)
    description: Mapped[str | None] = mapped_column(Text)
    slug: Mapped[str | None] = mapped_column(String(255), unique=True)
    category: Mapped[str | None] = mapped_column(String(100))
    difficulty_level: Mapped[int | None] = mapped_column(Integer)
    is_public: Mapped[bool] = mapped_column(
        Boolean,
        nullable=False,
        default=False,
        server_default=text("false"),
    )
    card_count: Mapped[int] = mapped_column(Integer, nullable=False, default=0, server_default=text("0"))
    study_count: Mapped[int] = mapped_column(Integer, nullable=False, default=0, server_default=text("0"))
    created_by: Mapped[uuid.UUID | None] = mapped_column(
        Uuid(),
        ForeignKey("profiles.id", ondelete="SET NULL"),
    )


__all__ = ["Deck"]
