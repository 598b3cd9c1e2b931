"""Public user profile rows keyed by the hosted auth user id."""

from __future__ import annotations

import uuid
from typing import Any

from sqlalchemy import Boolean, Integer, String, Text, Uuid, text
from sqlalchemy.orm import Mapped, mapped_column

from breaddie.models.base import Base, JSONType, TimestampMixin

UNIT_SYSTEMS = ("metric", "imperial")


class Profile(TimestampMixin, Base):
    """A member's public profile and study preferences."""

    __tablename__ = "profiles"

    id: Mapped[uuid.UUID] = mapped_column(Uuid(), primary_key=True)
    name: Mapped[str | None] = mapped_column(String(255))
    username: Mapped[str | None] = mapped_column(String(64), unique=True, index=True)
    avatar_url: Mapped[str | None] = mapped_column(Text)
    bio: Mapped[str | None] = mapped_column(Text)
    preferred_unit_system: Mapped[str | None] = mapped_column(String(16))
    timezone: Mapped[str | None] = mapped_column(String(64))

    daily_study_goal: Mapped[int | None] = mapped_column(Integer)
    max_new_cards: Mapped[int | None] = mapped_column(Integer)
    max_review_cards: Mapped[int | None] = mapped_column(Integer)
    ai_content_generation: Mapped[bool] = mapped_column(
        Boolean,
        nullable=False,
        default=True,
        server_default=text("true"),
    )
    preferred_languages: Mapped[list[str] | None] = mapped_column(JSONType)
    story_preferences: Mapped[dict[str, Any] | None] = mapped_column(JSONType)


__all__ = ["Profile", "UNIT_SYSTEMS"]
