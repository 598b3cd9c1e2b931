"""Adaptive story sessions and the rows hanging off them."""

from __future__ import annotations

import uuid
from datetime import datetime
from typing import Any

from sqlalchemy import DateTime, Float, ForeignKey, Integer, String, Text, Uuid, text
from sqlalchemy.orm import Mapped, mapped_column

from breaddie.models.base import Base, CreatedAtMixin, JSONType


class StorySession(CreatedAtMixin, Base):
    __tablename__ = "story_sessions"

    id: Mapped[uuid.UUID] = mapped_column(Uuid(), primary_key=True, default=uuid.uuid4)
    user_id: Mapped[uuid.UUID] = mapped_column(
        Uuid(),
        ForeignKey("profiles.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    target_words: Mapped[list[str]] = mapped_column(JSONType, nullable=False, default=list)
    story_title: Mapped[str] = mapped_column(String(500), nullable=False)
    story_content: Mapped[str] = mapped_column(Text, nullable=False)
    story_type: Mapped[str] = mapped_column(String(64), nullable=False)
    complexity_level: Mapped[int] = mapped_column(Integer, nullable=False)
    estimated_reading_time: Mapped[int] = mapped_column(Integer, nullable=False)
    integrated_news_articles: Mapped[list[str]] = mapped_column(JSONType, nullable=False, default=list)
    cultural_context: Mapped[dict[str, Any]] = mapped_column(JSONType, nullable=False, default=dict)
    status: Mapped[str] = mapped_column(
        String(16),
        nullable=False,
        default="active",
        server_default=text("'active'"),
    )

    completed_at: Mapped[datetime | None] = mapped_column(DateTime(timezone=True))
    actual_reading_time: Mapped[int | None] = mapped_column(Integer)
    comprehension_score: Mapped[float | None] = mapped_column(Float)
    difficulty_rating: Mapped[int | None] = mapped_column(Integer)
    relevance_rating: Mapped[int | None] = mapped_column(Integer)
    completion_percentage: Mapped[int | None] = mapped_column(Integer)


class StoryWordIntegration(CreatedAtMixin, Base):
    __tablename__ = "story_word_integrations"

    id: Mapped[uuid.UUID] = mapped_column(Uuid(), primary_key=True, default=uuid.uuid4)
    story_session_id: Mapped[uuid.UUID] = mapped_column(
        Uuid(),
        ForeignKey("story_sessions.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    word_id: Mapped[uuid.UUID] = mapped_column(Uuid(), nullable=False)
    position_in_story: Mapped[int | None] = mapped_column(Integer)
    integration_type: Mapped[str | None] = mapped_column(String(64))
    emphasis_type: Mapped[str | None] = mapped_column(String(64))
    context_strength: Mapped[float | None] = mapped_column(Float)
    word_form_used: Mapped[str | None] = mapped_column(String(255))
    alternative_forms: Mapped[list[str]] = mapped_column(JSONType, nullable=False, default=list)


class StoryComprehensionQuestion(CreatedAtMixin, Base):
    __tablename__ = "story_comprehension_questions"

    id: Mapped[uuid.UUID] = mapped_column(Uuid(), primary_key=True, default=uuid.uuid4)
    story_session_id: Mapped[uuid.UUID] = mapped_column(
        Uuid(),
        ForeignKey("story_sessions.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    question: Mapped[str] = mapped_column(Text, nullable=False)
    question_type: Mapped[str | None] = mapped_column(String(64))
    target_words: Mapped[list[str]] = mapped_column(JSONType, nullable=False, default=list)
    correct_answer: Mapped[str | None] = mapped_column(Text)
    multiple_choice_options: Mapped[list[str] | None] = mapped_column(JSONType)
    explanation: Mapped[str | None] = mapped_column(Text)
    difficulty_level: Mapped[int | None] = mapped_column(Integer)


class StoryUserInteraction(CreatedAtMixin, Base):
    __tablename__ = "story_user_interactions"

    id: Mapped[uuid.UUID] = mapped_column(Uuid(), primary_key=True, default=uuid.uuid4)
    story_session_id: Mapped[uuid.UUID] = mapped_column(
        Uuid(),
        ForeignKey("story_sessions.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    word_id: Mapped[uuid.UUID | None] = mapped_column(Uuid())
    interaction_type: Mapped[str] = mapped_column(String(64), nullable=False)
    user_response: Mapped[str | None] = mapped_column(Text)
    correctness_score: Mapped[float | None] = mapped_column(Float)
    time_taken: Mapped[int | None] = mapped_column(Integer)
    additional_context: Mapped[dict[str, Any]] = mapped_column(JSONType, nullable=False, default=dict)


__all__ = [
    "StoryComprehensionQuestion",
    "StorySession",
    "StoryUserInteraction",
    "StoryWordIntegration",
]
