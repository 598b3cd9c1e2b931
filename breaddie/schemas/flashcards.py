"""Deck, card review and study session payloads."""

from __future__ import annotations

import uuid
from datetime import datetime
from typing import Literal

from pydantic import BaseModel, ConfigDict, Field

SessionType = Literal["new", "review", "mixed", "cram", "practice"]


class DeckResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: uuid.UUID
    name: str
    description: str | None = None
    slug: str | None = None
    category: str | None = None
    difficulty_level: int | None = None
    is_public: bool
    card_count: int
    study_count: int
    created_by: uuid.UUID | None = None
    created_at: datetime | None = None


class DeckListResponse(BaseModel):
    data: list[DeckResponse]
    total: int
    limit: int
    offset: int


class CardReviewRequest(BaseModel):
    quality: int = Field(ge=0, le=5, description="Recall quality on the 0-5 scale.")


class CardReviewResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    card_id: uuid.UUID
    ease_factor: float
    interval: int
    repetitions: int
    next_review: datetime | None = None
    card_state: str
    total_reviews: int
    last_reviewed: datetime | None = None


class StudySessionStart(BaseModel):
    deck_id: uuid.UUID | None = None
    session_type: SessionType = "mixed"


class StudySessionEnd(BaseModel):
    cards_studied: int = Field(default=0, ge=0)
    new_cards: int = Field(default=0, ge=0)
    review_cards: int = Field(default=0, ge=0)
    correct_answers: int = Field(default=0, ge=0)
    average_response_time: float | None = Field(default=None, ge=0)


class StudySessionResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: uuid.UUID
    user_id: uuid.UUID
    deck_id: uuid.UUID | None = None
    session_type: str
    start_time: datetime
    end_time: datetime | None = None
    cards_studied: int
    new_cards: int
    review_cards: int
    correct_answers: int
    total_time: int | None = None
    average_response_time: float | None = None


__all__ = [
    "CardReviewRequest",
    "CardReviewResponse",
    "DeckListResponse",
    "DeckResponse",
    "SessionType",
    "StudySessionEnd",
    "StudySessionResponse",
    "StudySessionStart",
]
