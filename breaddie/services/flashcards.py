"""Deck listing, card review scheduling and study session lifecycle."""

from __future__ import annotations

import logging
import uuid
from datetime import datetime, timezone

from sqlalchemy.ext.asyncio import AsyncSession

from breaddie.core.errors import ApplicationError, ErrorCode, ExternalServiceError, NotFoundError
from breaddie.models.card import CardReview
from breaddie.models.deck import Deck
from breaddie.models.study_session import StudySession
from breaddie.repositories.card import CardRepository
from breaddie.repositories.deck import DeckRepository
from breaddie.repositories.study_session import StudySessionRepository
from breaddie.schemas.flashcards import StudySessionEnd, StudySessionStart

logger = logging.getLogger("breaddie.services.flashcards")

INITIAL_EASE = 2.5
PASSING_QUALITY = 3


class DeckService:
    def __init__(self, repository: DeckRepository) -> None:
        self.repository = repository

    @property
    def session(self) -> AsyncSession:
        return self.repository.session

    async def list_decks(self, user_id: uuid.UUID, *, limit: int = 50, offset: int = 0) -> tuple[list[Deck], int]:
        return await self.repository.list_visible(user_id, limit=limit, offset=offset)


class CardReviewService:
    """Records a review; the next interval comes from the database scheduler."""

    def __init__(self, repository: CardRepository) -> None:
        self.repository = repository

    @property
    def session(self) -> AsyncSession:
        return self.repository.session

    async def review_card(self, user_id: uuid.UUID, card_id: uuid.UUID, quality: int) -> CardReview:
        card = await self.repository.get(card_id)
        if card is None:
            raise NotFoundError(code=ErrorCode.CARD_NOT_FOUND, message="Card not found.")

        review = await self.repository.get_review(card_id, user_id)
        if review is None:
            review = CardReview(
                card_id=card_id,
                user_id=user_id,
                ease_factor=INITIAL_EASE,
                interval=0,
                repetitions=0,
                total_reviews=0,
                card_state="new",
            )
            await self.repository.add(review)  # type: ignore[arg-type]

        schedule = await self.repository.calculate_next_review(
            current_ease=review.ease_factor,
            current_interval=review.interval,
            quality=quality,
        )
        if schedule is None:
            raise ExternalServiceError(
                code=ErrorCode.DATABASE_ERROR,
                message="Scheduler returned no result.",
            )

        review.ease_factor = schedule["new_ease"]
        review.interval = schedule["new_interval"]
        review.next_review = schedule["next_review"]
        review.total_reviews += 1
        review.last_reviewed = datetime.now(timezone.utc)
        if quality >= PASSING_QUALITY:
            review.repetitions += 1
            review.card_state = "review"
        else:
            review.repetitions = 0
            review.card_state = "relearning" if review.card_state == "review" else "learning"
        await self.session.flush()

        logger.info(
            "Card reviewed",
            extra={
                "card_id": str(card_id),
                "user_id": str(user_id),
                "quality": quality,
                "interval": review.interval,
            },
        )
        return review


class StudySessionService:
    def __init__(self, repository: StudySessionRepository, deck_repository: DeckRepository) -> None:
        self.repository = repository
        self.deck_repository = deck_repository

    @property
    def session(self) -> AsyncSession:
        return self.repository.session

    async def start_session(self, user_id: uuid.UUID, payload: StudySessionStart) -> StudySession:
        if payload.deck_id is not None and await self.deck_repository.get(payload.deck_id) is None:
            raise NotFoundError(code=ErrorCode.DECK_NOT_FOUND, message="Deck not found.")

        study_session = StudySession(
            user_id=user_id,
            deck_id=payload.deck_id,
            session_type=payload.session_type,
            start_time=datetime.now(timezone.utc),
            cards_studied=0,
            new_cards=0,
            review_cards=0,
            correct_answers=0,
        )
        await self.repository.add(study_session)
        return study_session

    async def end_session(
        self,
        user_id: uuid.UUID,
        session_id: uuid.UUID,
        payload: StudySessionEnd,
    ) -> StudySession:
        study_session = await self.repository.get_for_user(session_id, user_id)
        if study_session is None:
            raise NotFoundError(code=ErrorCode.STUDY_SESSION_NOT_FOUND, message="Study session not found.")
        if study_session.end_time is not None:
            raise ApplicationError(
                code=ErrorCode.CONFLICT,
                message="Study session already ended.",
                status_code=409,
            )
        if payload.correct_answers > payload.cards_studied:
            raise ApplicationError(
                code=ErrorCode.VALIDATION_ERROR,
                message="correct_answers cannot exceed cards_studied.",
                status_code=422,
            )

        ended_at = datetime.now(timezone.utc)
        started_at = study_session.start_time
        if started_at.tzinfo is None:
            started_at = started_at.replace(tzinfo=timezone.utc)

        study_session.end_time = ended_at
        study_session.total_time = max(int((ended_at - started_at).total_seconds()), 0)
        study_session.cards_studied = payload.cards_studied
        study_session.new_cards = payload.new_cards
        study_session.review_cards = payload.review_cards
        study_session.correct_answers = payload.correct_answers
        study_session.average_response_time = payload.average_response_time
        await self.session.flush()
        return study_session


__all__ = ["CardReviewService", "DeckService", "StudySessionService"]
