"""Adaptive story generation and story-session bookkeeping."""

from __future__ import annotations

import logging
import math
import uuid
from datetime import datetime, timezone
from typing import Any

from pydantic import ValidationError
from sqlalchemy.exc import DBAPIError, SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from breaddie.core.metrics import record_story_outcome
from breaddie.core.results import OperationStatus
from breaddie.models.story import (
    StoryComprehensionQuestion,
    StorySession,
    StoryUserInteraction,
    StoryWordIntegration,
)
from breaddie.repositories.card import CardRepository
from breaddie.repositories.profile import ProfileRepository
from breaddie.repositories.story import StoryRepository
from breaddie.schemas.story import (
    DueWord,
    GeneratedStory,
    NewsArticle,
    StoryGenerationFailure,
    StoryGenerationResult,
    StoryPreferences,
)
from breaddie.services.llm import LLMService
from breaddie.services.prompts import PromptRenderer

logger = logging.getLogger("breaddie.services.story_generation")

DEFAULT_NEWS_CATEGORIES = ("world_news", "technology", "culture")
DEFAULT_MAX_NEWS_ARTICLES = 2
NEWS_COMPLEXITY_LEVEL = 3
NEWS_RECENCY_DAYS = {"today": 1, "this_week": 7, "this_month": 30}
DEFAULT_NEWS_DAYS = 7

STORY_SESSION_NOT_FOUND = "Story session not found"


def news_recency_days(recency: str | None) -> int:
    return NEWS_RECENCY_DAYS.get(recency or "this_week", DEFAULT_NEWS_DAYS)


def quality_from_score(comprehension_score: float) -> int:
    """Map a 0..1 comprehension score onto the review quality scale used by the scheduler."""
    if comprehension_score >= 0.8:
        return 4
    if comprehension_score >= 0.6:
        return 3
    return 2


def match_word_id(words: list[DueWord], text: str | None) -> uuid.UUID | None:
    """Case-insensitive exact match of ``text`` against the due words."""
    if not text:
        return None
    needle = text.lower()
    for word in words:
        if word.word.lower() == needle:
            return word.word_id
    return None


def _mastery_percent(score: float) -> int:
    # Half-up rounding so 0.125 shows as 13%, not banker's 12%.
    return int(math.floor(score * 100 + 0.5))


def build_prompt_context(
    words: list[DueWord],
    news: list[NewsArticle],
    preferences: StoryPreferences,
) -> dict[str, Any]:
    return {
        "words": [
            {
                "word": word.word,
                "definition": word.definition,
                "mastery_percent": _mastery_percent(word.mastery_score),
            }
            for word in words
        ],
        "news": [{"headline": article.headline, "summary": article.summary} for article in news],
        "interests": ", ".join(preferences.interests or []) or "general",
        "attention_span": preferences.attention_span or "medium",
        "cultural_background": preferences.cultural_background or "mixed",
        "learning_goals": ", ".join(preferences.learning_goals or []) or "vocabulary building",
    }


def _db_message(exc: SQLAlchemyError) -> str:
    if isinstance(exc, DBAPIError) and exc.orig is not None:
        return str(exc.orig)
    return str(exc)


class StoryGenerationService:
    """
    Runs the adaptive story pipeline.

    Steps run strictly one after another: due words, preferences, optional
    news, prompt, model call, then the session row and its dependent rows.
    Each insert is committed on its own, so a failure after the session row
    leaves that row in place.
    """

    def __init__(
        self,
        story_repository: StoryRepository,
        profile_repository: ProfileRepository,
        card_repository: CardRepository,
        llm: LLMService | None,
        renderer: PromptRenderer | None = None,
        *,
        temperature: float = 0.8,
        max_tokens: int = 2000,
    ) -> None:
        self.story_repository = story_repository
        self.profile_repository = profile_repository
        self.card_repository = card_repository
        self.llm = llm
        self.renderer = renderer or PromptRenderer()
        self.temperature = temperature
        self.max_tokens = max_tokens

    @property
    def session(self) -> AsyncSession:
        return self.story_repository.session

    async def generate_adaptive_story(
        self,
        user_id: uuid.UUID,
        max_words: int = 5,
        include_news: bool = True,
    ) -> StoryGenerationResult | StoryGenerationFailure:
        try:
            try:
                rows = await self.story_repository.fetch_words_for_story(user_id, max_words)
            except SQLAlchemyError as exc:
                await self.session.rollback()
                return self._failure(user_id, "words_failed", "Failed to fetch user words: " + _db_message(exc))

            words = [DueWord.model_validate(row) for row in rows]
            if not words:
                return self._failure(user_id, "no_words", "No words due for review found")

            preferences = StoryPreferences.model_validate(
                await self.profile_repository.get_story_preferences(user_id)
            )
            news = await self._fetch_news(preferences) if include_news else []

            story = await self._generate_story(words, news, preferences)

            try:
                story_session = await self._create_session(user_id, words, news, story)
            except SQLAlchemyError as exc:
                await self.session.rollback()
                return self._failure(
                    user_id,
                    "session_failed",
                    "Failed to create story session: " + _db_message(exc),
                )

            await self._persist_integrations(story_session.id, words, story)
            await self._persist_questions(story_session.id, words, story)
        except Exception as exc:  # noqa: BLE001 - the action reports, it never raises
            logger.exception("Story generation failed", extra={"user_id": str(user_id)})
            return self._failure(user_id, "failed", f"Failed to generate story: {exc}")

        record_story_outcome("success")
        logger.info(
            "Story generated",
            extra={
                "user_id": str(user_id),
                "story_session_id": str(story_session.id),
                "word_count": len(words),
                "news_count": len(news),
            },
        )
        return StoryGenerationResult(story=story, session_id=story_session.id)

    async def _fetch_news(self, preferences: StoryPreferences) -> list[NewsArticle]:
        settings = preferences.news_integration
        if settings is not None and settings.include_news is False:
            return []

        categories = list((settings and settings.preferred_categories) or DEFAULT_NEWS_CATEGORIES)
        max_articles = (settings and settings.max_news_elements) or DEFAULT_MAX_NEWS_ARTICLES
        recency = settings.news_recency if settings else None
        try:
            rows = await self.story_repository.fetch_relevant_news(
                categories=categories,
                max_articles=max_articles,
                days_back=news_recency_days(recency),
                complexity_level=NEWS_COMPLEXITY_LEVEL,
            )
        except SQLAlchemyError as exc:
            await self.session.rollback()
            logger.warning("News lookup failed; continuing without news", extra={"error": _db_message(exc)})
            return []
        articles: list[NewsArticle] = []
        for row in rows:
            try:
                articles.append(NewsArticle.model_validate(row))
            except ValidationError as exc:
                logger.warning("Skipping malformed news row", extra={"error": str(exc)})
        return articles

    async def _generate_story(
        self,
        words: list[DueWord],
        news: list[NewsArticle],
        preferences: StoryPreferences,
    ) -> GeneratedStory:
        if self.llm is None:
            raise RuntimeError("OPENAI_API_KEY is not configured")

        context = build_prompt_context(words, news, preferences)
        messages = [
            {"role": "system", "content": self.renderer.render("story/system.txt", {}).strip()},
            {"role": "user", "content": self.renderer.render("story/user.txt", context)},
        ]
        story, _usage = await self.llm.chat_json(
            messages,
            GeneratedStory,
            temperature=self.temperature,
            max_tokens=self.max_tokens,
            operation="story_generation",
        )
        return story

    async def _create_session(
        self,
        user_id: uuid.UUID,
        words: list[DueWord],
        news: list[NewsArticle],
        story: GeneratedStory,
    ) -> StorySession:
        story_session = StorySession(
            user_id=user_id,
            target_words=[str(word.word_id) for word in words],
            story_title=story.title,
            story_content=story.content,
            story_type=story.story_type,
            complexity_level=story.complexity_level,
            estimated_reading_time=story.estimated_reading_time,
            integrated_news_articles=[str(article.article_id) for article in news],
            cultural_context=story.cultural_context,
            status="active",
        )
        await self.story_repository.add(story_session)
        await self.session.commit()
        return story_session

    async def _persist_integrations(
        self,
        session_id: uuid.UUID,
        words: list[DueWord],
        story: GeneratedStory,
    ) -> None:
        rows: list[StoryWordIntegration] = []
        for point in story.word_integration_points:
            word_id = match_word_id(words, point.word)
            if word_id is None:
                continue
            rows.append(
                StoryWordIntegration(
                    story_session_id=session_id,
                    word_id=word_id,
                    position_in_story=point.position,
                    integration_type=point.integration_type,
                    emphasis_type=point.learning_emphasis,
                    context_strength=point.context_strength,
                    word_form_used=point.word,
                    alternative_forms=list(point.alternative_forms),
                )
            )

        dropped = len(story.word_integration_points) - len(rows)
        if dropped:
            logger.info(
                "Dropped integration points without a matching due word",
                extra={"story_session_id": str(session_id), "dropped": dropped},
            )
        if not rows:
            return

        try:
            await self.story_repository.add_integrations(rows)
            await self.session.commit()
        except SQLAlchemyError as exc:
            await self.session.rollback()
            logger.warning(
                "Word integrations not saved; story session kept",
                extra={"story_session_id": str(session_id), "error": _db_message(exc)},
            )

    async def _persist_questions(
        self,
        session_id: uuid.UUID,
        words: list[DueWord],
        story: GeneratedStory,
    ) -> None:
        rows = [
            StoryComprehensionQuestion(
                story_session_id=session_id,
                question=question.question,
                question_type=question.question_type,
                target_words=[
                    str(word_id)
                    for word_id in (match_word_id(words, text) for text in question.target_words)
                    if word_id is not None
                ],
                correct_answer=question.correct_answer,
                multiple_choice_options=list(question.multiple_choice_options),
                explanation=question.explanation,
                difficulty_level=question.difficulty_level,
            )
            for question in story.comprehension_questions
        ]
        if not rows:
            return

        try:
            await self.story_repository.add_questions(rows)
            await self.session.commit()
        except SQLAlchemyError as exc:
            await self.session.rollback()
            logger.warning(
                "Comprehension questions not saved; story session kept",
                extra={"story_session_id": str(session_id), "error": _db_message(exc)},
            )

    def _failure(self, user_id: uuid.UUID, outcome: str, message: str) -> StoryGenerationFailure:
        record_story_outcome(outcome)
        logger.info("Story generation stopped", extra={"user_id": str(user_id), "outcome": outcome})
        return StoryGenerationFailure(error=message)

    async def _owned_session(self, session_id: uuid.UUID, user_id: uuid.UUID | None) -> StorySession | None:
        story_session = await self.story_repository.get_session(session_id)
        if story_session is None:
            return None
        if user_id is not None and story_session.user_id != user_id:
            return None
        return story_session

    async def record_user_interaction(
        self,
        session_id: uuid.UUID,
        word_id: uuid.UUID | None,
        interaction_type: str,
        user_response: str | None = None,
        correctness_score: float | None = None,
        time_taken: int | None = None,
        *,
        user_id: uuid.UUID | None = None,
    ) -> OperationStatus:
        try:
            if await self._owned_session(session_id, user_id) is None:
                return OperationStatus(success=False, error=STORY_SESSION_NOT_FOUND)

            await self.story_repository.add_interaction(
                StoryUserInteraction(
                    story_session_id=session_id,
                    word_id=word_id,
                    interaction_type=interaction_type,
                    user_response=user_response,
                    correctness_score=correctness_score,
                    time_taken=time_taken,
                    additional_context={},
                )
            )
            await self.session.commit()
        except SQLAlchemyError as exc:
            await self.session.rollback()
            return OperationStatus(success=False, error=_db_message(exc))
        return OperationStatus(success=True)

    async def complete_story_session(
        self,
        session_id: uuid.UUID,
        comprehension_score: float,
        reading_time: int,
        difficulty_rating: int | None = None,
        relevance_rating: int | None = None,
        *,
        user_id: uuid.UUID | None = None,
    ) -> OperationStatus:
        try:
            story_session = await self._owned_session(session_id, user_id)
            if story_session is None:
                return OperationStatus(success=False, error=STORY_SESSION_NOT_FOUND)

            await self.story_repository.mark_completed(
                session_id,
                completed_at=datetime.now(timezone.utc),
                actual_reading_time=reading_time,
                comprehension_score=comprehension_score,
                difficulty_rating=difficulty_rating,
                relevance_rating=relevance_rating,
            )
            await self.session.commit()
        except SQLAlchemyError as exc:
            await self.session.rollback()
            return OperationStatus(success=False, error=_db_message(exc))

        await self._update_word_progress(story_session, comprehension_score)
        return OperationStatus(success=True)

    async def _update_word_progress(self, story_session: StorySession, comprehension_score: float) -> None:
        """Reschedule each target word the learner already has a review row for."""
        quality = quality_from_score(comprehension_score)
        now = datetime.now(timezone.utc)
        updated = 0
        try:
            for raw_word_id in story_session.target_words or []:
                review = await self.card_repository.get_review(uuid.UUID(str(raw_word_id)), story_session.user_id)
                if review is None:
                    continue
                schedule = await self.card_repository.calculate_next_review(
                    current_ease=review.ease_factor,
                    current_interval=review.interval,
                    quality=quality,
                )
                if schedule is None:
                    continue
                review.ease_factor = schedule["new_ease"]
                review.interval = schedule["new_interval"]
                review.next_review = schedule["next_review"]
                review.repetitions += 1
                review.total_reviews += 1
                review.last_reviewed = now
                review.card_state = "review"
                updated += 1
            await self.session.commit()
        except (SQLAlchemyError, ValueError, KeyError) as exc:
            await self.session.rollback()
            logger.warning(
                "Word progress update failed after story completion",
                extra={"story_session_id": str(story_session.id), "error": str(exc)},
            )
            return

        logger.info(
            "Word progress updated from story",
            extra={"story_session_id": str(story_session.id), "quality": quality, "updated": updated},
        )


__all__ = [
    "DEFAULT_NEWS_CATEGORIES",
    "STORY_SESSION_NOT_FOUND",
    "StoryGenerationService",
    "build_prompt_context",
    "match_word_id",
    "news_recency_days",
    "quality_from_score",
]
