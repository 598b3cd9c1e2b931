"""Story session rows and the remote word/news selection procedures."""

from __future__ import annotations

import uuid
from datetime import datetime
from typing import Any

from sqlalchemy import select, update
from sqlalchemy.dialects.postgresql import ARRAY
from sqlalchemy.types import String

from breaddie.models.story import (
    StoryComprehensionQuestion,
    StorySession,
    StoryUserInteraction,
    StoryWordIntegration,
)
from breaddie.repositories.base import BaseRepository


class StoryRepository(BaseRepository[StorySession]):
    async def fetch_words_for_story(self, user_id: uuid.UUID, max_words: int) -> list[dict[str, Any]]:
        """Due words as ``word_id, word, definition, contexts, mastery_score`` rows."""
        return await self.call_function(
            "get_user_words_for_story",
            {"p_user_id": user_id, "p_max_words": max_words},
        )

    async def fetch_relevant_news(
        self,
        *,
        categories: list[str],
        max_articles: int,
        days_back: int,
        complexity_level: int,
    ) -> list[dict[str, Any]]:
        return await self.call_function(
            "get_relevant_news",
            {
                "p_categories": categories,
                "p_max_articles": max_articles,
                "p_days_back": days_back,
                "p_complexity_level": complexity_level,
            },
            bind_types={"p_categories": ARRAY(String())},
        )

    async def get_session(self, session_id: uuid.UUID) -> StorySession | None:
        return await self.session.get(StorySession, session_id)

    async def add_integrations(self, rows: list[StoryWordIntegration]) -> list[StoryWordIntegration]:
        return await self.add_all(rows)  # type: ignore[arg-type, return-value]

    async def add_questions(
        self,
        rows: list[StoryComprehensionQuestion],
    ) -> list[StoryComprehensionQuestion]:
        return await self.add_all(rows)  # type: ignore[arg-type, return-value]

    async def add_interaction(self, interaction: StoryUserInteraction) -> StoryUserInteraction:
        await self.add_all([interaction])  # type: ignore[list-item]
        return interaction

    async def list_integrations(self, session_id: uuid.UUID) -> list[StoryWordIntegration]:
        stmt = (
            select(StoryWordIntegration)
            .where(StoryWordIntegration.story_session_id == session_id)
            .order_by(StoryWordIntegration.position_in_story.asc())
        )
        result = await self.session.execute(stmt)
        return list(result.scalars())

    async def list_questions(self, session_id: uuid.UUID) -> list[StoryComprehensionQuestion]:
        stmt = select(StoryComprehensionQuestion).where(
            StoryComprehensionQuestion.story_session_id == session_id
        )
        result = await self.session.execute(stmt)
        return list(result.scalars())

    async def mark_completed(
        self,
        session_id: uuid.UUID,
        *,
        completed_at: datetime,
        actual_reading_time: int,
        comprehension_score: float,
        difficulty_rating: int | None,
        relevance_rating: int | None,
    ) -> bool:
        stmt = (
            update(StorySession)
            .where(StorySession.id == session_id)
            .values(
                status="completed",
                completed_at=completed_at,
                actual_reading_time=actual_reading_time,
                comprehension_score=comprehension_score,
                difficulty_rating=difficulty_rating,
                relevance_rating=relevance_rating,
                completion_percentage=100,
            )
            .execution_options(synchronize_session=False)
        )
        result = await self.session.execute(stmt)
        return bool(result.rowcount)


__all__ = ["StoryRepository"]
