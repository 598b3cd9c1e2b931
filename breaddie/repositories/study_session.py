"""Study session persistence."""

from __future__ import annotations

import uuid

from sqlalchemy import select

from breaddie.models.study_session import StudySession
from breaddie.repositories.base import BaseRepository


class StudySessionRepository(BaseRepository[StudySession]):
    async def get_for_user(self, session_id: uuid.UUID, user_id: uuid.UUID) -> StudySession | None:
        stmt = select(StudySession).where(
            StudySession.id == session_id,
            StudySession.user_id == user_id,
        )
        result = await self.session.execute(stmt)
        return result.scalar_one_or_none()


__all__ = ["StudySessionRepository"]
