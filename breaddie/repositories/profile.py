"""Persistence helpers for public profiles."""

from __future__ import annotations

import uuid
from typing import Any

from sqlalchemy import select, update

from breaddie.models.profile import Profile
from breaddie.repositories.base import BaseRepository


class ProfileRepository(BaseRepository[Profile]):
    async def get(self, profile_id: uuid.UUID) -> Profile | None:
        return await self.session.get(Profile, profile_id)

    async def get_by_username(self, username: str) -> Profile | None:
        stmt = select(Profile).where(Profile.username == username)
        result = await self.session.execute(stmt)
        return result.scalar_one_or_none()

    async def get_story_preferences(self, user_id: uuid.UUID) -> dict[str, Any]:
        stmt = select(Profile.story_preferences).where(Profile.id == user_id)
        result = await self.session.execute(stmt)
        preferences = result.scalar_one_or_none()
        return preferences if isinstance(preferences, dict) else {}

    async def update_fields(self, profile_id: uuid.UUID, values: dict[str, Any]) -> Profile | None:
        """Write ``values`` onto the row and return the refreshed profile, or None if absent."""
        stmt = (
            update(Profile)
            .where(Profile.id == profile_id)
            .values(**values)
            .execution_options(synchronize_session=False)
        )
        result = await self.session.execute(stmt)
        if result.rowcount == 0:
            return None
        profile = await self.session.get(Profile, profile_id, populate_existing=True)
        return profile


__all__ = ["ProfileRepository"]
