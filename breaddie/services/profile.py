"""Profile server actions."""

from __future__ import annotations

import logging
import uuid
from collections.abc import Mapping
from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Any

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from breaddie.clients.auth import HostedAuthClient
from breaddie.clients.base import HostedServiceError
from breaddie.core.results import (
    ActionError,
    database_action_error,
    unexpected_action_error,
)
from breaddie.models.profile import Profile
from breaddie.models.recipe import Recipe
from breaddie.repositories.profile import ProfileRepository
from breaddie.repositories.recipe import RecipeRepository

logger = logging.getLogger("breaddie.services.profile")

UPDATABLE_FIELDS = frozenset(
    {
        "name",
        "username",
        "avatar_url",
        "bio",
        "timezone",
        "daily_study_goal",
        "max_new_cards",
        "max_review_cards",
        "ai_content_generation",
        "preferred_languages",
        "story_preferences",
    }
)
UNIT_SYSTEM_FIELD = "preferred_unit_system"


@dataclass
class ProfileWithRecipes:
    profile: Profile
    recipes_created: list[Recipe] = field(default_factory=list)
    favorite_recipes: list[Recipe] = field(default_factory=list)


class ProfileService:
    def __init__(
        self,
        repository: ProfileRepository,
        recipe_repository: RecipeRepository,
        auth_client: HostedAuthClient | None = None,
    ) -> None:
        self.repository = repository
        self.recipe_repository = recipe_repository
        self.auth_client = auth_client

    @property
    def session(self) -> AsyncSession:
        return self.repository.session

    async def fetch_user_profile(self, user_id: uuid.UUID) -> Profile | None:
        return await self.repository.get(user_id)

    async def fetch_user_profile_with_recipes(self, username: str) -> ProfileWithRecipes | None:
        profile = await self.repository.get_by_username(username)
        if profile is None:
            return None
        return ProfileWithRecipes(
            profile=profile,
            recipes_created=await self.recipe_repository.list_created_by(profile.id),
            favorite_recipes=await self.recipe_repository.list_favorited_by(profile.id),
        )

    async def update_user_profile(
        self,
        profile_data: Mapping[str, Any],
        *,
        access_token: str | None = None,
    ) -> Profile | ActionError:
        """
        Apply a partial update and return the saved row or an ActionError.

        ``preferred_unit_system`` is only touched when the key is present; when
        it is, the auth user's metadata is synced afterwards on a best-effort basis.
        """
        raw_id = profile_data.get("id")
        if not raw_id:
            return ActionError(name="ValidationError", message="Profile ID is required for an update.")

        try:
            profile_id = raw_id if isinstance(raw_id, uuid.UUID) else uuid.UUID(str(raw_id))
        except ValueError:
            return ActionError(name="ValidationError", message="Profile ID must be a valid UUID.")

        values = {key: value for key, value in profile_data.items() if key in UPDATABLE_FIELDS}
        unit_system_sent = UNIT_SYSTEM_FIELD in profile_data
        if unit_system_sent:
            values[UNIT_SYSTEM_FIELD] = profile_data[UNIT_SYSTEM_FIELD]
        values["updated_at"] = datetime.now(timezone.utc)

        try:
            profile = await self.repository.update_fields(profile_id, values)
            if profile is None:
                await self.session.rollback()
                return ActionError(name="NotFoundError", message="Profile not found.")
            await self.session.commit()
        except SQLAlchemyError as exc:
            await self.session.rollback()
            logger.error("Profile update failed", extra={"profile_id": str(profile_id), "error": str(exc)})
            return database_action_error(exc)
        except Exception as exc:  # noqa: BLE001 - actions report failures as values
            logger.exception("Unexpected profile update failure", extra={"profile_id": str(profile_id)})
            return unexpected_action_error(exc)

        if unit_system_sent:
            await self._sync_unit_system(profile_id, profile_data[UNIT_SYSTEM_FIELD], access_token)

        logger.info(
            "Profile updated",
            extra={"profile_id": str(profile_id), "fields": sorted(k for k in values if k != "updated_at")},
        )
        return profile

    async def _sync_unit_system(
        self,
        profile_id: uuid.UUID,
        unit_system: str | None,
        access_token: str | None,
    ) -> None:
        if self.auth_client is None:
            logger.warning("No auth client configured; unit system not mirrored to auth metadata")
            return
        try:
            await self.auth_client.update_user_metadata(
                profile_id,
                {UNIT_SYSTEM_FIELD: unit_system},
                access_token=access_token,
            )
        except HostedServiceError as exc:
            logger.warning(
                "Failed to update auth user metadata",
                extra={"profile_id": str(profile_id), "error": exc.message},
            )


__all__ = ["ProfileService", "ProfileWithRecipes", "UPDATABLE_FIELDS"]
