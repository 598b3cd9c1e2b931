"""Profile payloads."""

from __future__ import annotations

import uuid
from datetime import datetime
from typing import Any, Literal

from pydantic import BaseModel, ConfigDict, Field

from breaddie.schemas.recipe import RecipeCard

UnitSystem = Literal["metric", "imperial"]


class ProfileResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: uuid.UUID
    name: str | None = None
    username: str | None = None
    avatar_url: str | None = None
    bio: str | None = None
    preferred_unit_system: UnitSystem | None = None
    timezone: str | None = None
    daily_study_goal: int | None = None
    max_new_cards: int | None = None
    max_review_cards: int | None = None
    ai_content_generation: bool | None = None
    preferred_languages: list[str] | None = None
    story_preferences: dict[str, Any] | None = None
    created_at: datetime | None = None
    updated_at: datetime | None = None


class PublicProfile(BaseModel):
    """Profile fields visible to other visitors."""

    model_config = ConfigDict(from_attributes=True)

    id: uuid.UUID
    name: str | None = None
    username: str | None = None
    avatar_url: str | None = None
    bio: str | None = None
    created_at: datetime | None = None


class ProfileUpdate(BaseModel):
    """
    Partial profile update.

    Only keys present in the request are written; an explicit ``null`` for
    ``preferred_unit_system`` clears it.
    """

    model_config = ConfigDict(extra="forbid")

    name: str | None = Field(default=None, max_length=255)
    username: str | None = Field(default=None, min_length=3, max_length=64, pattern=r"^[A-Za-z0-9_.-]+$")
    avatar_url: str | None = None
    bio: str | None = Field(default=None, max_length=2000)
    preferred_unit_system: UnitSystem | None = None
    timezone: str | None = Field(default=None, max_length=64)
    daily_study_goal: int | None = Field(default=None, ge=0, le=1000)
    max_new_cards: int | None = Field(default=None, ge=0, le=1000)
    max_review_cards: int | None = Field(default=None, ge=0, le=10000)
    ai_content_generation: bool | None = None
    preferred_languages: list[str] | None = None
    story_preferences: dict[str, Any] | None = None


class ProfilePage(BaseModel):
    """Everything the public profile page renders."""

    profile: PublicProfile
    recipes_created: list[RecipeCard]
    favorite_recipes: list[RecipeCard]
    is_own_profile: bool
    metadata: dict[str, Any]
    structured_data: dict[str, Any]
    structured_data_script: str


__all__ = ["ProfilePage", "ProfileResponse", "ProfileUpdate", "PublicProfile", "UnitSystem"]
