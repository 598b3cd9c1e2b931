"""Recipe payloads and heart statistics."""

from __future__ import annotations

import uuid
from datetime import datetime
from typing import Any

from pydantic import BaseModel, ConfigDict


class RecipeAuthor(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: uuid.UUID
    name: str | None = None
    username: str | None = None
    avatar_url: str | None = None


class RecipeResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: uuid.UUID
    name: str
    description: str | None = None
    category: str | None = None
    subcategory: str | None = None
    slug: str
    status: str | None = None
    total_time: int | None = None
    servings: int | None = None
    difficulty: str | None = None
    image_url: str | None = None
    components: list[dict[str, Any]] | None = None
    instructions: list[Any] | None = None
    nutrition_info: dict[str, Any] | None = None
    created_by: uuid.UUID | None = None
    created_at: datetime | None = None
    updated_at: datetime | None = None
    author: RecipeAuthor | None = None


class RecipeHeartStats(BaseModel):
    id: uuid.UUID
    total_hearts: int


class RecipeCard(BaseModel):
    """A recipe as listed on a profile page, with heart state for the viewer."""

    recipe: RecipeResponse
    total_hearts: int = 0
    hearted_by_viewer: bool = False


class RecipePage(BaseModel):
    recipe: RecipeResponse
    total_hearts: int = 0
    hearted_by_viewer: bool = False
    structured_data: dict[str, Any]
    structured_data_script: str


__all__ = ["RecipeAuthor", "RecipeCard", "RecipeHeartStats", "RecipePage", "RecipeResponse"]
