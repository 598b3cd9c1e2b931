"""Recipe lookups and heart statistics."""

from __future__ import annotations

import uuid
from collections.abc import Sequence

from sqlalchemy.ext.asyncio import AsyncSession

from breaddie.models.recipe import Recipe
from breaddie.repositories.recipe import RecipeRepository
from breaddie.schemas.recipe import RecipeHeartStats


class RecipeService:
    def __init__(self, repository: RecipeRepository) -> None:
        self.repository = repository

    @property
    def session(self) -> AsyncSession:
        return self.repository.session

    async def get_recipe_by_slug(self, slug: str) -> Recipe | None:
        return await self.repository.get_by_slug(slug)

    async def get_multiple_recipe_heart_stats(self, recipe_ids: Sequence[uuid.UUID]) -> list[RecipeHeartStats]:
        """Heart totals for every requested recipe, zero included, in request order."""
        unique_ids = list(dict.fromkeys(recipe_ids))
        counts = await self.repository.heart_counts(unique_ids)
        return [RecipeHeartStats(id=recipe_id, total_hearts=counts.get(recipe_id, 0)) for recipe_id in unique_ids]

    async def get_user_hearts_for_recipes(
        self,
        user_id: uuid.UUID | None,
        recipe_ids: Sequence[uuid.UUID],
    ) -> set[uuid.UUID]:
        if user_id is None:
            return set()
        return await self.repository.hearted_by(user_id, list(dict.fromkeys(recipe_ids)))


__all__ = ["RecipeService"]
