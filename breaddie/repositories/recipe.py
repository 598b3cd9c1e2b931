"""Recipe lookups plus heart and favorite aggregations."""

from __future__ import annotations

import uuid
from collections.abc import Sequence

from sqlalchemy import Select, func, select

from breaddie.models.recipe import Recipe, RecipeHeart, UserFavoriteRecipe
from breaddie.repositories.base import BaseRepository


class RecipeRepository(BaseRepository[Recipe]):
    async def get_by_slug(self, slug: str) -> Recipe | None:
        stmt = select(Recipe).where(Recipe.slug == slug)
        result = await self.session.execute(stmt)
        return result.unique().scalar_one_or_none()

    async def list_created_by(self, user_id: uuid.UUID) -> list[Recipe]:
        stmt: Select[tuple[Recipe]] = (
            select(Recipe)
            .where(Recipe.created_by == user_id)
            .order_by(Recipe.created_at.desc())
        )
        result = await self.session.execute(stmt)
        return list(result.unique().scalars())

    async def list_favorited_by(self, user_id: uuid.UUID) -> list[Recipe]:
        stmt: Select[tuple[Recipe]] = (
            select(Recipe)
            .join(UserFavoriteRecipe, UserFavoriteRecipe.recipe_id == Recipe.id)
            .where(UserFavoriteRecipe.user_id == user_id)
            .order_by(UserFavoriteRecipe.created_at.desc())
        )
        result = await self.session.execute(stmt)
        return list(result.unique().scalars())

    async def heart_counts(self, recipe_ids: Sequence[uuid.UUID]) -> dict[uuid.UUID, int]:
        if not recipe_ids:
            return {}
        stmt = (
            select(RecipeHeart.recipe_id, func.count())
            .where(RecipeHeart.recipe_id.in_(list(recipe_ids)))
            .group_by(RecipeHeart.recipe_id)
        )
        result = await self.session.execute(stmt)
        return {recipe_id: int(count) for recipe_id, count in result.all()}

    async def hearted_by(
        self,
        user_id: uuid.UUID,
        recipe_ids: Sequence[uuid.UUID],
    ) -> set[uuid.UUID]:
        if not recipe_ids:
            return set()
        stmt = select(RecipeHeart.recipe_id).where(
            RecipeHeart.user_id == user_id,
            RecipeHeart.recipe_id.in_(list(recipe_ids)),
        )
        result = await self.session.execute(stmt)
        return set(result.scalars())


__all__ = ["RecipeRepository"]
