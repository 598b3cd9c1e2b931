from __future__ import annotations

import uuid

import pytest
from sqlalchemy.ext.asyncio import AsyncSession

from breaddie.models.profile import Profile
from breaddie.models.recipe import Recipe, RecipeHeart
from breaddie.repositories.recipe import RecipeRepository
from breaddie.services.recipe import RecipeService


@pytest.mark.asyncio
async def test_heart_stats_include_zero_and_keep_order(db_session: AsyncSession) -> None:
    baker = Profile(id=uuid.uuid4(), username="baker")
    db_session.add(baker)
    await db_session.flush()
    loved = Recipe(name="Brioche", slug="brioche", created_by=baker.id)
    ignored = Recipe(name="Matzo", slug="matzo", created_by=baker.id)
    db_session.add_all([loved, ignored])
    await db_session.flush()
    db_session.add(RecipeHeart(user_id=baker.id, recipe_id=loved.id))
    await db_session.flush()
    service = RecipeService(RecipeRepository(db_session))

    stats = await service.get_multiple_recipe_heart_stats([ignored.id, loved.id, ignored.id])
    hearted = await service.get_user_hearts_for_recipes(baker.id, [loved.id, ignored.id])
    anonymous = await service.get_user_hearts_for_recipes(None, [loved.id])

    assert [(item.id, item.total_hearts) for item in stats] == [(ignored.id, 0), (loved.id, 1)]
    assert hearted == {loved.id}
    assert anonymous == set()
