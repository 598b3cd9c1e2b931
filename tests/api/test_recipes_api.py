from __future__ import annotations

import uuid
from datetime import datetime, timezone
from types import SimpleNamespace

import pytest
from httpx import ASGITransport, AsyncClient

from breaddie.api.routes.profiles import get_recipe_service
from breaddie.core.auth import get_optional_user
from breaddie.main import app
from breaddie.schemas.recipe import RecipeHeartStats

RECIPE_ID = uuid.uuid4()


class StubRecipeService:
    def __init__(self) -> None:
        self.recipe = SimpleNamespace(
            id=RECIPE_ID,
            name="Country Sourdough",
            slug="country-sourdough",
            description="A crusty everyday loaf.",
            category="Bread",
            subcategory="Sourdough",
            status="published",
            total_time=1440,
            servings=2,
            difficulty="medium",
            image_url="country-sourdough.png",
            components=[{"name": "Dough", "ingredients": [{"amount": 500, "unit": "g", "name": "flour"}]}],
            instructions=["Mix", {"step": 2, "content": "Bake"}],
            nutrition_info={"calories": 250},
            created_by=uuid.uuid4(),
            created_at=datetime(2024, 5, 1, tzinfo=timezone.utc),
            updated_at=datetime(2024, 5, 2, tzinfo=timezone.utc),
            author=SimpleNamespace(id=uuid.uuid4(), name="Ada Baker", username="ada", avatar_url=None),
        )
        self.viewer_ids: list[uuid.UUID | None] = []

    async def get_recipe_by_slug(self, slug: str) -> SimpleNamespace | None:
        return self.recipe if slug == self.recipe.slug else None

    async def get_multiple_recipe_heart_stats(self, recipe_ids: list[uuid.UUID]) -> list[RecipeHeartStats]:
        return [RecipeHeartStats(id=recipe_id, total_hearts=23) for recipe_id in recipe_ids]

    async def get_user_hearts_for_recipes(
        self,
        user_id: uuid.UUID | None,
        recipe_ids: list[uuid.UUID],
    ) -> set[uuid.UUID]:
        self.viewer_ids.append(user_id)
        return set(recipe_ids) if user_id else set()


@pytest.fixture()
def recipe_service_stub() -> StubRecipeService:
    return StubRecipeService()


@pytest.fixture(autouse=True)
def override_dependencies(recipe_service_stub: StubRecipeService) -> None:
    async def _service_override() -> StubRecipeService:
        return recipe_service_stub

    app.dependency_overrides[get_recipe_service] = _service_override
    app.dependency_overrides[get_optional_user] = lambda: None

    yield

    app.dependency_overrides.pop(get_recipe_service, None)
    app.dependency_overrides.pop(get_optional_user, None)


@pytest.mark.asyncio
async def test_recipe_page_includes_structured_data(recipe_service_stub: StubRecipeService) -> None:
    async with AsyncClient(transport=ASGITransport(app=app), base_url="http://testserver") as client:
        response = await client.get("/recipes/country-sourdough")

    assert response.status_code == 200
    payload = response.json()
    assert payload["recipe"]["author"]["username"] == "ada"
    assert payload["total_hearts"] == 23
    assert payload["hearted_by_viewer"] is False
    assert recipe_service_stub.viewer_ids == [None]

    data = payload["structured_data"]
    assert data["@type"] == "Recipe"
    assert data["aggregateRating"] == {"@type": "AggregateRating", "ratingValue": 3, "reviewCount": 23}
    assert data["keywords"] == "Bread, Sourdough"
    assert data["totalTime"] == "PT1440M"
    assert data["recipeInstructions"][1] == {"@type": "HowToStep", "text": "Bake", "name": "Step 2"}


@pytest.mark.asyncio
async def test_recipe_page_unknown_slug_returns_404() -> None:
    async with AsyncClient(transport=ASGITransport(app=app), base_url="http://testserver") as client:
        response = await client.get("/recipes/missing")

    assert response.status_code == 404
    assert response.json()["error"]["code"] == "RECIPE_NOT_FOUND"
