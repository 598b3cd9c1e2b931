"""Recipe pages."""

from __future__ import annotations

from fastapi import APIRouter, Depends

from breaddie.api.routes.profiles import get_recipe_service
from breaddie.core.auth import AuthUser, get_optional_user
from breaddie.core.errors import ErrorCode, NotFoundError
from breaddie.schemas.recipe import RecipePage, RecipeResponse
from breaddie.seo import generate_recipe_structured_data, generate_structured_data_script
from breaddie.services.recipe import RecipeService

router = APIRouter(prefix="/recipes", tags=["recipes"])


@router.get("/{slug}", response_model=RecipePage, summary="Recipe page")
async def get_recipe_page(
    slug: str,
    viewer: AuthUser | None = Depends(get_optional_user),  # noqa: B008
    service: RecipeService = Depends(get_recipe_service),  # noqa: B008
) -> RecipePage:
    recipe = await service.get_recipe_by_slug(slug)
    if recipe is None:
        raise NotFoundError(code=ErrorCode.RECIPE_NOT_FOUND, message="Recipe not found.")

    stats = await service.get_multiple_recipe_heart_stats([recipe.id])
    total_hearts = stats[0].total_hearts if stats else 0
    viewer_hearts = await service.get_user_hearts_for_recipes(viewer.id if viewer else None, [recipe.id])

    payload = RecipeResponse.model_validate(recipe)
    structured_data = generate_recipe_structured_data(payload, total_hearts)
    return RecipePage(
        recipe=payload,
        total_hearts=total_hearts,
        hearted_by_viewer=recipe.id in viewer_hearts,
        structured_data=structured_data,
        structured_data_script=generate_structured_data_script(structured_data),
    )
