"""Public profile pages and the profile update action."""

from __future__ import annotations

import logging
from collections.abc import Sequence
from typing import Any
from uuid import UUID

from fastapi import APIRouter, Depends, status
from fastapi.responses import JSONResponse
from sqlalchemy.ext.asyncio import AsyncSession

from breaddie.api.dependencies import get_access_token, get_auth_client
from breaddie.clients.auth import HostedAuthClient
from breaddie.core.auth import AuthUser, get_current_user, get_optional_user
from breaddie.core.db import get_session
from breaddie.core.errors import ErrorCode, NotFoundError
from breaddie.core.results import ActionError, action_error_response
from breaddie.models.recipe import Recipe
from breaddie.repositories.profile import ProfileRepository
from breaddie.repositories.recipe import RecipeRepository
from breaddie.schemas.profile import ProfilePage, ProfileResponse, ProfileUpdate, PublicProfile
from breaddie.schemas.recipe import RecipeCard, RecipeResponse
from breaddie.seo import (
    generate_person_structured_data,
    generate_profile_metadata,
    generate_structured_data_script,
)
from breaddie.services.profile import ProfileService
from breaddie.services.recipe import RecipeService

logger = logging.getLogger("breaddie.api.profiles")

page_router = APIRouter(prefix="/profiles", tags=["profiles"])
router = APIRouter(prefix="/profile", tags=["profiles"])


async def get_profile_service(
    session: AsyncSession = Depends(get_session),  # noqa: B008
    auth_client: HostedAuthClient = Depends(get_auth_client),  # noqa: B008
) -> ProfileService:
    return ProfileService(ProfileRepository(session), RecipeRepository(session), auth_client)


async def get_recipe_service(
    session: AsyncSession = Depends(get_session),  # noqa: B008
) -> RecipeService:
    return RecipeService(RecipeRepository(session))


def _recipe_cards(
    recipes: Sequence[Recipe],
    hearts: dict[UUID, int],
    viewer_hearts: set[UUID],
) -> list[RecipeCard]:
    return [
        RecipeCard(
            recipe=RecipeResponse.model_validate(recipe),
            total_hearts=hearts.get(recipe.id, 0),
            hearted_by_viewer=recipe.id in viewer_hearts,
        )
        for recipe in recipes
    ]


@page_router.get("/{username}", response_model=ProfilePage, summary="Public profile page")
async def get_profile_page(
    username: str,
    viewer: AuthUser | None = Depends(get_optional_user),  # noqa: B008
    profile_service: ProfileService = Depends(get_profile_service),  # noqa: B008
    recipe_service: RecipeService = Depends(get_recipe_service),  # noqa: B008
) -> ProfilePage:
    """
    Render a profile with its created and favorited recipes.

    Heart totals and the viewer's own hearts are looked up once for both lists.
    """
    page = await profile_service.fetch_user_profile_with_recipes(username)
    if page is None:
        raise NotFoundError(code=ErrorCode.PROFILE_NOT_FOUND, message="Profile not found.")

    recipe_ids = [recipe.id for recipe in (*page.recipes_created, *page.favorite_recipes)]
    stats = await recipe_service.get_multiple_recipe_heart_stats(recipe_ids)
    hearts = {item.id: item.total_hearts for item in stats}
    viewer_hearts = await recipe_service.get_user_hearts_for_recipes(viewer.id if viewer else None, recipe_ids)

    public_profile = PublicProfile.model_validate(page.profile)
    recipes_count = len(page.recipes_created)
    structured_data = generate_person_structured_data(public_profile, recipes_count)
    metadata = generate_profile_metadata(public_profile, recipes_count)

    return ProfilePage(
        profile=public_profile,
        recipes_created=_recipe_cards(page.recipes_created, hearts, viewer_hearts),
        favorite_recipes=_recipe_cards(page.favorite_recipes, hearts, viewer_hearts),
        is_own_profile=viewer is not None and viewer.id == page.profile.id,
        metadata=metadata.model_dump(by_alias=True, exclude_none=True),
        structured_data=structured_data,
        structured_data_script=generate_structured_data_script(structured_data),
    )


@router.get("", response_model=ProfileResponse, summary="Current user's profile")
async def get_own_profile(
    current_user: AuthUser = Depends(get_current_user),  # noqa: B008
    service: ProfileService = Depends(get_profile_service),  # noqa: B008
) -> ProfileResponse:
    profile = await service.fetch_user_profile(current_user.id)
    if profile is None:
        raise NotFoundError(code=ErrorCode.PROFILE_NOT_FOUND, message="Profile not found.")
    return ProfileResponse.model_validate(profile)


@router.patch(
    "",
    response_model=ProfileResponse,
    status_code=status.HTTP_200_OK,
    summary="Update the current user's profile",
)
async def update_own_profile(
    payload: ProfileUpdate,
    current_user: AuthUser = Depends(get_current_user),  # noqa: B008
    access_token: str | None = Depends(get_access_token),  # noqa: B008
    service: ProfileService = Depends(get_profile_service),  # noqa: B008
) -> ProfileResponse | JSONResponse:
    profile_data: dict[str, Any] = payload.model_dump(exclude_unset=True)
    profile_data["id"] = current_user.id

    result = await service.update_user_profile(profile_data, access_token=access_token)
    if isinstance(result, ActionError):
        logger.info(
            "Profile update rejected",
            extra={"user_id": str(current_user.id), "error_name": result.name},
        )
        return action_error_response(result)
    return ProfileResponse.model_validate(result)
