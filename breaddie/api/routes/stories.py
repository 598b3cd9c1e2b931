"""Adaptive story page and story actions."""

from __future__ import annotations

import logging
from uuid import UUID

from fastapi import APIRouter, Depends, status
from fastapi.responses import JSONResponse, RedirectResponse
from sqlalchemy.ext.asyncio import AsyncSession

from breaddie.api.dependencies import get_llm_service
from breaddie.api.routes.profiles import get_profile_service
from breaddie.core.auth import AuthUser, get_current_user, get_optional_user
from breaddie.core.config import get_settings
from breaddie.core.db import get_session
from breaddie.core.errors import ErrorCode, error_response
from breaddie.core.results import OperationStatus
from breaddie.repositories.card import CardRepository
from breaddie.repositories.profile import ProfileRepository
from breaddie.repositories.story import StoryRepository
from breaddie.schemas.profile import ProfileResponse
from breaddie.schemas.story import (
    StoryCompleteRequest,
    StoryGenerateRequest,
    StoryGenerationFailure,
    StoryGenerationResult,
    StoryInteractionRequest,
)
from breaddie.seo import generate_story_page_metadata
from breaddie.services.llm import LLMService
from breaddie.services.profile import ProfileService
from breaddie.services.story_generation import STORY_SESSION_NOT_FOUND, StoryGenerationService

logger = logging.getLogger("breaddie.api.stories")

page_router = APIRouter(tags=["stories"])
router = APIRouter(prefix="/stories", tags=["stories"])

NO_DUE_WORDS_ERROR = "No words due for review found"
SIGN_IN_PATH = "/auth"


async def get_story_service(
    session: AsyncSession = Depends(get_session),  # noqa: B008
    llm: LLMService | None = Depends(get_llm_service),  # noqa: B008
) -> StoryGenerationService:
    settings = get_settings()
    return StoryGenerationService(
        StoryRepository(session),
        ProfileRepository(session),
        CardRepository(session),
        llm,
        temperature=settings.story_temperature,
        max_tokens=settings.story_max_tokens,
    )


def _status_response(result: OperationStatus) -> JSONResponse | OperationStatus:
    if result.success:
        return result
    if result.error == STORY_SESSION_NOT_FOUND:
        return error_response(
            status_code=status.HTTP_404_NOT_FOUND,
            code=ErrorCode.STORY_SESSION_NOT_FOUND,
            message=STORY_SESSION_NOT_FOUND,
        )
    return error_response(
        status_code=status.HTTP_502_BAD_GATEWAY,
        code=ErrorCode.DATABASE_ERROR,
        message=result.error or "Story session update failed.",
    )


@page_router.get("/study/story", summary="Adaptive story page", response_model=None)
async def story_page(
    viewer: AuthUser | None = Depends(get_optional_user),  # noqa: B008
    profile_service: ProfileService = Depends(get_profile_service),  # noqa: B008
) -> dict[str, object] | RedirectResponse:
    if viewer is None:
        return RedirectResponse(SIGN_IN_PATH, status_code=status.HTTP_307_TEMPORARY_REDIRECT)

    profile = await profile_service.fetch_user_profile(viewer.id)
    return {
        "metadata": generate_story_page_metadata().model_dump(by_alias=True, exclude_none=True),
        "profile": ProfileResponse.model_validate(profile).model_dump(mode="json") if profile else None,
    }


@router.post(
    "",
    response_model=StoryGenerationResult,
    status_code=status.HTTP_201_CREATED,
    summary="Generate an adaptive story from due words",
)
async def generate_story(
    payload: StoryGenerateRequest,
    current_user: AuthUser = Depends(get_current_user),  # noqa: B008
    service: StoryGenerationService = Depends(get_story_service),  # noqa: B008
) -> StoryGenerationResult | JSONResponse:
    result = await service.generate_adaptive_story(
        current_user.id,
        max_words=payload.max_words,
        include_news=payload.include_news,
    )
    if isinstance(result, StoryGenerationFailure):
        if result.error == NO_DUE_WORDS_ERROR:
            return error_response(
                status_code=status.HTTP_422_UNPROCESSABLE_ENTITY,
                code=ErrorCode.NO_DUE_WORDS,
                message=result.error,
            )
        return error_response(
            status_code=status.HTTP_502_BAD_GATEWAY,
            code=ErrorCode.STORY_GENERATION_FAILED,
            message=result.error,
        )
    return result


@router.post(
    "/{session_id}/interactions",
    response_model=OperationStatus,
    summary="Record a reader interaction with a story",
)
async def record_interaction(
    session_id: UUID,
    payload: StoryInteractionRequest,
    current_user: AuthUser = Depends(get_current_user),  # noqa: B008
    service: StoryGenerationService = Depends(get_story_service),  # noqa: B008
) -> OperationStatus | JSONResponse:
    result = await service.record_user_interaction(
        session_id,
        payload.word_id,
        payload.interaction_type,
        payload.user_response,
        payload.correctness_score,
        payload.time_taken,
        user_id=current_user.id,
    )
    return _status_response(result)


@router.post(
    "/{session_id}/complete",
    response_model=OperationStatus,
    summary="Complete a story session and reschedule its words",
)
async def complete_story(
    session_id: UUID,
    payload: StoryCompleteRequest,
    current_user: AuthUser = Depends(get_current_user),  # noqa: B008
    service: StoryGenerationService = Depends(get_story_service),  # noqa: B008
) -> OperationStatus | JSONResponse:
    result = await service.complete_story_session(
        session_id,
        payload.comprehension_score,
        payload.reading_time,
        payload.difficulty_rating,
        payload.relevance_rating,
        user_id=current_user.id,
    )
    if result.success:
        logger.info("Story session completed", extra={"story_session_id": str(session_id)})
    return _status_response(result)
