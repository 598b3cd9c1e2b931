"""Study session start and end endpoints."""

from __future__ import annotations

from typing import Annotated
from uuid import UUID

from fastapi import APIRouter, Depends, status
from sqlalchemy.ext.asyncio import AsyncSession

from breaddie.core.auth import AuthUser, get_current_user
from breaddie.core.db import get_session
from breaddie.repositories.deck import DeckRepository
from breaddie.repositories.study_session import StudySessionRepository
from breaddie.schemas.flashcards import StudySessionEnd, StudySessionResponse, StudySessionStart
from breaddie.services.flashcards import StudySessionService

router = APIRouter(prefix="/study-sessions", tags=["study-sessions"])


async def get_study_session_service(
    session: Annotated[AsyncSession, Depends(get_session)],
) -> StudySessionService:
    return StudySessionService(StudySessionRepository(session), DeckRepository(session))


@router.post(
    "",
    response_model=StudySessionResponse,
    status_code=status.HTTP_201_CREATED,
    summary="Start a study session",
)
async def start_study_session(
    payload: StudySessionStart,
    user: AuthUser = Depends(get_current_user),  # noqa: B008
    service: StudySessionService = Depends(get_study_session_service),  # noqa: B008
) -> StudySessionResponse:
    study_session = await service.start_session(user.id, payload)
    await service.session.flush()
    response = StudySessionResponse.model_validate(study_session)
    await service.session.commit()
    return response


@router.post(
    "/{session_id}/end",
    response_model=StudySessionResponse,
    summary="End a study session and store its totals",
)
async def end_study_session(
    session_id: UUID,
    payload: StudySessionEnd,
    user: AuthUser = Depends(get_current_user),  # noqa: B008
    service: StudySessionService = Depends(get_study_session_service),  # noqa: B008
) -> StudySessionResponse:
    study_session = await service.end_session(user.id, session_id, payload)
    response = StudySessionResponse.model_validate(study_session)
    await service.session.commit()
    return response
