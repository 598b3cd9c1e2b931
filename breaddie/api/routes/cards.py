"""Card review endpoint."""

from __future__ import annotations

from typing import Annotated
from uuid import UUID

from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession

from breaddie.core.auth import AuthUser, get_current_user
from breaddie.core.db import get_session
from breaddie.repositories.card import CardRepository
from breaddie.schemas.flashcards import CardReviewRequest, CardReviewResponse
from breaddie.services.flashcards import CardReviewService

router = APIRouter(tags=["cards"])


async def get_card_review_service(
    session: Annotated[AsyncSession, Depends(get_session)],
) -> CardReviewService:
    return CardReviewService(CardRepository(session))


@router.post(
    "/cards/{card_id}/review",
    response_model=CardReviewResponse,
    summary="Record a review and schedule the next one",
)
async def review_card(
    card_id: UUID,
    payload: CardReviewRequest,
    user: AuthUser = Depends(get_current_user),  # noqa: B008
    service: CardReviewService = Depends(get_card_review_service),  # noqa: B008
) -> CardReviewResponse:
    review = await service.review_card(user.id, card_id, payload.quality)
    response = CardReviewResponse.model_validate(review)
    await service.session.commit()
    return response
