"""Deck listing for the flashcard area."""

from __future__ import annotations

from typing import Annotated

from fastapi import APIRouter, Depends, Query
from sqlalchemy.ext.asyncio import AsyncSession

from breaddie.core.auth import AuthUser, get_current_user
from breaddie.core.db import get_session
from breaddie.repositories.deck import DeckRepository
from breaddie.schemas.flashcards import DeckListResponse, DeckResponse
from breaddie.services.flashcards import DeckService

router = APIRouter(tags=["decks"])


async def get_deck_service(
    session: Annotated[AsyncSession, Depends(get_session)],
) -> DeckService:
    return DeckService(DeckRepository(session))


@router.get(
    "/decks",
    response_model=DeckListResponse,
    summary="List public decks and decks created by the user",
)
async def list_decks(
    limit: Annotated[int, Query(ge=1, le=100)] = 50,
    offset: Annotated[int, Query(ge=0)] = 0,
    user: AuthUser = Depends(get_current_user),  # noqa: B008
    service: DeckService = Depends(get_deck_service),  # noqa: B008
) -> DeckListResponse:
    decks, total = await service.list_decks(user.id, limit=limit, offset=offset)
    return DeckListResponse(
        data=[DeckResponse.model_validate(deck) for deck in decks],
        total=total,
        limit=limit,
        offset=offset,
    )
