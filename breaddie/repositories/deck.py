"""Deck listing queries."""

from __future__ import annotations

import uuid

from sqlalchemy import Select, func, or_, select

from breaddie.models.deck import Deck
from breaddie.repositories.base import BaseRepository


class DeckRepository(BaseRepository[Deck]):
    async def get(self, deck_id: uuid.UUID) -> Deck | None:
        return await self.session.get(Deck, deck_id)

    async def list_visible(
        self,
        user_id: uuid.UUID,
        *,
        limit: int = 50,
        offset: int = 0,
    ) -> tuple[list[Deck], int]:
        """Public decks plus the user's own, newest first."""
        visible = or_(Deck.is_public.is_(True), Deck.created_by == user_id)
        stmt: Select[tuple[Deck]] = (
            select(Deck)
            .where(visible)
            .order_by(Deck.created_at.desc(), Deck.name.asc())
            .limit(limit)
            .offset(offset)
        )
        result = await self.session.execute(stmt)
        decks = list(result.scalars())

        count_result = await self.session.execute(select(func.count()).select_from(Deck).where(visible))
        return decks, int(count_result.scalar_one())


__all__ = ["DeckRepository"]
