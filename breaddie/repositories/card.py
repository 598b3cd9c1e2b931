"""Card and review-state persistence, with scheduling delegated to the database."""

from __future__ import annotations

import uuid
from collections.abc import Sequence
from typing import Any

from sqlalchemy import select

from breaddie.models.card import Card, CardReview
from breaddie.repositories.base import BaseRepository


class CardRepository(BaseRepository[Card]):
    async def get(self, card_id: uuid.UUID) -> Card | None:
        return await self.session.get(Card, card_id)

    async def get_review(self, card_id: uuid.UUID, user_id: uuid.UUID) -> CardReview | None:
        stmt = select(CardReview).where(
            CardReview.card_id == card_id,
            CardReview.user_id == user_id,
        )
        result = await self.session.execute(stmt)
        return result.scalar_one_or_none()

    async def list_reviews(
        self,
        user_id: uuid.UUID,
        card_ids: Sequence[uuid.UUID],
    ) -> list[CardReview]:
        if not card_ids:
            return []
        stmt = select(CardReview).where(
            CardReview.user_id == user_id,
            CardReview.card_id.in_(list(card_ids)),
        )
        result = await self.session.execute(stmt)
        return list(result.scalars())

    async def calculate_next_review(
        self,
        *,
        current_ease: float,
        current_interval: int,
        quality: int,
    ) -> dict[str, Any] | None:
        """Ask the database scheduler for the next ease, interval and due date."""
        rows = await self.call_function(
            "calculate_next_review",
            {
                "current_ease": current_ease,
                "current_interval": current_interval,
                "quality": quality,
            },
        )
        return rows[0] if rows else None


__all__ = ["CardRepository"]
