"""Recipe rows and the per-user heart / favorite link tables."""

from __future__ import annotations

import uuid
from typing import Any

from sqlalchemy import ForeignKey, Integer, String, Text, Uuid
from sqlalchemy.orm import Mapped, mapped_column, relationship

from breaddie.models.base import Base, CreatedAtMixin, JSONType, TimestampMixin
from breaddie.models.profile import Profile


class Recipe(TimestampMixin, Base):
    __tablename__ = "recipes"

    id: Mapped[uuid.UUID] = mapped_column(Uuid(), primary_key=True, default=uuid.uuid4)
    name: Mapped[str] = mapped_column(String(255), nullable=False)
    description: Mapped[str | None] = mapped_column(Text)
    category: Mapped[str | None] = mapped_column(String(100))
    subcategory: Mapped[str | None] = mapped_column(String(100))
    slug: Mapped[str] = mapped_column(String(255), nullable=False, unique=True, index=True)
    status: Mapped[str | None] = mapped_column(String(32))
    total_time: Mapped[int | None] = mapped_column(Integer)
    servings: Mapped[int | None] = mapped_column(Integer)
    difficulty: Mapped[str | None] = mapped_column(String(32))
    image_url: Mapped[str | None] = mapped_column(Text)

    # [{name, ingredients: [{amount, unit, name}]}]
    components: Mapped[list[dict[str, Any]] | None] = mapped_column(JSONType)
    # plain strings or {step, content} objects
    instructions: Mapped[list[Any] | None] = mapped_column(JSONType)
    # scalar values or {value, unit} objects
    nutrition_info: Mapped[dict[str, Any] | None] = mapped_column(JSONType)

    created_by: Mapped[uuid.UUID | None] = mapped_column(
        Uuid(),
        ForeignKey("profiles.id", ondelete="SET NULL"),
    )

    author: Mapped[Profile | None] = relationship(lazy="joined")


class RecipeHeart(CreatedAtMixin, Base):
    __tablename__ = "recipe_hearts"

    user_id: Mapped[uuid.UUID] = mapped_column(
        Uuid(),
        ForeignKey("profiles.id", ondelete="CASCADE"),
        primary_key=True,
    )
    recipe_id: Mapped[uuid.UUID] = mapped_column(
        Uuid(),
        ForeignKey("recipes.id", ondelete="CASCADE"),
        primary_key=True,
    )


class UserFavoriteRecipe(CreatedAtMixin, Base):
    __tablename__ = "user_favorite_recipes"

    user_id: Mapped[uuid.UUID] = mapped_column(
        Uuid(),
        ForeignKey("profiles.id", ondelete="CASCADE"),
        primary_key=True,
    )
    recipe_id: Mapped[uuid.UUID] = mapped_column(
        Uuid(),
        ForeignKey("recipes.id", ondelete="CASCADE"),
        primary_key=True,
    )


__all__ = ["Recipe", "RecipeHeart", "UserFavoriteRecipe"]
