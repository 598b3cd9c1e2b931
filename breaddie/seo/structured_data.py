"""
schema.org JSON-LD builders for recipes and people.

Pure mappings: optional values that are missing are left out of the
document instead of being emitted as null.
"""

from __future__ import annotations

import json
import math
from collections.abc import Mapping
from datetime import datetime
from typing import Any, Protocol

from breaddie.core.config import Settings, get_settings
from breaddie.schemas.recipe import RecipeResponse
from breaddie.utils.url import get_avatar_url, get_recipe_image_url

SCHEMA_CONTEXT = "https://schema.org"
DEFAULT_BASE_URL = "https://localhost:3000"

# nutrition_info key -> unit suffix
_NUTRIENT_UNITS = {
    "proteinContent": "g",
    "carbohydrateContent": "g",
    "fatContent": "g",
    "fiberContent": "g",
    "sugarContent": "g",
    "sodiumContent": "mg",
}


class PersonLike(Protocol):
    name: str | None
    username: str | None
    avatar_url: str | None


def _base_url(base_url: str | None, settings: Settings) -> str:
    return (base_url or settings.site_url or DEFAULT_BASE_URL).rstrip("/")


def rating_from_hearts(total_hearts: int) -> int:
    """Map a heart count onto a 1..5 rating (one star per ten hearts)."""
    return min(5, max(1, math.ceil(total_hearts / 10)))


def _nutrient_value(raw: Any) -> Any:
    if isinstance(raw, Mapping):
        return raw.get("value")
    return raw


def _format_number(value: Any) -> str:
    if isinstance(value, float) and value.is_integer():
        return str(int(value))
    return str(value)


def _isoformat(value: datetime | str | None) -> str | None:
    if value is None:
        return None
    return value if isinstance(value, str) else value.isoformat()


def _nutrition(recipe: RecipeResponse) -> dict[str, Any]:
    nutrition_info = recipe.nutrition_info or {}
    nutrition: dict[str, Any] = {"@type": "NutritionInformation"}
    if recipe.servings:
        nutrition["servingSize"] = f"1 serving (of {recipe.servings})"

    calories = _nutrient_value(nutrition_info.get("calories"))
    if calories:
        nutrition["calories"] = f"{_format_number(calories)} calories"

    for key, unit in _NUTRIENT_UNITS.items():
        value = _nutrient_value(nutrition_info.get(key))
        if value:
            nutrition[key] = f"{_format_number(value)}{unit}"
    return nutrition


def _ingredients(components: list[dict[str, Any]]) -> list[str]:
    lines: list[str] = []
    for component in components:
        if not isinstance(component, Mapping):
            continue
        ingredients = component.get("ingredients")
        if not isinstance(ingredients, list):
            continue
        for ingredient in ingredients:
            if not isinstance(ingredient, Mapping):
                continue
            parts = (ingredient.get("amount"), ingredient.get("unit"), ingredient.get("name"))
            lines.append(" ".join(_format_number(part) for part in parts if part))
    return lines


def _instruction_text(instruction: Any) -> str:
    if isinstance(instruction, Mapping):
        return str(instruction.get("content") or "")
    return str(instruction)


def generate_recipe_structured_data(
    recipe: RecipeResponse,
    hearts: int | None = None,
    base_url: str | None = None,
    settings: Settings | None = None,
) -> dict[str, Any]:
    """Build the schema.org ``Recipe`` document for a recipe page."""
    settings = settings or get_settings()
    site = _base_url(base_url, settings)
    author = recipe.author

    author_data: dict[str, Any] = {
        "@type": "Person",
        "name": (author and (author.name or author.username)) or "Unknown Author",
    }
    if author and author.username:
        author_data["url"] = f"{site}/profiles/{author.username}"

    data: dict[str, Any] = {
        "@context": SCHEMA_CONTEXT,
        "@type": "Recipe",
        "name": recipe.name,
        "author": author_data,
    }

    published = _isoformat(recipe.created_at)
    if published:
        data["datePublished"] = published
    if recipe.description:
        data["description"] = recipe.description
    keywords = ", ".join(part for part in (recipe.category, recipe.subcategory) if part)
    if keywords:
        data["keywords"] = keywords
    if recipe.servings:
        data["recipeYield"] = f"{recipe.servings} servings"
    if recipe.category:
        data["recipeCategory"] = recipe.category

    image_url = get_recipe_image_url(recipe.image_url, "image", recipe.updated_at, settings=settings)
    if image_url:
        data["image"] = [image_url]

    if recipe.total_time and recipe.total_time > 0:
        data["totalTime"] = f"PT{recipe.total_time}M"

    if hearts and hearts > 0:
        data["aggregateRating"] = {
            "@type": "AggregateRating",
            "ratingValue": rating_from_hearts(hearts),
            "reviewCount": hearts,
        }

    if recipe.nutrition_info:
        data["nutrition"] = _nutrition(recipe)

    if recipe.components:
        data["recipeIngredient"] = _ingredients(recipe.components)

    if recipe.instructions:
        data["recipeInstructions"] = [
            {"@type": "HowToStep", "text": _instruction_text(instruction), "name": f"Step {index}"}
            for index, instruction in enumerate(recipe.instructions, start=1)
        ]

    return data


def generate_person_structured_data(
    profile: PersonLike,
    recipes_created: int | None = None,
    base_url: str | None = None,
    settings: Settings | None = None,
) -> dict[str, Any]:
    """Build the schema.org ``Person`` document for a profile page."""
    settings = settings or get_settings()
    site = _base_url(base_url, settings)

    data: dict[str, Any] = {
        "@context": SCHEMA_CONTEXT,
        "@type": "Person",
        "url": f"{site}/profiles/{profile.username}",
    }
    if profile.name:
        data["name"] = profile.name
    if profile.username:
        data["identifier"] = profile.username

    avatar_url = get_avatar_url(profile.avatar_url, settings=settings)
    if avatar_url:
        data["image"] = avatar_url

    if recipes_created and recipes_created > 0:
        data["jobTitle"] = "Recipe Creator"
        data["knowsAbout"] = ["Cooking", "Recipe Development", "Food"]

    return data


def generate_structured_data_script(data: Mapping[str, Any]) -> str:
    payload = json.dumps(data, ensure_ascii=False, separators=(",", ":"))
    # A literal "</" would close the script element early.
    payload = payload.replace("</", "<\\/")
    return f'<script type="application/ld+json">{payload}</script>'


__all__ = [
    "DEFAULT_BASE_URL",
    "generate_person_structured_data",
    "generate_recipe_structured_data",
    "generate_structured_data_script",
    "rating_from_hearts",
]
