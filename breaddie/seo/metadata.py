"""Page titles, descriptions and social-card metadata."""

from __future__ import annotations

from typing import Any

from pydantic import BaseModel, Field

from breaddie.core.config import Settings, get_settings
from breaddie.seo.structured_data import PersonLike
from breaddie.utils.url import AVATARS_BUCKET

SITE_NAME = "Recipe App"
PROFILE_NOT_FOUND_TITLE = "Profile Not Found"


class PageMetadata(BaseModel):
    title: str
    description: str | None = None
    open_graph: dict[str, Any] | None = Field(default=None, serialization_alias="openGraph")
    twitter: dict[str, Any] | None = None


def generate_profile_metadata(
    profile: PersonLike | None,
    recipes_count: int,
    *,
    settings: Settings | None = None,
) -> PageMetadata:
    if profile is None:
        return PageMetadata(title=PROFILE_NOT_FOUND_TITLE)

    settings = settings or get_settings()
    bio = getattr(profile, "bio", None)
    image_url = (
        f"{settings.storage_public_url}/{AVATARS_BUCKET}/{profile.avatar_url}" if profile.avatar_url else None
    )
    short_description = bio or f"{profile.name} has shared {recipes_count} recipes"

    open_graph: dict[str, Any] = {
        "title": profile.name,
        "description": short_description,
        "type": "profile",
        "username": profile.username,
    }
    twitter: dict[str, Any] = {
        "card": "summary",
        "title": profile.name,
        "description": short_description,
    }
    if image_url:
        open_graph["images"] = [{"url": image_url}]
        twitter["images"] = [image_url]

    return PageMetadata(
        title=f"{profile.name} (@{profile.username}) | {SITE_NAME}",
        description=bio or f"{profile.name} has shared {recipes_count} recipes on {SITE_NAME}",
        open_graph=open_graph,
        twitter=twitter,
    )


def generate_story_page_metadata() -> PageMetadata:
    return PageMetadata(
        title="Adaptive Story Learning | Anki AI",
        description=(
            "Learn vocabulary through engaging stories that incorporate current events "
            "and your personal learning goals"
        ),
    )


__all__ = [
    "PROFILE_NOT_FOUND_TITLE",
    "PageMetadata",
    "generate_profile_metadata",
    "generate_story_page_metadata",
]
