"""Site and object-storage URL construction."""

from __future__ import annotations

from datetime import datetime, timezone
from typing import Literal

from breaddie.core.config import Settings, get_settings

DEFAULT_SITE_URL = "http://localhost:3000/"
RECIPE_IMAGES_BUCKET = "recipe_images"
AVATARS_BUCKET = "avatars"

ImageType = Literal["thumbnail", "banner", "image"]


def get_url(path: str = "", settings: Settings | None = None) -> str:
    """
    Absolute site URL for ``path``.

    SITE_URL wins over VERCEL_URL; blank values count as unset. Hosts without
    a scheme get ``https://``.
    """
    settings = settings or get_settings()
    candidates = (settings.site_url, settings.vercel_url)
    url = next((value for value in candidates if value and value.strip()), DEFAULT_SITE_URL)

    url = url.strip().rstrip("/")
    if "http" not in url:
        url = f"https://{url}"
    path = path.lstrip("/")
    return f"{url}/{path}" if path else url


def _epoch_millis(value: datetime | str) -> int:
    if isinstance(value, str):
        value = datetime.fromisoformat(value.replace("Z", "+00:00"))
    if value.tzinfo is None:
        value = value.replace(tzinfo=timezone.utc)
    return int(value.timestamp() * 1000)


def get_recipe_image_url(
    filename: str | None,
    image_type: ImageType = "image",
    updated_at: datetime | str | None = None,
    settings: Settings | None = None,
) -> str | None:
    """
    Public URL of a recipe image.

    Development serves fixtures from ``/recipes``; elsewhere the public bucket
    URL is returned, cache-busted with ``?t=<epoch ms>`` when ``updated_at`` is known.
    Every image type lives in the same bucket.
    """
    if not filename:
        return None

    settings = settings or get_settings()
    if settings.is_development:
        return f"/recipes/{filename}"

    url = f"{settings.storage_public_url}/{RECIPE_IMAGES_BUCKET}/{filename}"
    if updated_at:
        url += f"?t={_epoch_millis(updated_at)}"
    return url


def get_avatar_url(filename: str | None, settings: Settings | None = None) -> str | None:
    if not filename:
        return None

    settings = settings or get_settings()
    if settings.is_development:
        return f"/users/{filename}"
    return f"{settings.storage_public_url}/{AVATARS_BUCKET}/{filename}"


__all__ = [
    "AVATARS_BUCKET",
    "DEFAULT_SITE_URL",
    "RECIPE_IMAGES_BUCKET",
    "get_avatar_url",
    "get_recipe_image_url",
    "get_url",
]
