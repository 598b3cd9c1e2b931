"""breaddie-ops: storage seeding and diagnostics against the hosted backend."""

from __future__ import annotations

import asyncio
import json
import logging
from dataclasses import dataclass
from enum import StrEnum
from pathlib import Path
from typing import Annotated, Any

import typer

from breaddie.clients.base import HostedServiceError
from breaddie.clients.storage import DEFAULT_CACHE_CONTROL, StorageClient
from breaddie.core.config import get_settings
from breaddie.core.logging import configure_logging
from breaddie.utils.url import AVATARS_BUCKET, RECIPE_IMAGES_BUCKET

logger = logging.getLogger("breaddie.cli.ops")

app = typer.Typer(
    help="breaddie-ops: hosted storage maintenance.",
    no_args_is_help=True,
)

DEFAULT_RECIPES_DIR = Path("public/recipes")
DEFAULT_USERS_DIR = Path("public/users")
DEFAULT_PROBE_OBJECT = "f0f1f2f3-f4f5-f6f7-f8f9-fafbfcfdfeff-thumbnail.png"
CHECK_LIST_LIMIT = 100

_CONTENT_TYPES = {
    ".png": "image/png",
    ".jpg": "image/jpeg",
    ".jpeg": "image/jpeg",
    ".webp": "image/webp",
    ".svg": "image/svg+xml",
}


class UploadOutcome(StrEnum):
    MISSING = "missing"
    SKIPPED = "skipped"
    UPLOADED = "uploaded"
    OVERRIDDEN = "overridden"
    FAILED = "failed"


@dataclass(frozen=True)
class SeedImage:
    bucket: str
    path: Path


def content_type_for(path: Path) -> str:
    return _CONTENT_TYPES.get(path.suffix.lower(), "application/octet-stream")


def collect_seed_images(seed: dict[str, Any], recipes_dir: Path, users_dir: Path) -> list[SeedImage]:
    """The user's avatar first, then one image per recipe, in seed order."""
    images: list[SeedImage] = []
    avatar = (seed.get("user") or {}).get("avatar_url")
    if avatar:
        images.append(SeedImage(AVATARS_BUCKET, users_dir / avatar))
    for recipe in seed.get("recipes") or []:
        image = recipe.get("image_url")
        if image:
            images.append(SeedImage(RECIPE_IMAGES_BUCKET, recipes_dir / image))
    return images


def build_storage_client() -> StorageClient:
    return StorageClient.from_settings(get_settings(), privileged=True)


async def upload_image(storage: StorageClient, image: SeedImage, *, force: bool = True) -> UploadOutcome:
    if not image.path.is_file():
        typer.echo(f"Local file not found, skipping: {image.path}")
        return UploadOutcome.MISSING

    name = image.path.name
    try:
        exists = await storage.exists(image.bucket, name)
        if exists and not force:
            typer.echo(f"File already exists in storage, skipping: {name}")
            return UploadOutcome.SKIPPED

        await storage.upload(
            image.bucket,
            name,
            image.path.read_bytes(),
            content_type=content_type_for(image.path),
            cache_control=DEFAULT_CACHE_CONTROL,
            upsert=True,
        )
    except HostedServiceError as exc:
        logger.error("Upload failed", extra={"bucket": image.bucket, "object_name": name, "error": exc.message})
        typer.echo(f"Upload error for {name}: {exc.message}", err=True)
        return UploadOutcome.FAILED

    if exists:
        typer.echo(f"Overridden existing file: {name}")
        return UploadOutcome.OVERRIDDEN
    typer.echo(f"Uploaded new file: {name}")
    return UploadOutcome.UPLOADED


async def _seed(images: list[SeedImage], force: bool) -> list[UploadOutcome]:
    async with build_storage_client() as storage:
        return [await upload_image(storage, image, force=force) for image in images]


async def _check(probe_object: str) -> bool:
    healthy = True
    async with build_storage_client() as storage:
        for bucket in (RECIPE_IMAGES_BUCKET, AVATARS_BUCKET):
            typer.echo(f"Checking bucket: {bucket}")
            try:
                objects = await storage.list_objects(bucket, limit=CHECK_LIST_LIMIT)
            except HostedServiceError as exc:
                typer.echo(f"Error listing {bucket}: {exc.message}", err=True)
                healthy = False
                continue
            if not objects:
                typer.echo(f"No files found in {bucket}")
                continue
            typer.echo(f"Found {len(objects)} files in {bucket}:")
            for item in objects:
                size = (item.metadata or {}).get("size", "unknown size")
                typer.echo(f"   - {item.name} ({size})")

        url = storage.public_url(RECIPE_IMAGES_BUCKET, probe_object)
        typer.echo(f"Test URL: {url}")
        status_code = await storage.probe_public_url(RECIPE_IMAGES_BUCKET, probe_object)
        if 200 <= status_code < 300:
            typer.echo(f"Status: {status_code}. Image accessible via direct URL")
        else:
            typer.echo(f"Status: {status_code}. Image not accessible via direct URL")
            healthy = False
    return healthy


@app.callback()
def main_callback() -> None:
    """Configure logging for every command."""
    configure_logging(get_settings().log_level)


@app.command("seed-images")
def seed_images(
    seed_file: Annotated[
        Path,
        typer.Argument(exists=True, dir_okay=False, readable=True, help="Seed JSON with user and recipes."),
    ],
    recipes_dir: Annotated[Path, typer.Option(help="Local directory holding recipe images.")] = DEFAULT_RECIPES_DIR,
    users_dir: Annotated[Path, typer.Option(help="Local directory holding avatars.")] = DEFAULT_USERS_DIR,
    force: Annotated[
        bool,
        typer.Option("--force/--no-force", help="Overwrite files that already exist in storage."),
    ] = True,
) -> None:
    """Upload the seed avatar and recipe images to object storage."""
    try:
        seed = json.loads(seed_file.read_text(encoding="utf-8"))
    except json.JSONDecodeError as exc:
        typer.echo(f"Invalid seed file: {exc}", err=True)
        raise typer.Exit(2) from exc

    images = collect_seed_images(seed, recipes_dir, users_dir)
    outcomes = asyncio.run(_seed(images, force))
    if UploadOutcome.FAILED in outcomes:
        raise typer.Exit(1)


@app.command("check-storage")
def check_storage(
    probe_object: Annotated[
        str,
        typer.Option(help="Recipe image used to test public URL access."),
    ] = DEFAULT_PROBE_OBJECT,
) -> None:
    """List both image buckets and probe one public object URL."""
    if not asyncio.run(_check(probe_object)):
        raise typer.Exit(1)


__all__ = [
    "SeedImage",
    "UploadOutcome",
    "app",
    "build_storage_client",
    "collect_seed_images",
    "content_type_for",
    "upload_image",
]
