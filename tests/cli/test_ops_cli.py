from __future__ import annotations

import json
from pathlib import Path

import httpx
import pytest
from typer.testing import CliRunner

from breaddie.cli import ops
from breaddie.clients.storage import StorageClient

runner = CliRunner()


class FakeStorage:
    """Records requests made through a MockTransport-backed StorageClient."""

    def __init__(self, existing: dict[str, list[str]] | None = None, *, upload_status: int = 200, probe_status: int = 200) -> None:
        self.existing = existing or {}
        self.upload_status = upload_status
        self.probe_status = probe_status
        self.uploads: list[httpx.Request] = []

    def handler(self, request: httpx.Request) -> httpx.Response:
        path = request.url.path
        if request.method == "HEAD":
            return httpx.Response(self.probe_status)
        if path.startswith("/storage/v1/object/list/"):
            bucket = path.rsplit("/", 1)[-1]
            return httpx.Response(
                200,
                json=[{"name": name, "metadata": {"size": 1024}} for name in self.existing.get(bucket, [])],
            )
        self.uploads.append(request)
        if self.upload_status >= 400:
            return httpx.Response(self.upload_status, json={"message": "Bucket not found"})
        return httpx.Response(200, json={"Key": path.removeprefix("/storage/v1/object/")})

    def client(self) -> StorageClient:
        return StorageClient("https://project.supabase.test", "service-key", transport=httpx.MockTransport(self.handler))


@pytest.fixture()
def seed_tree(tmp_path: Path) -> Path:
    recipes = tmp_path / "recipes"
    users = tmp_path / "users"
    recipes.mkdir()
    users.mkdir()
    (recipes / "loaf.png").write_bytes(b"loaf")
    (users / "baker.jpg").write_bytes(b"baker")
    seed = {
        "user": {"username": "baker", "avatar_url": "baker.jpg"},
        "recipes": [{"slug": "loaf", "image_url": "loaf.png"}, {"slug": "gone", "image_url": "gone.png"}],
    }
    (tmp_path / "seed.json").write_text(json.dumps(seed), encoding="utf-8")
    return tmp_path


def _seed_args(tree: Path, *extra: str) -> list[str]:
    return [
        "seed-images",
        str(tree / "seed.json"),
        "--recipes-dir",
        str(tree / "recipes"),
        "--users-dir",
        str(tree / "users"),
        *extra,
    ]


def test_collect_seed_images_orders_avatar_first(tmp_path: Path) -> None:
    images = ops.collect_seed_images(
        {"user": {"avatar_url": "me.png"}, "recipes": [{"image_url": "a.jpg"}, {"image_url": None}]},
        tmp_path / "recipes",
        tmp_path / "users",
    )

    assert images == [
        ops.SeedImage("avatars", tmp_path / "users" / "me.png"),
        ops.SeedImage("recipe_images", tmp_path / "recipes" / "a.jpg"),
    ]


def test_content_type_for() -> None:
    assert ops.content_type_for(Path("a.JPG")) == "image/jpeg"
    assert ops.content_type_for(Path("a.bin")) == "application/octet-stream"


def test_seed_images_uploads_and_skips_missing(seed_tree: Path, monkeypatch: pytest.MonkeyPatch) -> None:
    storage = FakeStorage()
    monkeypatch.setattr(ops, "build_storage_client", storage.client)

    result = runner.invoke(ops.app, _seed_args(seed_tree))

    assert result.exit_code == 0, result.output
    assert "Uploaded new file: baker.jpg" in result.output
    assert "Uploaded new file: loaf.png" in result.output
    assert "Local file not found" in result.output
    assert [request.url.path for request in storage.uploads] == [
        "/storage/v1/object/avatars/baker.jpg",
        "/storage/v1/object/recipe_images/loaf.png",
    ]
    assert storage.uploads[0].headers["content-type"] == "image/jpeg"
    assert storage.uploads[0].headers["x-upsert"] == "true"


def test_seed_images_without_force_skips_existing(seed_tree: Path, monkeypatch: pytest.MonkeyPatch) -> None:
    storage = FakeStorage(existing={"recipe_images": ["loaf.png"]})
    monkeypatch.setattr(ops, "build_storage_client", storage.client)

    result = runner.invoke(ops.app, _seed_args(seed_tree, "--no-force"))

    assert result.exit_code == 0, result.output
    assert "File already exists in storage, skipping: loaf.png" in result.output
    assert [request.url.path for request in storage.uploads] == ["/storage/v1/object/avatars/baker.jpg"]


def test_seed_images_overrides_existing_by_default(seed_tree: Path, monkeypatch: pytest.MonkeyPatch) -> None:
    storage = FakeStorage(existing={"recipe_images": ["loaf.png"]})
    monkeypatch.setattr(ops, "build_storage_client", storage.client)

    result = runner.invoke(ops.app, _seed_args(seed_tree))

    assert result.exit_code == 0, result.output
    assert "Overridden existing file: loaf.png" in result.output


def test_seed_images_upload_failure_exits_nonzero(seed_tree: Path, monkeypatch: pytest.MonkeyPatch) -> None:
    storage = FakeStorage(upload_status=404)
    monkeypatch.setattr(ops, "build_storage_client", storage.client)

    result = runner.invoke(ops.app, _seed_args(seed_tree))

    assert result.exit_code == 1
    assert "Upload error for baker.jpg: Bucket not found" in result.output


def test_seed_images_rejects_invalid_json(tmp_path: Path) -> None:
    seed_file = tmp_path / "seed.json"
    seed_file.write_text("{not json", encoding="utf-8")

    result = runner.invoke(ops.app, ["seed-images", str(seed_file)])

    assert result.exit_code == 2
    assert "Invalid seed file" in result.output


def test_check_storage_healthy(monkeypatch: pytest.MonkeyPatch) -> None:
    storage = FakeStorage(existing={"recipe_images": ["loaf.png"]})
    monkeypatch.setattr(ops, "build_storage_client", storage.client)

    result = runner.invoke(ops.app, ["check-storage", "--probe-object", "loaf.png"])

    assert result.exit_code == 0, result.output
    assert "Found 1 files in recipe_images:" in result.output
    assert "   - loaf.png (1024)" in result.output
    assert "No files found in avatars" in result.output
    assert "Test URL: https://project.supabase.test/storage/v1/object/public/recipe_images/loaf.png" in result.output


def test_check_storage_unreachable_public_url(monkeypatch: pytest.MonkeyPatch) -> None:
    storage = FakeStorage(probe_status=400)
    monkeypatch.setattr(ops, "build_storage_client", storage.client)

    result = runner.invoke(ops.app, ["check-storage"])

    assert result.exit_code == 1
    assert "Status: 400. Image not accessible via direct URL" in result.output
