"""Client for the hosted object storage REST API."""

from __future__ import annotations

import logging
from typing import Any
from urllib.parse import quote

import httpx
from pydantic import BaseModel, ConfigDict

from breaddie.clients.base import HostedClient
from breaddie.core.config import Settings

logger = logging.getLogger("breaddie.clients.storage")

DEFAULT_CACHE_CONTROL = "3600"


class StoredObject(BaseModel):
    model_config = ConfigDict(extra="ignore")

    name: str
    id: str | None = None
    updated_at: str | None = None
    metadata: dict[str, Any] | None = None


class StorageClient(HostedClient):
    service_name = "storage"

    def __init__(
        self,
        base_url: str,
        api_key: str,
        *,
        timeout: float = 10.0,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        super().__init__(f"{base_url.rstrip('/')}/storage/v1", api_key, timeout=timeout, transport=transport)

    @classmethod
    def from_settings(cls, settings: Settings, *, privileged: bool = False) -> StorageClient:
        """Build a client; ``privileged`` prefers the service-role key needed for uploads."""
        key = settings.supabase_anon_key
        if privileged and settings.supabase_service_role_key is not None:
            key = settings.supabase_service_role_key
        return cls(
            settings.supabase_url,
            key.get_secret_value(),
            timeout=settings.http_timeout_seconds,
        )

    def public_url(self, bucket: str, path: str) -> str:
        return f"{self.base_url}/object/public/{bucket}/{quote(path)}"

    async def list_objects(self, bucket: str, *, prefix: str = "", limit: int = 100, offset: int = 0) -> list[StoredObject]:
        response = await self.request(
            "POST",
            f"/object/list/{bucket}",
            headers=self.bearer(),
            json={
                "prefix": prefix,
                "limit": limit,
                "offset": offset,
                "sortBy": {"column": "name", "order": "asc"},
            },
        )
        return [StoredObject.model_validate(item) for item in response.json()]

    async def exists(self, bucket: str, path: str) -> bool:
        folder, _, name = path.rpartition("/")
        objects = await self.list_objects(bucket, prefix=folder, limit=1000)
        return any(item.name == name for item in objects)

    async def upload(
        self,
        bucket: str,
        path: str,
        content: bytes,
        *,
        content_type: str,
        cache_control: str = DEFAULT_CACHE_CONTROL,
        upsert: bool = True,
    ) -> str:
        """Upload ``content`` and return the stored object key."""
        response = await self.request(
            "POST",
            f"/object/{bucket}/{quote(path)}",
            headers={
                **self.bearer(),
                "Content-Type": content_type,
                "Cache-Control": f"max-age={cache_control}",
                "x-upsert": "true" if upsert else "false",
            },
            content=content,
        )
        body = response.json()
        key = body.get("Key") if isinstance(body, dict) else None
        logger.info(
            "Uploaded object to storage",
            extra={"bucket": bucket, "object_path": path, "bytes": len(content)},
        )
        return str(key or f"{bucket}/{path}")

    async def probe_public_url(self, bucket: str, path: str) -> int:
        """HEAD the public URL of an object and return the status code."""
        try:
            response = await self.client.head(self.public_url(bucket, path))
        except httpx.HTTPError as exc:
            logger.warning("Public URL probe failed", extra={"bucket": bucket, "error": str(exc)})
            return 0
        return response.status_code


__all__ = ["DEFAULT_CACHE_CONTROL", "StorageClient", "StoredObject"]
