from __future__ import annotations

from datetime import datetime
from typing import AsyncIterator

import pytest
from httpx import ASGITransport, AsyncClient
from sqlalchemy.exc import OperationalError

from breaddie.api.dependencies import get_llm_service
from breaddie.core.db import get_session
from breaddie.core.version import APP_VERSION
from breaddie.main import app


def _client() -> AsyncClient:
    return AsyncClient(transport=ASGITransport(app=app), base_url="http://testserver")


@pytest.mark.asyncio
async def test_health_returns_expected_payload() -> None:
    async with _client() as client:
        response = await client.get("/health")

    assert response.status_code == 200

    payload = response.json()
    assert payload["status"] == "healthy"
    assert payload["version"] == APP_VERSION
    assert payload["checks"] == {"database": "ok", "openai": "configured"}

    # Ensure timestamp is ISO-8601 parsable
    datetime.fromisoformat(payload["timestamp"])


@pytest.mark.asyncio
async def test_health_reports_missing_model_key() -> None:
    app.dependency_overrides[get_llm_service] = lambda: None
    try:
        async with _client() as client:
            response = await client.get("/health")
    finally:
        app.dependency_overrides.pop(get_llm_service, None)

    assert response.status_code == 200
    assert response.json()["checks"]["openai"] == "not_configured"


@pytest.mark.asyncio
async def test_health_returns_503_when_database_fails() -> None:
    class BrokenSession:
        async def execute(self, *args: object, **kwargs: object) -> None:
            raise OperationalError("SELECT 1", {}, Exception("connection refused"))

    async def _broken_session() -> AsyncIterator[BrokenSession]:
        yield BrokenSession()

    app.dependency_overrides[get_session] = _broken_session
    try:
        async with _client() as client:
            response = await client.get("/health")
    finally:
        app.dependency_overrides.pop(get_session, None)

    assert response.status_code == 503
    payload = response.json()
    assert payload["status"] == "unhealthy"
    assert payload["checks"]["database"] == "error"


@pytest.mark.asyncio
async def test_request_id_header_generated() -> None:
    async with _client() as client:
        response = await client.get("/health")

    request_id = response.headers.get("X-Request-ID")
    assert request_id
    assert len(request_id) >= 8


@pytest.mark.asyncio
async def test_request_id_header_preserved_from_client() -> None:
    desired_request_id = "test-request-id-123"
    async with _client() as client:
        response = await client.get("/health", headers={"X-Request-ID": desired_request_id})

    assert response.headers.get("X-Request-ID") == desired_request_id


@pytest.mark.asyncio
async def test_cors_preflight_allows_site_origin() -> None:
    headers = {
        "Origin": "https://breaddie.test",
        "Access-Control-Request-Method": "PATCH",
        "Access-Control-Request-Headers": "Authorization",
    }

    async with _client() as client:
        response = await client.options("/api/profile", headers=headers)

    assert response.status_code == 200
    assert response.headers["access-control-allow-origin"] == "https://breaddie.test"
    assert response.headers["access-control-allow-credentials"] == "true"
