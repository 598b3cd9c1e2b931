"""Health check endpoint."""

from __future__ import annotations

import logging
from datetime import datetime, timezone
from typing import Literal

from fastapi import APIRouter, Depends, status
from fastapi.responses import JSONResponse
from pydantic import BaseModel, Field
from sqlalchemy import text
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from breaddie.api.dependencies import get_llm_service
from breaddie.core.db import get_session
from breaddie.core.version import APP_VERSION
from breaddie.services.llm import LLMService

logger = logging.getLogger("breaddie.api.health")

router = APIRouter()


class HealthResponse(BaseModel):
    """Schema returned by the /health endpoint."""

    status: Literal["healthy", "unhealthy"]
    timestamp: datetime
    checks: dict[str, str]
    version: str = Field(default=APP_VERSION)


@router.get(
    "/health",
    response_model=HealthResponse,
    status_code=status.HTTP_200_OK,
    summary="Health check",
    tags=["health"],
    responses={status.HTTP_503_SERVICE_UNAVAILABLE: {"model": HealthResponse}},
)
async def health(
    session: AsyncSession = Depends(get_session),  # noqa: B008
    llm: LLMService | None = Depends(get_llm_service),  # noqa: B008
) -> HealthResponse | JSONResponse:
    """
    Report database reachability and whether story generation is configured.

    Only the database decides the overall status; a missing model key just
    disables story generation.
    """
    checks = {"openai": "configured" if llm is not None else "not_configured"}
    try:
        await session.execute(text("SELECT 1"))
        checks["database"] = "ok"
    except SQLAlchemyError as exc:
        logger.warning("Database health check failed", extra={"error": str(exc)})
        checks["database"] = "error"

    healthy = checks["database"] == "ok"
    body = HealthResponse(
        status="healthy" if healthy else "unhealthy",
        timestamp=datetime.now(tz=timezone.utc),
        checks=checks,
        version=APP_VERSION,
    )
    if healthy:
        return body
    return JSONResponse(
        status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
        content=body.model_dump(mode="json"),
    )
