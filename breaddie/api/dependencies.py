"""Shared FastAPI dependencies: hosted clients, the LLM adapter and raw tokens."""

from __future__ import annotations

from functools import lru_cache

from fastapi import Depends, Request
from fastapi.security import HTTPAuthorizationCredentials

from breaddie.clients.auth import HostedAuthClient
from breaddie.core.auth import bearer_scheme, extract_access_token
from breaddie.core.config import get_settings
from breaddie.services.llm import LLMService


@lru_cache
def get_auth_client() -> HostedAuthClient:
    return HostedAuthClient.from_settings(get_settings())


@lru_cache
def get_llm_service() -> LLMService | None:
    """The story model client, or None when no API key is configured."""
    settings = get_settings()
    if settings.openai_api_key is None:
        return None
    return LLMService(
        api_key=settings.openai_api_key.get_secret_value(),
        model=settings.story_model,
        temperature=settings.story_temperature,
    )


async def get_access_token(
    request: Request,
    credentials: HTTPAuthorizationCredentials | None = Depends(bearer_scheme),  # noqa: B008
) -> str | None:
    return extract_access_token(request, credentials)


__all__ = ["get_access_token", "get_auth_client", "get_llm_service"]
