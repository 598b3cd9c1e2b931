"""Client for the hosted auth REST API (sessions, sign-in, user metadata)."""

from __future__ import annotations

import logging
import uuid
from typing import Any

import httpx
from pydantic import BaseModel, Field, ValidationError

from breaddie.clients.base import HostedClient, HostedServiceError
from breaddie.core.config import Settings

logger = logging.getLogger("breaddie.clients.auth")


class AuthSession(BaseModel):
    access_token: str
    refresh_token: str | None = None
    token_type: str = "bearer"
    expires_in: int | None = None
    user: dict[str, Any] = Field(default_factory=dict)


class HostedAuthClient(HostedClient):
    service_name = "auth"

    def __init__(
        self,
        base_url: str,
        anon_key: str,
        *,
        service_role_key: str | None = None,
        timeout: float = 10.0,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        super().__init__(f"{base_url.rstrip('/')}/auth/v1", anon_key, timeout=timeout, transport=transport)
        self.service_role_key = service_role_key

    @classmethod
    def from_settings(cls, settings: Settings) -> HostedAuthClient:
        service_key = settings.supabase_service_role_key
        return cls(
            settings.supabase_url,
            settings.supabase_anon_key.get_secret_value(),
            service_role_key=service_key.get_secret_value() if service_key else None,
            timeout=settings.http_timeout_seconds,
        )

    async def exchange_code_for_session(self, code: str, code_verifier: str | None = None) -> AuthSession:
        """Trade a one-time auth code (email links, OAuth) for a session."""
        response = await self.request(
            "POST",
            "/token",
            params={"grant_type": "pkce"},
            json={"auth_code": code, "code_verifier": code_verifier or ""},
        )
        return _parse_session(response)

    async def sign_in_with_password(self, email: str, password: str) -> AuthSession:
        response = await self.request(
            "POST",
            "/token",
            params={"grant_type": "password"},
            json={"email": email, "password": password},
        )
        return _parse_session(response)

    async def sign_up(
        self,
        email: str,
        password: str,
        *,
        metadata: dict[str, Any] | None = None,
        redirect_to: str | None = None,
    ) -> dict[str, Any]:
        """
        Register a user.

        When email confirmation is enabled the reply carries the user only and
        no session; callers must not assume they are signed in.
        """
        response = await self.request(
            "POST",
            "/signup",
            params={"redirect_to": redirect_to} if redirect_to else None,
            json={"email": email, "password": password, "data": metadata or {}},
        )
        body: dict[str, Any] = response.json()
        return body

    async def get_user(self, access_token: str) -> dict[str, Any]:
        response = await self.request("GET", "/user", headers=self.bearer(access_token))
        user: dict[str, Any] = response.json()
        return user

    async def update_user_metadata(
        self,
        user_id: uuid.UUID,
        metadata: dict[str, Any],
        *,
        access_token: str | None = None,
    ) -> dict[str, Any]:
        """
        Merge ``metadata`` into the auth user's metadata.

        Uses the user's own session when available and the service-role admin
        endpoint otherwise.
        """
        if access_token:
            response = await self.request(
                "PUT",
                "/user",
                headers=self.bearer(access_token),
                json={"data": metadata},
            )
        elif self.service_role_key:
            response = await self.request(
                "PUT",
                f"/admin/users/{user_id}",
                headers={**self.bearer(self.service_role_key), "apikey": self.service_role_key},
                json={"user_metadata": metadata},
            )
        else:
            raise HostedServiceError("No credentials available to update user metadata.")

        user: dict[str, Any] = response.json()
        return user


def _parse_session(response: httpx.Response) -> AuthSession:
    try:
        return AuthSession.model_validate(response.json())
    except (ValueError, ValidationError) as exc:
        logger.warning("Unreadable auth session reply", extra={"error": str(exc)})
        raise HostedServiceError(
            "Auth service returned an unreadable session.",
            remote_status=response.status_code,
        ) from exc


__all__ = ["AuthSession", "HostedAuthClient"]
