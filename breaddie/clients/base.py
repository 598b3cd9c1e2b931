"""Shared plumbing for clients of the hosted backend REST APIs."""

from __future__ import annotations

import logging
from types import TracebackType
from typing import Any

import httpx
from fastapi import status

from breaddie.core.errors import ErrorCode, ExternalServiceError

logger = logging.getLogger("breaddie.clients")


class HostedServiceError(ExternalServiceError):
    """The hosted backend rejected a request or could not be reached."""

    def __init__(
        self,
        message: str,
        *,
        remote_status: int | None = None,
        remote_code: str | None = None,
    ) -> None:
        super().__init__(
            code=ErrorCode.HOSTED_BACKEND_ERROR,
            message=message,
            status_code=status.HTTP_502_BAD_GATEWAY,
            details={"remote_status": remote_status, "remote_code": remote_code},
        )
        self.remote_status = remote_status
        self.remote_code = remote_code


class HostedClient:
    """Lazily-opened ``httpx.AsyncClient`` bound to one hosted API prefix."""

    service_name = "hosted"

    def __init__(
        self,
        base_url: str,
        api_key: str,
        *,
        timeout: float = 10.0,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        self.base_url = base_url.rstrip("/")
        self.api_key = api_key
        self.timeout = timeout
        self._transport = transport
        self._client: httpx.AsyncClient | None = None

    @property
    def client(self) -> httpx.AsyncClient:
        if self._client is None:
            self._client = httpx.AsyncClient(
                base_url=self.base_url,
                timeout=self.timeout,
                transport=self._transport,
                headers={"apikey": self.api_key},
            )
        return self._client

    async def aclose(self) -> None:
        if self._client is not None:
            await self._client.aclose()
            self._client = None

    async def __aenter__(self) -> HostedClient:
        return self

    async def __aexit__(
        self,
        exc_type: type[BaseException] | None,
        exc: BaseException | None,
        tb: TracebackType | None,
    ) -> None:
        await self.aclose()

    def bearer(self, token: str | None = None) -> dict[str, str]:
        return {"Authorization": f"Bearer {token or self.api_key}"}

    async def request(self, method: str, url: str, **kwargs: Any) -> httpx.Response:
        """Send a request and turn transport failures and non-2xx replies into HostedServiceError."""
        try:
            response = await self.client.request(method, url, **kwargs)
        except httpx.HTTPError as exc:
            logger.warning(
                "Hosted %s request failed",
                self.service_name,
                extra={"service": self.service_name, "http_path": url, "error": str(exc)},
            )
            raise HostedServiceError(f"{self.service_name} service is unreachable: {exc}") from exc

        if response.is_success:
            return response

        message, remote_code = _error_message(response)
        logger.info(
            "Hosted %s request rejected",
            self.service_name,
            extra={
                "service": self.service_name,
                "http_path": url,
                "status_code": response.status_code,
                "remote_code": remote_code,
            },
        )
        raise HostedServiceError(message, remote_status=response.status_code, remote_code=remote_code)


def _error_message(response: httpx.Response) -> tuple[str, str | None]:
    try:
        body = response.json()
    except ValueError:
        return response.text or response.reason_phrase, None
    if not isinstance(body, dict):
        return response.reason_phrase, None

    message = (
        body.get("msg")
        or body.get("message")
        or body.get("error_description")
        or body.get("error")
        or response.reason_phrase
    )
    code = body.get("error_code") or body.get("code") or body.get("statusCode")
    return str(message), str(code) if code is not None else None


__all__ = ["HostedClient", "HostedServiceError"]
