from __future__ import annotations

from typing import Any

import pytest

from breaddie.clients.auth import AuthSession
from breaddie.clients.base import HostedServiceError
from breaddie.core.errors import ApplicationError
from breaddie.schemas.auth import SignUpRequest
from breaddie.services.auth import SIGN_UP_CONFIRM_MESSAGE, SIGN_UP_DONE_MESSAGE, AuthService


class FakeAuthClient:
    def __init__(self, *, error: HostedServiceError | None = None, sign_up_body: dict[str, Any] | None = None) -> None:
        self.error = error
        self.sign_up_body = sign_up_body or {}
        self.exchanged: list[tuple[str, str | None]] = []
        self.sign_ups: list[dict[str, Any]] = []

    async def exchange_code_for_session(self, code: str, code_verifier: str | None = None) -> AuthSession:
        self.exchanged.append((code, code_verifier))
        if self.error is not None:
            raise self.error
        return AuthSession(access_token="access", refresh_token="refresh", user={"id": "u-1"})

    async def sign_in_with_password(self, email: str, password: str) -> AuthSession:
        if self.error is not None:
            raise self.error
        return AuthSession(access_token="access", user={"email": email})

    async def sign_up(self, email: str, password: str, **kwargs: Any) -> dict[str, Any]:
        self.sign_ups.append({"email": email, **kwargs})
        if self.error is not None:
            raise self.error
        return self.sign_up_body


def _service(client: FakeAuthClient) -> AuthService:
    return AuthService(client)  # type: ignore[arg-type]


@pytest.mark.asyncio
async def test_exchange_without_code_does_not_call_backend() -> None:
    client = FakeAuthClient()

    assert await _service(client).exchange_code(None) is None
    assert client.exchanged == []


@pytest.mark.asyncio
async def test_exchange_rejected_code_returns_none() -> None:
    client = FakeAuthClient(error=HostedServiceError("invalid flow state", remote_status=400))

    assert await _service(client).exchange_code("abc", "verifier") is None
    assert client.exchanged == [("abc", "verifier")]


@pytest.mark.asyncio
async def test_exchange_valid_code_returns_session() -> None:
    session = await _service(FakeAuthClient()).exchange_code("abc")

    assert session is not None
    assert session.refresh_token == "refresh"


@pytest.mark.asyncio
async def test_sign_in_bad_credentials_is_auth_failure() -> None:
    client = FakeAuthClient(error=HostedServiceError("Invalid login credentials", remote_status=400))

    with pytest.raises(ApplicationError) as excinfo:
        await _service(client).sign_in("baker@example.com", "wrong")

    assert excinfo.value.status_code == 401
    assert excinfo.value.message == "Invalid login credentials"


@pytest.mark.asyncio
async def test_sign_in_backend_outage_propagates() -> None:
    client = FakeAuthClient(error=HostedServiceError("auth service is unreachable"))

    with pytest.raises(HostedServiceError):
        await _service(client).sign_in("baker@example.com", "secret")


@pytest.mark.asyncio
async def test_sign_up_requiring_confirmation() -> None:
    client = FakeAuthClient(sign_up_body={"id": "u-1", "email": "baker@example.com"})
    payload = SignUpRequest(email="baker@example.com", password="secret1", username="baker")

    result = await _service(client).sign_up(payload, redirect_to="https://breaddie.test/auth/callback?type=signup")

    assert result.confirmation_required is True
    assert result.message == SIGN_UP_CONFIRM_MESSAGE
    assert result.user == {"id": "u-1", "email": "baker@example.com"}
    assert client.sign_ups[0]["metadata"] == {"username": "baker"}


@pytest.mark.asyncio
async def test_sign_up_with_immediate_session() -> None:
    client = FakeAuthClient(sign_up_body={"access_token": "a", "user": {"id": "u-2"}})
    payload = SignUpRequest(email="baker@example.com", password="secret1")

    result = await _service(client).sign_up(payload)

    assert result.confirmation_required is False
    assert result.message == SIGN_UP_DONE_MESSAGE
    assert result.user == {"id": "u-2"}
