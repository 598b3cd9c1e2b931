"""Sign-in, sign-up and auth-callback flows over the hosted auth API."""

from __future__ import annotations

import logging

from breaddie.clients.auth import AuthSession, HostedAuthClient
from breaddie.clients.base import HostedServiceError
from breaddie.core.errors import ApplicationError, ErrorCode
from breaddie.schemas.auth import SignUpRequest, SignUpResponse

logger = logging.getLogger("breaddie.services.auth")

SIGN_UP_CONFIRM_MESSAGE = "Check your email to confirm your account."
SIGN_UP_DONE_MESSAGE = "Your account has been created."


class AuthService:
    def __init__(self, client: HostedAuthClient) -> None:
        self.client = client

    async def exchange_code(self, code: str | None, code_verifier: str | None = None) -> AuthSession | None:
        """Return a session for a valid one-time code, None for a missing or rejected code."""
        if not code:
            return None
        try:
            return await self.client.exchange_code_for_session(code, code_verifier)
        except HostedServiceError as exc:
            logger.info(
                "Auth code exchange failed",
                extra={"remote_status": exc.remote_status, "remote_code": exc.remote_code},
            )
            return None

    async def sign_in(self, email: str, password: str) -> AuthSession:
        try:
            return await self.client.sign_in_with_password(email, password)
        except HostedServiceError as exc:
            if exc.remote_status is not None and 400 <= exc.remote_status < 500:
                raise ApplicationError(
                    code=ErrorCode.AUTH_FAILED,
                    message=exc.message,
                    status_code=401,
                ) from exc
            raise

    async def sign_up(self, payload: SignUpRequest, *, redirect_to: str | None = None) -> SignUpResponse:
        metadata = {key: value for key, value in (("name", payload.name), ("username", payload.username)) if value}
        try:
            body = await self.client.sign_up(
                payload.email,
                payload.password,
                metadata=metadata,
                redirect_to=redirect_to,
            )
        except HostedServiceError as exc:
            if exc.remote_status is not None and 400 <= exc.remote_status < 500:
                raise ApplicationError(code=ErrorCode.VALIDATION_ERROR, message=exc.message) from exc
            raise

        # With email confirmation on, the reply is the bare user and carries no session.
        has_session = "access_token" in body
        user = body.get("user") if has_session else body
        logger.info("User signed up", extra={"confirmation_required": not has_session})
        return SignUpResponse(
            user=user if isinstance(user, dict) else None,
            confirmation_required=not has_session,
            message=SIGN_UP_DONE_MESSAGE if has_session else SIGN_UP_CONFIRM_MESSAGE,
        )


__all__ = ["AuthService"]
