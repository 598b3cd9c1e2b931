"""
Hosted-auth session verification.

Access tokens issued by the hosted auth service are HS256 JWTs signed with the
project JWT secret. They arrive either as a Bearer header (API clients) or as
the ``sb-access-token`` cookie set by the auth callback (browser flows).
"""

from __future__ import annotations

import logging
from typing import Any
from uuid import UUID

import jwt
from fastapi import Depends, HTTPException, Request, status
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from pydantic import BaseModel, Field

from breaddie.core.config import settings
from breaddie.core.errors import ErrorCode

logger = logging.getLogger("breaddie.core.auth")

ACCESS_TOKEN_COOKIE = "sb-access-token"
REFRESH_TOKEN_COOKIE = "sb-refresh-token"
CODE_VERIFIER_COOKIE = "sb-auth-code-verifier"
JWT_ALGORITHM = "HS256"

bearer_scheme = HTTPBearer(auto_error=False)


class AuthUser(BaseModel):
    """Authenticated principal extracted from a verified access token."""

    id: UUID
    email: str | None = None
    role: str | None = None
    user_metadata: dict[str, Any] = Field(default_factory=dict)


class InvalidAccessToken(Exception):
    """Raised when an access token cannot be trusted."""


def decode_access_token(token: str) -> dict[str, Any]:
    """
    Decode and validate a hosted-auth access token.

    Raises:
        jwt.ExpiredSignatureError: Token has expired
        jwt.InvalidTokenError: Token is invalid
    """
    try:
        payload: dict[str, Any] = jwt.decode(
            token,
            settings.supabase_jwt_secret.get_secret_value(),
            algorithms=[JWT_ALGORITHM],
            audience=settings.jwt_audience,
        )
        return payload
    except jwt.ExpiredSignatureError:
        logger.warning("Access token expired")
        raise
    except jwt.InvalidTokenError:
        logger.warning("Access token invalid")
        raise


def user_from_claims(payload: dict[str, Any]) -> AuthUser:
    subject = payload.get("sub")
    if not subject:
        raise InvalidAccessToken("Token is missing the subject claim.")
    try:
        user_id = UUID(str(subject))
    except ValueError as exc:
        raise InvalidAccessToken("Token subject is not a valid user id.") from exc

    metadata = payload.get("user_metadata")
    return AuthUser(
        id=user_id,
        email=payload.get("email"),
        role=payload.get("role"),
        user_metadata=metadata if isinstance(metadata, dict) else {},
    )


def extract_access_token(
    request: Request,
    credentials: HTTPAuthorizationCredentials | None,
) -> str | None:
    if credentials is not None and credentials.credentials:
        return credentials.credentials
    cookie_token = request.cookies.get(ACCESS_TOKEN_COOKIE)
    return cookie_token or None


async def get_optional_user(
    request: Request,
    credentials: HTTPAuthorizationCredentials | None = Depends(bearer_scheme),  # noqa: B008
) -> AuthUser | None:
    """Resolve the visitor when a valid session exists, otherwise return None."""

    token = extract_access_token(request, credentials)
    if not token:
        return None
    try:
        return user_from_claims(decode_access_token(token))
    except (jwt.InvalidTokenError, InvalidAccessToken):
        return None


async def get_current_user(
    request: Request,
    credentials: HTTPAuthorizationCredentials | None = Depends(bearer_scheme),  # noqa: B008
) -> AuthUser:
    """FastAPI dependency that requires a valid hosted-auth session."""

    token = extract_access_token(request, credentials)
    if not token:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail={"code": ErrorCode.AUTH_FAILED, "message": "Authentication required."},
            headers={"WWW-Authenticate": "Bearer"},
        )

    try:
        return user_from_claims(decode_access_token(token))
    except jwt.ExpiredSignatureError as exc:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail={"code": ErrorCode.TOKEN_EXPIRED, "message": "Token expired."},
            headers={"WWW-Authenticate": "Bearer"},
        ) from exc
    except (jwt.InvalidTokenError, InvalidAccessToken) as exc:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail={"code": ErrorCode.AUTH_FAILED, "message": "Invalid token."},
            headers={"WWW-Authenticate": "Bearer"},
        ) from exc


__all__ = [
    "ACCESS_TOKEN_COOKIE",
    "CODE_VERIFIER_COOKIE",
    "AuthUser",
    "InvalidAccessToken",
    "JWT_ALGORITHM",
    "REFRESH_TOKEN_COOKIE",
    "decode_access_token",
    "extract_access_token",
    "get_current_user",
    "get_optional_user",
    "user_from_claims",
]
