"""Shared helpers for tests."""

from __future__ import annotations

import time
import uuid
from typing import Any

import jwt

TEST_JWT_SECRET = "test-jwt-secret-with-enough-length"


def make_access_token(
    user_id: uuid.UUID | str,
    *,
    expires_in: int = 3600,
    audience: str = "authenticated",
    secret: str = TEST_JWT_SECRET,
    **claims: Any,
) -> str:
    """Sign an HS256 token shaped like the hosted auth service's access tokens."""

    now = int(time.time())
    payload: dict[str, Any] = {
        "sub": str(user_id),
        "aud": audience,
        "role": "authenticated",
        "email": "cook@example.com",
        "iat": now,
        "exp": now + expires_in,
        **claims,
    }
    return jwt.encode(payload, secret, algorithm="HS256")
