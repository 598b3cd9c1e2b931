"""Email/password auth payloads."""

from __future__ import annotations

from typing import Any

from pydantic import BaseModel, EmailStr, Field


class SignInRequest(BaseModel):
    email: EmailStr
    password: str = Field(min_length=1, max_length=256)


class SignUpRequest(BaseModel):
    email: EmailStr
    password: str = Field(min_length=6, max_length=256)
    name: str | None = Field(default=None, max_length=255)
    username: str | None = Field(default=None, min_length=3, max_length=64, pattern=r"^[A-Za-z0-9_.-]+$")


class SignInResponse(BaseModel):
    user: dict[str, Any]
    expires_in: int | None = None


class SignUpResponse(BaseModel):
    user: dict[str, Any] | None = None
    confirmation_required: bool
    message: str


__all__ = ["SignInRequest", "SignInResponse", "SignUpRequest", "SignUpResponse"]
