"""
Configuration module for the breaddie backend.

The Settings object centralizes environment-driven configuration with strict
typing and validation rules so that the rest of the codebase can rely on a
single source of truth.
"""

from __future__ import annotations

import json
from functools import lru_cache
from typing import Literal

from pydantic import (
    AnyHttpUrl,
    Field,
    SecretStr,
    ValidationInfo,
    computed_field,
    field_validator,
    model_validator,
)
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application configuration loaded from environment variables."""

    model_config = SettingsConfigDict(
        env_file=(".env", "../.env"),
        env_file_encoding="utf-8",
        case_sensitive=True,
        extra="ignore",
    )

    project_name: str = Field(default="breaddie", alias="PROJECT_NAME")
    environment: Literal["local", "test", "staging", "production"] = Field(
        default="local",
        alias="APP_ENV",
    )
    debug: bool = Field(default=False, alias="DEBUG")
    log_level: str = Field(default="INFO", alias="LOG_LEVEL")
    sql_echo: bool = Field(default=False, alias="SQL_ECHO")

    database_url: str = Field(alias="DATABASE_URL")
    db_pool_size: int = Field(default=5, alias="DB_POOL_SIZE")
    db_max_overflow: int = Field(default=5, alias="DB_MAX_OVERFLOW")
    db_statement_cache_size: int = Field(
        default=0,
        alias="DB_STATEMENT_CACHE_SIZE",
        description="asyncpg prepared statement cache; 0 is required behind the transaction pooler.",
    )

    supabase_url: str = Field(
        alias="SUPABASE_URL",
        description="Base URL of the hosted backend (auth, storage and REST live under it).",
    )
    supabase_anon_key: SecretStr = Field(alias="SUPABASE_ANON_KEY")
    supabase_service_role_key: SecretStr | None = Field(
        default=None,
        alias="SUPABASE_SERVICE_ROLE_KEY",
        description="Privileged key used by ops scripts for storage uploads.",
    )
    supabase_jwt_secret: SecretStr = Field(alias="SUPABASE_JWT_SECRET")
    jwt_audience: str = Field(default="authenticated", alias="JWT_AUDIENCE")
    http_timeout_seconds: float = Field(default=10.0, alias="HTTP_TIMEOUT_SECONDS")

    site_url: str | None = Field(default=None, alias="SITE_URL")
    vercel_url: str | None = Field(default=None, alias="VERCEL_URL")

    openai_api_key: SecretStr | None = Field(default=None, alias="OPENAI_API_KEY")
    story_model: str = Field(default="gpt-4-turbo-preview", alias="STORY_MODEL")
    story_temperature: float = Field(default=0.8, alias="STORY_TEMPERATURE")
    story_max_tokens: int = Field(default=2000, alias="STORY_MAX_TOKENS")

    production_app_origin: AnyHttpUrl | None = Field(
        default=None,
        alias="PRODUCTION_APP_ORIGIN",
    )
    raw_backend_cors_origins: str | None = Field(
        default=None,
        alias="BACKEND_CORS_ORIGINS",
        description="Comma-separated list or JSON array of localhost origins (http://localhost:PORT).",
    )
    max_request_bytes: int = Field(
        default=1_048_576,
        alias="MAX_REQUEST_BYTES",
        description="Upper bound for request bodies in bytes (default 1 MiB).",
    )

    @field_validator("database_url", "supabase_url", "story_model", mode="before")
    @classmethod
    def _strip_string(cls, value: str | None, info: ValidationInfo) -> str:
        if value is None:
            field = (info.field_name or "value").upper()
            raise ValueError(f"{field} must be provided.")
        trimmed = value.strip()
        if not trimmed:
            field = (info.field_name or "value").upper()
            raise ValueError(f"{field} must not be empty.")
        return trimmed

    @field_validator("supabase_url")
    @classmethod
    def _validate_supabase_url(cls, value: str) -> str:
        if not value.startswith(("http://", "https://")):
            raise ValueError("SUPABASE_URL must include the http(s) scheme.")
        return value.rstrip("/")

    @field_validator("story_temperature")
    @classmethod
    def _validate_temperature(cls, value: float) -> float:
        if not 0 <= value <= 2:
            raise ValueError("STORY_TEMPERATURE must be within [0, 2].")
        return value

    @field_validator("story_max_tokens", "max_request_bytes")
    @classmethod
    def _validate_positive(cls, value: int, info: ValidationInfo) -> int:
        if value <= 0:
            field = (info.field_name or "value").upper()
            raise ValueError(f"{field} must be a positive integer.")
        return value

    @field_validator("db_pool_size", "db_max_overflow", "db_statement_cache_size")
    @classmethod
    def _validate_non_negative(cls, value: int, info: ValidationInfo) -> int:
        if value < 0:
            field = (info.field_name or "value").upper()
            raise ValueError(f"{field} must not be negative.")
        return value

    @field_validator("http_timeout_seconds")
    @classmethod
    def _validate_timeout(cls, value: float) -> float:
        if value <= 0:
            raise ValueError("HTTP_TIMEOUT_SECONDS must be positive.")
        return value

    @field_validator("supabase_anon_key", "supabase_jwt_secret", mode="after")
    @classmethod
    def _validate_secret(cls, secret: SecretStr, info: ValidationInfo) -> SecretStr:
        if not secret.get_secret_value().strip():
            field = (info.field_name or "value").upper()
            raise ValueError(f"{field} must not be empty.")
        return secret

    @model_validator(mode="after")
    def _validate_production_secrets(self) -> "Settings":
        if self.environment == "production" and self.openai_api_key is None:
            raise ValueError("OPENAI_API_KEY is required when APP_ENV is 'production'.")
        return self

    @property
    def is_development(self) -> bool:
        """Local stacks serve fixture images from disk instead of the storage bucket."""
        return self.environment == "local" or "localhost" in self.supabase_url

    @property
    def storage_public_url(self) -> str:
        return f"{self.supabase_url}/storage/v1/object/public"

    _LOCAL_CORS_ENVIRONMENTS = frozenset({"local", "test"})

    @computed_field(return_type=list[str])
    def backend_cors_origins(self) -> list[str]:
        """
        Return validated localhost origins for local/test development.

        Production/staging environments ignore BACKEND_CORS_ORIGINS entirely to
        avoid misconfiguration on deployed servers.
        """
        if self.environment not in self._LOCAL_CORS_ENVIRONMENTS:
            return []

        parsed = self.parse_cors_origins(self.raw_backend_cors_origins)
        return [self._validate_localhost_origin(origin) for origin in parsed]

    @staticmethod
    def parse_cors_origins(origins: str | list[str] | None) -> list[str]:
        """
        Normalize the BACKEND_CORS_ORIGINS value into a list of origins.

        Accepts either a comma-separated string, a JSON array string, or an
        explicit list of strings.
        """
        if origins is None:
            return []
        if isinstance(origins, list):
            cleaned: list[str] = []
            for origin in origins:
                if not isinstance(origin, str) or not origin.strip():
                    raise ValueError("CORS origin list entries must be non-empty strings.")
                cleaned.append(origin.strip().rstrip("/"))
            return cleaned
        if isinstance(origins, str):
            normalized = origins.strip()
            if not normalized:
                return []
            if normalized.startswith("["):
                try:
                    parsed = json.loads(normalized)
                except json.JSONDecodeError:
                    parsed = None
                if isinstance(parsed, list):
                    return [str(item).strip().rstrip("/") for item in parsed if str(item).strip()]
            return [item.strip().rstrip("/") for item in normalized.split(",") if item.strip()]
        raise ValueError("CORS origins must be provided as a string or list of strings.")

    @property
    def cors_origins(self) -> list[str]:
        """Effective CORS origins: the public site, the production origin and local opt-ins."""
        origins = {origin.rstrip("/") for origin in self.backend_cors_origins}  # type: ignore[attr-defined]
        if self.production_app_origin:
            origins.add(str(self.production_app_origin).rstrip("/"))
        if self.site_url and self.site_url.startswith("http"):
            origins.add(self.site_url.rstrip("/"))
        return sorted(origins)

    @staticmethod
    def _validate_localhost_origin(origin: str) -> str:
        normalized = origin.strip().rstrip("/")
        if not normalized.startswith("http://localhost"):
            raise ValueError(
                "BACKEND_CORS_ORIGINS only accepts http://localhost:* origins and is honored "
                "only when APP_ENV is 'local' or 'test'. Configure PRODUCTION_APP_ORIGIN for "
                "deployed domains."
            )
        return normalized


@lru_cache
def get_settings() -> Settings:
    """Return a cached Settings instance so configuration is evaluated once."""
    return Settings()  # type: ignore[call-arg]


settings = get_settings()

__all__ = ["Settings", "get_settings", "settings"]
