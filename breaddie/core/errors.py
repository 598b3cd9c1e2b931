"""
Error types raised by routes and services, and the JSON error envelope.

Every failure leaves the API as::

    {"error": {"code": ..., "message": ..., "details": ...}, "request_id": ...}

``details`` and ``request_id`` are only present when known.
"""

from __future__ import annotations

import logging
from enum import StrEnum
from http import HTTPStatus
from typing import Any, Awaitable, Callable, Mapping, Sequence, cast

from fastapi import FastAPI, Request, Response, status
from fastapi.encoders import jsonable_encoder
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

from breaddie.core.logging import get_request_id

ExceptionHandlerCallable = Callable[[Request, Exception], Awaitable[Response]]

logger = logging.getLogger("breaddie.errors")


class ErrorCode(StrEnum):
    # Authentication & authorization
    AUTH_FAILED = "AUTH_FAILED"
    TOKEN_EXPIRED = "TOKEN_EXPIRED"  # noqa: S105
    FORBIDDEN = "FORBIDDEN"

    VALIDATION_ERROR = "VALIDATION_ERROR"

    # Resources
    PROFILE_NOT_FOUND = "PROFILE_NOT_FOUND"
    RECIPE_NOT_FOUND = "RECIPE_NOT_FOUND"
    DECK_NOT_FOUND = "DECK_NOT_FOUND"
    CARD_NOT_FOUND = "CARD_NOT_FOUND"
    STUDY_SESSION_NOT_FOUND = "STUDY_SESSION_NOT_FOUND"
    STORY_SESSION_NOT_FOUND = "STORY_SESSION_NOT_FOUND"
    NOT_FOUND = "NOT_FOUND"

    # Story pipeline
    NO_DUE_WORDS = "NO_DUE_WORDS"
    STORY_GENERATION_FAILED = "STORY_GENERATION_FAILED"

    # Upstream services
    HOSTED_BACKEND_ERROR = "HOSTED_BACKEND_ERROR"
    LLM_SERVICE_ERROR = "LLM_SERVICE_ERROR"
    SERVICE_UNAVAILABLE = "SERVICE_UNAVAILABLE"
    DATABASE_ERROR = "DATABASE_ERROR"

    INTERNAL_ERROR = "INTERNAL_ERROR"

    # Transport
    METHOD_NOT_ALLOWED = "METHOD_NOT_ALLOWED"
    PAYLOAD_TOO_LARGE = "PAYLOAD_TOO_LARGE"
    CONFLICT = "CONFLICT"


_CODE_BY_STATUS: dict[int, ErrorCode] = {
    status.HTTP_400_BAD_REQUEST: ErrorCode.VALIDATION_ERROR,
    status.HTTP_401_UNAUTHORIZED: ErrorCode.AUTH_FAILED,
    status.HTTP_403_FORBIDDEN: ErrorCode.FORBIDDEN,
    status.HTTP_404_NOT_FOUND: ErrorCode.NOT_FOUND,
    status.HTTP_405_METHOD_NOT_ALLOWED: ErrorCode.METHOD_NOT_ALLOWED,
    status.HTTP_409_CONFLICT: ErrorCode.CONFLICT,
    status.HTTP_413_REQUEST_ENTITY_TOO_LARGE: ErrorCode.PAYLOAD_TOO_LARGE,
    status.HTTP_422_UNPROCESSABLE_ENTITY: ErrorCode.VALIDATION_ERROR,
    status.HTTP_502_BAD_GATEWAY: ErrorCode.SERVICE_UNAVAILABLE,
    status.HTTP_503_SERVICE_UNAVAILABLE: ErrorCode.SERVICE_UNAVAILABLE,
}

INTERNAL_ERROR_MESSAGE = "Internal server error. Please try again later."
VALIDATION_ERROR_MESSAGE = "Request validation failed."


def code_for_status(status_code: int) -> str:
    return _CODE_BY_STATUS.get(status_code, ErrorCode.INTERNAL_ERROR).value


class ApplicationError(Exception):
    """An expected failure that is shown to the client as-is."""

    default_status = status.HTTP_400_BAD_REQUEST

    def __init__(
        self,
        code: ErrorCode | str,
        message: str,
        *,
        status_code: int | None = None,
        details: object | None = None,
    ) -> None:
        super().__init__(message)
        self.code = str(code)
        self.message = message
        self.status_code = status_code if status_code is not None else self.default_status
        self.details = details


class NotFoundError(ApplicationError):
    default_status = status.HTTP_404_NOT_FOUND

    def __init__(self, code: ErrorCode | str, message: str, *, details: object | None = None) -> None:
        super().__init__(code, message, details=details)


class ExternalServiceError(ApplicationError):
    """The hosted backend or the model provider failed; always a 502 or 503."""

    default_status = status.HTTP_502_BAD_GATEWAY

    def __init__(
        self,
        code: ErrorCode | str,
        message: str,
        *,
        status_code: int = status.HTTP_502_BAD_GATEWAY,
        details: object | None = None,
    ) -> None:
        if status_code not in (status.HTTP_502_BAD_GATEWAY, status.HTTP_503_SERVICE_UNAVAILABLE):
            raise ValueError("External service errors must map to 502 or 503.")
        super().__init__(code, message, status_code=status_code, details=details)


class LLMParsingError(Exception):
    """The model reply is not the JSON document that was requested."""


def build_error_payload(
    *,
    code: ErrorCode | str,
    message: str,
    details: object | None = None,
    request_id: str | None = None,
) -> dict[str, Any]:
    error: dict[str, object] = {
        "code": str(code) if code else ErrorCode.INTERNAL_ERROR.value,
        "message": message,
    }
    if details is not None:
        error["details"] = details
    payload: dict[str, Any] = {"error": error}
    if request_id:
        payload["request_id"] = request_id
    return payload


def error_response(
    *,
    status_code: int,
    code: ErrorCode | str,
    message: str,
    details: object | None = None,
    headers: Mapping[str, str] | None = None,
) -> JSONResponse:
    """JSONResponse carrying the error envelope, tagged with the current request id."""
    body = build_error_payload(code=code, message=message, details=details, request_id=get_request_id())
    return JSONResponse(
        content=jsonable_encoder(body),
        status_code=status_code,
        headers=dict(headers) if headers else None,
    )


async def application_error_handler(request: Request, exc: ApplicationError) -> JSONResponse:
    if exc.status_code >= status.HTTP_500_INTERNAL_SERVER_ERROR:
        logger.warning(
            "Upstream failure surfaced to client",
            extra={"error_code": exc.code, "status_code": exc.status_code, "http_path": request.url.path},
        )
    return error_response(
        status_code=exc.status_code,
        code=exc.code,
        message=exc.message,
        details=exc.details,
    )


async def request_validation_exception_handler(
    request: Request,
    exc: RequestValidationError,
) -> JSONResponse:
    return error_response(
        status_code=status.HTTP_422_UNPROCESSABLE_ENTITY,
        code=ErrorCode.VALIDATION_ERROR,
        message=VALIDATION_ERROR_MESSAGE,
        details=_format_validation_errors(exc.errors()) or None,
    )


async def http_exception_handler(request: Request, exc: StarletteHTTPException) -> JSONResponse:
    detail = exc.detail
    code = code_for_status(exc.status_code)
    message = HTTPStatus(exc.status_code).phrase
    details = None
    if isinstance(detail, Mapping):
        code = str(detail.get("code") or code)
        message = str(detail.get("message") or message)
        details = detail.get("details")
    elif detail:
        message = str(detail)

    return error_response(
        status_code=exc.status_code,
        code=code,
        message=message,
        details=details,
        headers=exc.headers,
    )


async def unexpected_exception_handler(request: Request, exc: Exception) -> JSONResponse:
    logger.exception(
        "Unhandled exception during request",
        exc_info=(exc.__class__, exc, exc.__traceback__),
        extra={"http_path": request.url.path},
    )
    return error_response(
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        code=ErrorCode.INTERNAL_ERROR,
        message=INTERNAL_ERROR_MESSAGE,
    )


_HANDLERS: tuple[tuple[type[Exception], Callable[..., Awaitable[Response]]], ...] = (
    (ApplicationError, application_error_handler),
    (RequestValidationError, request_validation_exception_handler),
    (StarletteHTTPException, http_exception_handler),
    (Exception, unexpected_exception_handler),
)


def register_exception_handlers(app: FastAPI) -> None:
    for exc_class, handler in _HANDLERS:
        app.add_exception_handler(exc_class, cast(ExceptionHandlerCallable, handler))


def _format_validation_errors(errors: Sequence[Mapping[str, Any]]) -> dict[str, str]:
    """Collapse pydantic errors into ``{"field.path": "msg; msg"}``."""
    formatted: dict[str, str] = {}
    for error in errors:
        location = [str(part) for part in error.get("loc") or () if part not in {"body", "query", "path"}]
        field = ".".join(location) or "_schema"
        message = str(error.get("msg", "Invalid value"))
        formatted[field] = f"{formatted[field]}; {message}" if field in formatted else message
    return formatted


__all__ = [
    "ApplicationError",
    "ErrorCode",
    "ExternalServiceError",
    "LLMParsingError",
    "NotFoundError",
    "application_error_handler",
    "build_error_payload",
    "code_for_status",
    "error_response",
    "http_exception_handler",
    "register_exception_handlers",
    "request_validation_exception_handler",
    "unexpected_exception_handler",
]
