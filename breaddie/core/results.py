"""Plain result objects returned by server actions instead of raised errors."""

from __future__ import annotations

from typing import Any, Literal

from fastapi import status
from fastapi.responses import JSONResponse
from pydantic import BaseModel, ConfigDict
from sqlalchemy.exc import DBAPIError, SQLAlchemyError

from breaddie.core.errors import ErrorCode, error_response


class ActionError(BaseModel):
    """Failure descriptor of a server action; never raised across the service boundary."""

    model_config = ConfigDict(frozen=True)

    error: Literal[True] = True
    message: str
    name: str = "ServiceError"
    code: str | None = None
    details: str | None = None
    hint: str | None = None


class OperationStatus(BaseModel):
    success: bool
    error: str | None = None


_STATUS_BY_NAME: dict[str, tuple[int, ErrorCode]] = {
    "ValidationError": (status.HTTP_422_UNPROCESSABLE_ENTITY, ErrorCode.VALIDATION_ERROR),
    "NotFoundError": (status.HTTP_404_NOT_FOUND, ErrorCode.NOT_FOUND),
    "DatabaseError": (status.HTTP_502_BAD_GATEWAY, ErrorCode.DATABASE_ERROR),
}


def database_action_error(exc: SQLAlchemyError) -> ActionError:
    """Describe a database failure with the driver's SQLSTATE when it carries one."""

    code: str | None = None
    details: str | None = None
    hint: str | None = None
    if isinstance(exc, DBAPIError) and exc.orig is not None:
        original: Any = exc.orig
        code = getattr(original, "sqlstate", None) or getattr(original, "pgcode", None)
        details = getattr(original, "detail", None)
        hint = getattr(original, "hint", None)
        message = str(original)
    else:
        message = str(exc)
    return ActionError(
        name="DatabaseError",
        message=message or exc.__class__.__name__,
        code=code,
        details=details,
        hint=hint,
    )


def unexpected_action_error(exc: Exception) -> ActionError:
    name = exc.__class__.__name__ or "ServiceError"
    return ActionError(name=name, message=str(exc) or "An unexpected error occurred.")


def action_error_response(result: ActionError) -> JSONResponse:
    """Render an ActionError into the public error envelope."""

    status_code, code = _STATUS_BY_NAME.get(
        result.name,
        (status.HTTP_500_INTERNAL_SERVER_ERROR, ErrorCode.INTERNAL_ERROR),
    )
    details = {
        key: value
        for key, value in (("code", result.code), ("details", result.details), ("hint", result.hint))
        if value is not None
    }
    return error_response(
        status_code=status_code,
        code=code,
        message=result.message,
        details=details or None,
    )


__all__ = [
    "ActionError",
    "OperationStatus",
    "action_error_response",
    "database_action_error",
    "unexpected_action_error",
]
