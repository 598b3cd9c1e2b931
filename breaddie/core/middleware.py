"""Request correlation, access logging and response hardening middlewares."""

from __future__ import annotations

import logging
import re
import time
from typing import Final
from uuid import uuid4

from fastapi import Request, Response, status
from starlette.middleware.base import BaseHTTPMiddleware, RequestResponseEndpoint
from starlette.types import ASGIApp

from breaddie.core.errors import ErrorCode, error_response
from breaddie.core.logging import bind_request_id, reset_request_id

# Incoming ids are echoed back in headers and logs, so only accept tame values.
_REQUEST_ID_PATTERN: Final = re.compile(r"^[A-Za-z0-9._-]{1,128}$")

# Probes hit these constantly; they are logged at DEBUG to keep access logs readable.
QUIET_PATHS: Final[frozenset[str]] = frozenset({"/health", "/metrics"})


class RequestIDMiddleware(BaseHTTPMiddleware):
    """Attach a request_id to each request and bind it to the logging context."""

    header_name = "X-Request-ID"

    async def dispatch(self, request: Request, call_next: RequestResponseEndpoint) -> Response:
        incoming = request.headers.get(self.header_name)
        if incoming and _REQUEST_ID_PATTERN.match(incoming):
            request_id = incoming
        else:
            request_id = uuid4().hex

        request.state.request_id = request_id
        token = bind_request_id(request_id)
        try:
            response = await call_next(request)
        finally:
            reset_request_id(token)

        response.headers[self.header_name] = request_id
        return response


class AccessLogMiddleware(BaseHTTPMiddleware):
    """Emit one structured access log line per request."""

    def __init__(self, app: ASGIApp, logger_name: str = "breaddie.access") -> None:
        super().__init__(app)
        self.logger = logging.getLogger(logger_name)

    async def dispatch(self, request: Request, call_next: RequestResponseEndpoint) -> Response:
        start = time.perf_counter()
        status_code = status.HTTP_500_INTERNAL_SERVER_ERROR
        try:
            response = await call_next(request)
            status_code = response.status_code
            return response
        finally:
            self._log(request, status_code, (time.perf_counter() - start) * 1000)

    def _log(self, request: Request, status_code: int, duration_ms: float) -> None:
        level = logging.DEBUG if request.url.path in QUIET_PATHS else logging.INFO
        self.logger.log(
            level,
            "%s %s -> %s",
            request.method,
            request.url.path,
            status_code,
            extra={
                "event": "access",
                "http_method": request.method,
                "http_path": request.url.path,
                "status_code": status_code,
                "duration_ms": round(duration_ms, 2),
                "client_ip": request.client.host if request.client else None,
                "user_agent": request.headers.get("user-agent"),
            },
        )


class SecurityHeadersMiddleware(BaseHTTPMiddleware):
    """
    Add conservative security headers to every response.

    HSTS is opt-in so local stacks on plain http keep working.
    """

    def __init__(self, app: ASGIApp, enable_hsts: bool = False) -> None:
        super().__init__(app)
        self.enable_hsts = enable_hsts

    async def dispatch(self, request: Request, call_next: RequestResponseEndpoint) -> Response:
        response = await call_next(request)

        response.headers.setdefault("X-Content-Type-Options", "nosniff")
        response.headers.setdefault("X-Frame-Options", "DENY")
        response.headers.setdefault("Referrer-Policy", "strict-origin-when-cross-origin")
        if self.enable_hsts:
            response.headers.setdefault(
                "Strict-Transport-Security",
                "max-age=63072000; includeSubDomains; preload",
            )
        return response


class RequestSizeLimitMiddleware(BaseHTTPMiddleware):
    """Answer 413 for bodies larger than ``max_request_bytes``."""

    def __init__(self, app: ASGIApp, max_request_bytes: int) -> None:
        if max_request_bytes <= 0:
            raise ValueError("max_request_bytes must be greater than zero.")
        super().__init__(app)
        self.max_request_bytes = max_request_bytes

    async def dispatch(self, request: Request, call_next: RequestResponseEndpoint) -> Response:
        if request.method in {"GET", "HEAD", "OPTIONS"}:
            return await call_next(request)

        declared = request.headers.get("content-length", "")
        if declared.isdigit() and int(declared) > self.max_request_bytes:
            return self._too_large()

        # Chunked or lying clients: measure what actually arrived.
        body = await request.body()
        if len(body) > self.max_request_bytes:
            return self._too_large()

        return await call_next(request)

    def _too_large(self) -> Response:
        return error_response(
            status_code=status.HTTP_413_REQUEST_ENTITY_TOO_LARGE,
            code=ErrorCode.PAYLOAD_TOO_LARGE,
            message="Request body exceeds the configured size limit.",
            details={"max_bytes": self.max_request_bytes},
        )


__all__ = [
    "AccessLogMiddleware",
    "QUIET_PATHS",
    "RequestIDMiddleware",
    "RequestSizeLimitMiddleware",
    "SecurityHeadersMiddleware",
]
