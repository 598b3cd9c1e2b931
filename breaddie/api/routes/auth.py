"""Auth callback redirect and email/password endpoints."""

from __future__ import annotations

from fastapi import APIRouter, Depends, Request, Response, status
from fastapi.responses import RedirectResponse

from breaddie.api.dependencies import get_auth_client
from breaddie.clients.auth import AuthSession, HostedAuthClient
from breaddie.core.auth import ACCESS_TOKEN_COOKIE, CODE_VERIFIER_COOKIE, REFRESH_TOKEN_COOKIE
from breaddie.core.config import get_settings
from breaddie.schemas.auth import SignInRequest, SignInResponse, SignUpRequest, SignUpResponse
from breaddie.services.auth import AuthService
from breaddie.utils.redirects import (
    AUTH_ERROR_MESSAGE,
    callback_success_message,
    error_redirect,
    safe_next_path,
    success_redirect,
)
from breaddie.utils.url import get_url

callback_router = APIRouter(tags=["auth"])
router = APIRouter(prefix="/auth", tags=["auth"])

DEFAULT_SESSION_SECONDS = 3600
REFRESH_COOKIE_SECONDS = 60 * 60 * 24 * 30


async def get_auth_service(
    client: HostedAuthClient = Depends(get_auth_client),  # noqa: B008
) -> AuthService:
    return AuthService(client)


def set_session_cookies(response: Response, session: AuthSession) -> None:
    secure = not get_settings().is_development
    response.set_cookie(
        ACCESS_TOKEN_COOKIE,
        session.access_token,
        max_age=session.expires_in or DEFAULT_SESSION_SECONDS,
        httponly=True,
        secure=secure,
        samesite="lax",
        path="/",
    )
    if session.refresh_token:
        response.set_cookie(
            REFRESH_TOKEN_COOKIE,
            session.refresh_token,
            max_age=REFRESH_COOKIE_SECONDS,
            httponly=True,
            secure=secure,
            samesite="lax",
            path="/",
        )


def _request_origin(request: Request) -> str:
    return f"{request.url.scheme}://{request.url.netloc}"


@callback_router.get("/auth/callback", include_in_schema=False)
async def auth_callback(
    request: Request,
    code: str | None = None,
    next: str | None = None,  # noqa: A002
    type: str | None = None,  # noqa: A002
    service: AuthService = Depends(get_auth_service),  # noqa: B008
) -> RedirectResponse:
    """
    Finish an email-link or OAuth sign-in.

    On success the browser lands on ``next`` with a ``status`` toast message
    chosen by ``type``; otherwise on the auth error page.
    """
    origin = _request_origin(request)
    session = await service.exchange_code(code, request.cookies.get(CODE_VERIFIER_COOKIE))
    if session is None:
        return RedirectResponse(
            error_redirect(f"{origin}/auth/auth-code-error", AUTH_ERROR_MESSAGE),
            status_code=status.HTTP_307_TEMPORARY_REDIRECT,
        )

    next_path = safe_next_path(next)
    forwarded_host = request.headers.get("x-forwarded-host")
    if not get_settings().is_development and forwarded_host:
        target = f"https://{forwarded_host}{next_path}"
    else:
        target = f"{origin}{next_path}"

    response = RedirectResponse(
        success_redirect(target, callback_success_message(type)),
        status_code=status.HTTP_307_TEMPORARY_REDIRECT,
    )
    set_session_cookies(response, session)
    response.delete_cookie(CODE_VERIFIER_COOKIE, path="/")
    return response


@router.post("/sign-in", response_model=SignInResponse, summary="Sign in with email and password")
async def sign_in(
    payload: SignInRequest,
    response: Response,
    service: AuthService = Depends(get_auth_service),  # noqa: B008
) -> SignInResponse:
    session = await service.sign_in(payload.email, payload.password)
    set_session_cookies(response, session)
    return SignInResponse(user=session.user, expires_in=session.expires_in)


@router.post(
    "/sign-up",
    response_model=SignUpResponse,
    status_code=status.HTTP_201_CREATED,
    summary="Register with email and password",
)
async def sign_up(
    payload: SignUpRequest,
    service: AuthService = Depends(get_auth_service),  # noqa: B008
) -> SignUpResponse:
    return await service.sign_up(payload, redirect_to=get_url("auth/callback?type=signup"))


@router.post("/sign-out", status_code=status.HTTP_204_NO_CONTENT, summary="Clear the session cookies")
async def sign_out() -> Response:
    response = Response(status_code=status.HTTP_204_NO_CONTENT)
    response.delete_cookie(ACCESS_TOKEN_COOKIE, path="/")
    response.delete_cookie(REFRESH_TOKEN_COOKIE, path="/")
    return response
