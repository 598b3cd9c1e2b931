"""Redirect targets that carry a toast message in the query string."""

from __future__ import annotations

from urllib.parse import parse_qsl, urlencode, urlsplit, urlunsplit

AUTH_ERROR_MESSAGE = "Sorry, we could not authenticate you. Please try again."

_CALLBACK_MESSAGES = {
    "signup": "Your email has been confirmed! You can now access your account.",
    "email_change": "Your email address has been successfully updated.",
    "invite": "Welcome to breaddie! Your invitation has been accepted.",
    "magiclink": "You have been signed in successfully via magic link.",
    "recovery": "You can now reset your password.",
}
DEFAULT_CALLBACK_MESSAGE = "You have been successfully authenticated."


def callback_success_message(callback_type: str | None) -> str:
    return _CALLBACK_MESSAGES.get(callback_type or "", DEFAULT_CALLBACK_MESSAGE)


def _with_query(url: str, key: str, value: str) -> str:
    parts = urlsplit(url)
    query = [(k, v) for k, v in parse_qsl(parts.query, keep_blank_values=True) if k != key]
    query.append((key, value))
    return urlunsplit(parts._replace(query=urlencode(query)))


def success_redirect(url: str, message: str) -> str:
    return _with_query(url, "status", message)


def error_redirect(url: str, message: str) -> str:
    return _with_query(url, "error", message)


def safe_next_path(next_path: str | None) -> str:
    """Keep post-login redirects on this site: only absolute paths, no scheme-relative hosts."""
    if not next_path or not next_path.startswith("/") or next_path.startswith("//") or "\\" in next_path:
        return "/"
    return next_path


__all__ = [
    "AUTH_ERROR_MESSAGE",
    "DEFAULT_CALLBACK_MESSAGE",
    "callback_success_message",
    "error_redirect",
    "safe_next_path",
    "success_redirect",
]
