"""Admin session helpers (issue tokens, cookies, validation)."""
from __future__ import annotations

import base64
import binascii
import hashlib
import hmac
import time
from typing import Optional

from fastapi import Request, Response

from campus.core.config import Settings

SESSION_COOKIE_NAME = "token"


class SessionError(Exception):
    """Raised when a session token is malformed, tampered with or expired."""


def _sign(payload: str, secret_key: str) -> str:
    return hmac.new(secret_key.encode("utf-8"), payload.encode("utf-8"), hashlib.sha256).hexdigest()


def issue_token(username: str, settings: Settings, *, now: Optional[float] = None) -> str:
    """Create a signed token valid for the configured admin TTL."""
    issued = time.time() if now is None else now
    expires = int(issued) + settings.admin_session_ttl_seconds
    # Unpadded so the cookie value never needs quoting.
    payload = base64.urlsafe_b64encode(f"{username}:{expires}".encode("utf-8")).decode("ascii").rstrip("=")
    return f"{payload}.{_sign(payload, settings.secret_key)}"


def verify_token(token: str, settings: Settings, *, now: Optional[float] = None) -> str:
    """Return the username carried by a valid token."""
    payload, _, signature = (token or "").partition(".")
    if not payload or not signature:
        raise SessionError("Malformed token")
    if not hmac.compare_digest(_sign(payload, settings.secret_key), signature):
        raise SessionError("Bad signature")
    try:
        padded = payload + "=" * (-len(payload) % 4)
        username, _, expires = base64.urlsafe_b64decode(padded.encode("ascii")).decode("utf-8").rpartition(":")
        expires_at = int(expires)
    except (binascii.Error, UnicodeError, ValueError) as exc:
        raise SessionError("Malformed token") from exc
    current = time.time() if now is None else now
    if current >= expires_at:
        raise SessionError("Token expired")
    return username


def token_from_request(request: Request) -> str | None:
    """Cookie first, then an Authorization: Bearer header."""
    token = request.cookies.get(SESSION_COOKIE_NAME)
    if token:
        return token
    auth = request.headers.get("authorization") or ""
    scheme, _, value = auth.partition(" ")
    if scheme.lower() == "bearer" and value.strip():
        return value.strip()
    return None


def set_session_cookie(response: Response, token: str, settings: Settings) -> None:
    response.set_cookie(
        SESSION_COOKIE_NAME,
        token,
        httponly=True,
        secure=settings.is_prod,
        samesite="strict",
        max_age=settings.admin_session_ttl_seconds,
        path="/",
    )


def clear_session_cookie(response: Response) -> None:
    response.delete_cookie(SESSION_COOKIE_NAME, path="/")
