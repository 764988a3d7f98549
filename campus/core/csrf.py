from __future__ import annotations

import hashlib
import hmac
import secrets
from urllib import parse as urlparse

from fastapi import HTTPException, Request

CSRF_HEADER_NAME = "x-csrf-token"


def csrf_token_for(session_token: str, secret_key: str) -> str:
    """Derive the form token bound to an admin session token."""
    digest = hmac.new(secret_key.encode("utf-8"), f"csrf:{session_token}".encode("utf-8"), hashlib.sha256)
    return digest.hexdigest()


def _validate_origin(request: Request) -> None:
    origin = request.headers.get("origin") or ""
    referer = request.headers.get("referer") or ""
    source = origin or referer
    if not source:
        return
    try:
        parsed = urlparse.urlparse(source)
    except ValueError:
        raise HTTPException(403, "Invalid origin")
    host = (request.headers.get("host") or "").split(":", 1)[0].lower()
    parsed_host = (parsed.hostname or "").lower()
    if parsed_host and host and parsed_host != host:
        raise HTTPException(403, "Invalid origin")


def validate_csrf(request: Request, session_token: str, secret_key: str, supplied_token: str | None) -> None:
    header_token = request.headers.get(CSRF_HEADER_NAME)
    token = (supplied_token or "").strip() or (header_token or "").strip()
    if not token:
        raise HTTPException(403, "Missing CSRF token")
    if not secrets.compare_digest(csrf_token_for(session_token, secret_key), token):
        raise HTTPException(403, "Invalid CSRF token")
    _validate_origin(request)
