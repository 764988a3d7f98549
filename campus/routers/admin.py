from __future__ import annotations

import logging
from typing import Optional

from fastapi import APIRouter, File, Form, Request, UploadFile
from fastapi.responses import HTMLResponse, JSONResponse, RedirectResponse

from campus.core import csrf
from campus.core.config import Settings
from campus.core.security import verify_password
from campus.routers.pages import render
from campus.services.directory_service import DirectoryService, InvalidNameError, PersistError
from campus.services.session_service import (
    SESSION_COOKIE_NAME,
    SessionError,
    clear_session_cookie,
    issue_token,
    set_session_cookie,
    token_from_request,
    verify_token,
)
from campus.services.upload_service import ImageTooLargeError, UploadError, UploadService

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/admin", tags=["admin"])


class AdminAuthError(Exception):
    def __init__(self, message: str):
        super().__init__(message)
        self.message = message


def _settings(request: Request) -> Settings:
    return request.app.state.settings


def _directory(request: Request) -> DirectoryService:
    return request.app.state.directory


def _uploads(request: Request) -> UploadService:
    return request.app.state.uploads


def _error(message: str, status_code: int) -> JSONResponse:
    return JSONResponse({"error": message}, status_code=status_code)


def _session(request: Request) -> tuple[str, str]:
    """Return (username, token) for the current admin or raise AdminAuthError."""
    token = token_from_request(request)
    if not token:
        raise AdminAuthError("Authentication required")
    try:
        username = verify_token(token, _settings(request))
    except SessionError:
        raise AdminAuthError("Invalid or expired token")
    return username, token


def require_admin(request: Request, csrf_token: str | None = None) -> str:
    username, token = _session(request)
    # Bearer callers are not exposed to ambient-cookie CSRF.
    if request.cookies.get(SESSION_COOKIE_NAME) == token:
        csrf.validate_csrf(request, token, _settings(request).secret_key, csrf_token)
    return username


@router.get("", response_class=HTMLResponse)
@router.get("/", response_class=HTMLResponse, include_in_schema=False)
def login_page(request: Request):
    return render(request, "admin_login.html", {"title": "Admin Login"})


@router.post("/login")
def login(request: Request, username: str = Form(""), password: str = Form("")):
    request.app.state.login_throttle.check(request)
    settings = _settings(request)
    if not username or not password:
        return _error("Username and password are required", 400)
    if username != settings.admin_username or not verify_password(password, settings.admin_password_hash):
        logger.warning("Rejected admin login for %r", username)
        return _error("Invalid credentials", 401)
    token = issue_token(username, settings)
    response = JSONResponse({"success": True, "token": token})
    set_session_cookie(response, token, settings)
    logger.info("Admin %s logged in", username)
    return response


@router.get("/logout")
def logout():
    response = RedirectResponse("/admin", status_code=303)
    clear_session_cookie(response)
    return response


@router.get("/panel", response_class=HTMLResponse)
def panel(request: Request):
    try:
        username, token = _session(request)
    except AdminAuthError:
        return RedirectResponse("/admin", status_code=303)
    data = request.app.state.store.load()
    context = {
        "title": "Admin Panel",
        "data": data,
        "username": username,
        "csrf_token": csrf.csrf_token_for(token, _settings(request).secret_key),
    }
    return render(request, "admin_panel.html", context)


def _add_person(request: Request, kind: str, name: str, csrf_token: str) -> JSONResponse:
    try:
        require_admin(request, csrf_token)
    except AdminAuthError as exc:
        return _error(exc.message, 401)
    directory = _directory(request)
    add = directory.add_student if kind == "Student" else directory.add_teacher
    try:
        add(name)
    except InvalidNameError as exc:
        return _error(str(exc), 400)
    except PersistError as exc:
        return _error(str(exc), 500)
    return JSONResponse({"success": True, "message": f"{kind} added successfully"})


@router.post("/students")
def add_student(request: Request, name: str = Form(""), csrf_token: str = Form("")):
    return _add_person(request, "Student", name, csrf_token)


@router.post("/teachers")
def add_teacher(request: Request, name: str = Form(""), csrf_token: str = Form("")):
    return _add_person(request, "Teacher", name, csrf_token)


@router.post("/gallery")
def add_gallery_image(
    request: Request,
    image: Optional[UploadFile] = File(None),
    csrf_token: str = Form(""),
):
    try:
        require_admin(request, csrf_token)
    except AdminAuthError as exc:
        return _error(exc.message, 401)
    uploads = _uploads(request)
    data = image.file.read(uploads.max_bytes + 1) if image is not None else b""
    try:
        stored = uploads.store(image.filename if image else None, image.content_type if image else None, data)
    except ImageTooLargeError as exc:
        return _error(str(exc), 413)
    except UploadError as exc:
        return _error(str(exc), 400)
    try:
        _directory(request).add_gallery_image(stored.public_path, stored_file=stored.file_path)
    except PersistError as exc:
        uploads.discard(stored)
        return _error(str(exc), 500)
    return JSONResponse({"success": True, "message": "Image added successfully"})
