from __future__ import annotations

import logging
import os
from typing import Optional

from fastapi import FastAPI, Request
from fastapi.exception_handlers import http_exception_handler
from fastapi.staticfiles import StaticFiles
from fastapi.templating import Jinja2Templates
from starlette.exceptions import HTTPException as StarletteHTTPException

from campus.core.config import Settings, get_settings
from campus.core.logging_setup import setup_logging
from campus.core.rate_limiter import LoginThrottle
from campus.repositories.json_storage import JsonStore
from campus.routers import admin as admin_router
from campus.routers import pages as pages_router
from campus.services.directory_service import DirectoryService
from campus.services.sync_service import Synchronizer, build_synchronizer
from campus.services.upload_service import UploadService

logger = logging.getLogger(__name__)

BASE = os.path.dirname(__file__)
WEB = os.path.join(BASE, "web")
TEMPLATES = os.path.join(BASE, "templates")

LOGIN_LIMIT = 10
LOGIN_WINDOW_SECONDS = 300


def create_app(settings: Optional[Settings] = None, synchronizer: Optional[Synchronizer] = None) -> FastAPI:
    """
    Build the site from explicit settings.

    synchronizer overrides the one derived from settings (tests pass a
    recording fake here).
    """
    settings = settings or get_settings()
    setup_logging(settings.log_level)

    sync = synchronizer if synchronizer is not None else build_synchronizer(settings)
    store = JsonStore(settings.data_file, on_save=sync)
    settings.uploads_dir.mkdir(parents=True, exist_ok=True)

    app = FastAPI(title="Campus Site")
    app.state.settings = settings
    app.state.store = store
    app.state.synchronizer = sync
    app.state.directory = DirectoryService(store)
    app.state.uploads = UploadService(settings.uploads_dir, settings.max_upload_bytes)
    app.state.templates = Jinja2Templates(directory=TEMPLATES)
    app.state.login_throttle = LoginThrottle(LOGIN_LIMIT, LOGIN_WINDOW_SECONDS)

    app.mount("/static", StaticFiles(directory=WEB), name="static")
    app.mount("/uploads", StaticFiles(directory=str(settings.uploads_dir)), name="uploads")

    app.include_router(pages_router.router)
    app.include_router(admin_router.router)

    @app.exception_handler(StarletteHTTPException)
    async def not_found(request: Request, exc: StarletteHTTPException):
        if exc.status_code == 404:
            return pages_router.render(
                request, "error.html", {"title": "Error", "message": "Page not found"}, status_code=404
            )
        return await http_exception_handler(request, exc)

    @app.on_event("shutdown")
    def _stop_sync() -> None:
        if sync is not None:
            sync.shutdown()

    logger.info(
        "Campus site ready (data=%s, uploads=%s, git_sync=%s)",
        settings.data_file,
        settings.uploads_dir,
        "on" if sync is not None else "off",
    )
    return app


if __name__ == "__main__":
    import uvicorn

    uvicorn.run("campus.app_factory:app", host="0.0.0.0", port=int(os.getenv("PORT", "3000")))
