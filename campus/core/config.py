"""
Configuration helpers for the campus site.

Settings are read from the environment once, at process start, and then passed
explicitly to the application factory so that the store, the synchronizer and
the routers never fetch os.environ themselves.
"""

from dataclasses import dataclass
from functools import lru_cache
from pathlib import Path
import os
import secrets


@dataclass(frozen=True)
class Settings:
    """Typed view of environment variables."""

    app_env: str
    data_file: Path
    uploads_dir: Path
    secret_key: str
    admin_username: str
    admin_password_hash: str
    admin_session_ttl_seconds: int
    max_upload_bytes: int
    git_sync_enabled: bool
    git_remote: str
    git_branch: str
    git_workdir: Path
    git_timeout_seconds: int
    log_level: str

    @property
    def is_prod(self) -> bool:
        return self.app_env == "prod"


def _int(value: str | None, default: int = 0) -> int:
    try:
        return int(value)
    except (TypeError, ValueError):
        return default


def _bool(value: str | None, default: bool = False) -> bool:
    if value is None:
        return default
    return value.strip().lower() in {"1", "true", "yes", "on"}


@lru_cache
def get_settings() -> Settings:
    """Read the current environment and build a Settings instance."""
    app_env = (os.getenv("APP_ENV") or "dev").lower()
    secret_key = os.getenv("SECRET_KEY", "")
    if not secret_key:
        if app_env == "prod":
            raise RuntimeError("SECRET_KEY must be configured in prod.")
        secret_key = secrets.token_urlsafe(32)

    data_file = Path(os.getenv("CAMPUS_DATA_FILE") or "database.json").expanduser().resolve()
    uploads_dir = Path(os.getenv("CAMPUS_UPLOADS_DIR") or "public/uploads").expanduser().resolve()
    git_workdir = os.getenv("GIT_WORKDIR")

    return Settings(
        app_env=app_env,
        data_file=data_file,
        uploads_dir=uploads_dir,
        secret_key=secret_key,
        admin_username=os.getenv("ADMIN_USERNAME", "admin"),
        admin_password_hash=os.getenv("ADMIN_PASSWORD_HASH", ""),
        admin_session_ttl_seconds=max(60, _int(os.getenv("ADMIN_SESSION_TTL_SECONDS", "14400"), 14400)),
        max_upload_bytes=_int(os.getenv("MAX_UPLOAD_BYTES", str(5 * 1024 * 1024)), 5 * 1024 * 1024),
        git_sync_enabled=_bool(os.getenv("GIT_SYNC_ENABLED"), False),
        git_remote=os.getenv("GIT_REMOTE", "origin"),
        git_branch=os.getenv("GIT_BRANCH", "main"),
        git_workdir=Path(git_workdir).expanduser().resolve() if git_workdir else data_file.parent,
        git_timeout_seconds=_int(os.getenv("GIT_TIMEOUT_SECONDS", "60"), 60),
        log_level=(os.getenv("LOG_LEVEL") or "INFO").upper(),
    )
