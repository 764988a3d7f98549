from __future__ import annotations

import dataclasses
import sys
from pathlib import Path

import pytest

# Make the campus package importable during local test runs
ROOT = Path(__file__).resolve().parents[1]
if str(ROOT) not in sys.path:
    sys.path.insert(0, str(ROOT))

from campus.core.config import Settings  # noqa: E402


class RecordingMirror:
    """RemoteMirror fake that records calls and can fail on a chosen step."""

    def __init__(self, fail_on: str | None = None, fail_paths=()) -> None:
        self.fail_on = fail_on
        self.fail_paths = {Path(p) for p in fail_paths}
        self.calls: list[tuple] = []

    def _step(self, name: str, *args) -> None:
        self.calls.append((name, *args))
        if self.fail_on == name:
            raise RuntimeError(f"{name} exploded")

    def stage(self, paths):
        paths = [Path(p) for p in paths]
        self._step("stage", paths)
        if self.fail_paths.intersection(paths):
            raise RuntimeError("pathspec is ignored")

    def commit(self, message):
        self._step("commit", message)

    def push(self):
        self._step("push")

    @property
    def steps(self) -> list[str]:
        return [call[0] for call in self.calls]


@pytest.fixture()
def make_settings(tmp_path):
    def _make(**overrides) -> Settings:
        base = Settings(
            app_env="dev",
            data_file=tmp_path / "database.json",
            uploads_dir=tmp_path / "uploads",
            secret_key="test-secret",
            admin_username="admin",
            admin_password_hash="",
            admin_session_ttl_seconds=3600,
            max_upload_bytes=1024,
            git_sync_enabled=False,
            git_remote="origin",
            git_branch="main",
            git_workdir=tmp_path,
            git_timeout_seconds=5,
            log_level="WARNING",
        )
        return dataclasses.replace(base, **overrides)

    return _make


@pytest.fixture()
def mirror():
    return RecordingMirror()
