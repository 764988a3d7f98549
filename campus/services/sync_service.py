"""
Best-effort mirroring of the data file to a git remote.

The local file is always authoritative. A sync stages the changed paths,
commits them and pushes; the first failing step abandons the rest of that
invocation, and nothing is retried.
"""

from __future__ import annotations

import enum
import logging
import subprocess
from concurrent.futures import Executor, ThreadPoolExecutor
from pathlib import Path
from typing import Optional, Protocol, Sequence

from campus.core.config import Settings

logger = logging.getLogger(__name__)


class SyncFault(Exception):
    """Raised by a mirror when one of its steps fails."""

    def __init__(self, step: str, detail: str = "") -> None:
        super().__init__(f"{step} failed: {detail}" if detail else f"{step} failed")
        self.step = step
        self.detail = detail


class SyncState(str, enum.Enum):
    IDLE = "idle"
    STAGED = "staged"
    COMMITTED = "committed"
    PUSHED = "pushed"
    FAILED = "failed"


class RemoteMirror(Protocol):
    def stage(self, paths: Sequence[Path]) -> None:
        ...

    def commit(self, message: str) -> None:
        ...

    def push(self) -> None:
        ...


class GitMirror:
    """RemoteMirror that shells out to the git CLI inside a working tree."""

    def __init__(self, workdir: Path, *, remote: str = "origin", branch: str = "main", timeout: Optional[int] = None) -> None:
        self.workdir = Path(workdir)
        self.remote = remote
        self.branch = branch
        self.timeout = timeout or None

    def _run(self, step: str, args: list[str]) -> None:
        try:
            subprocess.run(
                ["git", *args],
                cwd=self.workdir,
                check=True,
                capture_output=True,
                text=True,
                timeout=self.timeout,
            )
        except subprocess.CalledProcessError as exc:
            raise SyncFault(step, (exc.stderr or exc.stdout or "").strip()) from exc
        except (OSError, subprocess.TimeoutExpired) as exc:
            raise SyncFault(step, str(exc)) from exc

    def _relative(self, path: Path) -> str:
        path = Path(path)
        try:
            return str(path.resolve().relative_to(self.workdir.resolve()))
        except ValueError:
            return str(path)

    def stage(self, paths: Sequence[Path]) -> None:
        self._run("stage", ["add", "--", *(self._relative(p) for p in paths)])

    def commit(self, message: str) -> None:
        self._run("commit", ["commit", "-m", message])

    def push(self) -> None:
        self._run("push", ["push", self.remote, self.branch])


class Synchronizer:
    """Post-save hook that mirrors the written paths to a remote."""

    def __init__(self, mirror: RemoteMirror, executor: Optional[Executor] = None) -> None:
        self.mirror = mirror
        self.executor = executor

    def _stage_extra(self, path: Path) -> None:
        try:
            self.mirror.stage([path])
        except Exception as exc:
            # e.g. an ignored uploads directory; the data file still gets mirrored
            logger.warning("Git sync skipped %s: %s", path, exc)

    def sync(self, message: str, paths: Sequence[Path]) -> SyncState:
        """Mirror paths; the first one (the data file) must stage, the rest are optional."""
        state = SyncState.IDLE
        primary, *extra = paths
        try:
            self.mirror.stage([primary])
            for path in extra:
                self._stage_extra(path)
            state = SyncState.STAGED
            self.mirror.commit(message)
            state = SyncState.COMMITTED
            self.mirror.push()
            state = SyncState.PUSHED
        except Exception as exc:
            logger.warning("Git sync %r abandoned after %s: %s", message, state.value, exc)
            return SyncState.FAILED
        logger.info("Git sync successful: %s", message)
        return state

    def after_save(self, paths: Sequence[Path], message: str) -> None:
        paths = list(paths)
        if self.executor is None:
            self.sync(message, paths)
            return
        self.executor.submit(self.sync, message, paths)

    def shutdown(self) -> None:
        if self.executor is not None:
            self.executor.shutdown(wait=True)


def build_synchronizer(settings: Settings) -> Optional[Synchronizer]:
    """Return the configured synchronizer, or None when git sync is disabled."""
    if not settings.git_sync_enabled:
        return None
    mirror = GitMirror(
        settings.git_workdir,
        remote=settings.git_remote,
        branch=settings.git_branch,
        timeout=settings.git_timeout_seconds,
    )
    # One worker keeps overlapping syncs in submission order.
    executor = ThreadPoolExecutor(max_workers=1, thread_name_prefix="git-sync")
    return Synchronizer(mirror, executor=executor)
