"""
JSON-backed document store.

The whole site lives in one pretty-printed JSON file. Every request reads it
fresh, and every mutation rewrites it in full.
"""

from __future__ import annotations

import json
import logging
import os
import threading
from pathlib import Path
from typing import Callable, Iterable, Optional, Protocol, Sequence

from campus.domain.models import Document

logger = logging.getLogger(__name__)

DEFAULT_MESSAGE = "Update database"


class SaveHook(Protocol):
    """Follow-up invoked after the document has been written successfully."""

    def after_save(self, paths: Sequence[Path], message: str) -> None:
        ...


class JsonStore:
    def __init__(self, path: Path, on_save: Optional[SaveHook] = None) -> None:
        self.path = Path(path)
        self.on_save = on_save
        # Reentrant: update() holds it across its own load() and save().
        self._lock = threading.RLock()

    def _read(self) -> Document:
        raw = json.loads(self.path.read_text(encoding="utf-8"))
        if not isinstance(raw, dict):
            raise ValueError(f"expected a JSON object, got {type(raw).__name__}")
        return Document.from_dict(raw)

    def load(self) -> Document:
        """Read the document; a missing or corrupt file yields (and persists) an empty one."""
        try:
            return self._read()
        except (OSError, ValueError):
            pass
        with self._lock:
            # A writer may have replaced the file while we waited for the lock.
            try:
                return self._read()
            except (OSError, ValueError) as exc:
                logger.warning("Could not read %s (%s); starting from an empty document", self.path, exc)
            document = Document()
            try:
                self._write(document)
            except OSError as write_exc:
                logger.error("Could not bootstrap %s: %s", self.path, write_exc)
            return document

    def save(
        self,
        document: Document,
        message: str = DEFAULT_MESSAGE,
        extra_paths: Iterable[Path] = (),
    ) -> bool:
        """Overwrite the backing file; True only when the write is durable."""
        with self._lock:
            try:
                self._write(document)
            except (OSError, TypeError, ValueError) as exc:
                logger.error("Error saving data to %s: %s", self.path, exc)
                return False
        if self.on_save is not None:
            try:
                self.on_save.after_save([self.path, *extra_paths], message)
            except Exception:
                logger.exception("Post-save hook failed for %s", self.path)
        return True

    def update(
        self,
        mutate: Callable[[Document], None],
        message: str = DEFAULT_MESSAGE,
        extra_paths: Iterable[Path] = (),
    ) -> bool:
        """Run load -> mutate -> save as one critical section."""
        with self._lock:
            document = self.load()
            mutate(document)
            return self.save(document, message=message, extra_paths=extra_paths)

    def _write(self, document: Document) -> None:
        payload = json.dumps(document.to_dict(), ensure_ascii=False, indent=2)
        self.path.parent.mkdir(parents=True, exist_ok=True)
        tmp = self.path.with_name(f"{self.path.name}.tmp")
        try:
            tmp.write_text(payload, encoding="utf-8")
            os.replace(tmp, self.path)
        except OSError:
            tmp.unlink(missing_ok=True)
            raise
