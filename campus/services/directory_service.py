"""Append use cases for students, teachers and the gallery."""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Iterable

from campus.domain.models import Document, GalleryRecord, Record
from campus.repositories.json_storage import DEFAULT_MESSAGE, JsonStore

logger = logging.getLogger(__name__)


class DirectoryError(Exception):
    """Base exception for directory mutations."""


class InvalidNameError(DirectoryError):
    """Raised when a student/teacher name is empty after trimming."""


class PersistError(DirectoryError):
    """Raised when the store could not write the mutated document."""


class DirectoryService:
    """Validates input, then appends through the store's single-writer update."""

    def __init__(self, store: JsonStore) -> None:
        self.store = store

    def normalize_name(self, value: str | None) -> str:
        name = (value or "").strip()
        if not name:
            raise InvalidNameError("Valid name is required")
        return name

    def _append(self, mutate, message: str = DEFAULT_MESSAGE, extra_paths: Iterable[Path] = ()) -> None:
        if not self.store.update(mutate, message=message, extra_paths=extra_paths):
            raise PersistError("Failed to save data")

    def add_student(self, name: str | None) -> Record:
        record = Record.create(self.normalize_name(name))

        def mutate(document: Document) -> None:
            document.students.append(record)

        self._append(mutate)
        logger.info("Student %s added (id=%s)", record.name, record.id)
        return record

    def add_teacher(self, name: str | None) -> Record:
        record = Record.create(self.normalize_name(name))

        def mutate(document: Document) -> None:
            document.teachers.append(record)

        self._append(mutate)
        logger.info("Teacher %s added (id=%s)", record.name, record.id)
        return record

    def add_gallery_image(self, path: str, stored_file: Path | None = None) -> GalleryRecord:
        """Record an already stored image; path is its public reference."""
        record = GalleryRecord.create(path)

        def mutate(document: Document) -> None:
            document.gallery.append(record)

        name = Path(path).name
        extra = [stored_file] if stored_file is not None else []
        self._append(mutate, message=f"Add gallery image {name}", extra_paths=extra)
        logger.info("Gallery image %s added (id=%s)", path, record.id)
        return record
