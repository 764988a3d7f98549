"""Gallery image storage (validation and naming)."""

from __future__ import annotations

import logging
import random
import time
from dataclasses import dataclass
from pathlib import Path

logger = logging.getLogger(__name__)

ALLOWED_EXTENSIONS = {".jpeg", ".jpg", ".png", ".gif", ".webp"}
ALLOWED_MIME_SUBTYPES = {"jpeg", "jpg", "png", "gif", "webp"}
PUBLIC_PREFIX = "/uploads"


class UploadError(Exception):
    """Base exception for gallery uploads."""


class MissingImageError(UploadError):
    pass


class UnsupportedImageError(UploadError):
    pass


class ImageTooLargeError(UploadError):
    pass


@dataclass
class StoredImage:
    filename: str
    file_path: Path
    public_path: str


class UploadService:
    def __init__(self, uploads_dir: Path, max_bytes: int) -> None:
        self.uploads_dir = Path(uploads_dir)
        self.max_bytes = max_bytes

    def validate(self, filename: str | None, content_type: str | None, size: int) -> str:
        """Return the normalized extension or raise an UploadError."""
        if not filename or size <= 0:
            raise MissingImageError("Image is required")
        ext = Path(filename).suffix.lower()
        mime = (content_type or "").lower()
        major, _, minor = mime.partition("/")
        if ext not in ALLOWED_EXTENSIONS or major != "image" or minor not in ALLOWED_MIME_SUBTYPES:
            raise UnsupportedImageError("Only image files are allowed")
        if size > self.max_bytes:
            raise ImageTooLargeError("Image too large")
        return ext

    def _unique_name(self, ext: str) -> str:
        return f"{int(time.time() * 1000)}-{random.randint(0, 10**9)}{ext}"

    def store(self, filename: str | None, content_type: str | None, data: bytes) -> StoredImage:
        ext = self.validate(filename, content_type, len(data))
        self.uploads_dir.mkdir(parents=True, exist_ok=True)
        name = self._unique_name(ext)
        target = self.uploads_dir / name
        target.write_bytes(data)
        logger.info("Stored upload %s as %s", filename, name)
        return StoredImage(filename=name, file_path=target, public_path=f"{PUBLIC_PREFIX}/{name}")

    def discard(self, image: StoredImage) -> None:
        try:
            image.file_path.unlink(missing_ok=True)
        except OSError as exc:
            logger.warning("Could not remove orphaned upload %s: %s", image.file_path, exc)
