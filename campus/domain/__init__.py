"""Plain value types for the persisted document."""

from .models import Document, GalleryRecord, Record, new_record_id

__all__ = ["Document", "GalleryRecord", "Record", "new_record_id"]
