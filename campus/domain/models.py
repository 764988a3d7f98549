"""Document, Record and GalleryRecord value types."""

from __future__ import annotations

import threading
import time
from dataclasses import dataclass, field
from typing import Any, Dict, FrozenSet, List, Tuple

COLLECTIONS = ("students", "teachers", "gallery")

_id_lock = threading.Lock()
_last_id = 0


def new_record_id() -> int:
    """Epoch milliseconds, bumped so ids never repeat within this process."""
    global _last_id
    with _id_lock:
        candidate = int(time.time() * 1000)
        if candidate <= _last_id:
            candidate = _last_id + 1
        _last_id = candidate
        return candidate


def _split(raw: dict, keys: Tuple[str, ...]) -> Tuple[Dict[str, Any], Dict[str, Any], FrozenSet[str]]:
    """Separate known fields from the rest, remembering which known ones were absent."""
    known = {key: raw.get(key) for key in keys}
    extra = {key: value for key, value in raw.items() if key not in keys}
    missing = frozenset(key for key in keys if key not in raw)
    return known, extra, missing


def _join(known: Dict[str, Any], extra: Dict[str, Any], missing: FrozenSet[str]) -> dict:
    data = {key: value for key, value in known.items() if key not in missing}
    data.update(extra)
    return data


# Values read from disk are kept as found (ids are not coerced, unknown keys
# survive) so that rewriting the document never loses anything.


@dataclass
class Record:
    id: Any
    name: Any
    extra: Dict[str, Any] = field(default_factory=dict)
    missing: FrozenSet[str] = field(default_factory=frozenset, repr=False)

    @classmethod
    def create(cls, name: str) -> "Record":
        return cls(id=new_record_id(), name=name)

    @classmethod
    def from_dict(cls, raw: dict) -> "Record":
        known, extra, missing = _split(raw, ("id", "name"))
        return cls(extra=extra, missing=missing, **known)

    def to_dict(self) -> dict:
        return _join({"id": self.id, "name": self.name}, self.extra, self.missing)


@dataclass
class GalleryRecord:
    id: Any
    path: Any
    extra: Dict[str, Any] = field(default_factory=dict)
    missing: FrozenSet[str] = field(default_factory=frozenset, repr=False)

    @classmethod
    def create(cls, path: str) -> "GalleryRecord":
        return cls(id=new_record_id(), path=path)

    @classmethod
    def from_dict(cls, raw: dict) -> "GalleryRecord":
        known, extra, missing = _split(raw, ("id", "path"))
        return cls(extra=extra, missing=missing, **known)

    def to_dict(self) -> dict:
        return _join({"id": self.id, "path": self.path}, self.extra, self.missing)


def _entry_to_dict(entry: Any) -> Any:
    return entry.to_dict() if isinstance(entry, (Record, GalleryRecord)) else entry


@dataclass
class Document:
    """
    The single persisted aggregate. Collections keep insertion order.

    Entries that are not JSON objects are carried through untouched, as are
    top-level keys other than the three collections.
    """

    students: List[Any] = field(default_factory=list)
    teachers: List[Any] = field(default_factory=list)
    gallery: List[Any] = field(default_factory=list)
    extra: Dict[str, Any] = field(default_factory=dict)

    @classmethod
    def from_dict(cls, raw: dict) -> "Document":
        """Build a Document; absent or null collections become empty lists."""
        def _entries(key: str, kind) -> list:
            value = raw.get(key)
            if value is None:
                return []
            if not isinstance(value, list):
                raise ValueError(f"{key!r} must be a list, got {type(value).__name__}")
            return [kind.from_dict(item) if isinstance(item, dict) else item for item in value]

        return cls(
            students=_entries("students", Record),
            teachers=_entries("teachers", Record),
            gallery=_entries("gallery", GalleryRecord),
            extra={key: value for key, value in raw.items() if key not in COLLECTIONS},
        )

    def to_dict(self) -> dict:
        # Field order is part of the on-disk format.
        data = {
            "students": [_entry_to_dict(r) for r in self.students],
            "teachers": [_entry_to_dict(r) for r in self.teachers],
            "gallery": [_entry_to_dict(g) for g in self.gallery],
        }
        data.update(self.extra)
        return data
