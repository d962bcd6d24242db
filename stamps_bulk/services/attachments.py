from __future__ import annotations

import base64
import logging
from collections.abc import Callable, Iterable, Mapping
from dataclasses import dataclass
from pathlib import Path
from typing import Protocol

from ..models.record import InstrumentRecord

"""Attachment store and resolver.

The store is read-only from the pipeline's point of view: filled before
validation starts, then only queried (existence, size, content). File names
are exact and case-sensitive.
"""

__all__ = [
    "AttachmentStore",
    "AttachmentError",
    "DirectoryAttachmentStore",
    "MemoryAttachmentStore",
    "AttachmentMatch",
    "base64_resolver",
    "match_attachments",
]

logger = logging.getLogger(__name__)


class AttachmentError(Exception):
    """Raised when an attachment store cannot be built."""


class AttachmentStore(Protocol):
    def has(self, filename: str) -> bool: ...

    def get(self, filename: str) -> bytes: ...

    def size(self, filename: str) -> int: ...

    def names(self) -> list[str]: ...


class DirectoryAttachmentStore:
    """Attachments read from the files of a single directory (non-recursive).

    The directory listing is taken once at construction; contents are read
    lazily on get().
    """

    def __init__(self, directory: Path) -> None:
        if not directory.exists():
            raise AttachmentError(f"attachments directory not found: {directory}")
        if not directory.is_dir():
            raise AttachmentError(f"attachments path is not a directory: {directory}")
        try:
            self._files = {p.name: p for p in directory.iterdir() if p.is_file()}
        except OSError as e:
            raise AttachmentError(f"error reading attachments directory {directory}: {e}") from e
        self.directory = directory

    def has(self, filename: str) -> bool:
        return filename in self._files

    def get(self, filename: str) -> bytes:
        return self._files[filename].read_bytes()

    def size(self, filename: str) -> int:
        return self._files[filename].stat().st_size

    def names(self) -> list[str]:
        return sorted(self._files)

    def __len__(self) -> int:
        return len(self._files)


class MemoryAttachmentStore:
    """Attachments held in memory (filename -> content)."""

    def __init__(self, files: Mapping[str, bytes] | None = None) -> None:
        self._files: dict[str, bytes] = dict(files or {})

    def has(self, filename: str) -> bool:
        return filename in self._files

    def get(self, filename: str) -> bytes:
        return self._files[filename]

    def size(self, filename: str) -> int:
        return len(self._files[filename])

    def names(self) -> list[str]:
        return sorted(self._files)

    def __len__(self) -> int:
        return len(self._files)


def base64_resolver(store: AttachmentStore) -> Callable[[str], str]:
    """Build a resolver returning base64 text for a filename, or "" if absent.

    Read errors from the store propagate; the serializer degrades them to an
    empty attachment.
    """

    def resolve(filename: str) -> str:
        if not store.has(filename):
            return ""
        return base64.b64encode(store.get(filename)).decode("ascii")

    return resolve


@dataclass(frozen=True)
class AttachmentMatch:
    """Attachment names required by the records, split by availability.

    unused lists files in the store that no record refers to.
    """
    required: list[str]
    matched: list[str]
    missing: list[str]
    unused: list[str]


def match_attachments(records: Iterable[InstrumentRecord], store: AttachmentStore) -> AttachmentMatch:
    """List required attachment names (first-seen order, de-duplicated)."""
    required: list[str] = []
    seen: set[str] = set()
    for record in records:
        if not record.attachment:
            continue
        name = record.attachment.strip()
        if name and name not in seen:
            seen.add(name)
            required.append(name)
    matched = [n for n in required if store.has(n)]
    missing = [n for n in required if not store.has(n)]
    unused = [n for n in store.names() if n not in seen]
    return AttachmentMatch(required=required, matched=matched, missing=missing, unused=unused)
