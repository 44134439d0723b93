"""
Storage Backend Interface

Capability set every storage backend provides, so the directory layout used
by LocalFileStorage stays one swappable implementation.

@.architecture
Incoming: api/dependencies.py, api/endpoints/*.py --- {StorageBackend instances}
Processing: put(), read(), resolve(), list_names(), delete() --- {5 jobs: write, read, lookup, enumeration, removal}
Outgoing: data/storage/local.py --- {abstract contract, FileKind, StoredFile}
"""

from abc import ABC, abstractmethod
from dataclasses import dataclass
from enum import Enum
from pathlib import Path
from typing import List


class FileKind(str, Enum):
    """Which of the two stores a file lives in."""
    IMAGE = "image"
    UPLOAD = "upload"


@dataclass(frozen=True)
class StoredFile:
    """Result of a successful put()."""
    filename: str
    path: Path
    kind: FileKind
    size_bytes: int
    content_type: str = ""

    @property
    def is_image(self) -> bool:
        return self.kind is FileKind.IMAGE


class StorageBackend(ABC):
    """
    Durable named-blob storage split into image and generic kinds.

    Stored files are addressed by filename only; a filename belongs to the
    kind it was written under and lookups name the kind they consult.
    """

    @abstractmethod
    async def put(self, original_name: str, content: bytes, content_type: str) -> StoredFile:
        """
        Store content under a freshly derived filename.

        Args:
            original_name: Client-supplied filename
            content: Full payload
            content_type: Declared MIME type, decides the kind

        Returns:
            StoredFile describing where the content went
        """

    @abstractmethod
    async def read(self, filename: str, kind: FileKind) -> bytes:
        """Return the bytes of filename from the given kind's store."""

    @abstractmethod
    async def resolve(self, filename: str, kind: FileKind) -> Path:
        """Return the on-disk path of filename in the given kind's store."""

    @abstractmethod
    async def list_names(self, kind: FileKind) -> List[str]:
        """Return the filenames currently held in the given kind's store."""

    @abstractmethod
    async def delete(self, filename: str) -> FileKind:
        """
        Delete filename, generic store first.

        Returns:
            The kind the file was removed from
        """
