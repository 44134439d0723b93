"""
Storage Layer - File storage management

Provides file system storage operations:
- Storage backend interface (put / read / resolve / list / delete)
- Local file storage split into image and generic directories
- Naming and placement policies
- Per-filename locking

The directory listing is the index; no metadata is persisted.
"""

from .base import FileKind, StorageBackend, StoredFile
from .exceptions import (
    StorageError,
    MissingPayloadError,
    FileNotFoundInStoreError,
    StorageWriteError,
)
from .local import LocalFileStorage
from .locks import KeyedLock
from .policies import build_stored_name, classify

__all__ = [
    "FileKind",
    "StorageBackend",
    "StoredFile",
    "StorageError",
    "MissingPayloadError",
    "FileNotFoundInStoreError",
    "StorageWriteError",
    "LocalFileStorage",
    "KeyedLock",
    "build_stored_name",
    "classify",
]
