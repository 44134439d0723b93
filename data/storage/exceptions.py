"""
Storage Exceptions

Error taxonomy raised by the storage layer and mapped to HTTP statuses by
api/middleware/error_handler.py.
"""

from typing import Optional


class StorageError(Exception):
    """Base class for storage layer errors."""
    status_code = 500


class MissingPayloadError(StorageError):
    """Raised when an upload carries no file."""
    status_code = 400

    def __init__(self, message: str = "No file uploaded"):
        super().__init__(message)


class FileNotFoundInStoreError(StorageError):
    """Raised when a filename is absent from every directory consulted."""
    status_code = 404

    def __init__(self, filename: str, message: Optional[str] = None):
        self.filename = filename
        super().__init__(message or "File not found")


class StorageWriteError(StorageError):
    """Raised when the payload could not be written to disk."""
    status_code = 500
