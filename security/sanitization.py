"""
Input Sanitization and Validation - Security Layer

Filename sanitization, path containment checks, and upload size limits for
the storage layer.

@.architecture
Incoming: data/storage/policies.py, data/storage/local.py, api/endpoints/files.py --- {str original filename, str lookup filename, Path candidate, int size_bytes}
Processing: sanitize_name_component(), validate_lookup_name(), ensure_within(), validate_file_size() --- {4 jobs: name_sanitization, path_validation, size_validation, truncation}
Outgoing: data/storage/*, api/middleware/error_handler.py --- {str safe name component, Path validated path, raises ValidationError/PathTraversalError/SizeExceededError}
"""

import os
import logging
from pathlib import Path
from typing import Optional
from dataclasses import dataclass

logger = logging.getLogger(__name__)


@dataclass
class SizeLimits:
    """Configurable size limits for uploads and stored names."""

    MAX_FILE_SIZE_BYTES: int = 100 * 1024 * 1024  # 100MB
    MAX_FILENAME_LENGTH: int = 255                 # bytes, as most filesystems count
    MAX_PATH_LENGTH: int = 4096


DEFAULT_LIMITS = SizeLimits()


class ValidationError(Exception):
    """Raised when input validation fails."""
    pass


class SizeExceededError(ValidationError):
    """Raised when input exceeds size limits."""
    pass


class PathTraversalError(ValidationError):
    """Raised when path traversal attempt detected."""
    pass


class InputSanitizer:
    """
    Sanitizes client-supplied filenames before they reach the filesystem.

    Two directions are covered:
    - Upload names are *repaired*: path components stripped, dangerous
      characters replaced, length capped. The result may be empty.
    - Lookup names are *checked*: anything that could address a path other
      than a direct child of a storage directory is rejected.
    """

    DANGEROUS_CHARS = '<>:"|?*'

    def __init__(self, limits: Optional[SizeLimits] = None):
        """
        Initialize sanitizer with size limits.

        Args:
            limits: Custom size limits (uses defaults if None)
        """
        self.limits = limits or DEFAULT_LIMITS

    # ==================== Upload Names ====================

    def sanitize_name_component(self, name: Optional[str], max_bytes: Optional[int] = None) -> str:
        """
        Reduce an uploaded filename to a safe single path component.

        Args:
            name: Original client-supplied filename (may be None or empty)
            max_bytes: Maximum UTF-8 length of the result

        Returns:
            Safe name component, possibly empty

        Raises:
            ValidationError: If name is not a string
        """
        if name is None:
            return ""
        if not isinstance(name, str):
            raise ValidationError(f"Expected string filename, got {type(name).__name__}")

        # Keep only the last component; browsers on Windows send backslashes
        name = name.replace('\\', '/').rsplit('/', 1)[-1]

        # Remove control characters
        name = ''.join(char for char in name if ord(char) >= 32)

        for char in self.DANGEROUS_CHARS:
            name = name.replace(char, '_')

        if name in ('.', '..'):
            name = ''

        limit = max_bytes if max_bytes is not None else self.limits.MAX_FILENAME_LENGTH
        return self._truncate(name, max(limit, 0))

    @staticmethod
    def _truncate(name: str, max_bytes: int) -> str:
        """Trim the stem so the encoded name fits, keeping the extension when possible."""
        if len(name.encode('utf-8')) <= max_bytes:
            return name

        stem, ext = os.path.splitext(name)
        if len(ext.encode('utf-8')) >= max_bytes:
            stem, ext = name, ''

        while stem and len((stem + ext).encode('utf-8')) > max_bytes:
            stem = stem[:-1]

        return stem + ext

    # ==================== Lookup Names ====================

    def validate_lookup_name(self, name: str) -> str:
        """
        Check that a filename from a request addresses a direct child.

        Args:
            name: Filename taken from the URL path

        Returns:
            The unchanged name

        Raises:
            PathTraversalError: If the name contains separators or dot segments
        """
        if not isinstance(name, str) or not name:
            raise PathTraversalError("Filename is required")

        if '/' in name or '\\' in name or '\x00' in name or name in ('.', '..'):
            raise PathTraversalError(f"Path traversal in filename: {name!r}")

        if len(name.encode('utf-8')) > self.limits.MAX_FILENAME_LENGTH:
            raise PathTraversalError(f"Filename too long: {len(name)} characters")

        return name

    def ensure_within(self, path: Path, base: Path) -> Path:
        """
        Validate that path resolves inside base.

        Args:
            path: Candidate path
            base: Directory the path must stay within

        Returns:
            The unchanged candidate path

        Raises:
            PathTraversalError: If path is outside base
        """
        if len(str(path)) > self.limits.MAX_PATH_LENGTH:
            raise PathTraversalError(f"Path length {len(str(path))} exceeds maximum")

        try:
            path.resolve().relative_to(base.resolve())
        except ValueError:
            raise PathTraversalError(f"Invalid path: {path} is outside storage directory")

        return path

    # ==================== Size Validation ====================

    def validate_file_size(self, size_bytes: int, max_bytes: Optional[int] = None) -> None:
        """
        Validate file size against limits.

        Args:
            size_bytes: File size in bytes
            max_bytes: Override for the configured maximum

        Raises:
            SizeExceededError: If file exceeds size limit
        """
        max_size = max_bytes if max_bytes is not None else self.limits.MAX_FILE_SIZE_BYTES

        if size_bytes > max_size:
            raise SizeExceededError(
                f"File size {size_bytes / (1024*1024):.2f}MB exceeds "
                f"maximum {max_size / (1024*1024):.2f}MB"
            )


# Global sanitizer instance
_default_sanitizer: Optional[InputSanitizer] = None


def get_sanitizer() -> InputSanitizer:
    """Get global sanitizer instance."""
    global _default_sanitizer
    if _default_sanitizer is None:
        _default_sanitizer = InputSanitizer()
    return _default_sanitizer


# Convenience functions for common operations
def sanitize_name_component(name: Optional[str], **kwargs) -> str:
    """Sanitize an uploaded filename using global sanitizer."""
    return get_sanitizer().sanitize_name_component(name, **kwargs)


def validate_lookup_name(name: str) -> str:
    """Validate a lookup filename using global sanitizer."""
    return get_sanitizer().validate_lookup_name(name)


def ensure_within(path: Path, base: Path) -> Path:
    """Validate path containment using global sanitizer."""
    return get_sanitizer().ensure_within(path, base)


def validate_file_size(size_bytes: int, **kwargs) -> None:
    """Validate upload size using global sanitizer."""
    get_sanitizer().validate_file_size(size_bytes, **kwargs)
