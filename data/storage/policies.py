"""
Naming and Placement Policies

Pure functions deciding what an upload is called and which store receives it.
"""

import time
from typing import Callable, Optional

from security.sanitization import SizeLimits, sanitize_name_component

from .base import FileKind

IMAGE_CONTENT_PREFIX = "image/"
NAME_SEPARATOR = "-"

Clock = Callable[[], float]


def timestamp_ms(clock: Clock = time.time) -> int:
    """Milliseconds since the epoch according to clock."""
    return int(clock() * 1000)


def build_stored_name(
    original_name: Optional[str],
    clock: Clock = time.time,
    max_bytes: int = SizeLimits.MAX_FILENAME_LENGTH,
) -> str:
    """
    Derive the stored filename for an upload.

    The result is ``<epoch-ms>-<name>`` where ``name`` is the sanitized final
    component of the original filename, trimmed so the whole result fits in
    ``max_bytes``. An empty original name yields ``<epoch-ms>-``.

    Args:
        original_name: Client-supplied filename
        clock: Wall-clock source in seconds
        max_bytes: Maximum UTF-8 length of the stored filename

    Returns:
        Stored filename
    """
    prefix = f"{timestamp_ms(clock)}{NAME_SEPARATOR}"
    component = sanitize_name_component(original_name, max_bytes=max_bytes - len(prefix))
    return prefix + component


def classify(content_type: Optional[str], image_prefix: str = IMAGE_CONTENT_PREFIX) -> FileKind:
    """Images go to the image store, everything else to the generic store."""
    # MIME types are case-insensitive
    if (content_type or "").lower().startswith(image_prefix.lower()):
        return FileKind.IMAGE
    return FileKind.UPLOAD
