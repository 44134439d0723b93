"""
Local File Storage - File system storage management

@.architecture
Incoming: api/endpoints/files.py, api/endpoints/images.py, Local filesystem (uploads_dir, images_dir) --- {upload payloads, filename lookups, deletion requests}
Processing: put(), read(), resolve(), list_names(), delete(), _candidate(), _ensure_directory() --- {7 jobs: file_crud, type_categorization, path_validation, directory_management, per_key_serialization, enumeration, naming}
Outgoing: Local filesystem (aiofiles write/read, aiofiles.os listdir/isfile/remove), api/endpoints/*.py --- {StoredFile, Path, bytes, List[str] filenames, FileKind}

Provides local file storage with:
- Type-based directory organization (declared content type decides)
- Timestamped, sanitized stored filenames
- Safe path handling
- Per-filename serialization of writes, lookups and deletes

Files are organized by kind:
- uploads/        - Everything not declared as an image
- public/images/  - Declared images (also served by the static mount)

There is no index: the directory listing is the source of truth and every
call re-reads it.
"""

import logging
import time
from contextlib import suppress
from pathlib import Path
from typing import Dict, List, Optional, Union

import aiofiles
import aiofiles.os

from security.sanitization import InputSanitizer, get_sanitizer

from .base import FileKind, StorageBackend, StoredFile
from .exceptions import FileNotFoundInStoreError, StorageWriteError
from .locks import KeyedLock
from .policies import IMAGE_CONTENT_PREFIX, Clock, build_stored_name, classify

logger = logging.getLogger(__name__)


class LocalFileStorage(StorageBackend):
    """
    Local file storage manager with a two-way image/generic split.

    Lookups are deliberately kind-specific: inline views only consult the
    image directory, downloads only the generic one. Deletion checks the
    generic directory first and stops at the first hit.

    Directory Structure:
        <uploads_dir>/   # generic files, served as attachments
        <images_dir>/    # images, served inline
    """

    DELETE_ORDER = (FileKind.UPLOAD, FileKind.IMAGE)

    NOT_FOUND_MESSAGES = {
        FileKind.IMAGE: "Image not found",
        FileKind.UPLOAD: "File not found",
    }

    def __init__(
        self,
        uploads_dir: Union[str, Path] = "uploads",
        images_dir: Union[str, Path] = "public/images",
        image_content_prefix: str = IMAGE_CONTENT_PREFIX,
        clock: Clock = time.time,
        sanitizer: Optional[InputSanitizer] = None,
    ):
        """
        Initialize local file storage.

        Directories are not created here; each is created on the first
        upload that needs it.

        Args:
            uploads_dir: Directory for generic uploads
            images_dir: Directory for images
            image_content_prefix: Content-type prefix that marks an image
            clock: Wall-clock source used for stored filenames
            sanitizer: Sanitizer for lookup names (global one if None)
        """
        self.directories: Dict[FileKind, Path] = {
            FileKind.UPLOAD: Path(uploads_dir),
            FileKind.IMAGE: Path(images_dir),
        }
        self.image_content_prefix = image_content_prefix
        self.clock = clock
        self.sanitizer = sanitizer or get_sanitizer()
        self._locks = KeyedLock()

    @classmethod
    def from_settings(cls, settings) -> "LocalFileStorage":
        """Build storage from a StorageSettings section."""
        return cls(
            uploads_dir=settings.uploads_dir,
            images_dir=settings.images_dir,
            image_content_prefix=settings.image_content_prefix,
        )

    def directory_for(self, kind: FileKind) -> Path:
        """Directory that holds files of the given kind."""
        return self.directories[kind]

    async def _ensure_directory(self, kind: FileKind) -> Path:
        """Create the kind's directory (with parents) if it doesn't exist."""
        directory = self.directories[kind]
        await aiofiles.os.makedirs(directory, exist_ok=True)
        return directory

    def _candidate(self, filename: str, kind: FileKind) -> Path:
        """
        Build the path filename would have in the kind's directory.

        Raises:
            PathTraversalError: If filename could address anything but a direct child
        """
        self.sanitizer.validate_lookup_name(filename)
        directory = self.directories[kind]
        return self.sanitizer.ensure_within(directory / filename, directory)

    # =========================================================================
    # FILE OPERATIONS
    # =========================================================================

    async def put(self, original_name: str, content: bytes, content_type: str) -> StoredFile:
        """
        Save an upload under a timestamped name in the directory its type selects.

        Args:
            original_name: Client-supplied filename
            content: File content
            content_type: Declared MIME type

        Returns:
            StoredFile with the stored filename and path

        Raises:
            StorageWriteError: If the write fails (partial file removed)
        """
        kind = classify(content_type, self.image_content_prefix)
        filename = build_stored_name(
            original_name,
            clock=self.clock,
            max_bytes=self.sanitizer.limits.MAX_FILENAME_LENGTH,
        )
        directory = await self._ensure_directory(kind)
        file_path = self.sanitizer.ensure_within(directory / filename, directory)

        async with self._locks.hold(filename):
            try:
                async with aiofiles.open(file_path, 'wb') as f:
                    await f.write(content)
            except OSError as e:
                with suppress(FileNotFoundError):
                    await aiofiles.os.remove(file_path)
                logger.error(f"Failed to save file {filename}: {e}")
                raise StorageWriteError(f"Failed to write file: {e}") from e

        logger.info(f"Saved {kind.value} file: {file_path} ({len(content)} bytes)")
        return StoredFile(
            filename=filename,
            path=file_path,
            kind=kind,
            size_bytes=len(content),
            content_type=content_type or "",
        )

    async def resolve(self, filename: str, kind: FileKind) -> Path:
        """
        Find filename in the kind's directory only.

        Args:
            filename: Stored filename
            kind: Which directory to consult

        Returns:
            Path to the stored file

        Raises:
            FileNotFoundInStoreError: If the file isn't in that directory
            PathTraversalError: If filename is not a plain name
        """
        file_path = self._candidate(filename, kind)

        async with self._locks.hold(filename):
            if not await aiofiles.os.path.isfile(file_path):
                logger.debug(f"Lookup miss: {filename} not in {kind.value} store")
                raise FileNotFoundInStoreError(filename, self.NOT_FOUND_MESSAGES[kind])

        logger.debug(f"Resolved {filename} -> {file_path}")
        return file_path

    async def read(self, filename: str, kind: FileKind) -> bytes:
        """
        Read a stored file's bytes from the kind's directory.

        Raises:
            FileNotFoundInStoreError: If the file isn't in that directory
        """
        file_path = self._candidate(filename, kind)

        async with self._locks.hold(filename):
            if not await aiofiles.os.path.isfile(file_path):
                raise FileNotFoundInStoreError(filename, self.NOT_FOUND_MESSAGES[kind])
            async with aiofiles.open(file_path, 'rb') as f:
                content = await f.read()

        logger.debug(f"Read file: {file_path} ({len(content)} bytes)")
        return content

    async def list_names(self, kind: FileKind) -> List[str]:
        """
        List stored filenames of one kind.

        A directory that doesn't exist yet lists as empty.
        """
        directory = self.directories[kind]
        if not await aiofiles.os.path.isdir(directory):
            return []

        names = []
        for name in await aiofiles.os.listdir(directory):
            if await aiofiles.os.path.isfile(directory / name):
                names.append(name)
        return sorted(names)

    async def delete(self, filename: str) -> FileKind:
        """
        Delete filename, checking the generic directory before the image one.

        If the same name exists in both, only the generic copy is removed.

        Args:
            filename: Stored filename

        Returns:
            Kind of the directory the file was deleted from

        Raises:
            FileNotFoundInStoreError: If the file is in neither directory
        """
        candidates = [(kind, self._candidate(filename, kind)) for kind in self.DELETE_ORDER]

        async with self._locks.hold(filename):
            for kind, file_path in candidates:
                if await aiofiles.os.path.isfile(file_path):
                    await aiofiles.os.remove(file_path)
                    logger.info(f"Deleted {kind.value} file: {file_path}")
                    return kind

        raise FileNotFoundInStoreError(filename)
