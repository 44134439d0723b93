"""
File Endpoints

Upload, listing, download and deletion of stored files.

@.architecture
Incoming: api/router.py, Clients (HTTP POST/GET/DELETE) --- {multipart/form-data uploads to /upload, requests to /files, /download/{filename}, /files/{filename}}
Processing: upload_file(), list_files(), download_file(), delete_file() --- {7 jobs: dependency_injection, error_counting, payload_validation, size_validation, storage_management, url_building, recording}
Outgoing: data/storage/local.py, Clients (HTTP) --- {StorageBackend calls, FileUploadResponse, FileListResponse, FileResponse attachments, MessageResponse}
"""

from typing import Union
from urllib.parse import quote

from fastapi import APIRouter, Depends, File, UploadFile
from fastapi.responses import FileResponse
from starlette.datastructures import UploadFile as StarletteUploadFile

from api.dependencies import get_settings, get_storage, setup_request_context
from api.schemas.files import FileUploadResponse, FileListResponse, MessageResponse
from config.settings import Settings
from data.storage import FileKind, MissingPayloadError, StorageBackend, StorageError
from monitoring import get_logger, counter
from security.sanitization import ValidationError, validate_file_size

logger = get_logger(__name__)
router = APIRouter(tags=["files"])

DOWNLOAD_ROUTE = "/download"

# Metrics
file_operations = counter('file_operations_total', 'Total file operations', ['operation', 'status'])


def build_file_url(filename: str, kind: FileKind, settings: Settings) -> str:
    """Public URL under which a stored file is served."""
    prefix = settings.storage.image_url_prefix if kind is FileKind.IMAGE else DOWNLOAD_ROUTE
    return f"{prefix}/{quote(filename)}"


# =============================================================================
# File Upload
# =============================================================================

@router.post(
    "/upload",
    response_model=FileUploadResponse,
    summary="Upload file",
    description="Upload one file in the multipart field 'file'"
)
async def upload_file(
    file: Union[UploadFile, str, None] = File(None),
    settings: Settings = Depends(get_settings),
    storage: StorageBackend = Depends(get_storage),
    _context: dict = Depends(setup_request_context)
) -> FileUploadResponse:
    """
    Upload a file.

    Files declared as ``image/*`` land in the image store and are served
    from the static mount; everything else lands in the generic store and
    is served as a download.
    """
    try:
        # A plain form value or a part without a filename carries no file
        if not isinstance(file, StarletteUploadFile) or not file.filename:
            raise MissingPayloadError()

        content = await file.read()
        validate_file_size(len(content), max_bytes=settings.storage.max_upload_size_bytes)

        stored = await storage.put(file.filename, content, file.content_type or "")

    except (StorageError, ValidationError):
        file_operations.inc(operation='upload', status='error')
        raise
    finally:
        if isinstance(file, StarletteUploadFile):
            await file.close()

    file_operations.inc(operation='upload', status='success')
    logger.info(
        f"Uploaded file: {stored.filename}",
        kind=stored.kind.value,
        size_bytes=stored.size_bytes,
        content_type=stored.content_type,
    )

    return FileUploadResponse(
        filename=stored.filename,
        path=str(stored.path),
        url=build_file_url(stored.filename, stored.kind, settings),
        is_image=stored.is_image,
    )


# =============================================================================
# Listing
# =============================================================================

@router.get(
    "/files",
    response_model=FileListResponse,
    summary="List files",
    description="List filenames in the generic and image stores"
)
async def list_files(
    storage: StorageBackend = Depends(get_storage),
    _context: dict = Depends(setup_request_context)
) -> FileListResponse:
    """List both stores independently; a missing store lists as empty."""
    uploads = await storage.list_names(FileKind.UPLOAD)
    images = await storage.list_names(FileKind.IMAGE)

    file_operations.inc(operation='list', status='success')
    logger.debug(f"Listed {len(uploads)} uploads and {len(images)} images")

    return FileListResponse(uploads=uploads, images=images)


# =============================================================================
# Download
# =============================================================================

@router.get(
    DOWNLOAD_ROUTE + "/{filename}",
    summary="Download file",
    description="Download a file from the generic store as an attachment",
    response_class=FileResponse,
)
async def download_file(
    filename: str,
    storage: StorageBackend = Depends(get_storage),
    _context: dict = Depends(setup_request_context)
) -> FileResponse:
    """
    Stream a generic file with an attachment disposition.

    Only the generic store is consulted; images are not downloadable here.
    """
    try:
        file_path = await storage.resolve(filename, FileKind.UPLOAD)
    except (StorageError, ValidationError):
        file_operations.inc(operation='download', status='error')
        raise

    file_operations.inc(operation='download', status='success')
    return FileResponse(file_path, filename=filename)


# =============================================================================
# Deletion
# =============================================================================

@router.delete(
    "/files/{filename}",
    response_model=MessageResponse,
    summary="Delete file",
    description="Delete a file by name, generic store first"
)
async def delete_file(
    filename: str,
    storage: StorageBackend = Depends(get_storage),
    _context: dict = Depends(setup_request_context)
) -> MessageResponse:
    """
    Delete a stored file.

    When the same name exists in both stores only the generic copy goes.
    """
    try:
        kind = await storage.delete(filename)
    except (StorageError, ValidationError):
        file_operations.inc(operation='delete', status='error')
        raise

    file_operations.inc(operation='delete', status='success')

    if kind is FileKind.IMAGE:
        return MessageResponse(message="Image deleted successfully")
    return MessageResponse(message="File deleted successfully")
