"""
Image Endpoints

Listing and inline viewing of files in the image store.

@.architecture
Incoming: api/router.py, Clients (HTTP GET) --- {requests to /images, /images/{filename}}
Processing: list_images(), get_image() --- {3 jobs: dependency_injection, enumeration, inline_streaming}
Outgoing: data/storage/local.py, Clients (HTTP) --- {ImageListResponse, FileResponse with inferred media type}
"""

from fastapi import APIRouter, Depends
from fastapi.responses import FileResponse

from api.dependencies import get_storage, setup_request_context
from api.endpoints.files import file_operations
from api.schemas.files import ImageListResponse
from data.storage import FileKind, StorageBackend, StorageError
from monitoring import get_logger
from security.sanitization import ValidationError

logger = get_logger(__name__)
router = APIRouter(tags=["images"])


@router.get(
    "/images",
    response_model=ImageListResponse,
    summary="List images",
    description="List filenames in the image store"
)
async def list_images(
    storage: StorageBackend = Depends(get_storage),
    _context: dict = Depends(setup_request_context)
) -> ImageListResponse:
    """List the image store; a missing store lists as empty."""
    images = await storage.list_names(FileKind.IMAGE)
    file_operations.inc(operation='list', status='success')
    return ImageListResponse(images=images)


@router.get(
    "/images/{filename}",
    summary="View image",
    description="Stream an image inline",
    response_class=FileResponse,
)
async def get_image(
    filename: str,
    storage: StorageBackend = Depends(get_storage),
    _context: dict = Depends(setup_request_context)
) -> FileResponse:
    """
    Stream an image with a content type inferred from its extension.

    Only the image store is consulted; generic uploads are not viewable here.
    """
    try:
        file_path = await storage.resolve(filename, FileKind.IMAGE)
    except (StorageError, ValidationError):
        file_operations.inc(operation='view', status='error')
        raise

    file_operations.inc(operation='view', status='success')
    return FileResponse(file_path)
