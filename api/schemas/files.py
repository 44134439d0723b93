"""
File Schemas

Pydantic models for upload, listing and deletion responses.

@.architecture
Incoming: api/endpoints/files.py, api/endpoints/images.py --- {StoredFile data, filename lists}
Processing: Pydantic validation and serialization --- {2 jobs: data_validation, serialization}
Outgoing: Clients (HTTP) --- {FileUploadResponse, FileListResponse, ImageListResponse, MessageResponse JSON}
"""

from typing import List
from pydantic import BaseModel, ConfigDict, Field


# =============================================================================
# Upload Models
# =============================================================================

class FileUploadResponse(BaseModel):
    """Response after file upload."""
    model_config = ConfigDict(
        populate_by_name=True,
        json_schema_extra={
            "example": {
                "message": "File uploaded successfully",
                "filename": "1700000000000-photo.png",
                "path": "public/images/1700000000000-photo.png",
                "url": "/public/images/1700000000000-photo.png",
                "isImage": True
            }
        }
    )

    message: str = "File uploaded successfully"
    filename: str
    path: str
    url: str
    is_image: bool = Field(..., alias="isImage")


# =============================================================================
# Listing Models
# =============================================================================

class FileListResponse(BaseModel):
    """Filenames in both stores."""
    uploads: List[str] = Field(default_factory=list)
    images: List[str] = Field(default_factory=list)


class ImageListResponse(BaseModel):
    """Filenames in the image store."""
    images: List[str] = Field(default_factory=list)


# =============================================================================
# Status Models
# =============================================================================

class MessageResponse(BaseModel):
    """Plain message response."""
    message: str
