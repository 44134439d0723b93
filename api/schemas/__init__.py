"""
API Schemas

Pydantic models for request/response validation.
"""

from .files import (
    FileUploadResponse,
    FileListResponse,
    ImageListResponse,
    MessageResponse,
)

__all__ = [
    "FileUploadResponse",
    "FileListResponse",
    "ImageListResponse",
    "MessageResponse",
]
