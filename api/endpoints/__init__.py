"""
API Endpoints

FastAPI routers for all API endpoints.
"""

from .files import router as files_router
from .images import router as images_router

__all__ = [
    "files_router",
    "images_router",
]
