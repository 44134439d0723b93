"""
API Dependencies

FastAPI dependency injection functions for:
- Settings management
- Storage backend access
- Request context setup

@.architecture
Incoming: app.py (create_app), api/endpoints/*.py --- {app.state settings and storage, Depends() injections from endpoints}
Processing: get_settings(), get_storage(), setup_request_context() --- {3 jobs: context_setup, dependency_injection, validation}
Outgoing: api/endpoints/*.py, app.py --- {Settings instance, StorageBackend instance, request context dict}
"""

from typing import Optional
from fastapi import Header, Request
import uuid

from config.settings import Settings, get_settings as load_settings
from data.storage import StorageBackend
from monitoring import set_request_context


# =============================================================================
# Settings Dependencies
# =============================================================================

def get_settings(request: Request) -> Settings:
    """
    Get application settings.

    Prefers the settings the app was created with; otherwise delegates to
    the cached loader in config.settings.

    Returns:
        Settings: Application configuration
    """
    settings = getattr(request.app.state, "settings", None)
    return settings or load_settings()


# =============================================================================
# Storage Dependencies
# =============================================================================

def get_storage(request: Request) -> StorageBackend:
    """
    Get the storage backend the app was created with.

    Returns:
        StorageBackend: Backend attached by create_app()
    """
    return request.app.state.storage


# =============================================================================
# Request Context Dependencies
# =============================================================================

async def setup_request_context(
    request: Request,
    x_request_id: Optional[str] = Header(None),
) -> dict:
    """
    Setup request context for logging.

    Uses the caller's X-Request-ID when present, otherwise generates one.

    Args:
        request: FastAPI request object
        x_request_id: Optional request ID from header

    Returns:
        dict: Request context information
    """
    request_id = x_request_id or str(uuid.uuid4())

    set_request_context(request_id=request_id)
    request.state.request_id = request_id

    return {
        "request_id": request_id,
        "method": request.method,
        "path": request.url.path
    }
