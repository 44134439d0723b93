"""
API Middleware Layer

Middleware components for request/response processing:
- Error handling
- CORS (via FastAPI)
"""

from .error_handler import (
    ErrorHandlerMiddleware,
    ErrorHandlerConfig,
    ErrorInfo,
    classify_exception,
    render_error,
    create_error_handler_middleware,
)

__all__ = [
    'ErrorHandlerMiddleware',
    'ErrorHandlerConfig',
    'ErrorInfo',
    'classify_exception',
    'render_error',
    'create_error_handler_middleware',
]
