"""
Error Handler Middleware - API Layer

Turns exceptions escaping the file endpoints into JSON error bodies.

@.architecture
Incoming: app.py (middleware registration), data/storage/exceptions.py, security/sanitization.py --- {Request objects, StorageError/ValidationError/HTTPException instances}
Processing: dispatch(), classify_exception(), render_error(), _log() --- {4 jobs: exception_catching, status_mapping, body_rendering, logging}
Outgoing: Clients (HTTP), logging --- {JSONResponse {"error": {code, message, type, hint}}, warning/error log records}
"""

import logging
import traceback
from dataclasses import dataclass
from typing import Callable, Dict, Optional, Tuple, Type

from fastapi import Request, Response
from fastapi.responses import JSONResponse
from starlette.middleware.base import BaseHTTPMiddleware
from starlette.types import ASGIApp

from data.storage.exceptions import StorageError
from security.sanitization import PathTraversalError, SizeExceededError, ValidationError

logger = logging.getLogger(__name__)

GENERIC_SERVER_MESSAGE = "An error occurred processing your request"

# Checked in order; subclasses must come before their bases.
# A None message keeps str(error).
VALIDATION_RULES: Tuple[Tuple[Type[Exception], int, Optional[str]], ...] = (
    (SizeExceededError, 413, None),
    (PathTraversalError, 400, "Invalid path"),
    (ValidationError, 400, None),
)

STATUS_HINTS: Dict[int, str] = {
    400: "Invalid request",
    404: "Resource not found",
    413: "Request entity too large",
    500: "Internal server error",
    503: "Service unavailable",
}


@dataclass
class ErrorHandlerConfig:
    """
    Behaviour switches for the error handler.

    Attributes:
        include_traceback: Attach the formatted traceback to the body
        sanitize_errors: Replace the message of 5xx errors with a generic one
        log_errors: Emit a log record per handled error
        hints: Extra human-readable hint per status code
    """
    include_traceback: bool = False
    sanitize_errors: bool = True
    log_errors: bool = True
    hints: Optional[Dict[int, str]] = None

    def hint_for(self, status_code: int) -> Optional[str]:
        return (self.hints if self.hints is not None else STATUS_HINTS).get(status_code)


@dataclass
class ErrorInfo:
    """What the client is told about a failed request."""
    status_code: int
    message: str
    error_type: str


def classify_exception(error: Exception, sanitize: bool = True) -> ErrorInfo:
    """
    Map an exception to a status code and client-facing message.

    Validation errors follow VALIDATION_RULES. Client-side storage errors
    (missing payload, unknown filename) keep their own status and message.
    Anything else carrying an integer ``status_code`` uses it; the rest is a
    500. With ``sanitize`` the message of every 5xx is replaced.
    """
    error_type = type(error).__name__

    for exc_type, status_code, message in VALIDATION_RULES:
        if isinstance(error, exc_type):
            return ErrorInfo(status_code, message or str(error), error_type)

    if isinstance(error, StorageError) and error.status_code < 500:
        return ErrorInfo(error.status_code, str(error), error_type)

    status_code = getattr(error, "status_code", None)
    if not isinstance(status_code, int):
        status_code = 500

    if status_code >= 500 and sanitize:
        return ErrorInfo(status_code, GENERIC_SERVER_MESSAGE, error_type)

    # HTTPException keeps its text in .detail
    message = getattr(error, "detail", None) or str(error)
    return ErrorInfo(status_code, str(message), error_type)


def render_error(
    info: ErrorInfo,
    config: ErrorHandlerConfig,
    error: Optional[Exception] = None,
) -> Dict[str, Dict[str, object]]:
    """Build the ``{"error": {...}}`` response body."""
    body: Dict[str, object] = {
        "code": info.status_code,
        "message": info.message,
        "type": info.error_type,
    }

    hint = config.hint_for(info.status_code)
    if hint:
        body["hint"] = hint

    if config.include_traceback and error is not None:
        body["traceback"] = traceback.format_exception(type(error), error, error.__traceback__)

    return {"error": body}


class ErrorHandlerMiddleware(BaseHTTPMiddleware):
    """
    Catches exceptions raised below it and answers with a JSON error body.

    Endpoints and the storage layer raise; nothing between them and this
    middleware translates errors.
    """

    def __init__(self, app: ASGIApp, config: Optional[ErrorHandlerConfig] = None):
        super().__init__(app)
        self.config = config or ErrorHandlerConfig()

    async def dispatch(self, request: Request, call_next: Callable) -> Response:
        try:
            return await call_next(request)
        except Exception as e:
            info = classify_exception(e, sanitize=self.config.sanitize_errors)
            if self.config.log_errors:
                self._log(request, e, info)
            return JSONResponse(
                status_code=info.status_code,
                content=render_error(info, self.config, e),
            )

    @staticmethod
    def _log(request: Request, error: Exception, info: ErrorInfo) -> None:
        """Server errors at error level with traceback, client errors as warnings."""
        context = {
            "method": request.method,
            "path": request.url.path,
            "status_code": info.status_code,
            "error_type": info.error_type,
            "client": request.client.host if request.client else "unknown",
        }

        if info.status_code >= 500:
            logger.error(f"{request.method} {request.url.path} failed: {error}", extra=context, exc_info=error)
        else:
            logger.warning(f"{request.method} {request.url.path} rejected: {error}", extra=context)


def create_error_handler_middleware(development: bool = False):
    """
    Middleware class and kwargs for app.add_middleware().

    Development shows raw messages and tracebacks; other environments hide
    the details of server errors.
    """
    config = ErrorHandlerConfig(
        include_traceback=development,
        sanitize_errors=not development,
    )
    return ErrorHandlerMiddleware, {"config": config}
