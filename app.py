"""
FastAPI Application Factory

Creates and configures the FastAPI application with:
- Middleware (CORS, error handling)
- Storage backend injection
- File, image and download routes
- Read-only static mount of the image store
- Liveness, health and metrics endpoints

@.architecture
Incoming: main.py, config/settings.py, api/router.py, api/middleware/*.py --- {Settings object, APIRouter instances, middleware constructors}
Processing: create_app(), lifespan(), root(), health_check(), metrics() --- {7 jobs: application_creation, dependency_injection, lifecycle_management, logging_configuration, middleware_registration, routing_registration, static_mounting}
Outgoing: main.py, Clients (HTTP) --- {FastAPI application instance, HTTP responses}
"""

from contextlib import asynccontextmanager
from typing import Optional
import time

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse, PlainTextResponse
from fastapi.staticfiles import StaticFiles

from api.middleware import create_error_handler_middleware
from api.router import api_router
from config.settings import Settings, get_settings
from data.storage import LocalFileStorage, StorageBackend
from monitoring import (
    ENVIRONMENT_PRESETS,
    configure_from_preset,
    get_logger,
    get_registry,
)

logger = get_logger(__name__)

# Track startup time for uptime calculation
START_TIME = time.time()


def _configure_logging(settings: Settings) -> None:
    """Apply the environment's logging preset plus explicit overrides."""
    overrides = {}
    if settings.monitoring.log_level:
        overrides["level"] = settings.monitoring.log_level
    if settings.monitoring.log_format:
        overrides["format_type"] = settings.monitoring.log_format

    configure_from_preset(ENVIRONMENT_PRESETS[settings.environment], **overrides)


def create_app(
    settings: Optional[Settings] = None,
    storage: Optional[StorageBackend] = None,
) -> FastAPI:
    """
    Create and configure FastAPI application.

    Args:
        settings: Settings to use (loaded from config/env if None)
        storage: Storage backend to use (local disk per settings if None)

    Returns:
        FastAPI: Configured application instance
    """
    settings = settings or get_settings()
    _configure_logging(settings)

    logger.info(f"Creating {settings.app_name} application (environment: {settings.environment})")

    storage = storage or LocalFileStorage.from_settings(settings.storage)

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        logger.info("=== Application Startup ===")
        logger.info(
            f"Uploads dir: {settings.storage.uploads_dir}, "
            f"images dir: {settings.storage.images_dir}"
        )
        yield
        logger.info("=== Application Shutdown ===")

    app = FastAPI(
        title=settings.app_name,
        version=settings.app_version,
        description="File upload, listing, retrieval and deletion service",
        docs_url="/docs",
        redoc_url="/redoc",
        openapi_url="/openapi.json",
        lifespan=lifespan,
    )
    app.state.settings = settings
    app.state.storage = storage

    # ==========================================================================
    # Middleware Configuration
    # ==========================================================================

    middleware_class, middleware_kwargs = create_error_handler_middleware(
        development=settings.environment == "development"
    )
    app.add_middleware(middleware_class, **middleware_kwargs)

    # Added last so it is outermost and error responses carry CORS headers
    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.security.allowed_origins,
        allow_credentials=settings.security.cors_allow_credentials,
        allow_methods=settings.security.cors_allow_methods,
        allow_headers=settings.security.cors_allow_headers,
    )

    # ==========================================================================
    # Routes
    # ==========================================================================

    app.include_router(api_router)

    # StaticFiles refuses to serve from a directory that doesn't exist
    settings.storage.images_dir.mkdir(parents=True, exist_ok=True)
    app.mount(
        settings.storage.image_url_prefix,
        StaticFiles(directory=settings.storage.images_dir),
        name="images-static",
    )

    @app.get("/")
    async def root():
        """Liveness message."""
        return JSONResponse({"message": "File Services API is running"})

    @app.get("/health")
    async def health_check():
        """Basic status and uptime."""
        return JSONResponse({
            "status": "ok",
            "timestamp": time.time(),
            "uptime_seconds": time.time() - START_TIME,
            "version": settings.app_version
        })

    if settings.monitoring.metrics_enabled:
        @app.get("/metrics", response_class=PlainTextResponse)
        async def metrics():
            """Counters in Prometheus text format."""
            return PlainTextResponse(
                get_registry().export_prometheus(),
                media_type="text/plain; version=0.0.4",
            )

    return app
