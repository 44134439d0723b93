"""
Main entry point for the File Services API

Imports the FastAPI app from app.py for uvicorn to run.

@.architecture
Incoming: none --- {entry point for uvicorn server}
Processing: create_app() import, uvicorn.run() --- {2 jobs: config_loading, server_startup}
Outgoing: uvicorn server, Network (HTTP) --- {FastAPI application instance, HTTP server}
"""

import os
from app import create_app
from config.settings import get_settings

# Create app instance
app = create_app()


def run() -> None:
    """Run the server with uvicorn using the configured bind address."""
    import uvicorn

    settings = get_settings()

    reload = os.getenv("FILESERVICE_RELOAD", "false").lower() == "true"
    log_level = (settings.monitoring.log_level or "info").lower()

    uvicorn.run(
        "main:app",
        host=settings.security.bind_host,
        port=settings.security.bind_port,
        reload=reload,
        log_level=log_level
    )


if __name__ == "__main__":
    run()
