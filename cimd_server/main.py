"""
FastAPI application entrypoint for the CIMD authorization server.
"""

from __future__ import annotations

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from cimd_server import __version__
from cimd_server.api.routes import router as api_router
from cimd_server.core.config import get_settings
from cimd_server.core.logging import configure_logging


def create_app() -> FastAPI:
    """Factory for the FastAPI application."""
    settings = get_settings()
    configure_logging(settings.log_level)

    app = FastAPI(
        title="CIMD Authorization Server",
        version=__version__,
        description=(
            "OAuth authorization server accepting Client ID Metadata Document "
            "URLs as client identifiers."
        ),
    )
    # Permissive on purpose so browser-based test clients can call the server.
    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.allowed_origins,
        allow_methods=["GET", "POST", "OPTIONS"],
        allow_headers=["Content-Type", "Authorization"],
    )
    app.include_router(api_router)
    return app


app = create_app()

__all__ = ["app", "create_app"]
