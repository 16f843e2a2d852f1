"""
FastAPI application entrypoint for the SharePoint list sync service.
"""

from __future__ import annotations

from fastapi import FastAPI

from graphsync.api.routes import router as api_router
from graphsync.core.config import get_settings
from graphsync.core.logging import configure_logging


def create_app() -> FastAPI:
    """Factory for the FastAPI application."""
    settings = get_settings()
    configure_logging(settings.log_level)

    app = FastAPI(
        title="Graph List Sync",
        version="0.1.0",
        description="Read and update SharePoint lists through Microsoft Graph.",
    )
    app.include_router(api_router, prefix="/api")
    return app


app = create_app()

__all__ = ["app", "create_app"]
