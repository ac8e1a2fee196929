"""
FastAPI Application Entry Point.

Exposes the MCP dispatcher over WebSocket alongside health endpoints.
"""

import logging
from contextlib import asynccontextmanager
from typing import Optional

from fastapi import FastAPI

from upgrade_lens import __version__
from upgrade_lens.infrastructure.config.settings import Settings
from upgrade_lens.presentation.websocket import websocket_router

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Manage application lifecycle."""
    settings: Settings = app.state.settings
    logger.info("Starting Upgrade Lens on %s:%s", settings.host, settings.port)
    logger.info("Debug mode: %s", settings.debug)

    yield

    logger.info("Shutting down Upgrade Lens")


def create_app(settings: Optional[Settings] = None) -> FastAPI:
    """Create and configure the FastAPI application."""
    settings = settings or Settings()

    app = FastAPI(
        title="Upgrade Lens",
        description="MCP server for framework upgrade documentation and code scanning",
        version=__version__,
        lifespan=lifespan,
        debug=settings.debug,
    )
    app.state.settings = settings

    app.include_router(websocket_router)

    @app.get("/health", tags=["health"])
    async def health_check():
        """Health check endpoint."""
        return {"status": "healthy"}

    @app.get("/", tags=["root"])
    async def root():
        """Root endpoint with server information."""
        return {
            "name": "Upgrade Lens",
            "version": __version__,
            "mcp": "/mcp",
            "health": "/health",
        }

    return app
