"""FastAPI application factory for the HTTP transport.

This module creates the FastAPI application exposing the MCP tools over
JSON-RPC, plus health endpoints. The dispatcher (and with it the store
connection and schema registry) lives on ``app.state`` for the lifetime of
the application.
"""

from contextlib import asynccontextmanager
from typing import AsyncGenerator

from fastapi import FastAPI
from fastapi.responses import JSONResponse

from mongomcp import __version__
from mongomcp.application.dispatcher import OperationDispatcher
from mongomcp.core.config import Settings, get_settings
from mongomcp.core.logging import get_logger

logger = get_logger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
    """Application lifespan manager.

    The store connection is opened lazily by the first tool call and closed
    here on shutdown.
    """
    settings: Settings = app.state.settings
    logger.info(
        "Starting MCP HTTP server",
        server_name=settings.server.name,
        version=settings.server.version,
    )

    yield

    logger.info("Shutting down MCP HTTP server")
    await app.state.dispatcher.aclose()


def create_app(
    settings: Settings | None = None,
    dispatcher: OperationDispatcher | None = None,
) -> FastAPI:
    """Create and configure the FastAPI application.

    Args:
        settings: Optional settings. Loaded from the environment if omitted.
        dispatcher: Optional dispatcher. Built from settings if omitted.

    Returns:
        FastAPI: Configured FastAPI application instance.
    """
    settings = settings or get_settings()

    app = FastAPI(
        title=settings.server.name,
        version=settings.server.version,
        description="MongoDB tools over the Model Context Protocol",
        docs_url="/docs" if settings.is_development else None,
        redoc_url=None,
        lifespan=lifespan,
    )

    app.state.settings = settings
    app.state.dispatcher = dispatcher or OperationDispatcher.from_settings(settings)

    register_health_check(app)
    register_routes(app)

    return app


def register_health_check(app: FastAPI) -> None:
    """Register health check endpoints.

    Args:
        app: FastAPI application instance.
    """

    @app.get("/health", tags=["health"])
    async def health_check():
        """Basic health check. Does not touch the database."""
        return {
            "status": "healthy",
            "service": app.state.settings.server.name,
            "version": __version__,
        }

    @app.get("/ready", tags=["health"])
    async def readiness_check():
        """Readiness check, including MongoDB connectivity."""
        connector = app.state.dispatcher.connector
        if await connector.check_connection():
            return {
                "status": "ready",
                "service": app.state.settings.server.name,
                "database": "connected",
            }
        return JSONResponse(
            status_code=503,
            content={
                "status": "not_ready",
                "service": app.state.settings.server.name,
                "database": "disconnected",
            },
        )


def register_routes(app: FastAPI) -> None:
    """Register API routes.

    Args:
        app: FastAPI application instance.
    """
    from mongomcp.infrastructure.api.routes import mcp_router

    app.include_router(mcp_router, tags=["mcp"])
