"""FastAPI server for the NetSuite sync service.

Main entry point for the API server.
"""

from contextlib import asynccontextmanager
from typing import AsyncGenerator

from fastapi import FastAPI

from api.routes import connections, health
from core import __version__
from core.config import load_settings
from core.observability.logging import configure_logging, get_logger

logger = get_logger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
    """Application lifespan handler."""
    settings = load_settings()
    configure_logging(level=settings.log_level_value, json_format=settings.log_json)
    logger.info("NetSuite sync API starting up...")

    yield

    logger.info("NetSuite sync API shutting down...")


def create_app() -> FastAPI:
    """Create and configure the FastAPI application."""
    app = FastAPI(
        title="NetSuite Sync API",
        description="Connection metadata management and sync metrics for NetSuite invoice and payment syncs",
        version=__version__,
        lifespan=lifespan,
        docs_url="/docs",
        redoc_url="/redoc",
        openapi_url="/openapi.json",
    )

    app.include_router(health.router, tags=["Health"])
    app.include_router(connections.router, prefix="/connection", tags=["Connections"])

    return app


# Default app instance
app = create_app()


if __name__ == "__main__":
    import uvicorn
    uvicorn.run("api.server:app", host="0.0.0.0", port=8000, reload=True)
