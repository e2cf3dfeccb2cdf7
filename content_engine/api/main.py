# content_engine/api/main.py
"""FastAPI application entry point."""

import logging
import uuid
from contextlib import asynccontextmanager
from typing import AsyncIterator, Optional

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from .. import __version__
from ..config import Config, load_config_sync
from ..exceptions import ReadOnlyStorageError, StorageConfigError, StorageError
from .dependencies import cleanup_dependencies, init_app_state
from .routes import content, images

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncIterator[None]:
    """Application lifespan manager."""
    yield
    await cleanup_dependencies(app)


def create_app(config: Optional[Config] = None) -> FastAPI:
    """
    Create and configure the FastAPI application.

    Without an explicit config, settings are read synchronously so the
    factory is safe to call from inside a running event loop.
    """
    config = config or load_config_sync()

    app = FastAPI(
        title="Content Engine API",
        description="Galleries, posts and pages served from a content folder",
        version=__version__,
        lifespan=lifespan,
        debug=config.api.debug,
    )
    init_app_state(app, config)

    @app.exception_handler(ReadOnlyStorageError)
    async def read_only_handler(request: Request, exc: ReadOnlyStorageError):
        return JSONResponse(status_code=403, content={"error": str(exc)})

    @app.exception_handler(StorageConfigError)
    async def storage_config_handler(request: Request, exc: StorageConfigError):
        logger.error("Storage is not configured: %s", exc)
        return JSONResponse(status_code=503, content={"error": str(exc)})

    @app.exception_handler(StorageError)
    async def storage_error_handler(request: Request, exc: StorageError):
        logger.error("Storage failure on %s: %s", request.url.path, exc)
        return JSONResponse(status_code=502, content={"error": "Storage backend error"})

    # Global Exception Handler
    @app.exception_handler(Exception)
    async def global_exception_handler(request: Request, exc: Exception):
        error_id = str(uuid.uuid4())[:8]
        logger.exception("Unhandled exception [%s]: %s", error_id, exc)
        return JSONResponse(
            status_code=500,
            content={"error": "Internal Server Error", "error_id": error_id},
        )

    app.add_middleware(
        CORSMiddleware,
        allow_origins=config.api.cors_origins,
        allow_credentials=True,
        allow_methods=["GET", "POST", "OPTIONS"],
        allow_headers=["Content-Type", "Authorization"],
    )

    app.include_router(content.router, prefix="/api", tags=["content"])
    app.include_router(images.router, prefix="/api", tags=["images"])

    @app.get("/health", tags=["health"])
    async def health_check():
        """Health check endpoint."""
        return {
            "status": "healthy",
            "version": __version__,
            "environment": config.storage.environment,
        }

    return app
