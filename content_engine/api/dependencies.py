# content_engine/api/dependencies.py
"""
FastAPI dependency injection.

The Config handed to create_app() lives on ``app.state``; the storage
adapter and index manager are built from it lazily, once per app.
"""

from typing import Annotated

import anyio
from fastapi import Depends, FastAPI, Request

from ..config import Config
from ..index.content_index import ContentIndexManager
from ..metadata.exif import PillowExifExtractor
from ..storage import create_storage_adapter
from ..storage.base import StorageAdapter


def init_app_state(app: FastAPI, config: Config) -> None:
    """Attach the config and empty singleton slots to the app."""
    app.state.config = config
    app.state.storage = None
    app.state.index_manager = None
    app.state.storage_lock = None
    app.state.index_manager_lock = None


def _get_lock(app: FastAPI, name: str) -> anyio.Lock:
    """Get or create a per-app lock (lazy initialization)."""
    lock = getattr(app.state, name)
    if lock is None:
        lock = anyio.Lock()
        setattr(app.state, name, lock)
    return lock


# =============================================================================
# Configuration
# =============================================================================


async def get_config(request: Request) -> Config:
    """The configuration the app was created with."""
    return request.app.state.config


ConfigDep = Annotated[Config, Depends(get_config)]


# =============================================================================
# Storage
# =============================================================================


async def get_storage(request: Request, config: ConfigDep) -> StorageAdapter:
    """Get or create the app's storage adapter."""
    state = request.app.state

    if state.storage is None:
        async with _get_lock(request.app, "storage_lock"):
            if state.storage is None:
                state.storage = await create_storage_adapter(config.storage)

    return state.storage


StorageDep = Annotated[StorageAdapter, Depends(get_storage)]


# =============================================================================
# Content Index
# =============================================================================


async def get_index_manager(
    request: Request, config: ConfigDep, storage: StorageDep
) -> ContentIndexManager:
    """Get or create the app's content index manager."""
    state = request.app.state

    if state.index_manager is None:
        async with _get_lock(request.app, "index_manager_lock"):
            if state.index_manager is None:
                state.index_manager = ContentIndexManager(
                    storage, config, extractor=PillowExifExtractor()
                )

    return state.index_manager


IndexManagerDep = Annotated[ContentIndexManager, Depends(get_index_manager)]


async def cleanup_dependencies(app: FastAPI) -> None:
    """Release the app's singletons on shutdown."""
    storage = app.state.storage
    app.state.index_manager = None
    app.state.index_manager_lock = None
    app.state.storage = None
    app.state.storage_lock = None

    if storage is not None:
        await storage.close()
