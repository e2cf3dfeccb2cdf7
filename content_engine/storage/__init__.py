# content_engine/storage/__init__.py
"""
Storage backends and the factory that selects one.

The factory takes an explicit StorageConfig; the resulting adapter is
passed to scanners and the content index rather than looked up globally.
"""

import logging
from typing import Literal

from ..config import StorageConfig
from ..exceptions import StorageConfigError
from .base import StorageAdapter
from .bundled import BundledStorageAdapter, Snapshot, build_snapshot
from .local import LocalStorageAdapter
from .object_store import ObjectStoreAdapter

logger = logging.getLogger(__name__)

StorageMode = Literal["local", "object_store", "bundled"]


def get_storage_mode(config: StorageConfig) -> StorageMode:
    """
    Decide which backend the factory will build.

    Production always uses the object store. Development uses the local
    filesystem unless a backend is chosen explicitly.
    """
    if config.environment == "production":
        if config.backend not in (None, "object_store"):
            raise StorageConfigError(
                f"Backend {config.backend!r} is not allowed in production"
            )
        if not config.object_store.is_configured:
            raise StorageConfigError(
                "Production requires an object store: set R2_ACCOUNT_ID, "
                "R2_API_TOKEN and R2_BUCKET_NAME"
            )
        return "object_store"

    return config.backend or "local"


async def create_storage_adapter(config: StorageConfig) -> StorageAdapter:
    """Build the storage adapter described by ``config``."""
    mode = get_storage_mode(config)

    if mode == "object_store":
        if not config.object_store.is_configured:
            raise StorageConfigError(
                "STORAGE_BACKEND=object_store requires R2_ACCOUNT_ID, "
                "R2_API_TOKEN and R2_BUCKET_NAME"
            )
        return ObjectStoreAdapter(config.object_store)

    if mode == "bundled":
        if not config.snapshot_path:
            raise StorageConfigError("STORAGE_BACKEND=bundled requires SNAPSHOT_PATH")
        logger.info("Using read-only snapshot %s", config.snapshot_path)
        return await BundledStorageAdapter.from_file(config.snapshot_path)

    logger.info("Using local storage at %s", config.local_path)
    return LocalStorageAdapter(config.local_path)


__all__ = [
    "StorageAdapter",
    "StorageMode",
    "LocalStorageAdapter",
    "ObjectStoreAdapter",
    "BundledStorageAdapter",
    "Snapshot",
    "build_snapshot",
    "create_storage_adapter",
    "get_storage_mode",
]
