# content_engine/storage/local.py
"""
Filesystem storage backend.

Used in development and for self-hosted deployments. All I/O goes through
anyio.Path so scans never block the event loop.
"""

import logging
import os
import shutil
import uuid
from datetime import datetime, timezone
from pathlib import Path
from typing import List, Optional, Union

import anyio

from ..exceptions import StorageError
from ..models.storage import FileInfo
from .base import StorageAdapter, join_key, normalize_key, quote_key

logger = logging.getLogger(__name__)

# Keys coming from the presentation layer are sometimes rooted at "content/"
_CONTENT_PREFIX = "content/"

_MISSING_ERRORS = (FileNotFoundError, IsADirectoryError, NotADirectoryError)


class LocalStorageAdapter(StorageAdapter):
    """Store content in a local directory tree."""

    def __init__(self, base_path: Union[str, Path] = "./content"):
        self.base_path = Path(base_path).resolve()

    def _clean_key(self, key: str) -> str:
        key = normalize_key(key)
        if key == "content" or key.startswith(_CONTENT_PREFIX):
            key = key[len(_CONTENT_PREFIX):]
        return key

    def _resolve(self, key: str) -> anyio.Path:
        """Map a key to a path under the root, rejecting traversal."""
        full_path = Path(os.path.normpath(self.base_path / self._clean_key(key)))
        if full_path != self.base_path and self.base_path not in full_path.parents:
            raise StorageError(f"Key escapes storage root: {key}")
        return anyio.Path(full_path)

    async def _file_info(self, path: anyio.Path, key: str) -> FileInfo:
        stat = await path.stat()
        is_directory = await path.is_dir()
        return FileInfo(
            name=path.name,
            path=key,
            size=0 if is_directory else stat.st_size,
            last_modified=datetime.fromtimestamp(stat.st_mtime, tz=timezone.utc),
            is_directory=is_directory,
        )

    async def list(self, prefix: str = "") -> List[FileInfo]:
        directory = self._resolve(prefix)
        if not await directory.is_dir():
            return []

        base = self._clean_key(prefix)
        entries = []
        try:
            async for item in directory.iterdir():
                if item.name.startswith("."):
                    continue
                entries.append(await self._file_info(item, join_key(base, item.name)))
        except OSError as e:
            raise StorageError(f"Failed to list {prefix!r}: {e}") from e

        entries.sort(key=lambda info: info.name)
        return entries

    async def list_recursive(self, prefix: str = "") -> List[FileInfo]:
        files = []
        for entry in await self.list(prefix):
            if entry.is_directory:
                files.extend(await self.list_recursive(entry.path))
            else:
                files.append(entry)
        return files

    async def get(self, key: str) -> Optional[bytes]:
        path = self._resolve(key)
        try:
            return await path.read_bytes()
        except _MISSING_ERRORS:
            return None
        except OSError as e:
            raise StorageError(f"Failed to read {key!r}: {e}") from e

    async def put(
        self,
        key: str,
        data: Union[bytes, str],
        content_type: Optional[str] = None,
    ) -> None:
        path = self._resolve(key)
        # Write atomically (write to temp, then rename)
        temp_path = path.with_name(f".{path.name}.{uuid.uuid4().hex}.tmp")
        try:
            await path.parent.mkdir(parents=True, exist_ok=True)
            await temp_path.write_bytes(self.encode(data))
            await temp_path.replace(path)
        except OSError as e:
            await temp_path.unlink(missing_ok=True)
            raise StorageError(f"Failed to write {key!r}: {e}") from e

    async def delete(self, key: str) -> None:
        path = self._resolve(key)
        try:
            await path.unlink(missing_ok=True)
        except IsADirectoryError:
            await self.delete_directory(key)
        except OSError as e:
            raise StorageError(f"Failed to delete {key!r}: {e}") from e

    async def delete_directory(self, prefix: str) -> int:
        path = self._resolve(prefix)
        if not await path.is_dir():
            return 0
        count = len(await self.list_recursive(prefix))
        try:
            await anyio.to_thread.run_sync(shutil.rmtree, str(path))
        except OSError as e:
            raise StorageError(f"Failed to delete directory {prefix!r}: {e}") from e
        return count

    async def exists(self, key: str) -> bool:
        return await self._resolve(key).exists()

    async def move(self, source: str, destination: str) -> None:
        """Native rename."""
        source_path = self._resolve(source)
        destination_path = self._resolve(destination)
        if not await source_path.exists():
            raise StorageError(f"Cannot move missing object: {source}")
        try:
            await destination_path.parent.mkdir(parents=True, exist_ok=True)
            await source_path.replace(destination_path)
        except OSError as e:
            raise StorageError(f"Failed to move {source!r}: {e}") from e

    def get_signed_url(self, key: str, expires_in: int = 3600) -> str:
        return f"/api/local-images/{quote_key(self._clean_key(key))}"
