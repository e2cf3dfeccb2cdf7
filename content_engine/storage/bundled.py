# content_engine/storage/bundled.py
"""
Read-only storage backed by an in-memory content snapshot.

The snapshot is a JSON document listing every file with its contents;
images are stored base64-encoded. Used for demos and tests where no
writable backend exists. Every mutating call raises ReadOnlyStorageError.
"""

import base64
import json
from datetime import datetime, timezone
from pathlib import Path
from typing import Any, Dict, List, Optional, Union

import anyio
from pydantic import Field

from ..exceptions import ReadOnlyStorageError
from ..models.base import CamelModel
from ..models.storage import FileInfo
from ..utils.files import IMAGE_EXTENSIONS, get_extension
from .base import StorageAdapter, key_name, normalize_key, normalize_prefix, quote_key
from .local import LocalStorageAdapter

SNAPSHOT_VERSION = "1"

# SVG is text and is stored verbatim
BINARY_EXTENSIONS = IMAGE_EXTENSIONS - {"svg"}


class SnapshotFile(CamelModel):
    path: str
    content: str = ""
    size: int = 0
    last_modified: datetime
    is_directory: bool = False


class Snapshot(CamelModel):
    version: str = SNAPSHOT_VERSION
    generated_at: datetime
    files: List[SnapshotFile] = Field(default_factory=list)


def _is_binary(key: str) -> bool:
    return get_extension(key) in BINARY_EXTENSIONS


class BundledStorageAdapter(StorageAdapter):
    """Serve content from a snapshot; refuse all writes."""

    read_only = True

    def __init__(self, snapshot: Union[Snapshot, Dict[str, Any]]):
        if not isinstance(snapshot, Snapshot):
            snapshot = Snapshot.model_validate(snapshot)
        self.snapshot = snapshot
        self._files: Dict[str, SnapshotFile] = {
            normalize_key(f.path): f for f in snapshot.files if not f.is_directory
        }

    @classmethod
    async def from_file(cls, path: Union[str, Path]) -> "BundledStorageAdapter":
        text = await anyio.Path(path).read_text()
        data = await anyio.to_thread.run_sync(json.loads, text)
        return cls(data)

    async def list(self, prefix: str = "") -> List[FileInfo]:
        normalized = normalize_prefix(prefix)
        directories: Dict[str, FileInfo] = {}
        files: List[FileInfo] = []

        for key, entry in self._files.items():
            if not key.startswith(normalized):
                continue
            parts = key[len(normalized):].split("/")
            if any(part.startswith(".") for part in parts):
                continue
            if len(parts) == 1:
                files.append(
                    FileInfo(
                        name=parts[0],
                        path=key,
                        size=entry.size,
                        last_modified=entry.last_modified,
                    )
                )
            elif parts[0] not in directories:
                directories[parts[0]] = FileInfo(
                    name=parts[0],
                    path=normalized + parts[0],
                    last_modified=self.snapshot.generated_at,
                    is_directory=True,
                )

        entries = list(directories.values()) + files
        entries.sort(key=lambda info: info.name)
        return entries

    async def list_recursive(self, prefix: str = "") -> List[FileInfo]:
        normalized = normalize_prefix(prefix)
        return [
            FileInfo(
                name=key_name(key),
                path=key,
                size=entry.size,
                last_modified=entry.last_modified,
            )
            for key, entry in sorted(self._files.items())
            if key.startswith(normalized)
        ]

    async def get(self, key: str) -> Optional[bytes]:
        entry = self._files.get(normalize_key(key))
        if entry is None:
            return None
        if _is_binary(entry.path):
            return base64.b64decode(entry.content)
        return entry.content.encode("utf-8")

    async def exists(self, key: str) -> bool:
        normalized = normalize_key(key)
        if normalized in self._files:
            return True
        prefix = normalize_prefix(normalized)
        return any(path.startswith(prefix) for path in self._files)

    def get_signed_url(self, key: str, expires_in: int = 3600) -> str:
        return f"/api/demo-content/{quote_key(key)}"

    async def put(
        self,
        key: str,
        data: Union[bytes, str],
        content_type: Optional[str] = None,
    ) -> None:
        raise ReadOnlyStorageError("upload files")

    async def delete(self, key: str) -> None:
        raise ReadOnlyStorageError("delete files")

    async def delete_directory(self, prefix: str) -> int:
        raise ReadOnlyStorageError("delete directories")

    async def copy(self, source: str, destination: str) -> None:
        raise ReadOnlyStorageError("copy files")

    async def move(self, source: str, destination: str) -> None:
        raise ReadOnlyStorageError("move files")


async def build_snapshot(local_root: Union[str, Path]) -> Snapshot:
    """Capture every file under a local content folder as a snapshot."""
    source = LocalStorageAdapter(local_root)
    files = []
    for info in await source.list_recursive(""):
        data = await source.get(info.path)
        if data is None:
            continue
        if _is_binary(info.path):
            content = base64.b64encode(data).decode("ascii")
        else:
            content = data.decode("utf-8", errors="replace")
        files.append(
            SnapshotFile(
                path=info.path,
                content=content,
                size=info.size,
                last_modified=info.last_modified,
            )
        )
    return Snapshot(generated_at=datetime.now(timezone.utc), files=files)
