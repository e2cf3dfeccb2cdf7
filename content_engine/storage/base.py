# content_engine/storage/base.py
"""
Storage adapter contract.

Every backend exposes the same async read/write/list surface so scanners
and the content index never know where content lives. Keys are
"/"-separated paths relative to the storage root.
"""

from abc import ABC, abstractmethod
from typing import List, Optional, Union
from urllib.parse import quote

from ..exceptions import StorageError
from ..models.storage import FileInfo
from ..utils.files import detect_content_type


def normalize_key(key: str) -> str:
    """Strip surrounding slashes and collapse empty segments."""
    return "/".join(part for part in key.replace("\\", "/").split("/") if part)


def normalize_prefix(prefix: str) -> str:
    """Prefix form of a key: no leading slash, one trailing slash (or empty)."""
    key = normalize_key(prefix)
    return f"{key}/" if key else ""


def join_key(*parts: str) -> str:
    return normalize_key("/".join(part for part in parts if part))


def key_name(key: str) -> str:
    return normalize_key(key).rsplit("/", 1)[-1]


def quote_key(key: str) -> str:
    return quote(normalize_key(key), safe="/")


class StorageAdapter(ABC):
    """Abstract async storage backend."""

    #: Whether mutating calls are supported
    read_only: bool = False

    @abstractmethod
    async def list(self, prefix: str = "") -> List[FileInfo]:
        """Immediate children of ``prefix``; directories have size 0."""

    @abstractmethod
    async def list_recursive(self, prefix: str = "") -> List[FileInfo]:
        """Every file under ``prefix`` at any depth (no directories)."""

    @abstractmethod
    async def get(self, key: str) -> Optional[bytes]:
        """Full object contents, or None if absent."""

    async def get_text(self, key: str) -> Optional[str]:
        """Object contents decoded as UTF-8, or None if absent."""
        data = await self.get(key)
        if data is None:
            return None
        return data.decode("utf-8", errors="replace")

    @abstractmethod
    async def put(
        self,
        key: str,
        data: Union[bytes, str],
        content_type: Optional[str] = None,
    ) -> None:
        """Create or overwrite an object."""

    @abstractmethod
    async def delete(self, key: str) -> None:
        """Delete an object. Deleting an absent key is not an error."""

    @abstractmethod
    async def delete_directory(self, prefix: str) -> int:
        """Delete every object under ``prefix``; returns the count deleted."""

    @abstractmethod
    async def exists(self, key: str) -> bool:
        """True for objects and for directories (real or virtual)."""

    async def copy(self, source: str, destination: str) -> None:
        data = await self.get(source)
        if data is None:
            raise StorageError(f"Cannot copy missing object: {source}")
        await self.put(destination, data)

    async def move(self, source: str, destination: str) -> None:
        """Read, write, then delete the source."""
        await self.copy(source, destination)
        await self.delete(source)

    @abstractmethod
    def get_signed_url(self, key: str, expires_in: int = 3600) -> str:
        """URL through which the object can be fetched."""

    @staticmethod
    def detect_content_type(key: str) -> str:
        return detect_content_type(key)

    @staticmethod
    def encode(data: Union[bytes, str]) -> bytes:
        return data.encode("utf-8") if isinstance(data, str) else data

    async def close(self) -> None:
        """Release backend resources (no-op by default)."""
