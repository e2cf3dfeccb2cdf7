# content_engine/storage/object_store.py
"""
Network object-store backend (Cloudflare R2 REST API).

Object stores have no real directories: a "directory" is any key prefix
with objects under it. Listing uses the "/" delimiter to recover one level
of structure and follows the pagination cursor until exhausted.
"""

import logging
from datetime import datetime, timezone
from typing import Any, Dict, List, Optional, Tuple, Union
from urllib.parse import quote

import anyio
import httpx

from ..config import ObjectStoreConfig
from ..exceptions import StorageConfigError, StorageError
from ..models.base import coerce_datetime
from ..models.storage import FileInfo
from .base import StorageAdapter, key_name, normalize_key, normalize_prefix, quote_key

logger = logging.getLogger(__name__)


class ObjectStoreAdapter(StorageAdapter):
    """Store content in an R2 bucket over its HTTP API."""

    def __init__(
        self,
        config: ObjectStoreConfig,
        client: Optional[httpx.AsyncClient] = None,
    ):
        if not config.is_configured:
            raise StorageConfigError(
                "Object store requires account_id, api_token and bucket_name"
            )
        self.config = config
        self._owns_client = client is None
        self.client = client or httpx.AsyncClient(
            base_url=config.base_url,
            headers={"Authorization": f"Bearer {config.api_token}"},
            timeout=config.timeout,
        )
        self._objects_path = (
            f"/accounts/{config.account_id}/r2/buckets/{config.bucket_name}/objects"
        )
        logger.info("Using object store bucket %s", config.bucket_name)

    def _object_path(self, key: str) -> str:
        return f"{self._objects_path}/{quote(normalize_key(key), safe='')}"

    async def _request(self, method: str, url: str, **kwargs: Any) -> httpx.Response:
        """Send a request; 404 is returned to the caller, other failures raise."""
        try:
            response = await self.client.request(method, url, **kwargs)
        except httpx.HTTPError as e:
            raise StorageError(f"{method} {url} failed: {e}") from e

        if response.status_code >= 400 and response.status_code != 404:
            raise StorageError(
                f"{method} {url} failed with HTTP {response.status_code}: "
                f"{response.text[:200]}"
            )
        return response

    async def _list_page(
        self,
        prefix: str,
        delimiter: Optional[str] = None,
        cursor: Optional[str] = None,
        per_page: Optional[int] = None,
    ) -> Tuple[List[Dict[str, Any]], List[str], Optional[str], bool]:
        params: Dict[str, Any] = {"per_page": per_page or self.config.page_size}
        if prefix:
            params["prefix"] = prefix
        if delimiter:
            params["delimiter"] = delimiter
        if cursor:
            params["cursor"] = cursor

        response = await self._request("GET", self._objects_path, params=params)
        if response.status_code == 404:
            raise StorageError(f"Bucket not found: {self.config.bucket_name}")

        body = response.json()
        info = body.get("result_info") or {}
        return (
            body.get("result") or [],
            info.get("delimited") or [],
            info.get("cursor"),
            bool(info.get("is_truncated")),
        )

    @staticmethod
    def _to_file_info(obj: Dict[str, Any]) -> FileInfo:
        key = obj["key"]
        return FileInfo(
            name=key_name(key),
            path=key,
            size=obj.get("size") or 0,
            last_modified=(
                coerce_datetime(obj.get("last_modified")) or datetime.now(timezone.utc)
            ),
        )

    async def list(self, prefix: str = "") -> List[FileInfo]:
        normalized = normalize_prefix(prefix)
        directories: Dict[str, FileInfo] = {}
        files: List[FileInfo] = []
        now = datetime.now(timezone.utc)
        cursor = None

        while True:
            objects, delimited, cursor, truncated = await self._list_page(
                normalized, delimiter="/", cursor=cursor
            )
            for dir_prefix in delimited:
                name = dir_prefix[len(normalized):].rstrip("/")
                if name and not name.startswith("."):
                    directories[name] = FileInfo(
                        name=name,
                        path=dir_prefix.rstrip("/"),
                        last_modified=now,
                        is_directory=True,
                    )
            for obj in objects:
                name = obj["key"][len(normalized):]
                if name and "/" not in name and not name.startswith("."):
                    files.append(self._to_file_info(obj))
            if not truncated or not cursor:
                break

        logger.debug(
            "LIST %r: %d dirs, %d files", normalized, len(directories), len(files)
        )
        entries = list(directories.values()) + files
        entries.sort(key=lambda info: info.name)
        return entries

    async def list_recursive(self, prefix: str = "") -> List[FileInfo]:
        normalized = normalize_prefix(prefix)
        files: List[FileInfo] = []
        cursor = None

        while True:
            objects, _, cursor, truncated = await self._list_page(
                normalized, cursor=cursor
            )
            files.extend(
                self._to_file_info(obj)
                for obj in objects
                if obj["key"] != normalized and not key_name(obj["key"]).startswith(".")
            )
            if not truncated or not cursor:
                break

        return files

    async def get(self, key: str) -> Optional[bytes]:
        response = await self._request("GET", self._object_path(key))
        if response.status_code == 404:
            return None
        return response.content

    async def put(
        self,
        key: str,
        data: Union[bytes, str],
        content_type: Optional[str] = None,
    ) -> None:
        response = await self._request(
            "PUT",
            self._object_path(key),
            content=self.encode(data),
            headers={"Content-Type": content_type or self.detect_content_type(key)},
        )
        if response.status_code == 404:
            raise StorageError(f"Bucket not found: {self.config.bucket_name}")
        logger.info("PUT %s", key)

    async def delete(self, key: str) -> None:
        await self._request("DELETE", self._object_path(key))
        logger.info("DELETE %s", key)

    async def delete_directory(self, prefix: str) -> int:
        files = await self.list_recursive(prefix)
        batch_size = max(1, self.config.delete_batch_size)

        for start in range(0, len(files), batch_size):
            batch = files[start:start + batch_size]
            async with anyio.create_task_group() as tg:
                for info in batch:
                    tg.start_soon(self.delete, info.path)

        logger.info("Deleted %d objects under %s", len(files), prefix)
        return len(files)

    async def exists(self, key: str) -> bool:
        """A direct object, or any object under ``key/`` (virtual directory)."""
        response = await self._request("HEAD", self._object_path(key))
        if response.status_code != 404:
            return True

        objects, _, _, _ = await self._list_page(normalize_prefix(key), per_page=1)
        return bool(objects)

    def get_signed_url(self, key: str, expires_in: int = 3600) -> str:
        return f"/api/images/{quote_key(key)}"

    async def close(self) -> None:
        if self._owns_client:
            await self.client.aclose()
