# content_engine/config.py

import os
from pathlib import Path
from typing import Literal, Optional
import yaml
from pydantic import BaseModel, Field
import anyio

DEFAULT_CONFIG_PATH = "configs/settings.yaml"


class ContentConfig(BaseModel):
    """Where each content type lives inside the storage root."""
    galleries_root: str = "galleries"
    blog_root: str = "blog"
    pages_root: str = "pages"
    index_file: str = "_content-index.json"


class ObjectStoreConfig(BaseModel):
    """Configuration for the Cloudflare R2 REST backend."""
    account_id: Optional[str] = None
    api_token: Optional[str] = None
    bucket_name: Optional[str] = None
    base_url: str = "https://api.cloudflare.com/client/v4"
    page_size: int = 1000           # R2 caps list pages at 1000 keys
    delete_batch_size: int = 1000
    timeout: float = 30.0

    @property
    def is_configured(self) -> bool:
        return bool(self.account_id and self.api_token and self.bucket_name)


class StorageConfig(BaseModel):
    """Backend selection. Passed explicitly to the storage factory."""
    environment: Literal["development", "production"] = "development"
    backend: Optional[Literal["local", "object_store", "bundled"]] = None
    local_path: str = "./content"
    snapshot_path: Optional[str] = None
    object_store: ObjectStoreConfig = Field(default_factory=ObjectStoreConfig)


class ScanningConfig(BaseModel):
    """Tuning knobs for the scanners."""
    max_concurrency: int = 8
    parallel_descent: bool = True
    # Folders with more markdown-bearing subfolders than this are blogs, not pages
    # (unset: scanners.page.MAX_MARKDOWN_SUBFOLDERS)
    page_markdown_subfolder_limit: Optional[int] = None
    excerpt_length: int = 160
    words_per_minute: int = 200


class APIConfig(BaseModel):
    """Configuration for the HTTP API server."""
    host: str = "127.0.0.1"
    port: int = 8010
    cors_origins: list[str] = Field(default_factory=lambda: [
        "http://localhost:5173",
        "http://127.0.0.1:5173",
    ])
    debug: bool = False


class Config(BaseModel):
    content: ContentConfig = Field(default_factory=ContentConfig)
    storage: StorageConfig = Field(default_factory=StorageConfig)
    scanning: ScanningConfig = Field(default_factory=ScanningConfig)
    api: APIConfig = Field(default_factory=APIConfig)

    @property
    def is_production(self) -> bool:
        return self.storage.environment == "production"


def _get_env_value(name: str) -> Optional[str]:
    """Get environment variable value, treating empty as unset."""
    value = os.getenv(name)
    if value is None or not value.strip():
        return None
    return value.strip()


def _get_env_int(name: str) -> Optional[int]:
    value = _get_env_value(name)
    if value is None:
        return None
    try:
        return int(value)
    except ValueError as e:
        raise ValueError(f"{name} must be an integer") from e


def _apply_env_overrides(config: Config) -> Config:
    environment = _get_env_value("CONTENT_ENV")
    if environment is not None:
        if environment not in ("development", "production"):
            raise ValueError("CONTENT_ENV must be 'development' or 'production'")
        config.storage.environment = environment

    backend = _get_env_value("STORAGE_BACKEND")
    if backend is not None:
        if backend not in ("local", "object_store", "bundled"):
            raise ValueError(
                "STORAGE_BACKEND must be one of 'local', 'object_store', 'bundled'"
            )
        config.storage.backend = backend

    content_path = _get_env_value("CONTENT_PATH")
    if content_path is not None:
        config.storage.local_path = content_path

    snapshot_path = _get_env_value("SNAPSHOT_PATH")
    if snapshot_path is not None:
        config.storage.snapshot_path = snapshot_path

    object_store = config.storage.object_store
    account_id = _get_env_value("R2_ACCOUNT_ID")
    if account_id is not None:
        object_store.account_id = account_id

    api_token = _get_env_value("R2_API_TOKEN")
    if api_token is not None:
        object_store.api_token = api_token

    bucket_name = _get_env_value("R2_BUCKET_NAME")
    if bucket_name is not None:
        object_store.bucket_name = bucket_name

    base_url = _get_env_value("R2_BASE_URL")
    if base_url is not None:
        object_store.base_url = base_url

    api_host = _get_env_value("API_HOST")
    if api_host is not None:
        config.api.host = api_host

    api_port = _get_env_int("API_PORT")
    if api_port is not None:
        config.api.port = api_port

    return config


def _resolve_config_path(config_path: Optional[str]) -> str:
    return config_path or _get_env_value("CONTENT_CONFIG") or DEFAULT_CONFIG_PATH


def _build_config(data: Optional[dict]) -> Config:
    config = Config(**data) if data else Config()
    return _apply_env_overrides(config)


async def load_config(config_path: Optional[str] = None) -> Config:
    """Load configuration from YAML file (async)."""
    path = anyio.Path(_resolve_config_path(config_path))
    if await path.exists():
        text = await path.read_text()
        # Run YAML parsing in a thread to avoid blocking the event loop
        data = await anyio.to_thread.run_sync(yaml.safe_load, text)
        return _build_config(data)

    return _build_config(None)


def load_config_sync(config_path: Optional[str] = None) -> Config:
    """
    Load configuration without an event loop.

    For callers that may already be inside one, such as the app factory
    uvicorn invokes from its running loop.
    """
    path = Path(_resolve_config_path(config_path))
    if path.exists():
        return _build_config(yaml.safe_load(path.read_text()))

    return _build_config(None)
