# tests/test_config.py
"""Tests for config loading and env overrides."""

import pytest

from content_engine.config import load_config, load_config_sync

ENV_VARS = (
    "CONTENT_ENV", "STORAGE_BACKEND", "CONTENT_PATH", "SNAPSHOT_PATH",
    "R2_ACCOUNT_ID", "R2_API_TOKEN", "R2_BUCKET_NAME", "R2_BASE_URL",
    "API_HOST", "API_PORT", "CONTENT_CONFIG",
)


@pytest.fixture(autouse=True)
def clean_env(monkeypatch):
    for name in ENV_VARS:
        monkeypatch.delenv(name, raising=False)


@pytest.mark.asyncio
async def test_defaults_when_file_missing(tmp_path):
    config = await load_config(config_path=str(tmp_path / "missing.yaml"))

    assert config.storage.environment == "development"
    assert config.storage.backend is None
    assert config.content.index_file == "_content-index.json"
    assert config.scanning.excerpt_length == 160
    assert config.is_production is False


@pytest.mark.asyncio
async def test_yaml_file_is_loaded(tmp_path):
    path = tmp_path / "settings.yaml"
    path.write_text(
        "storage:\n"
        "  local_path: /srv/content\n"
        "  object_store:\n"
        "    bucket_name: photos\n"
        "scanning:\n"
        "  max_concurrency: 2\n"
    )

    config = await load_config(config_path=str(path))

    assert config.storage.local_path == "/srv/content"
    assert config.storage.object_store.bucket_name == "photos"
    assert config.scanning.max_concurrency == 2


@pytest.mark.asyncio
async def test_env_overrides_apply(monkeypatch, tmp_path):
    monkeypatch.setenv("CONTENT_ENV", "production")
    monkeypatch.setenv("STORAGE_BACKEND", "object_store")
    monkeypatch.setenv("CONTENT_PATH", str(tmp_path / "content"))
    monkeypatch.setenv("R2_ACCOUNT_ID", "acct")
    monkeypatch.setenv("R2_API_TOKEN", "token")
    monkeypatch.setenv("R2_BUCKET_NAME", "bucket")
    monkeypatch.setenv("API_HOST", "0.0.0.0")
    monkeypatch.setenv("API_PORT", "9000")

    config = await load_config(config_path=str(tmp_path / "missing.yaml"))

    assert config.is_production
    assert config.storage.backend == "object_store"
    assert config.storage.local_path == str(tmp_path / "content")
    assert config.storage.object_store.is_configured
    assert config.api.host == "0.0.0.0"
    assert config.api.port == 9000


@pytest.mark.asyncio
async def test_empty_env_values_are_ignored(monkeypatch, tmp_path):
    monkeypatch.setenv("CONTENT_PATH", "   ")

    config = await load_config(config_path=str(tmp_path / "missing.yaml"))

    assert config.storage.local_path == "./content"


@pytest.mark.asyncio
async def test_config_path_from_env(monkeypatch, tmp_path):
    path = tmp_path / "alt.yaml"
    path.write_text("api:\n  port: 7777\n")
    monkeypatch.setenv("CONTENT_CONFIG", str(path))

    config = await load_config()

    assert config.api.port == 7777


@pytest.mark.asyncio
@pytest.mark.parametrize(
    "name,value",
    [("API_PORT", "not-an-int"), ("CONTENT_ENV", "staging"), ("STORAGE_BACKEND", "s3")],
)
async def test_invalid_env_values_raise(monkeypatch, tmp_path, name, value):
    monkeypatch.setenv(name, value)

    with pytest.raises(ValueError):
        await load_config(config_path=str(tmp_path / "missing.yaml"))


def test_sync_loader_matches_async_loader(monkeypatch, tmp_path):
    path = tmp_path / "settings.yaml"
    path.write_text("storage:\n  local_path: /srv/site\napi:\n  port: 8123\n")
    monkeypatch.setenv("CONTENT_CONFIG", str(path))
    monkeypatch.setenv("STORAGE_BACKEND", "local")

    config = load_config_sync()

    assert config.storage.local_path == "/srv/site"
    assert config.storage.backend == "local"
    assert config.api.port == 8123
