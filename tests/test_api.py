# tests/test_api.py
"""Tests for the REST API."""

import pytest
import uvicorn
from unittest.mock import AsyncMock, MagicMock

from httpx import AsyncClient, ASGITransport

from content_engine.api.main import create_app
from content_engine.api.dependencies import get_config, get_index_manager, get_storage
from content_engine.config import Config, StorageConfig
from content_engine.exceptions import ReadOnlyStorageError, StorageError
from content_engine.index.content_index import ContentIndexManager


# =============================================================================
# Fixtures
# =============================================================================


@pytest.fixture
def manager(storage, config, stub_extractor_factory):
    """Index manager over the sample site on local storage."""
    return ContentIndexManager(storage, config, stub_extractor_factory())


async def _client_for(config, storage, manager):
    app = create_app(config)

    async def override_get_config():
        return config

    async def override_get_storage():
        return storage

    async def override_get_index_manager():
        return manager

    app.dependency_overrides[get_config] = override_get_config
    app.dependency_overrides[get_storage] = override_get_storage
    app.dependency_overrides[get_index_manager] = override_get_index_manager
    return app


@pytest.fixture
async def client(config, storage, manager, sample_site):
    """Create test client backed by the sample site."""
    app = await _client_for(config, storage, manager)

    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as client:
        yield client

    app.dependency_overrides.clear()


@pytest.fixture
async def failing_client(config, storage):
    """Client whose index manager raises whatever the test configures."""
    mock_manager = MagicMock()
    mock_manager.rebuild = AsyncMock()
    mock_manager.invalidate = AsyncMock()
    mock_manager.get = AsyncMock()
    app = await _client_for(config, storage, mock_manager)

    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as client:
        yield client, mock_manager

    app.dependency_overrides.clear()


# =============================================================================
# Health
# =============================================================================


@pytest.mark.asyncio
async def test_health_check(client):
    response = await client.get("/health")
    assert response.status_code == 200
    data = response.json()
    assert data["status"] == "healthy"
    assert data["environment"] == "development"


# =============================================================================
# Content Index
# =============================================================================


@pytest.mark.asyncio
async def test_get_content_index_builds_on_first_access(client, manager):
    """Test the index is rebuilt when missing and cached afterwards."""
    response = await client.get("/api/content-index")
    assert response.status_code == 200
    data = response.json()
    assert data["version"] == 1
    assert data["stats"]["totalGalleries"] == 5
    assert data["stats"]["totalPhotos"] == 6
    assert [g["slug"] for g in data["galleries"]][:3] == ["japan", "japan/osaka", "japan/tokyo"]

    cached = await client.get("/api/content-index")
    assert cached.json()["updatedAt"] == data["updatedAt"]
    assert await manager.has_valid_index()


@pytest.mark.asyncio
async def test_get_content_index_forced_rebuild(client):
    first = (await client.get("/api/content-index")).json()
    forced = await client.get("/api/content-index", params={"rebuild": "true"})
    assert forced.status_code == 200
    assert forced.json()["updatedAt"] >= first["updatedAt"]


@pytest.mark.asyncio
async def test_rebuild_action(client):
    response = await client.post("/api/content-index", json={"action": "rebuild-index"})
    assert response.status_code == 200
    data = response.json()
    assert data["success"] is True
    assert data["action"] == "rebuild-index"
    assert data["stats"]["totalPosts"] == 2
    assert "5 galleries" in data["message"]


@pytest.mark.asyncio
async def test_invalidate_action(client, manager):
    await manager.rebuild()

    response = await client.post("/api/content-index", json={"action": "invalidate"})
    assert response.status_code == 200
    assert response.json()["action"] == "invalidate"
    assert response.json()["stats"] is None
    assert await manager.read() is None


@pytest.mark.asyncio
async def test_unknown_action_is_rejected(client):
    response = await client.post("/api/content-index", json={"action": "explode"})
    assert response.status_code == 400
    assert "Unknown action" in response.json()["detail"]


@pytest.mark.asyncio
async def test_missing_action_is_invalid(client):
    response = await client.post("/api/content-index", json={})
    assert response.status_code == 422


@pytest.mark.asyncio
async def test_read_only_storage_maps_to_403(failing_client):
    client, mock_manager = failing_client
    mock_manager.invalidate.side_effect = ReadOnlyStorageError("delete files")

    response = await client.post("/api/content-index", json={"action": "invalidate"})
    assert response.status_code == 403
    assert "read-only" in response.json()["error"]


@pytest.mark.asyncio
async def test_storage_failure_maps_to_502(failing_client):
    client, mock_manager = failing_client
    mock_manager.get.side_effect = StorageError("bucket unreachable")

    response = await client.get("/api/content-index")
    assert response.status_code == 502
    assert response.json()["error"] == "Storage backend error"


# =============================================================================
# Navigation and Tags
# =============================================================================


@pytest.mark.asyncio
async def test_navigation(client):
    response = await client.get("/api/navigation")
    assert response.status_code == 200
    data = response.json()
    assert [item["slug"] for item in data] == ["japan", "street-photography"]
    assert [child["title"] for child in data[0]["children"]] == ["Osaka", "Tokyo"]
    assert data[0]["isVirtual"] is False


@pytest.mark.asyncio
async def test_tags(client):
    response = await client.get("/api/tags")
    assert response.status_code == 200
    data = response.json()
    by_name = {tag["name"]: tag for tag in data}
    assert by_name["urban"]["galleryCount"] == 1
    assert by_name["japan"]["postCount"] == 1
    assert by_name["travel"]["label"] == "Travel"


# =============================================================================
# Images
# =============================================================================


@pytest.mark.asyncio
@pytest.mark.parametrize("prefix", ["images", "local-images", "demo-content"])
async def test_serve_image(client, prefix):
    response = await client.get(f"/api/{prefix}/galleries/japan/tokyo/img1.jpg")
    assert response.status_code == 200
    assert response.content == b"tokyo-1"
    assert response.headers["content-type"] == "image/jpeg"
    assert "immutable" in response.headers["cache-control"]


@pytest.mark.asyncio
async def test_serve_image_accepts_content_prefix(client):
    response = await client.get("/api/local-images/content/galleries/street-photography/a.png")
    assert response.status_code == 200
    assert response.headers["content-type"] == "image/png"


@pytest.mark.asyncio
async def test_non_image_is_forbidden(client):
    response = await client.get("/api/images/galleries/japan/gallery.yaml")
    assert response.status_code == 403


@pytest.mark.asyncio
async def test_missing_image_is_not_found(client):
    response = await client.get("/api/images/galleries/japan/tokyo/missing.jpg")
    assert response.status_code == 404


# =============================================================================
# App wiring without overrides
# =============================================================================


def _site_config(root) -> Config:
    return Config(storage=StorageConfig(local_path=str(root)))


@pytest.mark.asyncio
async def test_create_app_uses_the_given_config(tree_writer, content_root):
    """Test storage and index are built from the config passed to create_app."""
    tree_writer({"galleries/tokyo/a.jpg": b"a"})
    app = create_app(_site_config(content_root))

    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as client:
        response = await client.get("/api/content-index")

    assert response.status_code == 200
    assert response.json()["stats"]["totalGalleries"] == 1
    assert app.state.storage.base_path == content_root.resolve()
    assert (content_root / "_content-index.json").exists()


@pytest.mark.asyncio
async def test_each_app_keeps_its_own_storage(tmp_path):
    first_root = tmp_path / "first"
    second_root = tmp_path / "second"
    (first_root / "galleries" / "a").mkdir(parents=True)
    (first_root / "galleries" / "a" / "x.jpg").write_bytes(b"x")
    (second_root / "galleries").mkdir(parents=True)

    totals = []
    for root in (first_root, second_root):
        app = create_app(_site_config(root))
        transport = ASGITransport(app=app)
        async with AsyncClient(transport=transport, base_url="http://test") as client:
            response = await client.get("/api/content-index")
        totals.append(response.json()["stats"]["totalGalleries"])

    assert totals == [1, 0]


@pytest.mark.asyncio
async def test_app_factory_loads_inside_running_event_loop(
    monkeypatch, tmp_path, tree_writer, content_root
):
    """Test uvicorn can call the factory from its own event loop."""
    tree_writer({"galleries/tokyo/a.jpg": b"a"})
    settings = tmp_path / "settings.yaml"
    settings.write_text(f"storage:\n  local_path: {content_root}\n")
    for name in ("CONTENT_ENV", "STORAGE_BACKEND", "CONTENT_PATH", "API_PORT"):
        monkeypatch.delenv(name, raising=False)
    monkeypatch.setenv("CONTENT_CONFIG", str(settings))

    server_config = uvicorn.Config(
        "content_engine.api.main:create_app", factory=True, log_config=None
    )
    server_config.load()

    assert server_config.loaded
    transport = ASGITransport(app=server_config.loaded_app)
    async with AsyncClient(transport=transport, base_url="http://test") as client:
        response = await client.get("/api/content-index")
    assert response.json()["stats"]["totalGalleries"] == 1
