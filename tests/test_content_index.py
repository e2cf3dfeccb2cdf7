# tests/test_content_index.py
"""Tests for the persisted content index."""

import json
from datetime import timedelta

import pytest

from content_engine.config import Config
from content_engine.exceptions import ReadOnlyStorageError
from content_engine.index.content_index import (
    INDEX_VERSION,
    ContentIndexManager,
    count_children,
)
from content_engine.models.gallery import Gallery
from content_engine.models.page import Page
from content_engine.models.photo import Photo
from content_engine.models.post import BlogPost
from content_engine.storage.bundled import BundledStorageAdapter, build_snapshot


@pytest.fixture
def manager(storage, stub_extractor_factory):
    return ContentIndexManager(storage, Config(), stub_extractor_factory())


def make_gallery(slug, photos=1, **kwargs):
    return Gallery(
        id=slug,
        slug=slug,
        title=slug.rsplit("/", 1)[-1].title(),
        path=f"galleries/{slug}",
        photos=[
            Photo(id=f"p{i}", filename=f"p{i}.jpg", path=f"galleries/{slug}/p{i}.jpg")
            for i in range(photos)
        ],
        **kwargs,
    )


def test_count_children():
    counts = count_children(["a", "a/b", "a/c", "a/b/d", "x/y"])

    assert counts == {"a": 2, "a/b": 1, "a/c": 0, "a/b/d": 0, "x/y": 0}


@pytest.mark.asyncio
async def test_rebuild_summarizes_sample_site(manager, sample_site):
    index = await manager.rebuild()

    assert index.version == INDEX_VERSION
    assert [g.slug for g in index.galleries] == [
        "japan", "japan/osaka", "japan/tokyo", "secret", "street-photography",
    ]
    assert index.stats.total_galleries == 5
    assert index.stats.total_photos == 6
    assert index.stats.total_posts == 2
    assert index.stats.total_pages == 2
    assert [(p.slug, p.title, p.order) for p in index.parent_metadata] == [
        ("japan", "Japan", 1),
    ]

    japan = index.galleries[0]
    assert japan.is_parent_gallery
    assert japan.has_children and japan.child_count == 2
    assert index.galleries[3].private is True
    assert [p.slug for p in index.posts] == ["first-trip", "quick-note"]


@pytest.mark.asyncio
async def test_rebuild_persists_camel_case_json(manager, sample_site, content_root):
    await manager.rebuild()

    data = json.loads((content_root / "_content-index.json").read_text())
    assert data["version"] == INDEX_VERSION
    assert "updatedAt" in data
    assert data["stats"]["totalGalleries"] == 5
    assert data["galleries"][0]["photoCount"] == 0
    assert data["parentMetadata"][0]["slug"] == "japan"


@pytest.mark.asyncio
async def test_rebuild_is_deterministic(manager, sample_site):
    first = await manager.rebuild()
    second = await manager.rebuild()

    exclude = {"updated_at"}
    assert first.model_dump(exclude=exclude) == second.model_dump(exclude=exclude)


@pytest.mark.asyncio
async def test_get_uses_cache_and_rebuilds_when_missing(manager, sample_site):
    assert await manager.read() is None
    assert await manager.has_valid_index() is False

    built = await manager.get()
    cached = await manager.get()

    assert cached.updated_at == built.updated_at
    assert await manager.has_valid_index()

    forced = await manager.get(force_rebuild=True)
    assert forced.updated_at >= built.updated_at


@pytest.mark.asyncio
async def test_invalidate_is_idempotent_and_triggers_rebuild(manager, sample_site):
    original = await manager.get()

    await manager.invalidate()
    await manager.invalidate()

    assert await manager.read() is None
    rebuilt = await manager.get()
    assert rebuilt.updated_at >= original.updated_at
    assert rebuilt.stats == original.stats


@pytest.mark.asyncio
async def test_stale_or_corrupt_index_is_ignored(manager, sample_site, content_root):
    index_file = content_root / "_content-index.json"

    index_file.write_text(json.dumps({"version": INDEX_VERSION - 1, "galleries": []}))
    assert await manager.read() is None

    index_file.write_text("{not json")
    assert await manager.read() is None

    index_file.write_text(json.dumps({"version": INDEX_VERSION, "galleries": "nope"}))
    assert await manager.read() is None

    index = await manager.get()
    assert index.stats.total_galleries == 5


@pytest.mark.asyncio
async def test_index_age(manager, sample_site):
    assert await manager.get_index_age() is None

    await manager.rebuild()
    age = await manager.get_index_age()

    assert timedelta(0) <= age < timedelta(minutes=1)


@pytest.mark.asyncio
async def test_navigation_excludes_private_galleries(manager, sample_site):
    nav = await manager.get_navigation()

    assert [item.slug for item in nav] == ["japan", "street-photography"]
    assert nav[0].order == 1
    assert [child.title for child in nav[0].children] == ["Osaka", "Tokyo"]


class TestIncrementalUpdates:
    @pytest.mark.asyncio
    async def test_update_existing_gallery_adjusts_photo_total(self, manager, sample_site):
        await manager.rebuild()

        await manager.update_gallery(make_gallery("japan/tokyo", photos=1))
        index = await manager.read()

        assert index.stats.total_galleries == 5
        assert index.stats.total_photos == 4
        tokyo = next(g for g in index.galleries if g.slug == "japan/tokyo")
        assert tokyo.photo_count == 1

    @pytest.mark.asyncio
    async def test_add_and_remove_gallery(self, manager, sample_site):
        await manager.rebuild()

        await manager.update_gallery(make_gallery("japan/kyoto", photos=2))
        index = await manager.read()
        assert index.stats.total_galleries == 6
        assert index.stats.total_photos == 8
        assert next(g for g in index.galleries if g.slug == "japan").child_count == 3

        await manager.remove_gallery("japan/kyoto")
        index = await manager.read()
        assert index.stats.total_galleries == 5
        assert index.stats.total_photos == 6
        assert next(g for g in index.galleries if g.slug == "japan").child_count == 2

    @pytest.mark.asyncio
    async def test_parent_metadata_tracks_parent_galleries(self, manager, sample_site):
        await manager.rebuild()

        await manager.update_gallery(
            make_gallery("europe", photos=0, is_parent_gallery=True, order=4)
        )
        index = await manager.read()
        assert ("europe", "Europe", 4) in [
            (p.slug, p.title, p.order) for p in index.parent_metadata
        ]

        await manager.update_gallery(make_gallery("japan", photos=3))
        index = await manager.read()
        assert "japan" not in [p.slug for p in index.parent_metadata]

        await manager.remove_gallery("europe")
        index = await manager.read()
        assert index.parent_metadata == []

    @pytest.mark.asyncio
    async def test_remove_absent_entries_is_a_no_op(self, manager, sample_site):
        before = await manager.rebuild()

        await manager.remove_gallery("nowhere")
        await manager.remove_post("nowhere")
        await manager.remove_page("nowhere")

        after = await manager.read()
        assert after.updated_at == before.updated_at
        assert after.stats == before.stats

    @pytest.mark.asyncio
    async def test_remove_without_index_does_nothing(self, manager, sample_site):
        await manager.remove_gallery("japan")

        assert await manager.read() is None

    @pytest.mark.asyncio
    async def test_update_without_index_rebuilds(self, manager, sample_site):
        await manager.update_post(
            BlogPost(id="x", slug="x", title="X", path="blog/x.md", content="")
        )

        index = await manager.read()
        assert index is not None
        # The rebuild scans storage, which does not contain the in-memory post
        assert [p.slug for p in index.posts] == ["first-trip", "quick-note"]

    @pytest.mark.asyncio
    async def test_posts_and_pages(self, manager, sample_site):
        await manager.rebuild()

        await manager.update_post(
            BlogPost(id="new", slug="new", title="New", path="blog/new.md", content="")
        )
        await manager.update_post(
            BlogPost(
                id="first-trip", slug="first-trip", title="Renamed",
                path="blog/first-trip", content="",
            )
        )
        await manager.update_page(
            Page(id="faq", slug="faq", title="FAQ", path="pages/faq.md", content="")
        )
        await manager.remove_page("contact")

        index = await manager.read()
        assert index.stats.total_posts == 3
        assert index.stats.total_pages == 2
        assert [p.title for p in index.posts if p.slug == "first-trip"] == ["Renamed"]
        assert [p.slug for p in index.pages] == ["about", "faq"]

        await manager.remove_post("new")
        assert (await manager.read()).stats.total_posts == 2


class TestReadOnlyStorage:
    @pytest.fixture
    async def bundled_manager(self, sample_site, stub_extractor_factory):
        snapshot = await build_snapshot(sample_site)
        storage = BundledStorageAdapter(snapshot)
        return ContentIndexManager(storage, Config(), stub_extractor_factory())

    @pytest.mark.asyncio
    async def test_rebuild_serves_without_persisting(self, bundled_manager):
        index = await bundled_manager.get()

        assert index.stats.total_galleries == 5
        assert await bundled_manager.read() is None

    @pytest.mark.asyncio
    async def test_invalidate_is_refused(self, bundled_manager):
        with pytest.raises(ReadOnlyStorageError):
            await bundled_manager.invalidate()
