# content_engine/index/content_index.py
"""
The persisted content index.

A single JSON document at the storage root summarizing every gallery, post
and page. It is a cache: reads fall back to a full rebuild when it is
missing, unreadable or from an older schema version.
"""

import json
import logging
import time
from datetime import datetime, timedelta, timezone
from typing import Dict, List, Optional

import anyio
from pydantic import ValidationError

from ..config import Config
from ..metadata.exif import MetadataExtractor
from ..models.gallery import Gallery, ParentGalleryMetadata
from ..models.index import (
    ContentIndex,
    GalleryIndexEntry,
    IndexStats,
    PageIndexEntry,
    ParentMetadataEntry,
    PostIndexEntry,
)
from ..models.navigation import NavItem
from ..models.page import Page
from ..models.post import BlogPost
from ..scanners.blog import BlogScanner
from ..scanners.gallery import GalleryScanner
from ..scanners.page import PageScanner
from ..storage.base import StorageAdapter
from .navigation import build_navigation

logger = logging.getLogger(__name__)

# Bump when the index layout changes; older caches are rebuilt on next read
INDEX_VERSION = 1


def gallery_to_entry(gallery: Gallery, child_count: int = 0) -> GalleryIndexEntry:
    return GalleryIndexEntry(
        slug=gallery.slug,
        title=gallery.title,
        description=gallery.description,
        cover=gallery.cover,
        photo_count=gallery.photo_count,
        is_parent_gallery=gallery.is_parent_gallery,
        private=gallery.private,
        is_protected=gallery.is_protected,
        order=gallery.order,
        category=gallery.category,
        tags=list(gallery.tags),
        path=gallery.path,
        has_children=child_count > 0,
        child_count=child_count,
    )


def post_to_entry(post: BlogPost) -> PostIndexEntry:
    return PostIndexEntry(
        slug=post.slug,
        title=post.title,
        excerpt=post.excerpt,
        date=post.date,
        draft=post.draft,
        cover=post.cover,
        tags=list(post.tags or []),
        reading_time=post.reading_time,
    )


def page_to_entry(page: Page) -> PageIndexEntry:
    return PageIndexEntry(
        slug=page.slug,
        title=page.title,
        description=page.description,
        path=page.path,
        hidden=page.hidden,
        order=page.order,
    )


def count_children(slugs: List[str]) -> Dict[str, int]:
    """Number of direct child slugs for every slug in the list."""
    counts = {slug: 0 for slug in slugs}
    for slug in slugs:
        if "/" in slug:
            parent = slug.rsplit("/", 1)[0]
            if parent in counts:
                counts[parent] += 1
    return counts


def _refresh_child_counts(index: ContentIndex) -> None:
    counts = count_children([g.slug for g in index.galleries])
    for entry in index.galleries:
        entry.child_count = counts[entry.slug]
        entry.has_children = entry.child_count > 0


def _now() -> datetime:
    return datetime.now(timezone.utc)


class ContentIndexManager:
    """
    Read, rebuild and incrementally patch the content index.

    Known race: incremental updates are read-modify-write with no version
    guard. Two concurrent updates can both read the same index and the
    second write drops the first one's change. A later rebuild repairs it.
    """

    def __init__(
        self,
        storage: StorageAdapter,
        config: Optional[Config] = None,
        extractor: Optional[MetadataExtractor] = None,
    ):
        self.storage = storage
        self.config = config or Config()
        self.index_key = self.config.content.index_file
        self.gallery_scanner = GalleryScanner(storage, extractor, self.config)
        self.blog_scanner = BlogScanner(storage, self.config)
        self.page_scanner = PageScanner(storage, self.config)

    # -------------------------------------------------------------------------
    # Persistence
    # -------------------------------------------------------------------------

    async def read(self) -> Optional[ContentIndex]:
        """
        Load the persisted index.

        Returns:
            The index, or None when it is absent, unparsable or stale
        """
        text = await self.storage.get_text(self.index_key)
        if text is None:
            return None

        try:
            data = json.loads(text)
        except json.JSONDecodeError as e:
            logger.warning("Content index is not valid JSON, ignoring: %s", e)
            return None

        version = data.get("version") if isinstance(data, dict) else None
        if version != INDEX_VERSION:
            logger.info(
                "Content index version %s != %s, needs rebuild", version, INDEX_VERSION
            )
            return None

        try:
            return ContentIndex.model_validate(data)
        except ValidationError as e:
            logger.warning("Content index has an invalid shape, ignoring: %s", e)
            return None

    async def write(self, index: ContentIndex) -> None:
        content = json.dumps(index.to_json_dict(), indent=2, ensure_ascii=False)
        await self.storage.put(self.index_key, content, "application/json")

    # -------------------------------------------------------------------------
    # Full rebuild
    # -------------------------------------------------------------------------

    async def rebuild(self) -> ContentIndex:
        """Scan everything concurrently and persist a fresh index."""
        logger.info("Rebuilding content index...")
        start = time.perf_counter()

        galleries: List[Gallery] = []
        posts: List[BlogPost] = []
        pages: List[Page] = []
        parents: List[ParentGalleryMetadata] = []

        async def scan_galleries() -> None:
            galleries.extend(await self.gallery_scanner.scan())

        async def scan_posts() -> None:
            posts.extend(await self.blog_scanner.scan())

        async def scan_pages() -> None:
            pages.extend(await self.page_scanner.scan())

        async def scan_parents() -> None:
            parents.extend(await self.gallery_scanner.scan_parent_metadata())

        async with anyio.create_task_group() as tg:
            tg.start_soon(scan_galleries)
            tg.start_soon(scan_posts)
            tg.start_soon(scan_pages)
            tg.start_soon(scan_parents)

        child_counts = count_children([g.slug for g in galleries])
        index = ContentIndex(
            version=INDEX_VERSION,
            updated_at=_now(),
            galleries=[gallery_to_entry(g, child_counts[g.slug]) for g in galleries],
            posts=[post_to_entry(p) for p in posts],
            pages=[page_to_entry(p) for p in pages],
            parent_metadata=[
                ParentMetadataEntry(slug=p.slug, title=p.title, order=p.order)
                for p in parents
            ],
            stats=IndexStats(
                total_galleries=len(galleries),
                total_photos=sum(g.photo_count for g in galleries),
                total_posts=len(posts),
                total_pages=len(pages),
            ),
        )

        if self.storage.read_only:
            logger.debug("Storage is read-only; serving index without persisting")
        else:
            await self.write(index)

        elapsed_ms = (time.perf_counter() - start) * 1000
        logger.info(
            "Content index rebuilt in %.0fms: %d galleries, %d posts, %d pages",
            elapsed_ms,
            len(galleries),
            len(posts),
            len(pages),
        )
        return index

    async def get(self, force_rebuild: bool = False) -> ContentIndex:
        """Cached index, rebuilding when missing, stale or forced."""
        if not force_rebuild:
            cached = await self.read()
            if cached is not None:
                return cached
        return await self.rebuild()

    async def invalidate(self) -> None:
        """Delete the persisted index; the next get() rebuilds it."""
        await self.storage.delete(self.index_key)
        logger.info("Content index invalidated")

    async def has_valid_index(self) -> bool:
        return await self.read() is not None

    async def get_index_age(self) -> Optional[timedelta]:
        index = await self.read()
        if index is None:
            return None
        return _now() - index.updated_at

    async def get_navigation(self) -> List[NavItem]:
        """Navigation tree of all non-private galleries."""
        index = await self.get()
        public = [g for g in index.galleries if not g.private]
        return build_navigation(public, index.parent_metadata)

    # -------------------------------------------------------------------------
    # Incremental updates
    # -------------------------------------------------------------------------

    async def update_gallery(self, gallery: Gallery) -> None:
        """Replace or append one gallery's entry."""
        index = await self.read()
        if index is None:
            await self.rebuild()
            return

        entry = gallery_to_entry(gallery)
        position = _find(index.galleries, gallery.slug)
        if position is not None:
            old = index.galleries[position]
            index.galleries[position] = entry
            index.stats.total_photos += entry.photo_count - old.photo_count
        else:
            index.galleries.append(entry)
            index.stats.total_galleries += 1
            index.stats.total_photos += entry.photo_count
        _refresh_child_counts(index)

        parent_position = _find(index.parent_metadata, gallery.slug)
        if parent_position is not None:
            index.parent_metadata.pop(parent_position)
        if gallery.is_parent_gallery:
            index.parent_metadata.append(
                ParentMetadataEntry(
                    slug=gallery.slug, title=gallery.title, order=gallery.order
                )
            )

        await self._save(index)

    async def remove_gallery(self, slug: str) -> None:
        index = await self.read()
        if index is None:
            return
        position = _find(index.galleries, slug)
        if position is None:
            return

        removed = index.galleries.pop(position)
        index.stats.total_galleries -= 1
        index.stats.total_photos -= removed.photo_count
        _refresh_child_counts(index)

        parent_position = _find(index.parent_metadata, slug)
        if parent_position is not None:
            index.parent_metadata.pop(parent_position)

        await self._save(index)

    async def update_post(self, post: BlogPost) -> None:
        index = await self.read()
        if index is None:
            await self.rebuild()
            return

        entry = post_to_entry(post)
        position = _find(index.posts, post.slug)
        if position is not None:
            index.posts[position] = entry
        else:
            index.posts.append(entry)
            index.stats.total_posts += 1
        await self._save(index)

    async def remove_post(self, slug: str) -> None:
        index = await self.read()
        if index is None:
            return
        position = _find(index.posts, slug)
        if position is None:
            return

        index.posts.pop(position)
        index.stats.total_posts -= 1
        await self._save(index)

    async def update_page(self, page: Page) -> None:
        index = await self.read()
        if index is None:
            await self.rebuild()
            return

        entry = page_to_entry(page)
        position = _find(index.pages, page.slug)
        if position is not None:
            index.pages[position] = entry
        else:
            index.pages.append(entry)
            index.stats.total_pages += 1
        await self._save(index)

    async def remove_page(self, slug: str) -> None:
        index = await self.read()
        if index is None:
            return
        position = _find(index.pages, slug)
        if position is None:
            return

        index.pages.pop(position)
        index.stats.total_pages -= 1
        await self._save(index)

    async def _save(self, index: ContentIndex) -> None:
        index.updated_at = _now()
        await self.write(index)


def _find(entries: list, slug: str) -> Optional[int]:
    for position, entry in enumerate(entries):
        if entry.slug == slug:
            return position
    return None
