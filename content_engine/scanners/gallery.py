# content_engine/scanners/gallery.py
"""
Gallery scanning.

Walks the galleries root depth-first. Any folder holding images, or a
gallery.yaml, becomes a Gallery; every folder is descended into either way.
Sibling folders may be scanned concurrently, but results are always
assembled in pre-order with siblings in name order.
"""

import logging
from datetime import datetime
from typing import Awaitable, Callable, Dict, List, Optional, TypeVar

import anyio

from ..config import Config
from ..exceptions import MetadataError
from ..metadata.exif import MetadataExtractor, PillowExifExtractor
from ..metadata.resolution import resolve_photo_fields
from ..models.gallery import Gallery, GalleryMetadata, ParentGalleryMetadata
from ..models.photo import Photo, PhotoOverride
from ..models.storage import FileInfo
from ..storage.base import StorageAdapter, join_key
from ..utils.files import get_basename, is_image_file, is_jpeg_file
from ..utils.tags import normalize_tag
from ..utils.text import folder_name_to_title, natural_sort_key, slug_from_path, to_slug
from .sidecar import (
    GALLERY_METADATA_FILE,
    PHOTOS_METADATA_FILE,
    load_yaml,
    validate_metadata,
)

logger = logging.getLogger(__name__)

T = TypeVar("T")

# Visitor called once per folder below the root: (path, name segments, listing)
FolderVisitor = Callable[[str, List[str], List[FileInfo]], Awaitable[Optional[T]]]


class GalleryScanner:
    """Turn the galleries folder tree into Gallery entities."""

    def __init__(
        self,
        storage: StorageAdapter,
        extractor: Optional[MetadataExtractor] = None,
        config: Optional[Config] = None,
    ):
        self.storage = storage
        self.extractor = extractor if extractor is not None else PillowExifExtractor()
        self.config = config or Config()
        self.root = self.config.content.galleries_root

    async def scan(self) -> List[Gallery]:
        """Scan every gallery, parents before children."""
        return await self._walk(self._scan_folder)

    async def scan_parent_metadata(self) -> List[ParentGalleryMetadata]:
        """Collect display data for folders with gallery.yaml but no images."""
        return await self._walk(self._scan_parent_folder)

    async def get_gallery(self, slug: str) -> Optional[Gallery]:
        """
        Scan the single gallery whose slug matches, or return None.

        Follows the folder path the slug names; slugs set in gallery.yaml
        need a full scan.
        """
        slug = slug.strip("/")
        gallery = await self._scan_by_path(slug)
        if gallery is not None and gallery.slug == slug:
            return gallery
        return next((g for g in await self.scan() if g.slug == slug), None)

    async def _scan_by_path(self, slug: str) -> Optional[Gallery]:
        path = self.root
        segments: List[str] = []

        for slug_segment in (s for s in slug.split("/") if s):
            items = await self.storage.list(path)
            match = next(
                (
                    item for item in items
                    if item.is_directory and to_slug(item.name) == slug_segment
                ),
                None,
            )
            if match is None:
                return None
            path = match.path
            segments.append(match.name)

        if not segments:
            return None
        return await self._scan_folder(path, segments, await self.storage.list(path))

    # -------------------------------------------------------------------------
    # Tree walk
    # -------------------------------------------------------------------------

    async def _walk(self, visit: FolderVisitor) -> List[T]:
        limiter = anyio.CapacityLimiter(max(1, self.config.scanning.max_concurrency))
        results: List[T] = []
        root_items = await self.storage.list(self.root)
        for child_results in await self._descend(root_items, [], visit, limiter):
            results.extend(child_results)
        return results

    async def _descend(
        self,
        items: List[FileInfo],
        segments: List[str],
        visit: FolderVisitor,
        limiter: anyio.CapacityLimiter,
    ) -> List[List[T]]:
        """Visit every subdirectory in ``items``; one result list per sibling."""
        directories = [item for item in items if item.is_directory]
        results: List[List[T]] = [[] for _ in directories]

        async def visit_subtree(index: int, directory: FileInfo) -> None:
            results[index] = await self._visit_subtree(
                directory, segments + [directory.name], visit, limiter
            )

        if self.config.scanning.parallel_descent and len(directories) > 1:
            async with anyio.create_task_group() as tg:
                for index, directory in enumerate(directories):
                    tg.start_soon(visit_subtree, index, directory)
        else:
            for index, directory in enumerate(directories):
                await visit_subtree(index, directory)

        return results

    async def _visit_subtree(
        self,
        directory: FileInfo,
        segments: List[str],
        visit: FolderVisitor,
        limiter: anyio.CapacityLimiter,
    ) -> List[T]:
        # Held for the folder's own work only; descent happens outside it
        async with limiter:
            items = await self.storage.list(directory.path)
            found = await visit(directory.path, segments, items)

        results: List[T] = [found] if found is not None else []
        for child_results in await self._descend(items, segments, visit, limiter):
            results.extend(child_results)
        return results

    # -------------------------------------------------------------------------
    # Sidecars
    # -------------------------------------------------------------------------

    async def _load_gallery_metadata(self, path: str) -> Optional[GalleryMetadata]:
        key = join_key(path, GALLERY_METADATA_FILE)
        try:
            data = await load_yaml(self.storage, key)
            if data is None:
                return None
            if not isinstance(data, dict):
                raise MetadataError(key, "expected a mapping")
            return validate_metadata(GalleryMetadata, data, key)
        except MetadataError as e:
            logger.warning("%s; using defaults", e)
            return None

    async def _load_photo_overrides(self, path: str) -> List[PhotoOverride]:
        key = join_key(path, PHOTOS_METADATA_FILE)
        try:
            data = await load_yaml(self.storage, key)
        except MetadataError as e:
            logger.warning("%s; using filename order", e)
            return []

        if isinstance(data, dict):
            data = data.get("photos")
        if not isinstance(data, list):
            if data:
                logger.warning("Invalid metadata in %s: expected a list", key)
            return []

        overrides = []
        for entry in data:
            if not isinstance(entry, dict):
                logger.warning("Skipping invalid entry in %s: %r", key, entry)
                continue
            try:
                overrides.append(validate_metadata(PhotoOverride, entry, key))
            except MetadataError as e:
                logger.warning("Skipping entry: %s", e)
        return overrides

    # -------------------------------------------------------------------------
    # Folder visitors
    # -------------------------------------------------------------------------

    async def _scan_parent_folder(
        self, path: str, segments: List[str], items: List[FileInfo]
    ) -> Optional[ParentGalleryMetadata]:
        if any(not item.is_directory and is_image_file(item.name) for item in items):
            return None
        metadata = await self._load_gallery_metadata(path)
        if metadata is None:
            return None
        return ParentGalleryMetadata(
            slug=gallery_slug(segments, metadata),
            title=metadata.title,
            order=metadata.order,
        )

    async def _scan_folder(
        self, path: str, segments: List[str], items: List[FileInfo]
    ) -> Optional[Gallery]:
        image_files = sorted(
            (item for item in items if not item.is_directory and is_image_file(item.name)),
            key=lambda item: natural_sort_key(item.name),
        )
        metadata = await self._load_gallery_metadata(path)

        if not image_files and metadata is None:
            return None

        overrides = await self._load_photo_overrides(path) if image_files else []
        photos = await self._scan_photos(image_files, overrides)
        photos = sort_photos(photos, overrides)

        meta = metadata or GalleryMetadata()
        slug = gallery_slug(segments, metadata)

        cover_name = meta.cover or (photos[0].filename if photos else None)
        if cover_name is None and image_files:
            cover_name = image_files[0].name

        last_modified: Optional[datetime] = (
            max(item.last_modified for item in image_files) if image_files else None
        )

        return Gallery(
            id=slug,
            slug=slug,
            title=meta.title or folder_name_to_title(segments[-1]),
            description=meta.description,
            path=path,
            cover=join_key(path, cover_name) if cover_name else None,
            photos=photos,
            date=meta.date or last_modified,
            last_modified=last_modified,
            tags=merge_tags(meta.tags or [], photos),
            category=meta.category or ("/".join(segments[:-1]) or None),
            private=meta.private,
            password=meta.password,
            order=meta.order,
            include_nested_photos=meta.include_nested_photos,
            is_parent_gallery=metadata is not None and not image_files,
            has_custom_metadata=metadata is not None,
        )

    async def _scan_photos(
        self, image_files: List[FileInfo], overrides: List[PhotoOverride]
    ) -> List[Photo]:
        override_map: Dict[str, PhotoOverride] = {o.filename: o for o in overrides}
        photos = []

        for file in image_files:
            override = override_map.get(file.name)
            exif = None
            if self.extractor is not None and is_jpeg_file(file.name):
                data = await self.storage.get(file.path)
                if data:
                    exif = await self.extractor.extract(data)

            fields = resolve_photo_fields(override, exif)
            photos.append(
                Photo(
                    id=get_basename(file.name),
                    filename=file.name,
                    path=file.path,
                    title=fields["title"],
                    description=fields["description"],
                    tags=list(fields["tags"]) if fields["tags"] else None,
                    date_taken=(exif.date_time_original if exif else None) or file.last_modified,
                    exif=exif,
                    order=override.order if override else None,
                    hidden=override.hidden if override else False,
                    size=file.size,
                    width=exif.width if exif else None,
                    height=exif.height if exif else None,
                )
            )

        return photos


def gallery_slug(segments: List[str], metadata: Optional[GalleryMetadata]) -> str:
    """The gallery.yaml ``slug`` when set, else the slugged folder path."""
    if metadata is not None and metadata.slug:
        override = slug_from_path(metadata.slug.split("/"))
        if override:
            return override
    return slug_from_path(segments)


def sort_photos(photos: List[Photo], overrides: List[PhotoOverride]) -> List[Photo]:
    """
    Order photos by photos.yaml, then by filename.

    Listed photos sort by their explicit ``order``, else their position in
    the file. Unlisted photos follow all listed ones in filename order.
    """
    if not overrides:
        return sorted(photos, key=lambda p: natural_sort_key(p.filename))

    positions: Dict[str, float] = {}
    for index, entry in enumerate(overrides):
        positions[entry.filename] = entry.order if entry.order is not None else index

    def key(photo: Photo):
        listed = photo.filename in positions
        return (
            0 if listed else 1,
            positions.get(photo.filename, 0),
            natural_sort_key(photo.filename),
        )

    return sorted(photos, key=key)


def merge_tags(explicit: List[str], photos: List[Photo]) -> List[str]:
    """Explicit gallery tags, then tags of visible photos; lowercase, deduplicated."""
    seen = set()
    tags = []
    candidates = list(explicit)
    for photo in photos:
        if not photo.hidden and photo.tags:
            candidates.extend(photo.tags)

    for tag in candidates:
        key = normalize_tag(tag)
        if key and key not in seen:
            seen.add(key)
            tags.append(tag.strip().lower())
    return tags
