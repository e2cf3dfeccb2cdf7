# content_engine/scanners/blog.py
"""
Blog scanning.

Each top-level entry under the blog root is a post: either a folder with a
main markdown file (plus sibling images), or a single markdown file.
"""

import logging
from typing import List, Optional

from ..config import Config
from ..exceptions import MetadataError
from ..models.post import BlogPost, PostFrontmatter
from ..models.storage import FileInfo
from ..storage.base import StorageAdapter, join_key
from ..utils.files import get_basename, is_image_file, is_markdown_file
from ..utils.frontmatter import parse_frontmatter
from ..utils.text import (
    calculate_reading_time,
    folder_name_to_title,
    generate_excerpt,
    natural_sort_key,
    sort_by_date_desc,
    to_slug,
)
from .sidecar import validate_metadata

logger = logging.getLogger(__name__)

MAIN_FILE_PRIORITY = ("index.md", "post.md", "readme.md")


def find_main_markdown_file(files: List[FileInfo]) -> Optional[FileInfo]:
    """index.md > post.md > readme.md > first markdown file."""
    by_name = {f.name.lower(): f for f in files}
    for name in MAIN_FILE_PRIORITY:
        if name in by_name:
            return by_name[name]
    return files[0] if files else None


def filter_published_posts(posts: List[BlogPost]) -> List[BlogPost]:
    return [post for post in posts if not post.draft]


class BlogScanner:
    """Turn the blog folder into BlogPost entities."""

    def __init__(self, storage: StorageAdapter, config: Optional[Config] = None):
        self.storage = storage
        self.config = config or Config()
        self.root = self.config.content.blog_root

    async def scan(self) -> List[BlogPost]:
        """All posts, drafts included, newest first."""
        posts = []
        for item in await self.storage.list(self.root):
            if item.is_directory:
                post = await self._scan_folder(item)
            elif is_markdown_file(item.name):
                post = await self._scan_file(item)
            else:
                continue
            if post is not None:
                posts.append(post)
        return sort_by_date_desc(posts)

    async def get_post(self, slug: str) -> Optional[BlogPost]:
        for post in await self.scan():
            if post.slug == slug:
                return post
        return None

    async def _scan_folder(self, directory: FileInfo) -> Optional[BlogPost]:
        contents = await self.storage.list(directory.path)
        files = sorted(
            (f for f in contents if not f.is_directory),
            key=lambda f: natural_sort_key(f.name),
        )
        main_file = find_main_markdown_file([f for f in files if is_markdown_file(f.name)])
        if main_file is None:
            logger.debug("No markdown in %s; skipping", directory.path)
            return None

        content = await self.storage.get_text(main_file.path)
        if content is None:
            logger.warning("Main file %s disappeared; skipping post", main_file.path)
            return None

        images = [f.path for f in files if is_image_file(f.name)]
        return self._parse_post(
            content, directory.path, directory.name, images, is_folder=True
        )

    async def _scan_file(self, file: FileInfo) -> Optional[BlogPost]:
        content = await self.storage.get_text(file.path)
        if content is None:
            return None
        return self._parse_post(content, file.path, get_basename(file.name), [])

    def _parse_post(
        self,
        content: str,
        path: str,
        default_name: str,
        images: List[str],
        is_folder: bool = False,
    ) -> BlogPost:
        data, body = parse_frontmatter(content, source=path)
        try:
            frontmatter = validate_metadata(PostFrontmatter, data, path)
        except MetadataError as e:
            logger.warning("%s; ignoring header", e)
            frontmatter = PostFrontmatter()

        slug = to_slug(frontmatter.title) if frontmatter.title else to_slug(default_name)
        scanning = self.config.scanning

        cover = frontmatter.cover
        if cover and is_folder and "/" not in cover:
            # Bare filename relative to the post folder
            cover = join_key(path, cover)
        cover = cover or (images[0] if images else None)

        return BlogPost(
            id=slug,
            slug=slug,
            title=frontmatter.title or folder_name_to_title(default_name),
            path=path,
            content=body,
            excerpt=frontmatter.description
            or generate_excerpt(body, scanning.excerpt_length),
            reading_time=calculate_reading_time(body, scanning.words_per_minute),
            images=images,
            cover=cover,
            date=frontmatter.date,
            description=frontmatter.description,
            tags=frontmatter.tags,
            draft=frontmatter.draft,
            author=frontmatter.author,
            has_frontmatter=bool(data),
        )
