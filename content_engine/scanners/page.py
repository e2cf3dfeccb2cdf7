# content_engine/scanners/page.py
"""
Static page scanning.

Each folder or markdown/HTML file under the pages root is a page, unless
the folder looks like a blog: page.yaml declares another type, or more
than MAX_MARKDOWN_SUBFOLDERS of its subfolders contain markdown.
"""

import logging
from typing import List, Optional

from ..config import Config
from ..exceptions import MetadataError
from ..models.page import Page, PageFrontmatter
from ..models.storage import FileInfo
from ..storage.base import StorageAdapter, join_key
from ..utils.files import get_basename, is_html_file, is_markdown_file
from ..utils.frontmatter import parse_frontmatter
from ..utils.text import folder_name_to_title, natural_sort_key, to_slug
from .sidecar import PAGE_METADATA_FILE, load_yaml, validate_metadata

logger = logging.getLogger(__name__)

# Folders with more markdown-bearing subfolders than this are treated as blogs
MAX_MARKDOWN_SUBFOLDERS = 2

PAGE_TYPE = "page"
STYLESHEET_FILES = ("style.css", "styles.css")


def find_main_page_file(files: List[FileInfo]) -> Optional[FileInfo]:
    """index.html > index.md > first HTML file > first markdown file."""
    html_files = [f for f in files if is_html_file(f.name)]
    md_files = [f for f in files if is_markdown_file(f.name)]

    for candidates, index_name in ((html_files, "index.html"), (md_files, "index.md")):
        for f in candidates:
            if f.name.lower() == index_name:
                return f
    if html_files:
        return html_files[0]
    return md_files[0] if md_files else None


def filter_visible_pages(pages: List[Page]) -> List[Page]:
    return [page for page in pages if not page.hidden]


class PageScanner:
    """Turn the pages folder into Page entities."""

    def __init__(self, storage: StorageAdapter, config: Optional[Config] = None):
        self.storage = storage
        self.config = config or Config()
        self.root = self.config.content.pages_root

    @property
    def markdown_subfolder_limit(self) -> int:
        limit = self.config.scanning.page_markdown_subfolder_limit
        return MAX_MARKDOWN_SUBFOLDERS if limit is None else limit

    async def scan(self) -> List[Page]:
        if not await self.storage.exists(self.root):
            return []

        pages = []
        for item in await self.storage.list(self.root):
            if item.is_directory:
                page = await self._scan_folder(item)
            elif is_markdown_file(item.name) or is_html_file(item.name):
                page = await self._scan_file(item)
            else:
                continue
            if page is not None:
                pages.append(page)
        return pages

    async def get_page(self, slug: str) -> Optional[Page]:
        for page in await self.scan():
            if page.slug == slug:
                return page
        return None

    async def _declared_type(self, folder: str) -> Optional[str]:
        try:
            data = await load_yaml(self.storage, join_key(folder, PAGE_METADATA_FILE))
        except MetadataError as e:
            logger.warning("%s; treating folder as a page", e)
            return None
        if isinstance(data, dict) and data.get("type") is not None:
            return str(data["type"]).strip().lower()
        return None

    async def _count_markdown_subfolders(self, subfolders: List[FileInfo]) -> int:
        count = 0
        for subfolder in subfolders:
            contents = await self.storage.list(subfolder.path)
            if any(not f.is_directory and is_markdown_file(f.name) for f in contents):
                count += 1
        return count

    async def _scan_folder(self, directory: FileInfo) -> Optional[Page]:
        contents = await self.storage.list(directory.path)

        declared_type = await self._declared_type(directory.path)
        if declared_type is not None and declared_type != PAGE_TYPE:
            logger.debug("%s declares type %r; not a page", directory.path, declared_type)
            return None

        subfolders = [f for f in contents if f.is_directory]
        if await self._count_markdown_subfolders(subfolders) > self.markdown_subfolder_limit:
            logger.debug("%s looks like a blog; not a page", directory.path)
            return None

        files = sorted(
            (f for f in contents if not f.is_directory),
            key=lambda f: natural_sort_key(f.name),
        )
        main_file = find_main_page_file(files)
        if main_file is None:
            return None

        content = await self.storage.get_text(main_file.path)
        if content is None:
            logger.warning("Main file %s disappeared; skipping page", main_file.path)
            return None

        custom_css = None
        names = {f.name: f for f in files}
        for stylesheet in STYLESHEET_FILES:
            if stylesheet in names:
                custom_css = await self.storage.get_text(names[stylesheet].path)
                break

        return self._parse_page(
            content,
            directory.path,
            directory.name,
            is_html_file(main_file.name),
            custom_css,
        )

    async def _scan_file(self, file: FileInfo) -> Optional[Page]:
        content = await self.storage.get_text(file.path)
        if content is None:
            return None
        return self._parse_page(
            content, file.path, get_basename(file.name), is_html_file(file.name)
        )

    def _parse_page(
        self,
        content: str,
        path: str,
        default_name: str,
        is_html: bool,
        custom_css: Optional[str] = None,
    ) -> Page:
        data, body = parse_frontmatter(content, source=path)
        try:
            frontmatter = validate_metadata(PageFrontmatter, data, path)
        except MetadataError as e:
            logger.warning("%s; ignoring header", e)
            frontmatter = PageFrontmatter()

        # Slug follows the folder/file name so URLs survive title edits
        slug = to_slug(default_name)

        return Page(
            id=slug,
            slug=slug,
            title=frontmatter.title or folder_name_to_title(default_name),
            path=path,
            content=body.strip(),
            is_html=is_html,
            custom_css=custom_css or None,
            description=frontmatter.description,
            css=frontmatter.css,
            layout=frontmatter.layout,
            hidden=frontmatter.hidden,
            order=frontmatter.order,
            has_frontmatter=bool(data),
        )
