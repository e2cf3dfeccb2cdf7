"""Scanners that turn storage trees into typed content entities."""

from .blog import BlogScanner, filter_published_posts
from .gallery import GalleryScanner
from .page import MAX_MARKDOWN_SUBFOLDERS, PageScanner, filter_visible_pages

__all__ = [
    "BlogScanner",
    "GalleryScanner",
    "PageScanner",
    "MAX_MARKDOWN_SUBFOLDERS",
    "filter_published_posts",
    "filter_visible_pages",
]
