"""Data models for the content engine."""

from .storage import FileInfo
from .photo import ExifData, Photo, PhotoOverride
from .gallery import Gallery, GalleryMetadata, ParentGalleryMetadata
from .post import BlogPost, PostFrontmatter
from .page import Page, PageFrontmatter
from .tag import Tag
from .navigation import NavItem
from .index import (
    ContentIndex,
    GalleryIndexEntry,
    IndexStats,
    PageIndexEntry,
    ParentMetadataEntry,
    PostIndexEntry,
)

__all__ = [
    "FileInfo",
    "ExifData",
    "Photo",
    "PhotoOverride",
    "Gallery",
    "GalleryMetadata",
    "ParentGalleryMetadata",
    "BlogPost",
    "PostFrontmatter",
    "Page",
    "PageFrontmatter",
    "Tag",
    "NavItem",
    "ContentIndex",
    "GalleryIndexEntry",
    "IndexStats",
    "PageIndexEntry",
    "ParentMetadataEntry",
    "PostIndexEntry",
]
