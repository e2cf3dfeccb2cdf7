# content_engine/models/index.py

from datetime import datetime
from typing import Optional
from pydantic import Field

from .base import CamelModel


class GalleryIndexEntry(CamelModel):
    """Compact gallery summary stored in the index (no photos array)."""

    slug: str
    title: str
    description: Optional[str] = None
    cover: Optional[str] = None
    photo_count: int = 0
    is_parent_gallery: bool = False
    private: bool = False
    is_protected: bool = False
    order: Optional[int] = None
    category: Optional[str] = None
    tags: list[str] = Field(default_factory=list)
    path: str
    has_children: bool = False
    child_count: int = 0


class PostIndexEntry(CamelModel):
    """Compact post summary stored in the index (no body text)."""

    slug: str
    title: str
    excerpt: Optional[str] = None
    date: Optional[datetime] = None
    draft: bool = False
    cover: Optional[str] = None
    tags: list[str] = Field(default_factory=list)
    reading_time: int = 1


class PageIndexEntry(CamelModel):
    """Compact page summary stored in the index (no content)."""

    slug: str
    title: str
    description: Optional[str] = None
    path: str
    hidden: bool = False
    order: Optional[int] = None


class ParentMetadataEntry(CamelModel):
    """Navigation data for a container folder without photos."""

    slug: str
    title: Optional[str] = None
    order: Optional[int] = None


class IndexStats(CamelModel):
    total_galleries: int = 0
    total_photos: int = 0
    total_posts: int = 0
    total_pages: int = 0


class ContentIndex(CamelModel):
    """
    The persisted, versioned catalog of galleries, posts and pages.

    A cache, not the source of truth: rebuilt from storage on demand and
    patched in place by incremental updates.
    """

    version: int
    updated_at: datetime
    galleries: list[GalleryIndexEntry] = Field(default_factory=list)
    posts: list[PostIndexEntry] = Field(default_factory=list)
    pages: list[PageIndexEntry] = Field(default_factory=list)
    parent_metadata: list[ParentMetadataEntry] = Field(default_factory=list)
    stats: IndexStats = Field(default_factory=IndexStats)
