# content_engine/models/post.py

from datetime import datetime
from typing import Optional
from pydantic import BaseModel, ConfigDict, Field

from .base import CamelModel, FlexibleDatetime, TagList


class PostFrontmatter(BaseModel):
    """Header block fields recognised on a blog post."""

    model_config = ConfigDict(extra="ignore", coerce_numbers_to_str=True)

    title: Optional[str] = None
    date: FlexibleDatetime = None
    description: Optional[str] = None
    tags: TagList = None
    draft: bool = False
    cover: Optional[str] = None
    author: Optional[str] = None


class BlogPost(CamelModel):
    """A markdown post: a folder with a main markdown file, or a single file."""

    id: str
    slug: str
    title: str
    path: str
    content: str                      # Markdown body without the header block
    excerpt: Optional[str] = None
    reading_time: int = 1             # Minutes
    images: list[str] = Field(default_factory=list)
    cover: Optional[str] = None
    date: Optional[datetime] = None
    description: Optional[str] = None
    tags: Optional[list[str]] = None
    draft: bool = False
    author: Optional[str] = None
    has_frontmatter: bool = False
