# content_engine/models/page.py

from typing import Optional
from pydantic import BaseModel, ConfigDict

from .base import CamelModel


class PageFrontmatter(BaseModel):
    """Header block fields recognised on a static page."""

    model_config = ConfigDict(extra="ignore", coerce_numbers_to_str=True)

    title: Optional[str] = None
    description: Optional[str] = None
    css: Optional[str] = None         # Custom CSS file to include
    layout: Optional[str] = None
    hidden: bool = False
    order: Optional[int] = None


class Page(CamelModel):
    """A static page such as About or Contact."""

    id: str
    slug: str
    title: str
    path: str
    content: str                      # Raw markdown or HTML
    is_html: bool = False
    custom_css: Optional[str] = None  # Verbatim style.css / styles.css
    description: Optional[str] = None
    css: Optional[str] = None
    layout: Optional[str] = None
    hidden: bool = False              # Hidden from navigation, still reachable
    order: Optional[int] = None
    has_frontmatter: bool = False
