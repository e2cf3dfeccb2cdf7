# content_engine/models/navigation.py

from typing import Optional
from pydantic import Field

from .base import CamelModel


class NavItem(CamelModel):
    """A node of the gallery navigation tree."""

    title: str
    slug: str
    path: str
    order: Optional[int] = None
    is_virtual: bool = False          # Synthesized ancestor with no gallery of its own
    children: list["NavItem"] = Field(default_factory=list)
