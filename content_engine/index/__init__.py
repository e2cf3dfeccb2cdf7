"""The content index and navigation built from it."""

from .content_index import INDEX_VERSION, ContentIndexManager
from .navigation import DEFAULT_NAV_ORDER, build_navigation

__all__ = [
    "INDEX_VERSION",
    "ContentIndexManager",
    "DEFAULT_NAV_ORDER",
    "build_navigation",
]
