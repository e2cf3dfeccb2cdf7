# content_engine/index/navigation.py
"""
Gallery navigation tree.

Nodes are built for every gallery first, then every missing ancestor of a
multi-segment slug is materialized as a virtual placeholder, and only then
are children attached to parents. Levels sort by order, then title.
"""

from typing import Dict, Iterable, List, Optional, Protocol

from ..models.navigation import NavItem

# Unordered items sort after everything with an explicit order
DEFAULT_NAV_ORDER = 999

GALLERY_URL_PREFIX = "/gallery/"


class GalleryLike(Protocol):
    slug: str
    title: str
    order: Optional[int]


class ParentLike(Protocol):
    slug: str
    title: Optional[str]
    order: Optional[int]


def _parent_slug(slug: str) -> Optional[str]:
    return slug.rsplit("/", 1)[0] if "/" in slug else None


def _sort_level(items: List[NavItem]) -> None:
    items.sort(
        key=lambda item: (
            item.order if item.order is not None else DEFAULT_NAV_ORDER,
            item.title.lower(),
        )
    )
    for item in items:
        _sort_level(item.children)


def build_navigation(
    galleries: Iterable[GalleryLike],
    parent_metadata: Iterable[ParentLike] = (),
) -> List[NavItem]:
    parents: Dict[str, ParentLike] = {p.slug: p for p in parent_metadata}
    nodes: Dict[str, NavItem] = {}

    for gallery in galleries:
        meta = parents.get(gallery.slug)
        order = gallery.order
        if order is None and meta is not None:
            order = meta.order
        nodes[gallery.slug] = NavItem(
            title=gallery.title,
            slug=gallery.slug,
            path=f"{GALLERY_URL_PREFIX}{gallery.slug}",
            order=order,
        )

    # Materialize ancestor chains before any child is attached
    for slug in sorted(nodes):
        ancestor = _parent_slug(slug)
        while ancestor is not None and ancestor not in nodes:
            meta = parents.get(ancestor)
            segment = ancestor.rsplit("/", 1)[-1]
            title = meta.title if meta and meta.title else None
            nodes[ancestor] = NavItem(
                title=title or segment[:1].upper() + segment[1:],
                slug=ancestor,
                path=f"{GALLERY_URL_PREFIX}{ancestor}",
                order=meta.order if meta else None,
                is_virtual=True,
            )
            ancestor = _parent_slug(ancestor)

    roots: List[NavItem] = []
    for slug in sorted(nodes):
        parent = _parent_slug(slug)
        if parent is None:
            roots.append(nodes[slug])
        else:
            nodes[parent].children.append(nodes[slug])

    _sort_level(roots)
    return roots
