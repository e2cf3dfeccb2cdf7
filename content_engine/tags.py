# content_engine/tags.py
"""
Tag aggregation across galleries, photos and posts.

Private galleries and draft posts never contribute. Hidden photos do not
contribute their own tags, but do not hide their gallery either.
"""

from typing import Dict, Iterable, List

from .models.gallery import Gallery
from .models.photo import Photo
from .models.post import BlogPost
from .models.tag import Tag
from .utils.tags import format_tag_label, normalize_tag


def _has_tag(tags: Iterable[str], normalized: str) -> bool:
    return any(normalize_tag(t) == normalized for t in tags)


def build_tag_index(galleries: List[Gallery], posts: List[BlogPost]) -> List[Tag]:
    """Count tag usage; most used first, ties in first-seen order."""
    tag_map: Dict[str, Tag] = {}

    def counter(raw: str) -> Tag:
        name = normalize_tag(raw)
        if name not in tag_map:
            tag_map[name] = Tag(name=name, label=format_tag_label(raw))
        return tag_map[name]

    for gallery in galleries:
        if gallery.private:
            continue
        for tag in gallery.tags:
            if normalize_tag(tag):
                counter(tag).gallery_count += 1
        for photo in gallery.photos:
            if photo.hidden:
                continue
            for tag in photo.tags or []:
                if normalize_tag(tag):
                    counter(tag).photo_count += 1

    for post in posts:
        if post.draft:
            continue
        for tag in post.tags or []:
            if normalize_tag(tag):
                counter(tag).post_count += 1

    # sorted() is stable, so equal totals keep insertion order
    return sorted(tag_map.values(), key=lambda t: t.total, reverse=True)


def filter_photos_by_tag(galleries: List[Gallery], tag: str) -> List[Photo]:
    normalized = normalize_tag(tag)
    return [
        photo
        for gallery in galleries
        if not gallery.private
        for photo in gallery.photos
        if not photo.hidden and _has_tag(photo.tags or [], normalized)
    ]


def filter_galleries_by_tag(galleries: List[Gallery], tag: str) -> List[Gallery]:
    """Galleries tagged directly, or holding a visible photo with the tag."""
    normalized = normalize_tag(tag)
    return [
        gallery
        for gallery in galleries
        if not gallery.private
        and (
            _has_tag(gallery.tags, normalized)
            or any(
                not photo.hidden and _has_tag(photo.tags or [], normalized)
                for photo in gallery.photos
            )
        )
    ]


def filter_galleries_by_category(
    galleries: List[Gallery], category_path: str
) -> List[Gallery]:
    """Exact category match, or any category nested below it."""
    wanted = category_path.strip("/").lower()
    results = []
    for gallery in galleries:
        if gallery.private or not gallery.category:
            continue
        category = gallery.category.lower()
        if category == wanted or category.startswith(f"{wanted}/"):
            results.append(gallery)
    return results


def get_categories(galleries: List[Gallery]) -> List[str]:
    """Every category in use plus all of its ancestor paths, sorted."""
    categories = set()
    for gallery in galleries:
        if gallery.private or not gallery.category:
            continue
        path = ""
        for part in gallery.category.lower().split("/"):
            if not part:
                continue
            path = f"{path}/{part}" if path else part
            categories.add(path)
    return sorted(categories)
