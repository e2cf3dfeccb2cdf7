# content_engine/utils/text.py
"""Slug, title, excerpt and reading-time helpers."""

import math
import re
import unicodedata
from datetime import datetime, timezone
from typing import Any, Iterable, List, TypeVar

T = TypeVar("T")

WORDS_PER_MINUTE = 200
EXCERPT_LENGTH = 160

_EPOCH = datetime(1970, 1, 1, tzinfo=timezone.utc)

# Applied in order; code and images go first so their inner syntax
# is not picked up by the link/emphasis rules.
_MARKDOWN_STRIP_RULES = [
    (re.compile(r"```[\s\S]*?```"), ""),              # Fenced code blocks
    (re.compile(r"!\[[^\]]*\]\([^)]*\)"), ""),        # Images
    (re.compile(r"^#{1,6}\s+", re.MULTILINE), ""),    # Headings
    (re.compile(r"\*\*([^*]+)\*\*"), r"\1"),          # Bold
    (re.compile(r"__([^_]+)__"), r"\1"),
    (re.compile(r"\*([^*]+)\*"), r"\1"),              # Italic
    (re.compile(r"(?<!\w)_([^_]+)_(?!\w)"), r"\1"),
    (re.compile(r"\[([^\]]+)\]\([^)]*\)"), r"\1"),    # Links -> text
    (re.compile(r"`([^`]+)`"), r"\1"),                # Inline code
]
_FRONTMATTER_RE = re.compile(r"^---[\s\S]*?---")
_WHITESPACE_RE = re.compile(r"\s+")


def folder_name_to_title(name: str) -> str:
    """
    Convert a folder or file name to a display title.

    "tokyo-2024" -> "Tokyo 2024", "street_photography" -> "Street Photography"
    """
    spaced = re.sub(r"[-_]", " ", name)
    return re.sub(r"\b\w", lambda m: m.group(0).upper(), spaced).strip()


def to_slug(text: str) -> str:
    """
    Convert text to a URL-safe slug.

    "Tokyo 2024!" -> "tokyo-2024", "Café Müller" -> "cafe-muller"
    """
    decomposed = unicodedata.normalize("NFD", text.lower())
    ascii_text = "".join(ch for ch in decomposed if not unicodedata.combining(ch))
    return re.sub(r"[^a-z0-9]+", "-", ascii_text).strip("-")


def slug_from_path(segments: Iterable[str]) -> str:
    """Join the slug of every path segment with "/"."""
    return "/".join(slug for slug in (to_slug(s) for s in segments) if slug)


def calculate_reading_time(text: str, words_per_minute: int = WORDS_PER_MINUTE) -> int:
    """Reading time in whole minutes, rounded up, never less than one."""
    words = len(text.split())
    return max(1, math.ceil(words / words_per_minute))


def strip_markdown(content: str) -> str:
    """Reduce markdown to plain text on a single line."""
    text = _FRONTMATTER_RE.sub("", content, count=1).strip()
    for pattern, replacement in _MARKDOWN_STRIP_RULES:
        text = pattern.sub(replacement, text)
    return _WHITESPACE_RE.sub(" ", text).strip()


def generate_excerpt(content: str, max_length: int = EXCERPT_LENGTH) -> str:
    """Plain-text excerpt truncated at a word boundary near max_length."""
    plain_text = strip_markdown(content)
    if len(plain_text) <= max_length:
        return plain_text

    truncated = plain_text[:max_length]
    last_space = truncated.rfind(" ")
    if last_space > 0:
        truncated = truncated[:last_space]
    return truncated.rstrip(" ,;:.") + "…"


def natural_sort_key(name: str) -> tuple:
    """Sort key that orders "img2" before "img10"."""
    parts: List[Any] = [
        int(token) if token.isdecimal() else token.lower()
        for token in re.split(r"(\d+)", name)
    ]
    return (parts, name)


def sort_by_date_desc(items: Iterable[T]) -> List[T]:
    """Most recent first, using ``date`` then ``last_modified``."""
    def key(item: T) -> datetime:
        return (
            getattr(item, "date", None)
            or getattr(item, "last_modified", None)
            or _EPOCH
        )

    return sorted(items, key=key, reverse=True)
