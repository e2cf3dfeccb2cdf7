# content_engine/utils/tags.py

import re


def normalize_tag(tag: str) -> str:
    """Aggregation key: lowercase, trimmed, inner whitespace as hyphens."""
    return re.sub(r"\s+", "-", tag.strip().lower())


def format_tag_label(tag: str) -> str:
    """Display form of a tag ("street-photography" -> "Street Photography")."""
    spaced = tag.strip().replace("-", " ")
    return re.sub(r"\b\w", lambda m: m.group(0).upper(), spaced)
