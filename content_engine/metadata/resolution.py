# content_engine/metadata/resolution.py
"""
Per-field precedence between sidecar overrides and embedded metadata.

Each photo field lists candidate getters per source; the first source in
SOURCE_PRECEDENCE with a non-empty value wins. Empty strings and empty
lists count as absent.
"""

from enum import Enum
from typing import Any, Callable, Dict, Mapping, Optional, Sequence, Tuple

from ..models.photo import ExifData, PhotoOverride


class MetadataSource(str, Enum):
    SIDECAR = "sidecar"
    EMBEDDED = "embedded"


SOURCE_PRECEDENCE: Tuple[MetadataSource, ...] = (
    MetadataSource.SIDECAR,
    MetadataSource.EMBEDDED,
)

Getter = Callable[[Any], Any]

PHOTO_FIELD_RESOLUTION: Dict[str, Dict[MetadataSource, Tuple[Getter, ...]]] = {
    "title": {
        MetadataSource.SIDECAR: (lambda o: o.title,),
        MetadataSource.EMBEDDED: (lambda e: e.title, lambda e: e.image_description),
    },
    "description": {
        MetadataSource.SIDECAR: (lambda o: o.description,),
        MetadataSource.EMBEDDED: (lambda e: e.image_description,),
    },
    "tags": {
        MetadataSource.SIDECAR: (lambda o: o.tags,),
        MetadataSource.EMBEDDED: (lambda e: e.keywords,),
    },
}


def is_present(value: Any) -> bool:
    if value is None:
        return False
    if isinstance(value, str):
        return bool(value.strip())
    if isinstance(value, (list, tuple, set, dict)):
        return bool(value)
    return True


def resolve_field(
    getters: Mapping[MetadataSource, Sequence[Getter]],
    sources: Mapping[MetadataSource, Any],
    precedence: Sequence[MetadataSource] = SOURCE_PRECEDENCE,
) -> Tuple[Any, Optional[MetadataSource]]:
    """
    Resolve one field.

    Args:
        getters: Candidate accessors per source, tried in order
        sources: The available source objects (missing sources are skipped)
        precedence: Source order, highest priority first

    Returns:
        (value, source it came from), or (None, None) when no source has it
    """
    for source in precedence:
        obj = sources.get(source)
        if obj is None:
            continue
        for getter in getters.get(source, ()):
            value = getter(obj)
            if is_present(value):
                return value, source
    return None, None


def resolve_photo_fields(
    override: Optional[PhotoOverride],
    exif: Optional[ExifData],
) -> Dict[str, Any]:
    """Resolve every photo field listed in PHOTO_FIELD_RESOLUTION."""
    sources = {
        MetadataSource.SIDECAR: override,
        MetadataSource.EMBEDDED: exif,
    }
    return {
        field: resolve_field(getters, sources)[0]
        for field, getters in PHOTO_FIELD_RESOLUTION.items()
    }
