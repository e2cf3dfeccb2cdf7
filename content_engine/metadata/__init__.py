"""Embedded metadata extraction and field resolution."""

from .exif import MetadataExtractor, PillowExifExtractor, format_exif_for_display
from .resolution import (
    PHOTO_FIELD_RESOLUTION,
    SOURCE_PRECEDENCE,
    MetadataSource,
    resolve_field,
    resolve_photo_fields,
)

__all__ = [
    "MetadataExtractor",
    "PillowExifExtractor",
    "format_exif_for_display",
    "PHOTO_FIELD_RESOLUTION",
    "SOURCE_PRECEDENCE",
    "MetadataSource",
    "resolve_field",
    "resolve_photo_fields",
]
