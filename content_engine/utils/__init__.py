"""Pure helper functions: no I/O."""

from .files import (
    detect_content_type,
    get_basename,
    get_extension,
    is_html_file,
    is_image_file,
    is_jpeg_file,
    is_markdown_file,
)
from .frontmatter import parse_frontmatter
from .tags import format_tag_label, normalize_tag
from .text import (
    calculate_reading_time,
    folder_name_to_title,
    generate_excerpt,
    natural_sort_key,
    slug_from_path,
    sort_by_date_desc,
    strip_markdown,
    to_slug,
)

__all__ = [
    "detect_content_type",
    "get_basename",
    "get_extension",
    "is_html_file",
    "is_image_file",
    "is_jpeg_file",
    "is_markdown_file",
    "parse_frontmatter",
    "format_tag_label",
    "normalize_tag",
    "calculate_reading_time",
    "folder_name_to_title",
    "generate_excerpt",
    "natural_sort_key",
    "slug_from_path",
    "sort_by_date_desc",
    "strip_markdown",
    "to_slug",
]
