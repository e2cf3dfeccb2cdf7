# content_engine/utils/files.py
"""File-type classification by extension."""

IMAGE_EXTENSIONS = frozenset({"jpg", "jpeg", "png", "webp", "gif", "avif", "svg"})
JPEG_EXTENSIONS = frozenset({"jpg", "jpeg"})
MARKDOWN_EXTENSIONS = frozenset({"md", "mdx"})
HTML_EXTENSIONS = frozenset({"html", "htm"})

CONTENT_TYPES = {
    "jpg": "image/jpeg",
    "jpeg": "image/jpeg",
    "png": "image/png",
    "gif": "image/gif",
    "webp": "image/webp",
    "avif": "image/avif",
    "svg": "image/svg+xml",
    "json": "application/json",
    "yaml": "text/yaml",
    "yml": "text/yaml",
    "md": "text/markdown",
    "html": "text/html",
    "css": "text/css",
}
DEFAULT_CONTENT_TYPE = "application/octet-stream"


def get_extension(filename: str) -> str:
    """Lowercase extension without the dot ("" when there is none)."""
    name = filename.rsplit("/", 1)[-1]
    if "." not in name:
        return ""
    return name.rsplit(".", 1)[-1].lower()


def get_basename(filename: str) -> str:
    """Filename without its extension ("photo.01.jpg" -> "photo.01")."""
    last_dot = filename.rfind(".")
    return filename[:last_dot] if last_dot > 0 else filename


def is_image_file(filename: str) -> bool:
    return get_extension(filename) in IMAGE_EXTENSIONS


def is_jpeg_file(filename: str) -> bool:
    """JPEG-family files are the only ones read for embedded metadata."""
    return get_extension(filename) in JPEG_EXTENSIONS


def is_markdown_file(filename: str) -> bool:
    return get_extension(filename) in MARKDOWN_EXTENSIONS


def is_html_file(filename: str) -> bool:
    return get_extension(filename) in HTML_EXTENSIONS


def detect_content_type(key: str) -> str:
    """Guess a MIME type from the key's extension."""
    return CONTENT_TYPES.get(get_extension(key), DEFAULT_CONTENT_TYPE)
