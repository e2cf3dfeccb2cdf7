# tests/conftest.py
"""Shared pytest fixtures and test helpers."""

from io import BytesIO
from pathlib import Path
from typing import Dict, Optional, Union

import pytest
from PIL import ExifTags, Image

from content_engine.config import Config
from content_engine.models.photo import ExifData
from content_engine.storage.local import LocalStorageAdapter


def make_jpeg(
    description: Optional[str] = None,
    make: Optional[str] = None,
    model: Optional[str] = None,
    artist: Optional[str] = None,
    taken: Optional[str] = None,
    size: tuple = (8, 6),
) -> bytes:
    """Generate a small JPEG, optionally with IFD0 EXIF tags."""
    img = Image.new("RGB", size, "red")
    exif = Image.Exif()
    if description:
        exif[ExifTags.Base.ImageDescription] = description
    if make:
        exif[ExifTags.Base.Make] = make
    if model:
        exif[ExifTags.Base.Model] = model
    if artist:
        exif[ExifTags.Base.Artist] = artist
    if taken:
        exif[ExifTags.Base.DateTime] = taken

    buffer = BytesIO()
    if len(exif):
        img.save(buffer, "JPEG", exif=exif.tobytes())
    else:
        img.save(buffer, "JPEG")
    return buffer.getvalue()


def write_tree(root: Path, files: Dict[str, Union[str, bytes]]) -> Path:
    """Create files (and their parent folders) under root."""
    for rel_path, content in files.items():
        path = root / rel_path
        path.parent.mkdir(parents=True, exist_ok=True)
        if isinstance(content, bytes):
            path.write_bytes(content)
        else:
            path.write_text(content, encoding="utf-8")
    return root


class StubExtractor:
    """Metadata extractor returning canned results per image content."""

    def __init__(self, results: Optional[Dict[bytes, ExifData]] = None):
        self.results = results or {}
        self.calls = 0

    async def extract(self, data: bytes) -> Optional[ExifData]:
        self.calls += 1
        return self.results.get(data)


@pytest.fixture
def config():
    """Default configuration."""
    return Config()


@pytest.fixture
def content_root(tmp_path):
    root = tmp_path / "content"
    root.mkdir()
    return root


@pytest.fixture
def storage(content_root):
    return LocalStorageAdapter(content_root)


@pytest.fixture
def sample_site(content_root):
    """A small site: nested galleries, two posts, two pages."""
    write_tree(
        content_root,
        {
            "galleries/japan/gallery.yaml": "title: Japan\norder: 1\n",
            "galleries/japan/tokyo/img1.jpg": b"tokyo-1",
            "galleries/japan/tokyo/img2.jpg": b"tokyo-2",
            "galleries/japan/tokyo/img10.jpg": b"tokyo-10",
            "galleries/japan/osaka/castle.jpg": b"osaka-1",
            "galleries/street-photography/a.png": b"street-a",
            "galleries/street-photography/gallery.yaml": (
                "title: Street\ntags: [Urban, night]\norder: 2\n"
            ),
            "galleries/secret/gallery.yaml": "title: Secret\nprivate: true\n",
            "galleries/secret/x.jpg": b"secret-x",
            "galleries/empty/notes.txt": "nothing here",
            "blog/first-trip/index.md": (
                "---\ntitle: First Trip\ndate: 2024-03-01\ntags: [travel, Japan]\n---\n"
                "# Day one\n\nWe walked **a lot** around the city.\n"
            ),
            "blog/first-trip/post.md": "ignored",
            "blog/first-trip/photo-1.jpg": b"blog-1",
            "blog/first-trip/photo-2.jpg": b"blog-2",
            "blog/quick-note.md": "Just a short note without a header.\n",
            "pages/about/index.md": "---\ntitle: About Me\norder: 1\n---\nHello there.\n",
            "pages/about/style.css": "body { color: red; }\n",
            "pages/contact.html": "<h1>Contact</h1>\n",
        },
    )
    return content_root


@pytest.fixture
def jpeg_factory():
    """Fixture providing make_jpeg(description=..., make=..., ...)."""
    return make_jpeg


@pytest.fixture
def tree_writer(content_root):
    """Fixture providing write(files) that populates the content root."""
    def _write(files: Dict[str, Union[str, bytes]]) -> Path:
        return write_tree(content_root, files)
    return _write


@pytest.fixture
def stub_extractor_factory():
    """Fixture providing StubExtractor(results)."""
    return StubExtractor
