# content_engine/models/tag.py

from .base import CamelModel


class Tag(CamelModel):
    """Aggregate usage of one normalized tag across the catalog."""

    name: str                         # Lowercase, whitespace -> hyphen
    label: str                        # Display label
    photo_count: int = 0
    gallery_count: int = 0
    post_count: int = 0

    @property
    def total(self) -> int:
        return self.photo_count + self.gallery_count + self.post_count
