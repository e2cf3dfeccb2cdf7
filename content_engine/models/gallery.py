# content_engine/models/gallery.py

from datetime import datetime
from typing import Optional
from pydantic import BaseModel, ConfigDict, Field, computed_field

from .base import CamelModel, FlexibleDatetime, TagList
from .photo import Photo


class GalleryMetadata(BaseModel):
    """Fields a gallery.yaml sidecar may set."""

    model_config = ConfigDict(
        extra="ignore", populate_by_name=True, coerce_numbers_to_str=True
    )

    title: Optional[str] = None
    description: Optional[str] = None
    cover: Optional[str] = None       # Filename inside the gallery folder
    date: FlexibleDatetime = None
    tags: TagList = None
    category: Optional[str] = None    # e.g. "travel/asia/japan"
    private: bool = False
    password: Optional[str] = None    # Hashed; consumed by the auth layer
    order: Optional[int] = None
    include_nested_photos: Optional[bool] = Field(
        default=None, alias="includeNestedPhotos"
    )
    slug: Optional[str] = None        # Replaces the folder-derived slug


class Gallery(CamelModel):
    """
    A directory exposed as a photo collection.

    A folder is a gallery if it holds at least one image or a gallery.yaml.
    Folders with metadata but no direct images are parent galleries, used
    only to organise their children in navigation.
    """

    id: str
    slug: str                         # URL-safe path segments joined by "/"
    title: str
    description: Optional[str] = None
    path: str                         # Folder path relative to storage root
    cover: Optional[str] = None       # Cover image path
    photos: list[Photo] = Field(default_factory=list)
    date: Optional[datetime] = None
    last_modified: Optional[datetime] = None
    tags: list[str] = Field(default_factory=list)
    category: Optional[str] = None
    private: bool = False
    password: Optional[str] = None
    order: Optional[int] = None
    include_nested_photos: Optional[bool] = None
    is_parent_gallery: bool = False
    has_custom_metadata: bool = False

    @computed_field
    @property
    def photo_count(self) -> int:
        """Number of photos visible to the public."""
        return sum(1 for photo in self.photos if not photo.hidden)

    @property
    def is_protected(self) -> bool:
        return bool(self.password)


class ParentGalleryMetadata(CamelModel):
    """Display data for a container folder (gallery.yaml, no images)."""

    slug: str
    title: Optional[str] = None
    order: Optional[int] = None
