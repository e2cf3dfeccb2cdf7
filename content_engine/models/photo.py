# content_engine/models/photo.py

from datetime import datetime
from typing import Optional
from pydantic import BaseModel, ConfigDict

from .base import CamelModel, FlexibleDatetime, TagList


class ExifData(CamelModel):
    """Descriptive fields embedded in an image file."""

    # Date/Time
    date_time_original: FlexibleDatetime = None

    # Description (Lightroom / IPTC)
    image_description: Optional[str] = None
    title: Optional[str] = None
    keywords: Optional[list[str]] = None

    # Author
    artist: Optional[str] = None
    copyright: Optional[str] = None

    # Camera
    make: Optional[str] = None
    model: Optional[str] = None
    lens_model: Optional[str] = None
    focal_length: Optional[float] = None
    aperture: Optional[float] = None
    iso: Optional[int] = None
    shutter_speed: Optional[str] = None

    # GPS
    latitude: Optional[float] = None
    longitude: Optional[float] = None

    # Dimensions
    width: Optional[int] = None
    height: Optional[int] = None


class PhotoOverride(BaseModel):
    """One record of a gallery's photos.yaml sidecar."""

    model_config = ConfigDict(extra="ignore", coerce_numbers_to_str=True)

    filename: str
    title: Optional[str] = None
    description: Optional[str] = None
    tags: TagList = None
    hidden: bool = False
    order: Optional[float] = None


class Photo(CamelModel):
    """
    One image within a gallery.
    Recreated on every scan; edits go through the sidecar file.
    """

    id: str                           # Filename without extension
    filename: str
    path: str                         # Relative to storage root, unique per gallery
    title: Optional[str] = None
    description: Optional[str] = None
    tags: Optional[list[str]] = None
    date_taken: Optional[datetime] = None
    exif: Optional[ExifData] = None
    order: Optional[float] = None
    hidden: bool = False
    size: int = 0
    width: Optional[int] = None
    height: Optional[int] = None

