# content_engine/metadata/exif.py
"""
Embedded image metadata extraction.

The engine only needs a narrow contract: bytes in, optional ExifData out.
PillowExifExtractor reads EXIF (IFD0, Exif sub-IFD, GPS), the Windows XP
tags Lightroom writes, and IPTC. Any failure means "no embedded metadata".
"""

import logging
from datetime import datetime
from io import BytesIO
from typing import Any, Dict, List, Optional, Protocol

import anyio
from PIL import ExifTags, Image, IptcImagePlugin

from ..models.photo import ExifData

logger = logging.getLogger(__name__)

_EXIF_DATE_FORMAT = "%Y:%m:%d %H:%M:%S"

# Windows XP tags (UTF-16LE byte strings in IFD0)
_XP_TITLE = 0x9C9B
_XP_COMMENT = 0x9C9C
_XP_KEYWORDS = 0x9C9E

# IPTC application record datasets
_IPTC_OBJECT_NAME = (2, 5)
_IPTC_KEYWORDS = (2, 25)
_IPTC_CAPTION = (2, 120)


class MetadataExtractor(Protocol):
    """Anything that can pull descriptive fields out of image bytes."""

    async def extract(self, data: bytes) -> Optional[ExifData]:
        ...


def _clean_string(value: Any) -> Optional[str]:
    if isinstance(value, bytes):
        value = value.decode("utf-8", errors="replace")
    if not isinstance(value, str):
        return None
    value = value.replace("\x00", "").strip()
    return value or None


def _decode_xp(value: Any) -> Optional[str]:
    if isinstance(value, (tuple, list)):
        value = bytes(value)
    if isinstance(value, bytes):
        return _clean_string(value.decode("utf-16-le", errors="replace"))
    return _clean_string(value)


def _to_float(value: Any) -> Optional[float]:
    try:
        result = float(value)
    except (TypeError, ValueError, ZeroDivisionError):
        return None
    return None if result != result else result    # NaN from 0/0 rationals


def _parse_exif_date(value: Any) -> Optional[datetime]:
    text = _clean_string(value)
    if not text:
        return None
    try:
        return datetime.strptime(text[:19], _EXIF_DATE_FORMAT)
    except ValueError:
        return None


def _split_keywords(value: Optional[str]) -> List[str]:
    if not value:
        return []
    return [k.strip() for k in value.replace(";", ",").split(",") if k.strip()]


def _format_shutter_speed(exposure: Optional[float]) -> Optional[str]:
    if not exposure or exposure <= 0:
        return None
    if exposure >= 1:
        return f"{exposure:g}s"
    return f"1/{round(1 / exposure)}s"


def _gps_to_decimal(coordinate: Any, ref: Any) -> Optional[float]:
    if not isinstance(coordinate, (tuple, list)) or len(coordinate) != 3:
        return None
    parts = [_to_float(part) for part in coordinate]
    if any(part is None for part in parts):
        return None
    degrees, minutes, seconds = parts
    decimal = degrees + minutes / 60 + seconds / 3600
    if _clean_string(ref) in ("S", "W"):
        decimal = -decimal
    return round(decimal, 6)


def _iptc_values(iptc: Dict[Any, Any], key: tuple) -> List[str]:
    value = iptc.get(key)
    if value is None:
        return []
    values = value if isinstance(value, list) else [value]
    return [text for text in (_clean_string(v) for v in values) if text]


def _read_image(data: bytes) -> Optional[ExifData]:
    with Image.open(BytesIO(data)) as img:
        width, height = img.size
        exif = img.getexif()
        exif_ifd = exif.get_ifd(ExifTags.IFD.Exif)
        gps_ifd = exif.get_ifd(ExifTags.IFD.GPSInfo)
        iptc = IptcImagePlugin.getiptcinfo(img) or {}

    if not exif and not iptc:
        return None

    base = ExifTags.Base
    gps = ExifTags.GPS

    iptc_title = _iptc_values(iptc, _IPTC_OBJECT_NAME)
    iptc_caption = _iptc_values(iptc, _IPTC_CAPTION)
    keywords = _iptc_values(iptc, _IPTC_KEYWORDS) or _split_keywords(
        _decode_xp(exif.get(_XP_KEYWORDS))
    )

    date_taken = _parse_exif_date(exif_ifd.get(base.DateTimeOriginal)) or _parse_exif_date(
        exif.get(base.DateTime)
    )

    iso = exif_ifd.get(base.ISOSpeedRatings)
    if isinstance(iso, (tuple, list)):
        iso = iso[0] if iso else None

    return ExifData(
        date_time_original=date_taken,
        image_description=(
            _clean_string(exif.get(base.ImageDescription))
            or (iptc_caption[0] if iptc_caption else None)
            or _decode_xp(exif.get(_XP_COMMENT))
        ),
        title=(iptc_title[0] if iptc_title else None) or _decode_xp(exif.get(_XP_TITLE)),
        keywords=keywords or None,
        artist=_clean_string(exif.get(base.Artist)),
        copyright=_clean_string(exif.get(base.Copyright)),
        make=_clean_string(exif.get(base.Make)),
        model=_clean_string(exif.get(base.Model)),
        lens_model=_clean_string(exif_ifd.get(base.LensModel)),
        focal_length=_to_float(exif_ifd.get(base.FocalLength)),
        aperture=_to_float(exif_ifd.get(base.FNumber)),
        iso=int(iso) if isinstance(iso, (int, float)) else None,
        shutter_speed=_format_shutter_speed(_to_float(exif_ifd.get(base.ExposureTime))),
        latitude=_gps_to_decimal(gps_ifd.get(gps.GPSLatitude), gps_ifd.get(gps.GPSLatitudeRef)),
        longitude=_gps_to_decimal(
            gps_ifd.get(gps.GPSLongitude), gps_ifd.get(gps.GPSLongitudeRef)
        ),
        width=width,
        height=height,
    )


class PillowExifExtractor:
    """Extract embedded metadata with Pillow, off the event loop."""

    async def extract(self, data: bytes) -> Optional[ExifData]:
        try:
            return await anyio.to_thread.run_sync(_read_image, data)
        except Exception as e:
            logger.warning("Could not read embedded metadata: %s", e)
            return None


def format_exif_for_display(exif: ExifData) -> Dict[str, str]:
    """Human-readable labels for the camera settings panel."""
    result: Dict[str, str] = {}

    if exif.make and exif.model:
        result["Camera"] = f"{exif.make} {exif.model}"
    elif exif.model:
        result["Camera"] = exif.model

    if exif.lens_model:
        result["Lens"] = exif.lens_model
    if exif.focal_length:
        result["Focal Length"] = f"{exif.focal_length:g}mm"
    if exif.aperture:
        result["Aperture"] = f"f/{exif.aperture:g}"
    if exif.shutter_speed:
        result["Shutter Speed"] = exif.shutter_speed
    if exif.iso:
        result["ISO"] = str(exif.iso)
    if exif.date_time_original:
        result["Date Taken"] = exif.date_time_original.strftime("%Y-%m-%d")
    if exif.latitude is not None and exif.longitude is not None:
        result["Location"] = f"{exif.latitude:.4f}, {exif.longitude:.4f}"

    return result
