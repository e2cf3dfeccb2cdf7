# content_engine/scanners/sidecar.py
"""Loading of YAML sidecar files that sit next to content."""

import logging
from typing import Any, Dict, Optional, Type, TypeVar

import anyio
import yaml
from pydantic import BaseModel, ValidationError

from ..exceptions import MetadataError
from ..storage.base import StorageAdapter

logger = logging.getLogger(__name__)

M = TypeVar("M", bound=BaseModel)

GALLERY_METADATA_FILE = "gallery.yaml"
PHOTOS_METADATA_FILE = "photos.yaml"
PAGE_METADATA_FILE = "page.yaml"


async def load_yaml(storage: StorageAdapter, key: str) -> Optional[Any]:
    """
    Read and parse a YAML sidecar.

    Returns:
        None if the file does not exist, {} for an empty file, else the data

    Raises:
        MetadataError: If the file exists but is not valid YAML
    """
    text = await storage.get_text(key)
    if text is None:
        return None

    try:
        # Run YAML parsing in a thread to avoid blocking the event loop
        data = await anyio.to_thread.run_sync(yaml.safe_load, text)
    except yaml.YAMLError as e:
        raise MetadataError(key, str(e)) from e

    return {} if data is None else data


def validate_metadata(model: Type[M], data: Dict[str, Any], source: str) -> M:
    """
    Validate sidecar or header fields, dropping only the ones that fail.

    Fields that fail fall back to their defaults; the others are kept.

    Raises:
        MetadataError: If the remaining fields still do not validate
    """
    try:
        return model.model_validate(data)
    except ValidationError as e:
        invalid = {err["loc"][0] for err in e.errors() if err["loc"]}
        for name, field in model.model_fields.items():
            if name in invalid or field.alias in invalid:
                invalid.update({name, field.alias})
        invalid.discard(None)
        logger.warning(
            "Ignoring invalid fields %s in %s",
            ", ".join(sorted(str(name) for name in invalid)),
            source,
        )

    remaining = {key: value for key, value in data.items() if key not in invalid}
    try:
        return model.model_validate(remaining)
    except ValidationError as e:
        raise MetadataError(source, str(e)) from e
