# content_engine/api/routes/images.py
"""Image pass-through for storage backends without public URLs."""

from fastapi import APIRouter, Response

from ...storage.base import normalize_key
from ...utils.files import detect_content_type, is_image_file
from ..dependencies import StorageDep
from ..errors import APIError

router = APIRouter()

IMMUTABLE_CACHE_CONTROL = "public, max-age=31536000, immutable"


@router.get("/images/{key:path}")
@router.get("/local-images/{key:path}")
@router.get("/demo-content/{key:path}")
async def get_image(key: str, storage: StorageDep):
    """Serve image bytes straight from storage."""
    key = normalize_key(key)
    if not key or ".." in key.split("/") or not is_image_file(key):
        raise APIError.forbidden("Only image files can be served")

    data = await storage.get(key)
    if data is None:
        raise APIError.not_found("Image", key)

    return Response(
        content=data,
        media_type=detect_content_type(key),
        headers={"Cache-Control": IMMUTABLE_CACHE_CONTROL},
    )
