# content_engine/api/schemas.py
"""API request/response schemas."""

from typing import Literal, Optional

from pydantic import BaseModel

ContentIndexActionName = Literal["rebuild-index", "invalidate"]


class ContentIndexActionRequest(BaseModel):
    action: str


class ContentIndexActionResponse(BaseModel):
    success: bool
    action: ContentIndexActionName
    message: str
    stats: Optional[dict] = None
