# content_engine/models/storage.py

from datetime import datetime
from pydantic import BaseModel


class FileInfo(BaseModel):
    """
    A directory-listing record produced by a storage adapter.
    Never persisted.
    """

    name: str
    path: str                         # Relative to storage root
    size: int = 0                     # Always 0 for directories
    last_modified: datetime
    is_directory: bool = False
