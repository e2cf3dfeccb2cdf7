# content_engine/exceptions.py
"""Exception hierarchy for the content engine."""


class ContentEngineError(Exception):
    """Base exception for the content engine."""


class StorageConfigError(ContentEngineError):
    """Raised when no usable storage backend is configured."""


class StorageError(ContentEngineError):
    """Raised when a storage backend fails to complete an operation."""


class ReadOnlyStorageError(StorageError):
    """Raised on any mutation against a read-only backend."""

    def __init__(self, operation: str = "write"):
        super().__init__(
            f"Cannot {operation}: storage is read-only. "
            "Configure a writable backend to enable uploads and editing."
        )
        self.operation = operation


class MetadataError(ContentEngineError):
    """Raised when a sidecar metadata file cannot be parsed."""

    def __init__(self, path: str, reason: str):
        super().__init__(f"Invalid metadata in {path}: {reason}")
        self.path = path
        self.reason = reason
