"""Infrastructure exceptions for document store operations.

Store errors extend FireEatsException so presentation can map them
to HTTP responses consistently.
"""

from fireeats.domain.exceptions import FireEatsException


class DocumentStoreException(FireEatsException):
    """Base exception for document store operations."""


class StoreWriteError(DocumentStoreException):
    """The store rejected a write; nothing from the batch was applied."""

    def __init__(self, path: str, reason: str) -> None:
        super().__init__(
            f"Write rejected for {path}: {reason}",
            "STORE_WRITE_ERROR",
            {"path": path, "reason": reason},
        )


class StoreUnavailableError(DocumentStoreException):
    """The store could not be reached or returned an unexpected response."""

    def __init__(self, operation: str, reason: str) -> None:
        super().__init__(
            f"Document store unavailable during {operation}: {reason}",
            "STORE_UNAVAILABLE",
            {"operation": operation, "reason": reason},
        )
