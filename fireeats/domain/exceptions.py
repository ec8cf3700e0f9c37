"""Domain exceptions for the FireEats service.

Defines domain-level exceptions that represent business rule violations
and store failures. These exceptions are independent of the HTTP layer;
the presentation layer maps them to responses in exception handlers.
"""

from typing import Any


class FireEatsException(Exception):
    """Base exception for all FireEats errors.

    All custom exceptions should inherit from this class to allow
    consistent error handling and logging. Presentation layer maps
    these to HTTP responses using message, error_code, and details.

    Attributes:
        message: Human-readable error description.
        error_code: Machine-readable error code.
        details: Additional error context (e.g. field, resource_id).
    """

    def __init__(
        self,
        message: str,
        error_code: str | None = None,
        details: dict[str, Any] | None = None,
    ) -> None:
        """Initialize the exception.

        Args:
            message: Human-readable error description.
            error_code: Optional machine-readable code; defaults to class name.
            details: Optional dict of extra context.
        """
        self.message = message
        self.error_code = error_code or self.__class__.__name__
        self.details = details or {}
        super().__init__(self.message)

    def to_dict(self) -> dict[str, Any]:
        """Return the JSON error body used by the API exception handler."""
        return {
            "error": self.error_code,
            "message": self.message,
            "details": self.details,
        }


class ValidationException(FireEatsException):
    """Raised when input validation fails (e.g. rating outside 1-5)."""

    def __init__(self, message: str, field: str | None = None) -> None:
        """Initialize with message and optional field name.

        Args:
            message: Description of the validation failure.
            field: Optional field or attribute that failed validation.
        """
        details = {"field": field} if field else {}
        super().__init__(message, "VALIDATION_ERROR", details)


class ResourceNotFoundException(FireEatsException):
    """Raised when a requested document is not found."""

    def __init__(self, resource_type: str, resource_id: str) -> None:
        """Initialize with resource type and id.

        Args:
            resource_type: Type of resource (e.g. 'restaurant').
            resource_id: The ID that was not found.
        """
        super().__init__(
            f"{resource_type} not found: {resource_id}",
            "RESOURCE_NOT_FOUND",
            {"resource_type": resource_type, "resource_id": resource_id},
        )


class IndexOutOfRangeException(FireEatsException, IndexError):
    """Raised when a mirrored collection is indexed outside 0 <= index < count."""

    def __init__(self, index: int, count: int) -> None:
        super().__init__(
            f"Index {index} out of range for collection of {count} items",
            "INDEX_OUT_OF_RANGE",
            {"index": index, "count": count},
        )


class DataIntegrityException(FireEatsException):
    """Raised when a stored document cannot be decoded as the record it must hold."""

    def __init__(self, path: str, reason: str = "document is missing or malformed") -> None:
        """Initialize with the document path and reason.

        Args:
            path: Store path of the offending document.
            reason: Human-readable reason.
        """
        super().__init__(
            f"Unable to write to restaurant at path: {path}",
            "DATA_INTEGRITY_ERROR",
            {"path": path, "reason": reason},
        )


class TransactionConflictException(FireEatsException):
    """Raised by a store when a transaction attempt lost an optimistic-concurrency race."""

    def __init__(self, path: str | None = None) -> None:
        details = {"path": path} if path else {}
        super().__init__(
            "Document was updated by another client; retry.",
            "TRANSACTION_CONFLICT",
            details,
        )


class TransactionFailedException(FireEatsException):
    """Raised when a transaction could not be committed (retries exhausted or write failed)."""

    def __init__(self, message: str, attempts: int | None = None) -> None:
        """Initialize with message and optional attempt count.

        Args:
            message: Description of the failure.
            attempts: Number of attempts made before giving up.
        """
        details = {"attempts": attempts} if attempts is not None else {}
        super().__init__(message, "TRANSACTION_FAILED", details)


class StoreNotConfiguredException(FireEatsException):
    """Raised when an operation requires a document store that is not configured."""

    def __init__(self) -> None:
        super().__init__(
            message="This operation requires a document store that is not configured.",
            error_code="SERVICE_UNAVAILABLE",
        )
