"""Domain layer: entities, value objects, enums, and exceptions.

No dependencies on infrastructure or presentation. Used by application
and infrastructure layers.
"""

from fireeats.domain.entities import DocumentSerializable, Restaurant, Review
from fireeats.domain.enums import SortField
from fireeats.domain.exceptions import (
    DataIntegrityException,
    FireEatsException,
    IndexOutOfRangeException,
    ResourceNotFoundException,
    TransactionConflictException,
    TransactionFailedException,
    ValidationException,
)
from fireeats.domain.value_objects import AggregateRating

__all__ = [
    # Entities
    "DocumentSerializable",
    "Restaurant",
    "Review",
    # Enums
    "SortField",
    # Exceptions
    "DataIntegrityException",
    "FireEatsException",
    "IndexOutOfRangeException",
    "ResourceNotFoundException",
    "TransactionConflictException",
    "TransactionFailedException",
    "ValidationException",
    # Value objects
    "AggregateRating",
]
