"""Domain value objects (immutable, self-validating)."""

from fireeats.domain.value_objects.core import (
    MAX_RATING,
    MIN_RATING,
    AggregateRating,
    validate_rating,
)

__all__ = [
    "AggregateRating",
    "MAX_RATING",
    "MIN_RATING",
    "validate_rating",
]
