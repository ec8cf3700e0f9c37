"""Domain entities (decoded document records).

Pure domain models; no store or transport concerns.
"""

from fireeats.domain.entities.restaurant import Restaurant
from fireeats.domain.entities.review import Review
from fireeats.domain.entities.serializable import DocumentSerializable

__all__ = [
    "DocumentSerializable",
    "Restaurant",
    "Review",
]
