"""Domain enumerations for the FireEats service.

Enums represent fixed sets of domain values (e.g. sortable restaurant fields).
"""

from enum import Enum


class SortField(str, Enum):
    """Restaurant fields a listing can be ordered by (stored field names)."""

    NAME = "name"
    CATEGORY = "category"
    CITY = "city"
    PRICE = "price"
    AVG_RATING = "avgRating"
    NUM_RATINGS = "numRatings"

    @classmethod
    def values(cls) -> list[str]:
        """Return all valid sort field values as strings.

        Returns:
            List of enum value strings (e.g. for validation or serialization).
        """
        return [field.value for field in cls]
