"""Restaurant domain record.

Stored in the top-level ``restaurants`` collection. The rating fields are a
cached aggregate over the restaurant's ``ratings`` subcollection.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any

from fireeats.domain.entities._fields import (
    any_missing,
    read_float,
    read_int,
    read_str,
)
from fireeats.domain.value_objects.core import AggregateRating


@dataclass(frozen=True)
class Restaurant:
    """Decoded restaurant document.

    Attributes:
        name: Display name.
        category: Cuisine category (e.g. 'Pizza').
        city: City the restaurant is in.
        price: Price tier from 1 ($) to 3 ($$$).
        rating_count: Number of reviews (stored as numRatings).
        average_rating: Mean review rating (stored as avgRating).
    """

    name: str
    category: str
    city: str
    price: int
    rating_count: int
    average_rating: float

    @property
    def aggregate(self) -> AggregateRating:
        """Cached rating summary as a value object."""
        return AggregateRating(count=self.rating_count, average=self.average_rating)

    def to_dict(self) -> dict[str, Any]:
        """Encode to the stored field map."""
        return {
            "name": self.name,
            "category": self.category,
            "city": self.city,
            "price": self.price,
            "numRatings": self.rating_count,
            "avgRating": self.average_rating,
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> Restaurant | None:
        """Decode a stored field map; None if any field is missing or mistyped."""
        name = read_str(data, "name")
        category = read_str(data, "category")
        city = read_str(data, "city")
        price = read_int(data, "price")
        rating_count = read_int(data, "numRatings")
        average_rating = read_float(data, "avgRating")
        if any_missing(name, category, city, price, rating_count, average_rating):
            return None
        return cls(
            name=name,
            category=category,
            city=city,
            price=price,
            rating_count=rating_count,
            average_rating=average_rating,
        )
