"""Domain value objects for the FireEats service.

Value objects are immutable types that represent domain concepts with
self-validation. They have no identity, only value.
"""

from dataclasses import dataclass

MIN_RATING = 1
MAX_RATING = 5


def validate_rating(rating: int) -> None:
    """Raise ValueError unless rating is an int on the 1-5 star scale."""
    if isinstance(rating, bool) or not isinstance(rating, int):
        raise ValueError("Rating must be an integer")
    if rating < MIN_RATING or rating > MAX_RATING:
        raise ValueError(f"Rating must be between {MIN_RATING} and {MAX_RATING}")


@dataclass(frozen=True)
class AggregateRating:
    """Cached rating summary stored on a restaurant (numRatings, avgRating).

    The average is a running mean over every review in the restaurant's
    ratings subcollection.
    """

    count: int
    average: float

    def __post_init__(self) -> None:
        if self.count < 0:
            raise ValueError("Rating count cannot be negative")

    def add(self, rating: int) -> "AggregateRating":
        """Return the aggregate after one more rating.

        new_average = (count * average + rating) / (count + 1)
        """
        validate_rating(rating)
        new_count = self.count + 1
        new_average = (float(self.count) * self.average + float(rating)) / float(new_count)
        return AggregateRating(count=new_count, average=new_average)

    def to_fields(self) -> dict[str, int | float]:
        """Stored field names for a partial update of the parent document."""
        return {"numRatings": self.count, "avgRating": self.average}
