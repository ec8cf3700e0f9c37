"""Application services: ratings, restaurant queries, seeding."""

from fireeats.application.services.rating_service import RatingService
from fireeats.application.services.restaurant_query import (
    DEFAULT_LIMIT,
    RestaurantFilters,
    build_query,
)
from fireeats.application.services.seed_service import SeedService

__all__ = [
    "DEFAULT_LIMIT",
    "RatingService",
    "RestaurantFilters",
    "SeedService",
    "build_query",
]
