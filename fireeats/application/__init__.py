"""Application layer: store interfaces, the mirrored collection, services.

Depends only on domain and protocol definitions (DIP).
Infrastructure implements the interfaces (memory store, Firestore REST).
"""

from fireeats.application.interfaces import DocumentStore
from fireeats.application.local_collection import LocalCollection
from fireeats.application.services import (
    RatingService,
    RestaurantFilters,
    SeedService,
    build_query,
)

__all__ = [
    "DocumentStore",
    "LocalCollection",
    "RatingService",
    "RestaurantFilters",
    "SeedService",
    "build_query",
]
