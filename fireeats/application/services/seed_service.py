"""Seed service: write random sample restaurants (the "Populate" action)."""

from __future__ import annotations

import logging
import random

from fireeats.application.interfaces.store import DocumentStore
from fireeats.core.constants import COLLECTION_RESTAURANTS, DEFAULT_SEED_COUNT
from fireeats.domain.entities.restaurant import Restaurant
from fireeats.domain.exceptions import ValidationException

logger = logging.getLogger(__name__)

NAME_WORDS: tuple[str, ...] = (
    "Bar", "Fire", "Grill", "Drive Thru", "Place", "Best", "Spot", "Prime", "Eatin'",
)
SEED_CITIES: tuple[str, ...] = (
    "San Francisco", "Mountain View", "Palo Alto", "Redwood City", "San Mateo",
    "Cupertino", "San Jose", "Daly City", "Millbrae", "Belmont",
)
SEED_CATEGORIES: tuple[str, ...] = (
    "Pizza", "Burgers", "American", "Dim Sum", "Pho", "Mexican", "Hot Pot",
)


class SeedService:
    """Create unrated restaurants with random names, cities, categories and prices."""

    def __init__(self, store: DocumentStore, rng: random.Random | None = None) -> None:
        self._store = store
        self._rng = rng or random.Random()

    def random_restaurant(self) -> Restaurant:
        rng = self._rng
        return Restaurant(
            name=f"{rng.choice(NAME_WORDS)} {rng.choice(NAME_WORDS)}",
            category=rng.choice(SEED_CATEGORIES),
            city=rng.choice(SEED_CITIES),
            price=rng.randint(1, 3),
            rating_count=0,
            average_rating=0.0,
        )

    async def populate(self, count: int = DEFAULT_SEED_COUNT) -> list[str]:
        """Write count random restaurants; return their document IDs.

        Raises:
            ValidationException: If count is negative.
        """
        if count < 0:
            raise ValidationException("count cannot be negative", field="count")
        collection = self._store.collection(COLLECTION_RESTAURANTS)
        created: list[str] = []
        for _ in range(count):
            ref = collection.document()
            await ref.set(self.random_restaurant().to_dict())
            created.append(ref.id)
        logger.info("Populated %d restaurants", len(created))
        return created
