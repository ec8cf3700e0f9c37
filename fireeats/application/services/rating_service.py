"""Rating application service: add a review and refresh the restaurant's aggregate.

The review document and the parent's numRatings/avgRating are written in
one store transaction. The parent is re-read inside the transaction so a
concurrent review is never lost; the store retries the whole function when
another writer commits to the parent first.
"""

from __future__ import annotations

import logging

from fireeats.application.interfaces.store import (
    DocumentReference,
    DocumentStore,
    Transaction,
)
from fireeats.core.constants import SUBCOLLECTION_RATINGS
from fireeats.domain.entities.restaurant import Restaurant
from fireeats.domain.entities.review import Review
from fireeats.domain.exceptions import (
    DataIntegrityException,
    FireEatsException,
    ValidationException,
)
from fireeats.domain.value_objects.core import validate_rating

logger = logging.getLogger(__name__)


class RatingService:
    """Append reviews to a restaurant's ratings subcollection atomically."""

    def __init__(self, store: DocumentStore, max_attempts: int = 5) -> None:
        self._store = store
        self._max_attempts = max_attempts

    async def add_review(self, restaurant_ref: DocumentReference, review: Review) -> str:
        """Write review under restaurant_ref and update the cached aggregate.

        Returns:
            ID of the new review document.

        Raises:
            ValidationException: If the rating is outside 1-5.
            DataIntegrityException: If the restaurant is missing or cannot be decoded.
            TransactionFailedException: If every attempt conflicted or the commit failed.
        """
        try:
            validate_rating(review.rating)
        except ValueError as e:
            raise ValidationException(str(e), field="rating") from e

        review_ref = restaurant_ref.collection(SUBCOLLECTION_RATINGS).document()

        async def apply(transaction: Transaction) -> str:
            snapshot = await transaction.get(restaurant_ref)
            restaurant = Restaurant.from_dict(snapshot.to_dict()) if snapshot.exists else None
            if restaurant is None:
                raise DataIntegrityException(restaurant_ref.path)
            try:
                current = restaurant.aggregate
            except ValueError as exc:
                raise DataIntegrityException(restaurant_ref.path, str(exc)) from exc
            aggregate = current.add(review.rating)
            transaction.set(review_ref, review.to_dict())
            transaction.update(restaurant_ref, aggregate.to_fields())
            return review_ref.id

        try:
            review_id = await self._store.run_transaction(apply, max_attempts=self._max_attempts)
        except FireEatsException as e:
            logger.warning(
                "Failed to add review to %s: %s",
                restaurant_ref.path,
                e.message,
            )
            raise
        logger.info("Added review %s to %s", review_id, restaurant_ref.path)
        return review_id
