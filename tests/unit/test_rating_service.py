"""Tests for RatingService (review write + aggregate update in one transaction)."""

from datetime import datetime, timezone

import pytest

from fireeats.application.interfaces.store import DocumentReference
from fireeats.application.services import RatingService
from fireeats.domain.entities import Restaurant, Review
from fireeats.domain.exceptions import (
    DataIntegrityException,
    TransactionFailedException,
    ValidationException,
)
from fireeats.infrastructure.memory import MemoryDocumentStore
from tests.conftest import restaurant_data


def _review(rating: int = 5, text: str = "Great pizza") -> Review:
    return Review(
        rating=rating,
        user_id="user-1",
        username="Sam",
        text=text,
        date=datetime(2024, 5, 1, 12, 0, tzinfo=timezone.utc),
    )


async def _restaurant(ref: DocumentReference) -> Restaurant:
    snapshot = await ref.get()
    restaurant = Restaurant.from_dict(snapshot.to_dict())
    assert restaurant is not None
    return restaurant


class TestAddReview:
    async def test_updates_aggregate_and_writes_review(
        self, store: MemoryDocumentStore, restaurant_ref: DocumentReference
    ) -> None:
        """3 ratings averaging 4.0 plus a 5 gives 4 ratings averaging 4.25."""
        review_id = await RatingService(store).add_review(restaurant_ref, _review(5))

        restaurant = await _restaurant(restaurant_ref)
        assert restaurant.rating_count == 4
        assert restaurant.average_rating == pytest.approx(4.25)

        stored = await restaurant_ref.collection("ratings").document(review_id).get()
        assert stored.exists
        assert Review.from_dict(stored.to_dict()) == _review(5)

    async def test_first_review_sets_average(self, store: MemoryDocumentStore) -> None:
        ref = store.collection("restaurants").document("fresh")
        await ref.set(
            Restaurant("New Spot", "Pho", "Millbrae", 1, 0, 0.0).to_dict()
        )
        await RatingService(store).add_review(ref, _review(3))
        restaurant = await _restaurant(ref)
        assert restaurant.rating_count == 1
        assert restaurant.average_rating == pytest.approx(3.0)

    async def test_sequential_reviews_accumulate(
        self, store: MemoryDocumentStore, restaurant_ref: DocumentReference
    ) -> None:
        service = RatingService(store)
        await service.add_review(restaurant_ref, _review(5))
        await service.add_review(restaurant_ref, _review(1))
        restaurant = await _restaurant(restaurant_ref)
        assert restaurant.rating_count == 5
        assert restaurant.average_rating == pytest.approx((4.0 * 3 + 5 + 1) / 5)
        assert len(await restaurant_ref.collection("ratings").get()) == 2

    async def test_conflict_is_retried_against_fresh_parent(
        self, store: MemoryDocumentStore, restaurant_ref: DocumentReference
    ) -> None:
        store.inject_conflicts(2)
        await RatingService(store).add_review(restaurant_ref, _review(5))
        restaurant = await _restaurant(restaurant_ref)
        assert restaurant.rating_count == 4
        assert len(await restaurant_ref.collection("ratings").get()) == 1

    async def test_retries_exhausted(
        self, store: MemoryDocumentStore, restaurant_ref: DocumentReference
    ) -> None:
        store.inject_conflicts(3)
        with pytest.raises(TransactionFailedException) as exc_info:
            await RatingService(store, max_attempts=3).add_review(restaurant_ref, _review(5))
        assert exc_info.value.details == {"attempts": 3}
        assert (await _restaurant(restaurant_ref)).rating_count == 3
        assert await restaurant_ref.collection("ratings").get() == []

    async def test_write_failure_leaves_no_review(
        self, store: MemoryDocumentStore, restaurant_ref: DocumentReference
    ) -> None:
        """A rejected parent update rolls back the review write as well."""
        store.fail_writes_to(restaurant_ref.path)
        with pytest.raises(TransactionFailedException):
            await RatingService(store).add_review(restaurant_ref, _review(5))
        assert await restaurant_ref.collection("ratings").get() == []
        assert (await _restaurant(restaurant_ref)).rating_count == 3

    async def test_missing_restaurant(self, store: MemoryDocumentStore) -> None:
        ref = store.collection("restaurants").document("ghost")
        with pytest.raises(DataIntegrityException) as exc_info:
            await RatingService(store).add_review(ref, _review(4))
        assert exc_info.value.message == "Unable to write to restaurant at path: restaurants/ghost"

    async def test_malformed_restaurant(self, store: MemoryDocumentStore) -> None:
        ref = store.collection("restaurants").document("broken")
        await ref.set({"name": "Broken", "numRatings": "three"})
        with pytest.raises(DataIntegrityException):
            await RatingService(store).add_review(ref, _review(4))
        snapshot = await ref.get()
        assert snapshot.to_dict() == {"name": "Broken", "numRatings": "three"}
        assert store.commit_count == 1

    async def test_negative_rating_count_on_restaurant(self, store: MemoryDocumentStore) -> None:
        ref = store.collection("restaurants").document("negative")
        await ref.set({**restaurant_data("Negative", num_ratings=2, avg_rating=3.0), "numRatings": -1})
        with pytest.raises(DataIntegrityException) as exc_info:
            await RatingService(store).add_review(ref, _review(4))
        assert exc_info.value.details["path"] == "restaurants/negative"
        assert (await ref.get()).to_dict()["numRatings"] == -1
        assert store.commit_count == 1

    @pytest.mark.parametrize("rating", [0, 6, -1])
    async def test_rating_out_of_range(
        self, store: MemoryDocumentStore, restaurant_ref: DocumentReference, rating: int
    ) -> None:
        commits_before = store.commit_count
        with pytest.raises(ValidationException) as exc_info:
            await RatingService(store).add_review(restaurant_ref, _review(rating))
        assert exc_info.value.details == {"field": "rating"}
        assert store.commit_count == commits_before

    async def test_live_query_sees_one_aggregate_change(
        self, store: MemoryDocumentStore, restaurant_ref: DocumentReference
    ) -> None:
        """Watchers of the restaurant list see a single modification per review."""
        batches: list = []
        registration = store.collection("restaurants").on_snapshot(
            lambda changes, error: batches.append(changes)
        )
        await RatingService(store).add_review(restaurant_ref, _review(2))
        registration.remove()
        assert len(batches) == 2
        (change,) = batches[1]
        assert change.type.value == "modified"
        assert change.document.data["numRatings"] == 4
