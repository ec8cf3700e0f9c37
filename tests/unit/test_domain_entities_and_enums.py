"""Tests for domain records (Restaurant, Review), catalogue helpers and enums."""

from datetime import datetime, timedelta, timezone

import pytest

from fireeats.domain.entities import Restaurant, Review
from fireeats.domain.entities.catalog import (
    CATEGORIES,
    CITIES,
    price_from_string,
    price_string,
)
from fireeats.domain.enums import SortField


def _restaurant_fields() -> dict:
    return {
        "name": "Best Spot",
        "category": "Dim Sum",
        "city": "Palo Alto",
        "price": 3,
        "numRatings": 2,
        "avgRating": 4.5,
    }


class TestRestaurant:
    def test_round_trip(self) -> None:
        restaurant = Restaurant.from_dict(_restaurant_fields())
        assert restaurant is not None
        assert restaurant.rating_count == 2
        assert restaurant.average_rating == 4.5
        assert restaurant.to_dict() == _restaurant_fields()

    def test_integer_average_accepted_as_float(self) -> None:
        data = _restaurant_fields() | {"avgRating": 4}
        restaurant = Restaurant.from_dict(data)
        assert restaurant is not None
        assert isinstance(restaurant.average_rating, float)

    @pytest.mark.parametrize("missing", ["name", "category", "city", "price", "numRatings", "avgRating"])
    def test_missing_field_returns_none(self, missing: str) -> None:
        data = _restaurant_fields()
        del data[missing]
        assert Restaurant.from_dict(data) is None

    @pytest.mark.parametrize(
        "field,value",
        [("price", "2"), ("numRatings", True), ("numRatings", 2.0), ("avgRating", "4.5"), ("name", None)],
    )
    def test_wrong_type_returns_none(self, field: str, value: object) -> None:
        assert Restaurant.from_dict(_restaurant_fields() | {field: value}) is None

    def test_extra_fields_ignored(self) -> None:
        restaurant = Restaurant.from_dict(_restaurant_fields() | {"photo": "x.png"})
        assert restaurant is not None
        assert "photo" not in restaurant.to_dict()

    def test_aggregate_property(self) -> None:
        restaurant = Restaurant.from_dict(_restaurant_fields())
        assert restaurant.aggregate.count == 2
        assert restaurant.aggregate.average == 4.5


class TestReview:
    def test_round_trip(self) -> None:
        when = datetime(2024, 3, 1, 8, 30, tzinfo=timezone.utc)
        review = Review(rating=4, user_id="u1", username="Ada", text="Nice", date=when)
        data = review.to_dict()
        assert data == {
            "rating": 4,
            "userId": "u1",
            "userName": "Ada",
            "text": "Nice",
            "timestamp": when,
        }
        assert Review.from_dict(data) == review

    def test_timestamp_normalized_to_utc(self) -> None:
        plus_two = timezone(timedelta(hours=2))
        data = {
            "rating": 5,
            "userId": "u1",
            "userName": "Ada",
            "text": "",
            "timestamp": datetime(2024, 3, 1, 10, 30, tzinfo=plus_two),
        }
        review = Review.from_dict(data)
        assert review is not None
        assert review.date == datetime(2024, 3, 1, 8, 30, tzinfo=timezone.utc)
        assert review.date.utcoffset() == timedelta(0)

    def test_string_timestamp_rejected(self) -> None:
        data = {
            "rating": 5,
            "userId": "u1",
            "userName": "Ada",
            "text": "",
            "timestamp": "2024-03-01T08:30:00Z",
        }
        assert Review.from_dict(data) is None


class TestCatalog:
    @pytest.mark.parametrize("price,label", [(1, "$"), (2, "$$"), (3, "$$$"), (0, ""), (4, "")])
    def test_price_string(self, price: int, label: str) -> None:
        assert price_string(price) == label

    def test_price_from_string(self) -> None:
        assert price_from_string("$$") == 2
        assert price_from_string("$$$$") is None

    def test_catalogue_values(self) -> None:
        assert "Pizza" in CATEGORIES
        assert "San Francisco" in CITIES


class TestSortField:
    def test_values_use_stored_field_names(self) -> None:
        assert SortField.values() == ["name", "category", "city", "price", "avgRating", "numRatings"]
        assert SortField("avgRating") is SortField.AVG_RATING
