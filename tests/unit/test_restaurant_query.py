"""Tests for build_query and RestaurantFilters."""

import pytest

from fireeats.application.services import RestaurantFilters, build_query
from fireeats.domain.exceptions import ValidationException
from fireeats.infrastructure.memory import MemoryDocumentStore
from tests.conftest import add_restaurant


@pytest.fixture
async def seeded(store: MemoryDocumentStore) -> MemoryDocumentStore:
    await add_restaurant(store, "a", name="Alpha", category="Pizza", city="Belmont", price=1, avg_rating=3.0)
    await add_restaurant(store, "b", name="Bravo", category="Pizza", city="Cupertino", price=2, avg_rating=5.0)
    await add_restaurant(store, "c", name="Charlie", category="Pho", city="Belmont", price=1, avg_rating=4.0)
    return store


async def _ids(query) -> list[str]:
    return [snapshot.id for snapshot in await query.get()]


async def test_no_filters_returns_everything(seeded: MemoryDocumentStore) -> None:
    assert sorted(await _ids(build_query(seeded))) == ["a", "b", "c"]


async def test_empty_strings_mean_no_filter(seeded: MemoryDocumentStore) -> None:
    filters = RestaurantFilters(category="", city="", sort_by="")
    assert filters.is_empty
    assert sorted(await _ids(build_query(seeded, filters))) == ["a", "b", "c"]


async def test_filters_combine(seeded: MemoryDocumentStore) -> None:
    filters = RestaurantFilters(city="Belmont", price=1)
    assert sorted(await _ids(build_query(seeded, filters))) == ["a", "c"]
    filters = RestaurantFilters(category="Pizza", city="Belmont", price=1)
    assert await _ids(build_query(seeded, filters)) == ["a"]


async def test_sort_is_ascending(seeded: MemoryDocumentStore) -> None:
    filters = RestaurantFilters(sort_by="avgRating")
    assert await _ids(build_query(seeded, filters)) == ["a", "c", "b"]


async def test_limit(seeded: MemoryDocumentStore) -> None:
    query = build_query(seeded, RestaurantFilters(sort_by="name"), limit=2)
    assert await _ids(query) == ["a", "b"]


@pytest.mark.parametrize("price", [0, 4])
def test_invalid_price(store: MemoryDocumentStore, price: int) -> None:
    with pytest.raises(ValidationException) as exc_info:
        build_query(store, RestaurantFilters(price=price))
    assert exc_info.value.details == {"field": "price"}


def test_invalid_sort_field(store: MemoryDocumentStore) -> None:
    with pytest.raises(ValidationException) as exc_info:
        build_query(store, RestaurantFilters(sort_by="rating"))
    assert exc_info.value.details == {"field": "sort_by"}


def test_describe_labels() -> None:
    assert RestaurantFilters(category="Pizza", city="Belmont", price=3).describe() == [
        "Pizza",
        "Belmont",
        "$$$",
    ]
    assert RestaurantFilters(sort_by="name").describe() == []
    assert RestaurantFilters(sort_by="name").is_empty
