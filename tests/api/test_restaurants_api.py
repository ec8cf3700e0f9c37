"""Tests for restaurant and review endpoints (memory store behind the API)."""

import pytest
from httpx import AsyncClient

from fireeats.infrastructure.memory import MemoryDocumentStore
from fireeats.main import app
from tests.conftest import add_restaurant

BASE = "/api/v1/restaurants"


async def test_list_empty(client: AsyncClient) -> None:
    response = await client.get(BASE)
    assert response.status_code == 200
    assert response.json() == []


async def test_list_filters_and_skips_malformed(
    client: AsyncClient, store: MemoryDocumentStore
) -> None:
    await add_restaurant(store, "a", name="Alpha", city="Belmont", price=1)
    await add_restaurant(store, "b", name="Bravo", city="Cupertino", price=2)
    await store.document("restaurants/broken").set({"name": "Broken", "city": "Belmont"})

    response = await client.get(BASE, params={"city": "Belmont"})
    assert response.status_code == 200
    data = response.json()
    assert [item["id"] for item in data] == ["a"]
    assert data[0]["price_label"] == "$"
    assert data[0]["num_ratings"] == 0


async def test_list_sorted(client: AsyncClient, store: MemoryDocumentStore) -> None:
    await add_restaurant(store, "a", name="Charlie")
    await add_restaurant(store, "b", name="Alpha")
    response = await client.get(BASE, params={"sort_by": "name"})
    assert [item["name"] for item in response.json()] == ["Alpha", "Charlie"]


async def test_list_invalid_sort_returns_400(client: AsyncClient) -> None:
    response = await client.get(BASE, params={"sort_by": "rating"})
    assert response.status_code == 400
    body = response.json()
    assert body["error"] == "VALIDATION_ERROR"
    assert body["details"] == {"field": "sort_by"}


async def test_list_price_out_of_range_returns_422(client: AsyncClient) -> None:
    response = await client.get(BASE, params={"price": 4})
    assert response.status_code == 422


async def test_populate_creates_restaurants(client: AsyncClient) -> None:
    response = await client.post(f"{BASE}/populate", params={"count": 3})
    assert response.status_code == 201
    body = response.json()
    assert body["created"] == 3
    listed = await client.get(BASE)
    assert sorted(item["id"] for item in listed.json()) == sorted(body["ids"])
    assert all(item["num_ratings"] == 0 for item in listed.json())


async def test_populate_count_must_be_positive(client: AsyncClient) -> None:
    response = await client.post(f"{BASE}/populate", params={"count": 0})
    assert response.status_code == 422


async def test_populate_is_rate_limited(client: AsyncClient) -> None:
    for _ in range(10):
        response = await client.post(f"{BASE}/populate", params={"count": 1})
        assert response.status_code == 201
    response = await client.post(f"{BASE}/populate", params={"count": 1})
    assert response.status_code == 429


async def test_get_restaurant(client: AsyncClient, restaurant_ref) -> None:
    response = await client.get(f"{BASE}/r1")
    assert response.status_code == 200
    data = response.json()
    assert data["id"] == "r1"
    assert data["num_ratings"] == 3
    assert data["avg_rating"] == 4.0
    assert data["price_label"] == "$$"


async def test_get_missing_restaurant_returns_404(client: AsyncClient) -> None:
    response = await client.get(f"{BASE}/nope")
    assert response.status_code == 404
    assert response.json()["error"] == "RESOURCE_NOT_FOUND"


async def test_get_malformed_restaurant_returns_404(
    client: AsyncClient, store: MemoryDocumentStore
) -> None:
    await store.document("restaurants/broken").set({"name": "Broken"})
    response = await client.get(f"{BASE}/broken")
    assert response.status_code == 404


class TestAddRating:
    async def test_add_rating_updates_aggregate(self, client: AsyncClient, restaurant_ref) -> None:
        response = await client.post(
            f"{BASE}/r1/ratings",
            json={"rating": 5, "text": "Great", "user_id": "user-1", "username": "Sam"},
        )
        assert response.status_code == 201
        created = response.json()
        assert created["restaurant_id"] == "r1"

        restaurant = (await client.get(f"{BASE}/r1")).json()
        assert restaurant["num_ratings"] == 4
        assert restaurant["avg_rating"] == pytest.approx(4.25)

        reviews = (await client.get(f"{BASE}/r1/ratings")).json()
        assert [r["id"] for r in reviews] == [created["id"]]
        assert reviews[0]["username"] == "Sam"
        assert reviews[0]["text"] == "Great"

    async def test_username_defaults_to_anonymous(self, client: AsyncClient, restaurant_ref) -> None:
        response = await client.post(f"{BASE}/r1/ratings", json={"rating": 3, "user_id": "user-2"})
        assert response.status_code == 201
        reviews = (await client.get(f"{BASE}/r1/ratings")).json()
        assert reviews[0]["username"] == "Anonymous"
        assert reviews[0]["text"] == ""

    @pytest.mark.parametrize(
        "body",
        [
            {"rating": 7, "user_id": "u"},
            {"rating": 0, "user_id": "u"},
            {"rating": 4},
            {"rating": 4, "user_id": ""},
        ],
    )
    async def test_invalid_body_returns_422(self, client: AsyncClient, restaurant_ref, body: dict) -> None:
        response = await client.post(f"{BASE}/r1/ratings", json=body)
        assert response.status_code == 422
        assert response.json()["error"] == "VALIDATION_ERROR"
        assert (await client.get(f"{BASE}/r1")).json()["num_ratings"] == 3

    async def test_missing_restaurant_returns_409(self, client: AsyncClient) -> None:
        response = await client.post(f"{BASE}/ghost/ratings", json={"rating": 4, "user_id": "u"})
        assert response.status_code == 409
        body = response.json()
        assert body["error"] == "DATA_INTEGRITY_ERROR"
        assert body["message"] == "Unable to write to restaurant at path: restaurants/ghost"

    async def test_malformed_restaurant_returns_409(
        self, client: AsyncClient, store: MemoryDocumentStore
    ) -> None:
        await store.document("restaurants/broken").set({"name": "Broken", "numRatings": "x"})
        response = await client.post(f"{BASE}/broken/ratings", json={"rating": 4, "user_id": "u"})
        assert response.status_code == 409

    async def test_retries_exhausted_returns_503(
        self, client: AsyncClient, store: MemoryDocumentStore, restaurant_ref
    ) -> None:
        store.inject_conflicts(100)
        response = await client.post(f"{BASE}/r1/ratings", json={"rating": 4, "user_id": "u"})
        assert response.status_code == 503
        assert response.json()["error"] == "TRANSACTION_FAILED"
        store.clear_failures()
        assert (await client.get(f"{BASE}/r1/ratings")).json() == []


async def test_ratings_of_missing_restaurant_returns_404(client: AsyncClient) -> None:
    response = await client.get(f"{BASE}/ghost/ratings")
    assert response.status_code == 404


async def test_store_not_configured_returns_503(client: AsyncClient) -> None:
    app.state.store = None
    response = await client.get(BASE)
    assert response.status_code == 503
    assert response.json()["error"] == "SERVICE_UNAVAILABLE"
