"""Pytest configuration and fixtures for fireeats.

Uses fireeats.main:app for HTTP tests with a fresh in-memory document store
per test. The memory store doubles as the transactional fake (conflict and
write-failure injection). All imports use fireeats.*.
"""

from typing import Any

import pytest
from httpx import ASGITransport, AsyncClient

from fireeats.api.websocket import ConnectionManager
from fireeats.application.interfaces.store import DocumentReference
from fireeats.core.config import get_settings
from fireeats.core.constants import COLLECTION_RESTAURANTS
from fireeats.core.limiter import limiter
from fireeats.domain.entities import Restaurant
from fireeats.infrastructure.memory import MemoryDocumentStore
from fireeats.main import app


def restaurant_data(
    name: str = "Fire Grill",
    *,
    category: str = "Pizza",
    city: str = "San Francisco",
    price: int = 2,
    num_ratings: int = 0,
    avg_rating: float = 0.0,
) -> dict[str, Any]:
    """Stored field map for a well-formed restaurant."""
    return Restaurant(
        name=name,
        category=category,
        city=city,
        price=price,
        rating_count=num_ratings,
        average_rating=avg_rating,
    ).to_dict()


async def add_restaurant(
    store: MemoryDocumentStore, document_id: str, **fields: Any
) -> DocumentReference:
    """Write restaurants/{document_id} and return its reference."""
    ref = store.collection(COLLECTION_RESTAURANTS).document(document_id)
    await ref.set(restaurant_data(**fields))
    return ref


@pytest.fixture(autouse=True)
def _settings_cache():
    """Each test resolves settings from its own environment."""
    get_settings.cache_clear()
    yield
    get_settings.cache_clear()


@pytest.fixture
def store() -> MemoryDocumentStore:
    """Empty in-memory document store."""
    return MemoryDocumentStore()


@pytest.fixture
async def restaurant_ref(store: MemoryDocumentStore) -> DocumentReference:
    """restaurants/r1 with 3 ratings averaging 4.0."""
    return await add_restaurant(store, "r1", num_ratings=3, avg_rating=4.0)


@pytest.fixture
async def client(store: MemoryDocumentStore) -> AsyncClient:
    """Async HTTP client against the FastAPI app (ASGI), backed by the store fixture.

    ASGITransport does not run the lifespan, so the state it would set up is
    installed here.
    """
    app.state.store = store
    app.state.ws_manager = ConnectionManager()
    limiter.reset()
    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as ac:
        yield ac
    app.state.store = None
