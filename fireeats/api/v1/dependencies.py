"""Presentation-layer dependency injection (composition root).

Provides FastAPI Depends() for the document store and application services.
The store is built once in lifespan (app.state.store); routes depend only
on these dependencies, not on infrastructure directly. Switch backends via
DATABASE_BACKEND in config.
"""

from __future__ import annotations

from typing import Annotated

from fastapi import Depends, Query
from starlette.requests import HTTPConnection

from fireeats.application.interfaces.store import DocumentReference, DocumentStore
from fireeats.application.services import (
    RatingService,
    RestaurantFilters,
    SeedService,
)
from fireeats.core.config import Settings, get_settings
from fireeats.core.constants import COLLECTION_RESTAURANTS
from fireeats.domain.exceptions import StoreNotConfiguredException


def get_store(connection: HTTPConnection) -> DocumentStore:
    """Return the document store created at startup (works for HTTP and WebSocket)."""
    store = getattr(connection.app.state, "store", None)
    if store is None:
        raise StoreNotConfiguredException()
    return store


StoreDep = Annotated[DocumentStore, Depends(get_store)]
SettingsDep = Annotated[Settings, Depends(get_settings)]


def get_restaurant_ref(restaurant_id: str, store: StoreDep) -> DocumentReference:
    """Reference to restaurants/{restaurant_id} (the document may not exist)."""
    return store.collection(COLLECTION_RESTAURANTS).document(restaurant_id)


def get_restaurant_filters(
    category: Annotated[str | None, Query(max_length=100)] = None,
    city: Annotated[str | None, Query(max_length=100)] = None,
    price: Annotated[int | None, Query(ge=1, le=3)] = None,
    sort_by: Annotated[str | None, Query(max_length=32)] = None,
) -> RestaurantFilters:
    """Listing filters from query params (shared by GET and WebSocket)."""
    return RestaurantFilters(category=category, city=city, price=price, sort_by=sort_by)


def get_rating_service(store: StoreDep, settings: SettingsDep) -> RatingService:
    """Build RatingService with the configured transaction retry budget."""
    return RatingService(store, max_attempts=settings.transaction_max_attempts)


def get_seed_service(store: StoreDep) -> SeedService:
    return SeedService(store)


RestaurantRefDep = Annotated[DocumentReference, Depends(get_restaurant_ref)]
FiltersDep = Annotated[RestaurantFilters, Depends(get_restaurant_filters)]
RatingServiceDep = Annotated[RatingService, Depends(get_rating_service)]
SeedServiceDep = Annotated[SeedService, Depends(get_seed_service)]
