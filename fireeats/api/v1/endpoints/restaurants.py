"""Restaurant API: thin routes delegating to the listing query, RatingService and SeedService."""

import logging
from typing import Annotated

from fastapi import APIRouter, Query, Request

from fireeats.api.v1.dependencies import (
    FiltersDep,
    RatingServiceDep,
    RestaurantRefDep,
    SeedServiceDep,
    SettingsDep,
    StoreDep,
)
from fireeats.application.services import build_query
from fireeats.core.constants import DEFAULT_SEED_COUNT, DEFAULT_USERNAME, SUBCOLLECTION_RATINGS
from fireeats.core.limiter import limit_populate, limit_writes
from fireeats.domain.entities import Review
from fireeats.domain.exceptions import ResourceNotFoundException
from fireeats.schemas.restaurant import (
    PopulateResponse,
    RestaurantResponse,
    ReviewCreateRequest,
    ReviewCreateResponse,
    ReviewResponse,
)
from fireeats.shared.utils import utc_now

logger = logging.getLogger(__name__)

router = APIRouter()


@router.get("", response_model=list[RestaurantResponse])
async def list_restaurants(
    store: StoreDep,
    filters: FiltersDep,
    settings: SettingsDep,
):
    """List restaurants matching the filters, in query order.

    Documents that do not decode as restaurants are left out.
    """
    query = build_query(store, filters, limit=settings.query_result_limit)
    results: list[RestaurantResponse] = []
    for snapshot in await query.get():
        item = RestaurantResponse.from_snapshot(snapshot)
        if item is None:
            logger.debug("Skipping malformed restaurant %s", snapshot.id)
            continue
        results.append(item)
    return results


@router.post("/populate", response_model=PopulateResponse, status_code=201)
@limit_populate
async def populate_restaurants(
    request: Request,
    seed_svc: SeedServiceDep,
    count: Annotated[int, Query(ge=1, le=100)] = DEFAULT_SEED_COUNT,
):
    """Write `count` random unrated restaurants (sample data)."""
    ids = await seed_svc.populate(count)
    return PopulateResponse(created=len(ids), ids=ids)


@router.get("/{restaurant_id}", response_model=RestaurantResponse)
async def get_restaurant(restaurant_id: str, ref: RestaurantRefDep):
    """Get one restaurant; 404 when it is missing or malformed."""
    snapshot = await ref.get()
    item = RestaurantResponse.from_snapshot(snapshot)
    if item is None:
        raise ResourceNotFoundException("restaurant", restaurant_id)
    return item


@router.get("/{restaurant_id}/ratings", response_model=list[ReviewResponse])
async def list_ratings(restaurant_id: str, ref: RestaurantRefDep):
    """List the restaurant's reviews; 404 when the restaurant does not exist."""
    snapshot = await ref.get()
    if not snapshot.exists:
        raise ResourceNotFoundException("restaurant", restaurant_id)
    results: list[ReviewResponse] = []
    for review_snapshot in await ref.collection(SUBCOLLECTION_RATINGS).get():
        item = ReviewResponse.from_snapshot(review_snapshot)
        if item is None:
            logger.debug("Skipping malformed review %s", review_snapshot.id)
            continue
        results.append(item)
    return results


@router.post(
    "/{restaurant_id}/ratings",
    response_model=ReviewCreateResponse,
    status_code=201,
)
@limit_writes
async def add_rating(
    request: Request,
    restaurant_id: str,
    body: ReviewCreateRequest,
    ref: RestaurantRefDep,
    rating_svc: RatingServiceDep,
):
    """Add a review and update the restaurant's numRatings/avgRating in one transaction.

    409 when the restaurant is missing or malformed; 503 when the
    transaction could not be committed.
    """
    review = Review(
        rating=body.rating,
        user_id=body.user_id,
        username=body.username or DEFAULT_USERNAME,
        text=body.text,
        date=utc_now(),
    )
    review_id = await rating_svc.add_review(ref, review)
    return ReviewCreateResponse(id=review_id, restaurant_id=restaurant_id)
