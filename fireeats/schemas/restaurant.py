"""Restaurant and review API schemas."""

from datetime import datetime

from pydantic import BaseModel, Field

from fireeats.application.dtos.documents import DocumentSnapshot
from fireeats.domain.entities import Restaurant, Review
from fireeats.domain.entities.catalog import price_string


class RestaurantResponse(BaseModel):
    """Restaurant as listed by the API (document ID plus decoded fields)."""

    id: str
    name: str
    category: str
    city: str
    price: int
    num_ratings: int
    avg_rating: float
    price_label: str = Field(..., description="'$' to '$$$'")

    @classmethod
    def from_record(cls, document_id: str, restaurant: Restaurant) -> "RestaurantResponse":
        return cls(
            id=document_id,
            name=restaurant.name,
            category=restaurant.category,
            city=restaurant.city,
            price=restaurant.price,
            num_ratings=restaurant.rating_count,
            avg_rating=restaurant.average_rating,
            price_label=price_string(restaurant.price),
        )

    @classmethod
    def from_snapshot(cls, snapshot: DocumentSnapshot) -> "RestaurantResponse | None":
        """None when the document does not decode as a restaurant."""
        restaurant = Restaurant.from_dict(snapshot.to_dict()) if snapshot.exists else None
        if restaurant is None:
            return None
        return cls.from_record(snapshot.id, restaurant)


class ReviewResponse(BaseModel):
    """Review in a restaurant's ratings subcollection."""

    id: str
    rating: int
    user_id: str
    username: str
    text: str
    date: datetime

    @classmethod
    def from_snapshot(cls, snapshot: DocumentSnapshot) -> "ReviewResponse | None":
        """None when the document does not decode as a review."""
        review = Review.from_dict(snapshot.to_dict()) if snapshot.exists else None
        if review is None:
            return None
        return cls(
            id=snapshot.id,
            rating=review.rating,
            user_id=review.user_id,
            username=review.username,
            text=review.text,
            date=review.date,
        )


class ReviewCreateRequest(BaseModel):
    """Request body for adding a review.

    user_id and username come from the identity provider; only presence of
    user_id is checked. username falls back to 'Anonymous'.
    """

    rating: int = Field(..., ge=1, le=5, description="Star rating, 1-5")
    text: str = Field(default="", max_length=2000)
    user_id: str = Field(..., min_length=1, max_length=128)
    username: str | None = Field(default=None, max_length=128)


class ReviewCreateResponse(BaseModel):
    """Response after a review is written."""

    id: str
    restaurant_id: str


class PopulateResponse(BaseModel):
    """Response for POST /restaurants/populate."""

    created: int
    ids: list[str] = Field(default_factory=list)
