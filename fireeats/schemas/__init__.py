"""Pydantic request/response schemas for the API."""

from fireeats.schemas.health import HealthResponse
from fireeats.schemas.restaurant import (
    PopulateResponse,
    RestaurantResponse,
    ReviewCreateRequest,
    ReviewCreateResponse,
    ReviewResponse,
)
from fireeats.schemas.websocket import ChangeMessage, ErrorMessage, SnapshotMessage

__all__ = [
    "ChangeMessage",
    "ErrorMessage",
    "HealthResponse",
    "PopulateResponse",
    "RestaurantResponse",
    "ReviewCreateRequest",
    "ReviewCreateResponse",
    "ReviewResponse",
    "SnapshotMessage",
]
