"""API v1 router aggregation.

Includes all endpoint modules with consistent prefix and tags. All routes
use dependencies from fireeats.api.v1.dependencies (no manual store/service construction).
"""

from fastapi import APIRouter

from fireeats.api.v1.endpoints import (
    health,
    restaurants,
    websocket as ws_endpoint,
)

api_router = APIRouter()

api_router.include_router(health.router, prefix="/health", tags=["health"])
api_router.include_router(restaurants.router, prefix="/restaurants", tags=["restaurants"])
api_router.include_router(ws_endpoint.router, tags=["websocket"])
