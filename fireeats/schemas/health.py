"""Health check API schemas."""

from pydantic import BaseModel, Field


class HealthResponse(BaseModel):
    """Response for GET /health (liveness)."""

    status: str = Field(default="ok", description="Service status")
    backend: str = Field(..., description="Document store backend ('memory' or 'firestore')")
    live_queries: int = Field(default=0, description="Open WebSocket live queries")
