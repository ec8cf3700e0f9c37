"""Health check endpoint. Used for liveness and readiness probes."""

from fastapi import APIRouter, Request

from fireeats.api.v1.dependencies import SettingsDep
from fireeats.schemas.health import HealthResponse

router = APIRouter()


@router.get("", response_model=HealthResponse)
async def health_check(request: Request, settings: SettingsDep) -> HealthResponse:
    """Return ok status, the store backend and the number of open live queries."""
    manager = getattr(request.app.state, "ws_manager", None)
    live_queries = await manager.get_connection_count() if manager is not None else 0
    return HealthResponse(backend=settings.database_backend, live_queries=live_queries)
