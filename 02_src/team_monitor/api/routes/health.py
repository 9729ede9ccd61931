"""Health check route."""

from datetime import datetime, timezone

from pydantic import BaseModel
from fastapi import APIRouter

from ...app import IApplication


class HealthResponse(BaseModel):
    """Response model for health."""

    status: str
    timestamp: datetime
    teams: int
    subscribers: int


def create_health_router(app: IApplication) -> APIRouter:
    """Create health router."""
    router = APIRouter(tags=["health"])

    @router.get("/health", response_model=HealthResponse)
    async def health() -> dict:
        """Liveness plus a few cache counters."""
        return {
            "status": "ok",
            "timestamp": datetime.now(timezone.utc),
            "teams": len(app.store.list_teams()),
            "subscribers": app.fanout.subscriber_count(),
        }

    return router
