"""Recent-activity API routes."""

from pydantic import BaseModel, Field
from fastapi import APIRouter, HTTPException, Query

from ...app import Application


class ConnectionResponse(BaseModel):
    """Response model for one enriched event (viewer wire shape)."""

    ip: str
    lat: float
    lng: float
    country: str
    city: str | None = None
    request_type: str = Field(alias="requestType")
    path: str
    status_code: int | None = Field(default=None, alias="statusCode")
    response_size: int | None = Field(default=None, alias="responseSize")
    timestamp: int
    source: str


class ServerLocationResponse(BaseModel):
    """Response model for the server reference point."""

    lat: float
    lng: float
    label: str


class HealthResponse(BaseModel):
    """Response model for health."""

    status: str
    subscribers: int
    history_size: int
    accepted: int
    dropped: int
    log_file: str | None = None


def create_connections_router(app: Application) -> APIRouter:
    """Create recent-activity router."""
    router = APIRouter(prefix="/api", tags=["connections"])

    @router.get(
        "/connections",
        response_model=list[ConnectionResponse],
        response_model_by_alias=True,
    )
    async def get_connections(
        limit: int | None = Query(None, ge=1, description="Most recent N events"),
    ) -> list[dict]:
        """Get the current history, most recent first."""
        try:
            events = app.store.snapshot()
        except RuntimeError as e:
            raise HTTPException(status_code=503, detail=str(e))
        if limit is not None:
            events = events[:limit]
        return [e.to_wire() for e in events]

    @router.get("/server-location", response_model=ServerLocationResponse)
    async def get_server_location() -> dict:
        """Get the point arcs are drawn to."""
        return app.server_location.to_wire()

    @router.get("/health", response_model=HealthResponse)
    async def get_health() -> dict:
        """Get pipeline status."""
        try:
            hub = app.hub
            store = app.store
            pipeline = app.pipeline
            log_path = app.log_reader.path
        except RuntimeError as e:
            raise HTTPException(status_code=503, detail=str(e))
        return {
            "status": "ok",
            "subscribers": hub.subscriber_count,
            "history_size": len(store),
            "accepted": pipeline.accepted,
            "dropped": pipeline.dropped,
            "log_file": str(log_path) if log_path else None,
        }

    return router
