"""Observability API routes."""

from datetime import datetime
from typing import Any

from pydantic import BaseModel
from fastapi import APIRouter, HTTPException, Query

from ...app import Agent


class StatusResponse(BaseModel):
    """Response model for agent status."""

    running: bool
    enabled: bool
    listener_state: str | None
    pending_notifications: int
    subscribers: int


class EventResponse(BaseModel):
    """Response model for a recorded event."""

    id: str
    type: str
    source: str
    severity: str
    timestamp: datetime
    value: float | None
    metadata: dict[str, Any]


class InterventionResponse(BaseModel):
    """Response model for a recorded intervention."""

    id: str
    type: str
    source: str
    reason: str
    timestamp: datetime
    urgency: float
    parameters: dict[str, Any]


def _parse_after(after: str | None) -> datetime | None:
    if not after:
        return None
    try:
        return datetime.fromisoformat(after)
    except ValueError:
        raise HTTPException(status_code=400, detail="Invalid after timestamp format")


def create_observability_router(agent: Agent) -> APIRouter:
    """Create observability router."""
    router = APIRouter(prefix="/api", tags=["observability"])

    @router.get("/status", response_model=StatusResponse)
    async def get_status() -> dict:
        """Current agent state."""
        running = agent.is_running
        return {
            "running": running,
            "enabled": agent.config.enabled,
            "listener_state": agent.listener.state.value if running else None,
            "pending_notifications": agent.executor.pending if running else 0,
            "subscribers": agent.event_bus.subscriber_count() if running else 0,
        }

    @router.get("/events", response_model=list[EventResponse])
    async def get_events(
        after: str | None = Query(None, description="ISO timestamp filter"),
        limit: int = Query(100, ge=1, le=1000),
        event_type: str | None = Query(None, description="Filter by event type"),
    ) -> list[dict]:
        """Recorded events, newest first."""
        if agent.storage is None:
            raise HTTPException(status_code=503, detail="Storage not configured")
        try:
            events = await agent.storage.get_events(
                after=_parse_after(after),
                event_types=[event_type] if event_type else None,
                limit=limit,
            )
            return [e.model_dump(mode="json") for e in events]
        except HTTPException:
            raise
        except Exception as e:
            raise HTTPException(status_code=500, detail=str(e))

    @router.get("/interventions", response_model=list[InterventionResponse])
    async def get_interventions(
        after: str | None = Query(None, description="ISO timestamp filter"),
        limit: int = Query(100, ge=1, le=1000),
    ) -> list[dict]:
        """Recorded interventions, newest first."""
        if agent.storage is None:
            raise HTTPException(status_code=503, detail="Storage not configured")
        try:
            interventions = await agent.storage.get_interventions(
                after=_parse_after(after), limit=limit
            )
            return [i.model_dump(mode="json") for i in interventions]
        except HTTPException:
            raise
        except Exception as e:
            raise HTTPException(status_code=500, detail=str(e))

    return router
