"""Control API routes."""

from pydantic import BaseModel, ValidationError
from fastapi import APIRouter, HTTPException

from ...app import Agent
from ...config import AgentConfig


class StatusResponse(BaseModel):
    """Response model for control actions."""

    status: str


class ConfigUpdate(BaseModel):
    """Partial configuration update; unset fields keep their current value."""

    process_interval: int | None = None
    cooldown_period: int | None = None
    cpu_warning_threshold: float | None = None
    cpu_critical_threshold: float | None = None
    sample_timeout: float | None = None
    notifications_enabled: bool | None = None


def create_control_router(agent: Agent) -> APIRouter:
    """Create control router."""
    router = APIRouter(prefix="/api/control", tags=["control"])

    @router.post("/start", response_model=StatusResponse)
    async def start_agent() -> dict:
        """Start the agent (no-op if running)."""
        try:
            await agent.start()
            return {"status": "running" if agent.is_running else "disabled"}
        except Exception as e:
            raise HTTPException(status_code=500, detail=str(e))

    @router.post("/stop", response_model=StatusResponse)
    async def stop_agent() -> dict:
        """Stop the agent (no-op if stopped)."""
        try:
            await agent.stop()
            return {"status": "stopped"}
        except Exception as e:
            raise HTTPException(status_code=500, detail=str(e))

    @router.post("/reload", response_model=AgentConfig)
    async def reload_config(update: ConfigUpdate) -> AgentConfig:
        """Merge an update into the current config and broadcast it."""
        merged = {
            **agent.config.model_dump(),
            **update.model_dump(exclude_none=True),
        }
        try:
            config = AgentConfig.model_validate(merged)
        except ValidationError as e:
            raise HTTPException(status_code=422, detail=str(e))

        try:
            await agent.reload_config(config)
        except Exception as e:
            raise HTTPException(status_code=500, detail=str(e))
        return config

    return router
