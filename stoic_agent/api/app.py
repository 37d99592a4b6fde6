"""FastAPI application setup."""

from contextlib import asynccontextmanager

from fastapi import FastAPI

from ..app import Agent
from .routes import control, observability


def create_fastapi_app(agent: Agent | None = None) -> FastAPI:
    """Create and configure FastAPI application around an Agent."""
    agent = agent if agent is not None else Agent()

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        """Manage agent lifespan."""
        # Startup
        await agent.start()
        yield
        # Shutdown
        await agent.stop()

    fastapi_app = FastAPI(
        title="Stoic Agent API",
        description="Status and control API for the Stoic wellness agent",
        version="0.1.0",
        lifespan=lifespan,
    )
    fastapi_app.state.agent = agent

    # Include routers
    fastapi_app.include_router(observability.create_observability_router(agent))
    fastapi_app.include_router(control.create_control_router(agent))

    return fastapi_app
