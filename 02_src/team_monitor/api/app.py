"""FastAPI application setup."""

from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from ..app import Application
from .routes import health, realtime, teams


# Global application instance
_app: Application | None = None


def get_app() -> Application:
    """Get the global application instance."""
    global _app
    if not _app:
        _app = Application()
    return _app


def create_fastapi_app(application: Application | None = None) -> FastAPI:
    """Create and configure FastAPI application."""
    application = application or get_app()

    @asynccontextmanager
    async def lifespan(fastapi_app: FastAPI):
        """Load the snapshot and start watching before serving."""
        await application.start()
        yield
        await application.stop()

    fastapi_app = FastAPI(
        title="Team Monitor API",
        description="Live view of agent teams, inboxes and tasks",
        version="0.1.0",
        lifespan=lifespan,
    )

    fastapi_app.add_middleware(
        CORSMiddleware,
        allow_origins=list(application.settings.cors_origins),
        allow_credentials=True,
        allow_methods=["GET", "POST"],
        allow_headers=["*"],
    )

    fastapi_app.include_router(health.create_health_router(application))
    fastapi_app.include_router(teams.create_teams_router(application))
    fastapi_app.include_router(realtime.create_realtime_router(application))

    return fastapi_app
