"""FastAPI application factory for Statusboard."""

from __future__ import annotations

from collections.abc import AsyncIterator
from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from statusboard.api.routes import services
from statusboard.config.loader import load_config
from statusboard.config.models import StatusboardConfig
from statusboard.dashboard import Dashboard, create_store


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncIterator[None]:
    dashboard: Dashboard = app.state.dashboard
    await dashboard.load()
    yield
    dashboard.close()


def create_app(config: StatusboardConfig | None = None) -> FastAPI:
    if config is None:
        try:
            config = load_config()
        except (FileNotFoundError, ValueError):
            # Fallback for environments without a config file (e.g. testing)
            config = StatusboardConfig()

    app = FastAPI(
        title="Statusboard",
        version=config.statusboard.version,
        description="Tap-to-check service status dashboard",
        lifespan=lifespan,
    )

    app.add_middleware(
        CORSMiddleware,
        allow_origins=["*"],
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    app.state.config = config
    app.state.dashboard = Dashboard.from_config(config, store=create_store(config))

    @app.get("/health", tags=["meta"])
    async def healthcheck() -> dict[str, str]:
        return {"status": "ok"}

    app.include_router(services.router, prefix="/api")

    return app


app = create_app()
