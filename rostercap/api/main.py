"""FastAPI application for the rostercap transfer engine."""

import logging
from contextlib import asynccontextmanager
from typing import AsyncGenerator, Optional

import uvicorn
from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from rostercap import __version__
from rostercap.api.routers import settings_router, teams_router, transfers_router
from rostercap.api.services import TransferService
from rostercap.config import RosterCapConfig, get_config

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
    """Application lifespan handler."""
    # Startup
    service: TransferService = app.state.transfer_service
    service.init_db()
    logger.info("rostercap API starting up (db=%s)", service.config.db_path)
    yield
    # Shutdown
    logger.info("rostercap API shutting down")


def create_app(config: Optional[RosterCapConfig] = None) -> FastAPI:
    """Create and configure the FastAPI application."""
    config = config or get_config()
    errors = config.validate()
    if errors:
        raise ValueError(f"Invalid configuration: {errors}")

    app = FastAPI(
        title="rostercap API",
        description="Salary-cap fantasy football roster transfers",
        version=__version__,
        lifespan=lifespan,
    )
    app.state.transfer_service = TransferService(config)

    # Configure CORS for the frontend dev server
    app.add_middleware(
        CORSMiddleware,
        allow_origins=[
            "http://localhost:3000",
            "http://127.0.0.1:3000",
        ],
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    app.include_router(transfers_router, prefix="/api/v1")
    app.include_router(teams_router, prefix="/api/v1")
    app.include_router(settings_router, prefix="/api/v1")

    @app.get("/")
    async def root() -> dict:
        """Root endpoint - API info."""
        return {
            "name": "rostercap API",
            "version": __version__,
            "docs": "/docs",
        }

    @app.get("/health")
    async def health() -> dict:
        """Health check endpoint."""
        return {"status": "healthy"}

    return app


def run_api(host: str = "127.0.0.1", port: int = 8000, reload: bool = False) -> None:
    """Run the API server."""
    uvicorn.run(
        "rostercap.api.main:create_app",
        host=host,
        port=port,
        reload=reload,
        factory=True,
    )
