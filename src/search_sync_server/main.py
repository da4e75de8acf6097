"""
Sync Server Application Entry Point

This module defines the FastAPI application instance, registers all routers,
configures global exception handling, and provides a test-friendly application
factory.

Design Goals
------------
- Deterministic startup
- Explicit dependency initialization order
- Centralized router registration
- Global exception safety net
- Test-friendly via create_app()
"""

from __future__ import annotations

import logging
from contextlib import asynccontextmanager
from typing import AsyncIterator

from fastapi import FastAPI

from .config import settings
from .core.errors import register_exception_handlers
from .db import init_models

from .api import (
    admin_routes,
    content_routes,
    health_routes,
)
from .api.dependencies import close_search_engine


logger = logging.getLogger("sync.app")


# ---------------------------------------------------------------------
# Lifespan
# ---------------------------------------------------------------------

@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncIterator[None]:
    """
    Fail-fast validation at startup; release the search client on shutdown.
    """
    logger.info("Starting search-sync-server")

    # Touch critical secrets to force validation now (not at first use)
    if not settings.jwt_host_to_sync_secret.get_secret_value():
        raise RuntimeError("jwt_host_to_sync_secret is not configured")
    if not settings.jwt_sync_to_host_secret.get_secret_value():
        raise RuntimeError("jwt_sync_to_host_secret is not configured")

    await init_models()
    logger.info("Configuration validated successfully")

    yield

    logger.info("Shutting down search-sync-server")
    await close_search_engine()


# ---------------------------------------------------------------------
# Application Factory (Test-Friendly)
# ---------------------------------------------------------------------

def create_app() -> FastAPI:
    """
    Create and configure the FastAPI application.

    This factory pattern allows:
    - Clean test instantiation
    - Isolated app instances for integration tests
    - Controlled dependency overrides in pytest
    """
    app = FastAPI(
        title="search-sync-server",
        version="1.0.0",
        docs_url="/docs",
        redoc_url="/redoc",
        openapi_url="/openapi.json",
        lifespan=lifespan,
    )

    # --------------------------------------------------------------
    # Global Exception Handling
    # --------------------------------------------------------------

    register_exception_handlers(app)

    # --------------------------------------------------------------
    # Router Registration
    # --------------------------------------------------------------

    app.include_router(health_routes.router)
    app.include_router(admin_routes.router)
    app.include_router(content_routes.router)

    return app


# ---------------------------------------------------------------------
# Default Application Instance (for Uvicorn/Gunicorn)
# ---------------------------------------------------------------------

app = create_app()
