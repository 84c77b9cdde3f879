"""FastAPI application setup."""

from __future__ import annotations

import logging
from contextlib import asynccontextmanager
from typing import TYPE_CHECKING

from fastapi import FastAPI, Request, status
from fastapi.responses import JSONResponse

from pushci.api.dependencies import (
    close_archiver,
    close_orchestrator,
    init_archiver,
    init_orchestrator,
)
from pushci.api.models import APIResponse
from pushci.api.routes import health, logs, webhook
from pushci.config import Settings
from pushci.exceptions import NotFoundError, PushCIError, ValidationError
from pushci.pipeline import Orchestrator

if TYPE_CHECKING:
    from collections.abc import AsyncGenerator

logger = logging.getLogger("pushci.api")


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
    """Application lifespan manager."""
    # Startup
    settings = app.state.settings or Settings.from_env()
    orchestrator = Orchestrator.from_settings(settings)
    init_orchestrator(orchestrator)
    init_archiver(orchestrator.archiver)
    logger.info(
        "pushci ready (workspace=%s, archive=%s, public_url=%s)",
        settings.workspace_root,
        settings.archive_root,
        settings.public_url,
    )

    yield
    # Shutdown
    close_archiver()
    close_orchestrator()


def create_app(settings: Settings | None = None) -> FastAPI:
    """Create and configure the FastAPI application.

    Args:
        settings: Server settings. Read from the environment at startup if omitted.
    """
    app = FastAPI(
        title="pushci API",
        description="Push-triggered build and test pipeline",
        version="0.1.0",
        lifespan=lifespan,
    )

    # Store config for lifespan manager
    app.state.settings = settings

    # Exception handlers
    @app.exception_handler(ValidationError)
    async def validation_error_handler(_request: Request, exc: ValidationError) -> JSONResponse:
        return JSONResponse(
            status_code=status.HTTP_400_BAD_REQUEST,
            content=APIResponse[None](data=None, error=str(exc)).model_dump(),
        )

    @app.exception_handler(NotFoundError)
    async def not_found_handler(_request: Request, exc: NotFoundError) -> JSONResponse:
        return JSONResponse(
            status_code=status.HTTP_404_NOT_FOUND,
            content=APIResponse[None](data=None, error=str(exc)).model_dump(),
        )

    @app.exception_handler(PushCIError)
    async def pushci_error_handler(_request: Request, exc: PushCIError) -> JSONResponse:
        logger.error("Request failed: %s", exc)
        return JSONResponse(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            content=APIResponse[None](data=None, error="Internal server error").model_dump(),
        )

    # Include routers
    app.include_router(webhook.router)
    app.include_router(logs.router)
    app.include_router(health.router)

    return app


# Default app instance
app = create_app()
