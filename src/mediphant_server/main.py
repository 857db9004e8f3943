"""
Mediphant Server Application Entry Point

This module defines the FastAPI application instance, registers all routers,
configures global exception handling, and provides a test-friendly application
factory.

Design Goals
------------
- Deterministic startup: shared services are built once, in create_app()
- Explicit injection: routes receive services through dependencies that
  read `app.state.services`
- Global exception safety net
- Test-friendly via create_app(settings=..., services=...)
"""

from __future__ import annotations

import asyncio
import contextlib
import logging
from typing import AsyncIterator, Optional

from fastapi import FastAPI
from fastapi.exceptions import RequestValidationError

from .config import Settings
from .core.errors import (
    MediphantError,
    request_validation_handler,
    service_error_handler,
    unhandled_exception_handler,
)
from .services import Services, build_services

from .api import (
    faq_routes,
    health_routes,
    history_routes,
    interaction_routes,
)


logger = logging.getLogger("mediphant.app")


@contextlib.asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncIterator[None]:
    """
    Run the rate limiter sweep for the lifetime of the application.
    """
    services: Services = app.state.services
    logger.info(
        "Starting mediphant-server (search mode: %s)",
        services.faq.orchestrator.mode.value,
    )

    sweeper = asyncio.create_task(
        services.rate_limiter.run_sweeper(services.sweep_interval_seconds)
    )
    try:
        yield
    finally:
        sweeper.cancel()
        with contextlib.suppress(asyncio.CancelledError):
            await sweeper
        logger.info("Shutting down mediphant-server")


# ---------------------------------------------------------------------
# Application Factory (Test-Friendly)
# ---------------------------------------------------------------------

def create_app(
    settings: Optional[Settings] = None,
    services: Optional[Services] = None,
) -> FastAPI:
    """
    Create and configure the FastAPI application.

    Parameters
    ----------
    settings : Optional[Settings]
        Configuration used to build services. Defaults to global settings.

    services : Optional[Services]
        Pre-built services. Takes precedence over `settings`.

    Returns
    -------
    FastAPI
        Fully configured FastAPI application.
    """
    app = FastAPI(
        title="mediphant-server",
        version="1.0.0",
        lifespan=lifespan,
    )

    app.state.services = services or build_services(settings)

    # --------------------------------------------------------------
    # Global Exception Handling
    # --------------------------------------------------------------

    app.add_exception_handler(MediphantError, service_error_handler)
    app.add_exception_handler(RequestValidationError, request_validation_handler)
    app.add_exception_handler(Exception, unhandled_exception_handler)

    # --------------------------------------------------------------
    # Router Registration
    # --------------------------------------------------------------

    app.include_router(health_routes.router)
    app.include_router(faq_routes.router)
    app.include_router(interaction_routes.router)
    app.include_router(history_routes.router)

    return app


# ---------------------------------------------------------------------
# Default Application Instance (for Uvicorn/Gunicorn)
# ---------------------------------------------------------------------

app = create_app()
