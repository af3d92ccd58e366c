"""
FastAPI application entry point.
"""

import logging
from contextlib import asynccontextmanager

import uvicorn
from fastapi import FastAPI
from starlette.middleware.base import BaseHTTPMiddleware

from jobqueue import __version__
from jobqueue.api.errors import register_exception_handlers
from jobqueue.api.middleware import record_request_metrics
from jobqueue.api.routes import health_router, jobs_router
from jobqueue.config import get_settings
from jobqueue.db import Database, create_database
from jobqueue.observability.logging import setup_logging
from jobqueue.observability.metrics import setup_metrics
from jobqueue.observability.tracing import (
    instrument_fastapi,
    instrument_sqlalchemy,
    setup_tracing,
)

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """
    Application lifespan manager.

    Opens the database handle unless one was injected, and disposes of the
    handle it opened on shutdown.
    """
    settings = get_settings()

    # Startup
    setup_logging()
    setup_metrics()

    owns_database = getattr(app.state, "database", None) is None
    if owns_database:
        app.state.database = create_database(settings)

    if settings.otel_enabled:
        setup_tracing()
        instrument_sqlalchemy(app.state.database.engine.sync_engine)

    logger.info("Application started")

    yield

    # Shutdown
    if owns_database:
        await app.state.database.dispose()
        app.state.database = None
    logger.info("Application shutdown")


def create_app(database: Database | None = None) -> FastAPI:
    """
    Create and configure the FastAPI application.

    Args:
        database: Optional database handle. When omitted, one is created
            from settings at startup.

    Returns:
        FastAPI: The configured application instance.
    """
    settings = get_settings()

    app = FastAPI(
        title="Job Queue API",
        description="Durable job queue with row-locked claims on PostgreSQL",
        version=__version__,
        lifespan=lifespan,
        docs_url="/docs",
        redoc_url="/redoc",
    )
    app.state.database = database

    app.add_middleware(BaseHTTPMiddleware, dispatch=record_request_metrics)
    register_exception_handlers(app)

    # Include routers
    app.include_router(health_router)
    app.include_router(jobs_router)

    if settings.otel_enabled:
        instrument_fastapi(app)

    return app


def run() -> None:
    """Run the API server."""
    settings = get_settings()

    uvicorn.run(
        "jobqueue.api.main:create_app",
        factory=True,
        host=settings.api_host,
        port=settings.api_port,
        log_level=settings.log_level.lower(),
    )


if __name__ == "__main__":
    run()
