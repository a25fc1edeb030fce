import logging
import time
from collections.abc import AsyncIterator
from contextlib import asynccontextmanager
from datetime import datetime, UTC
from typing import Callable

from fastapi import FastAPI, Request

from src.sales.api.error_handlers import register_exception_handlers
from src.sales.api.v1 import clients
from src.sales.containers import Container
from src.sales.logging import configure_logging
from src.client.schemas import HealthResponse

# Configure logging at module load time
configure_logging()

logger = logging.getLogger(__name__)

# Type alias for lifespan context manager
LifespanType = Callable[[FastAPI], AsyncIterator[None]]


@asynccontextmanager
async def default_lifespan(app: FastAPI):
    """Default application lifespan manager - prepares the database and S3 bucket, releases shared clients on shutdown."""
    container: Container = app.state.container
    logger.info("Starting Sales API...")

    # Initialize database tables on startup
    db = container.database()
    await db.create_tables()
    logger.info("Database initialized successfully")

    # Ensure S3 bucket exists on startup
    s3_storage = container.s3_storage()
    await s3_storage.ensure_bucket_exists()
    logger.info("S3 bucket '%s' initialized successfully", s3_storage.settings.bucket_name)

    yield

    logger.info("Shutting down Sales API...")
    await container.auth_http_client().aclose()
    await db.dispose()


def create_app(container: Container, lifespan: LifespanType | None = None) -> FastAPI:
    """
    Create and configure FastAPI application.

    Args:
        container: DI container providing settings, storage clients and services.
        lifespan: Optional lifespan context manager. If not provided, uses default_lifespan.

    Returns:
        Configured FastAPI application.
    """
    container.wire(modules=[
        "src.sales.api.dependencies",
        "src.sales.api.v1.clients",
    ])

    config = container.config()

    app = FastAPI(
        title=config.app_name,
        version=config.app_version,
        lifespan=lifespan or default_lifespan,
    )

    # Attach container to app state for access in lifespan and routes
    app.state.container = container

    register_exception_handlers(app, is_production=config.is_production)

    @app.middleware("http")
    async def log_requests(request: Request, call_next):
        start_time = time.perf_counter()
        response = await call_next(request)
        duration_ms = (time.perf_counter() - start_time) * 1000
        logger.info(
            "%s %s %d - %.1fms",
            request.method, request.url.path, response.status_code, duration_ms,
        )
        return response

    # Include routers
    app.include_router(clients.router, prefix="/api/sales")

    @app.get("/health", response_model=HealthResponse)
    async def health() -> HealthResponse:
        return HealthResponse(
            status="ok",
            service=config.service_name,
            timestamp=datetime.now(UTC),
            environment=config.environment,
        )

    return app

container = Container()
app = create_app(container=container)
