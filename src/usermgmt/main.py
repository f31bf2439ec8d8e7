"""FastAPI application factory."""

from collections.abc import AsyncGenerator
from contextlib import asynccontextmanager

import structlog
from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from usermgmt import __version__
from usermgmt.api.router import api_router
from usermgmt.config import settings
from usermgmt.core.constants import API_KEY_HEADER, REQUEST_ID_HEADER
from usermgmt.core.database import Base, async_engine
from usermgmt.core.errors import register_exception_handlers
from usermgmt.core.logging import (
    RequestIdMiddleware,
    RequestLoggingMiddleware,
    configure_logging,
)


configure_logging(settings.log_level, json_logs=settings.is_production)

logger = structlog.get_logger()


@asynccontextmanager
async def lifespan(_app: FastAPI) -> AsyncGenerator[None, None]:
    """Application lifespan handler.

    Handles startup and shutdown events.
    """
    # Startup
    logger.info(
        "application_startup",
        app_name=settings.app_name,
        environment=settings.environment,
        database=async_engine.url.get_backend_name(),
    )

    if settings.database_auto_create:
        # Models are registered on Base.metadata by the router import
        async with async_engine.begin() as conn:
            await conn.run_sync(Base.metadata.create_all)
        logger.info("database_tables_created")

    yield

    # Shutdown
    logger.info("application_shutdown")

    await async_engine.dispose()
    logger.info("database_pool_closed")


def create_app() -> FastAPI:
    """Create and configure the FastAPI application.

    Returns:
        Configured FastAPI application instance.
    """
    app = FastAPI(
        title=settings.app_name,
        description="Multi-tenant user management: each API client manages its own users",
        version=__version__,
        debug=settings.debug,
        lifespan=lifespan,
        # Disable docs in production
        docs_url="/docs" if not settings.is_production else None,
        redoc_url="/redoc" if not settings.is_production else None,
        openapi_url="/openapi.json" if not settings.is_production else None,
    )

    cors_origins = settings.cors_origins
    if settings.is_development and not cors_origins:
        cors_origins = ["http://localhost:3000", "http://localhost:5173"]

    app.add_middleware(
        CORSMiddleware,
        allow_origins=cors_origins,
        allow_credentials=True,
        allow_methods=["GET", "POST", "PUT", "DELETE", "OPTIONS"],
        allow_headers=["Content-Type", API_KEY_HEADER, REQUEST_ID_HEADER],
        expose_headers=["Location", REQUEST_ID_HEADER],
    )

    # Add request logging middleware
    app.add_middleware(RequestLoggingMiddleware)

    # Add request ID middleware (added last, so outermost and runs first)
    app.add_middleware(RequestIdMiddleware)

    # Register exception handlers for RFC 7807 error responses
    register_exception_handlers(app)

    # Include API router
    app.include_router(api_router)

    return app


app = create_app()
