"""FastAPI application factory and main entry point."""

from contextlib import asynccontextmanager

from fastapi import FastAPI, HTTPException
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware

from sat_api.api.v1.router import api_router
from sat_api.common.request_id import RequestIDMiddleware
from sat_api.core.config import Settings, settings as default_settings
from sat_api.core.errors import (
    general_exception_handler,
    http_exception_handler,
    validation_exception_handler,
)
from sat_api.core.logging import get_logger, setup_logging
from sat_api.db.engine import Database
from sat_api.storage.images import ImageLifecycleManager
from sat_api.storage.s3 import ObjectStorage, S3ObjectStorage

logger = get_logger(__name__)


def create_app(
    settings: Settings | None = None,
    database: Database | None = None,
    storage: ObjectStorage | None = None,
) -> FastAPI:
    """Create and configure FastAPI application.

    The database and object storage are built here (or injected by the
    caller) and shared with request handlers through ``app.state``.
    """
    settings = settings or default_settings
    database = database or Database(settings)
    storage = storage or S3ObjectStorage.from_settings(settings)

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        """Application lifespan events."""
        setup_logging(settings)
        # Create tables (in production, use migrations)
        if settings.ENV in ("dev", "test"):
            database.create_all()
        logger.info(
            "startup",
            extra={"event": "startup", "env": settings.ENV, "bucket": settings.S3_BUCKET_NAME},
        )
        yield
        database.dispose()

    app = FastAPI(
        title=settings.PROJECT_NAME,
        version="1.0.0",
        description="SAT question bank API with image storage",
        openapi_url="/openapi.json" if settings.ENV != "prod" else None,
        docs_url="/docs" if settings.ENV != "prod" else None,
        redoc_url="/redoc" if settings.ENV != "prod" else None,
        lifespan=lifespan,
    )

    app.state.settings = settings
    app.state.database = database
    app.state.storage = storage
    app.state.image_manager = ImageLifecycleManager(storage, key_prefix=settings.IMAGE_KEY_PREFIX)

    # Add middleware (order matters - last added is outermost)
    app.add_middleware(RequestIDMiddleware)
    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.CORS_ORIGINS,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    app.add_exception_handler(RequestValidationError, validation_exception_handler)
    app.add_exception_handler(HTTPException, http_exception_handler)
    app.add_exception_handler(Exception, general_exception_handler)

    app.include_router(api_router, prefix=settings.API_PREFIX)

    @app.get("/", tags=["Root"])
    async def root():
        """Root endpoint - API information."""
        return {
            "message": settings.PROJECT_NAME,
            "version": "1.0.0",
            "docs_url": "/docs" if settings.ENV != "prod" else None,
        }

    return app


# Create app instance
app = create_app()
