"""
Main FastAPI application instance.
"""

import logging
from contextlib import asynccontextmanager
from pathlib import Path
from typing import AsyncIterator

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from wktview import __version__
from wktview.api.crs import router as crs_router
from wktview.api.error_handlers import register_error_handlers
from wktview.api.middleware import LoggingContextMiddleware, RequestCorrelationMiddleware
from wktview.api.normalize import router as normalize_router
from wktview.core.config import settings
from wktview.core.logging_config import setup_logging
from wktview.core.pipeline import SpatialPipeline

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncIterator[None]:
    """
    Lifespan context manager for FastAPI application.

    - Startup: configure logging and create the pipeline (unless one was
      installed on app.state beforehand)
    - Shutdown: close the pipeline's HTTP client
    """
    setup_logging(
        log_file=Path(settings.log_file) if settings.log_file else None,
        json_logs=(settings.environment == "production"),
    )
    logger.info(f"Starting wktview API v{__version__} in {settings.environment} mode")

    if getattr(app.state, "pipeline", None) is None:
        app.state.pipeline = SpatialPipeline()

    yield

    logger.info("Shutting down wktview API")
    pipeline = getattr(app.state, "pipeline", None)
    if pipeline is not None:
        await pipeline.close()
        app.state.pipeline = None


app = FastAPI(
    title="wktview API",
    description="Normalize WKT, EWKT, H3, quadkey, geohash and bounding box input to WGS84",
    version=__version__,
    docs_url="/docs",
    redoc_url="/redoc",
    lifespan=lifespan,
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origins_list,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

# Added in reverse order of execution
app.add_middleware(LoggingContextMiddleware)
app.add_middleware(RequestCorrelationMiddleware)

register_error_handlers(app)

app.include_router(normalize_router, prefix=settings.api_v1_prefix)
app.include_router(crs_router, prefix=settings.api_v1_prefix)


@app.get("/")
async def root() -> dict[str, str]:
    """
    Root endpoint returning API information.

    Returns:
        dict[str, str]: API information including name and version.
    """
    return {
        "name": "wktview API",
        "version": __version__,
        "description": "Geometry normalization and reprojection to WGS84",
    }


@app.get("/health")
async def health_check() -> dict[str, str]:
    """Health check endpoint."""
    return {"status": "healthy"}
