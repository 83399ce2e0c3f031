"""
Shared FastAPI dependencies.
"""

from fastapi import Request

from wktview.core.crs.resolver import CRSResolver
from wktview.core.pipeline import SpatialPipeline


def get_pipeline(request: Request) -> SpatialPipeline:
    """
    Get the application's pipeline.

    The pipeline is normally created by the lifespan handler; it is created
    here on first use when the application runs without one.
    """
    pipeline = getattr(request.app.state, "pipeline", None)
    if pipeline is None:
        pipeline = SpatialPipeline()
        request.app.state.pipeline = pipeline
    return pipeline


def get_resolver(request: Request) -> CRSResolver:
    """Get the CRS resolver used by the application's pipeline."""
    return get_pipeline(request).resolver
