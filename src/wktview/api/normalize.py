"""
Geometry normalization endpoints.
"""

import logging
from typing import Optional, Union

from fastapi import APIRouter, Depends, Query

from wktview.api.dependencies import get_pipeline
from wktview.core.config import settings
from wktview.core.errors import ValidationError
from wktview.core.pipeline import SpatialPipeline
from wktview.models.api import NormalizeRequest, NormalizeResponse
from wktview.models.errors import ErrorResponse
from wktview.models.spatial import SpatialInput

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/normalize", tags=["normalize"])

ERROR_RESPONSES = {
    404: {"model": ErrorResponse, "description": "EPSG code not found"},
    422: {"model": ErrorResponse, "description": "Unparseable geometry or unsupported CRS"},
}


def _check_length(wkt: str) -> None:
    # Bounds the share-link form only
    if len(wkt) > settings.max_input_length:
        raise ValidationError(
            f"Geometry text is {len(wkt)} characters long; "
            f"the maximum is {settings.max_input_length}",
            field="wkt",
            details={"length": len(wkt), "max_length": settings.max_input_length},
            suggestions=["Send long geometries in a POST body"],
        )


async def _normalize(
    pipeline: SpatialPipeline, wkt: str, epsg: Optional[Union[int, str]]
) -> NormalizeResponse:
    result = await pipeline.normalize(SpatialInput(raw_text=wkt, explicit_crs=epsg))
    return NormalizeResponse.from_result(result)


@router.post(
    "",
    response_model=NormalizeResponse,
    responses=ERROR_RESPONSES,
    summary="Normalize a geometry",
    description=(
        "Detect the encoding of a geometry string, resolve its CRS and return it "
        "as WKT, WKB and EWKB in the source CRS plus GeoJSON in EPSG:4326"
    ),
)
async def normalize_geometry(
    request: NormalizeRequest,
    pipeline: SpatialPipeline = Depends(get_pipeline),
) -> NormalizeResponse:
    """
    Normalize a geometry sent as a JSON body.

    Args:
        request: Geometry string and optional EPSG code

    Returns:
        NormalizeResponse
    """
    return await _normalize(pipeline, request.wkt, request.epsg)


@router.get(
    "",
    response_model=NormalizeResponse,
    responses={
        **ERROR_RESPONSES,
        400: {"model": ErrorResponse, "description": "Share link too long"},
    },
    summary="Normalize a geometry from query parameters",
    description="Same as POST /normalize, for wkt/epsg pairs carried in shared URLs",
)
async def normalize_geometry_from_query(
    wkt: str = Query(..., description="Raw geometry string"),
    epsg: Optional[str] = Query(None, description="EPSG code"),
    pipeline: SpatialPipeline = Depends(get_pipeline),
) -> NormalizeResponse:
    """Normalize a geometry given as URL query parameters."""
    _check_length(wkt)
    return await _normalize(pipeline, wkt, epsg or None)
