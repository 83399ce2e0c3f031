"""
CRS lookup endpoint.
"""

import logging

from fastapi import APIRouter, Depends

from wktview.api.dependencies import get_resolver
from wktview.core.crs.resolver import CRSResolver
from wktview.models.api import CRSLookupResponse
from wktview.models.errors import ErrorResponse

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/crs", tags=["crs"])


@router.get(
    "/{epsg}",
    response_model=CRSLookupResponse,
    responses={
        404: {"model": ErrorResponse, "description": "EPSG code not found"},
        422: {"model": ErrorResponse, "description": "EPSG code out of range"},
    },
    summary="Validate an EPSG code",
    description="Resolve an EPSG code to its projection definition",
)
async def lookup_crs(
    epsg: int,
    resolver: CRSResolver = Depends(get_resolver),
) -> CRSLookupResponse:
    """
    Resolve an EPSG code.

    Args:
        epsg: EPSG code (1024-32767)

    Returns:
        CRSLookupResponse with the definition and where it came from
    """
    definition = await resolver.resolve(epsg)
    logger.info(f"Validated EPSG:{epsg} ({definition.source})")
    return CRSLookupResponse.from_definition(definition)
