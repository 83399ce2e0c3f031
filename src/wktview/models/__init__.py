"""
Data models and schemas.
"""

from .api import CRSLookupResponse, NormalizeRequest, NormalizeResponse
from .crs import (
    MAX_CRS_IDENTIFIER,
    MIN_CRS_IDENTIFIER,
    WGS84_EPSG,
    ProjectionDefinition,
)
from .errors import ErrorDetail, ErrorResponse
from .spatial import (
    EncodedGeometry,
    GeometryKind,
    InputFormat,
    NormalizedResult,
    PipelineStage,
    SpatialInput,
)

__all__ = [
    # API
    "CRSLookupResponse",
    "NormalizeRequest",
    "NormalizeResponse",
    # CRS
    "MAX_CRS_IDENTIFIER",
    "MIN_CRS_IDENTIFIER",
    "WGS84_EPSG",
    "ProjectionDefinition",
    # Errors
    "ErrorDetail",
    "ErrorResponse",
    # Spatial
    "EncodedGeometry",
    "GeometryKind",
    "InputFormat",
    "NormalizedResult",
    "PipelineStage",
    "SpatialInput",
]
