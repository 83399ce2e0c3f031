"""
Coordinate Reference System (CRS) handling.

This module provides:
- Extraction of CRS references embedded in WKT (SRID prefix, CRS URI)
- EPSG identifier parsing and range validation
- Resolution of EPSG codes to projection definitions with caching
- Reprojection of geometries to WGS84
"""

from wktview.core.crs.extractor import (
    KNOWN_CRS_URIS,
    ExtractedCrs,
    clean_crs_uri,
    crs_uri_to_epsg,
    extract_crs,
    resolve_crs_reference,
)
from wktview.core.crs.identifiers import parse_crs_identifier, validate_crs_range
from wktview.core.crs.resolver import (
    SEED_DEFINITIONS,
    CRSResolver,
    CRSResolverConfig,
    ProjectionCache,
    get_default_cache,
)
from wktview.core.crs.transformer import ProjectionTransformer, reproject

__all__ = [
    # Extractor
    "KNOWN_CRS_URIS",
    "ExtractedCrs",
    "clean_crs_uri",
    "crs_uri_to_epsg",
    "extract_crs",
    "resolve_crs_reference",
    # Identifiers
    "parse_crs_identifier",
    "validate_crs_range",
    # Resolver
    "SEED_DEFINITIONS",
    "CRSResolver",
    "CRSResolverConfig",
    "ProjectionCache",
    "get_default_cache",
    # Transformer
    "ProjectionTransformer",
    "reproject",
]
