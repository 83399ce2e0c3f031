"""
Extraction of CRS references embedded in WKT text.

Two prefixes are understood: the PostGIS EWKT form "SRID=4326;POINT(...)"
and the GeoSPARQL geo:wktLiteral form
"<http://www.opengis.net/def/crs/EPSG/0/4326> POINT(...)".
"""

import logging
import re
from dataclasses import dataclass
from typing import Dict, Optional

from wktview.core.crs.identifiers import parse_crs_identifier, validate_crs_range
from wktview.core.errors import CrsNotFoundError, UnsupportedCrsUriError

logger = logging.getLogger(__name__)

SRID_PATTERN = re.compile(r"^\s*SRID\s*=\s*(\d+)\s*;(.*)$", re.IGNORECASE | re.DOTALL)
URI_PATTERN = re.compile(r"^\s*(<[^>]*>)\s*(.*)$", re.DOTALL)
EPSG_URI_PATTERN = re.compile(r"opengis\.net/def/crs/EPSG/[0-9.]+/([0-9]+)$")

# OGC CRS URIs that do not follow the EPSG URI scheme
KNOWN_CRS_URIS: Dict[str, int] = {
    "http://www.opengis.net/def/crs/OGC/1.3/CRS84": 4326,
    "http://www.opengis.net/def/crs/OGC/1.3/CRS83": 4269,
    "http://www.opengis.net/def/crs/OGC/1.3/CRS27": 4267,
    "http://www.opengis.net/def/crs/OGC/0/CRS84": 4326,
    "http://www.opengis.net/def/crs/OGC/0/CRS83": 4269,
    "http://www.opengis.net/def/crs/OGC/0/CRS27": 4267,
}


@dataclass(frozen=True)
class ExtractedCrs:
    """
    WKT split into its CRS reference and geometry text.

    Attributes:
        crs_ref: EPSG code as text, or None when the WKT carries no CRS
        geometry_text: Remaining geometry WKT, stripped
        uri: The CRS URI as written, for geo:wktLiteral input
    """

    crs_ref: Optional[str]
    geometry_text: str
    uri: Optional[str] = None

    @property
    def epsg(self) -> Optional[int]:
        """Numeric EPSG code of crs_ref."""
        return int(self.crs_ref) if self.crs_ref is not None else None


def clean_crs_uri(uri: str) -> str:
    """Strip whitespace and angle brackets and normalize the scheme to http."""
    cleaned = uri.strip()
    if cleaned.startswith("<"):
        cleaned = cleaned[1:]
    if cleaned.endswith(">"):
        cleaned = cleaned[:-1]
    return cleaned.strip().replace("https://", "http://", 1)


def crs_uri_to_epsg(uri: str) -> str:
    """
    Resolve a CRS URI to an EPSG code.

    Args:
        uri: URI with or without angle brackets

    Returns:
        EPSG code as text

    Raises:
        UnsupportedCrsUriError: If the URI is neither a known OGC CRS nor an
            EPSG definition URI
    """
    cleaned = clean_crs_uri(uri)

    if cleaned in KNOWN_CRS_URIS:
        return str(KNOWN_CRS_URIS[cleaned])

    match = EPSG_URI_PATTERN.search(cleaned)
    if match:
        return match.group(1)

    raise UnsupportedCrsUriError(uri)


def extract_crs(raw_wkt: str) -> ExtractedCrs:
    """
    Split WKT into an optional CRS reference and the geometry text.

    The SRID prefix is checked before the URI prefix.

    Args:
        raw_wkt: WKT, EWKT or geo:wktLiteral text

    Returns:
        ExtractedCrs

    Raises:
        UnsupportedCrsUriError: If a CRS URI is present but not supported
    """
    srid_match = SRID_PATTERN.match(raw_wkt)
    if srid_match:
        crs_ref, rest = srid_match.groups()
        logger.debug(f"Found SRID prefix: {crs_ref}")
        return ExtractedCrs(crs_ref=str(int(crs_ref)), geometry_text=rest.strip())

    uri_match = URI_PATTERN.match(raw_wkt)
    if uri_match:
        uri, rest = uri_match.groups()
        crs_ref = crs_uri_to_epsg(uri)
        logger.debug(f"Found CRS URI {uri} -> EPSG:{crs_ref}")
        return ExtractedCrs(crs_ref=crs_ref, geometry_text=rest.strip(), uri=uri)

    return ExtractedCrs(crs_ref=None, geometry_text=raw_wkt.strip())


def resolve_crs_reference(crs_ref: str) -> int:
    """
    Turn an extracted CRS reference into a range-checked EPSG code.

    Raises:
        CrsNotFoundError: If crs_ref is not numeric
        InvalidCrsRangeError: If the code is outside 1024-32767
    """
    epsg = parse_crs_identifier(crs_ref)
    if epsg is None:
        raise CrsNotFoundError(crs_ref, reason="empty CRS reference")
    return validate_crs_range(epsg)
