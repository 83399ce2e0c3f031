"""
Input format detection for raw geometry strings.

Besides WKT, a geometry can be typed as an H3 cell index, a Bing Maps
quadkey, a "left,top,right,bottom" bounding box or a geohash. This module
recognizes those encodings and converts them to an equivalent WGS84
polygon in WKT so the rest of the pipeline only ever sees WKT.
"""

import logging
import math
import re
from dataclasses import dataclass
from typing import List, Optional, Tuple

import h3
import mercantile
import pygeohash

from wktview.core.errors import InvalidBoundingBoxError
from wktview.models.crs import WGS84_EPSG
from wktview.models.spatial import InputFormat

logger = logging.getLogger(__name__)

_FLOAT = r"[-+]?(?:\d+\.?\d*|\.\d+)(?:[eE][-+]?\d+)?"

H3_PATTERN = re.compile(r"^[0-9a-fA-F]{15,16}$")
QUADKEY_PATTERN = re.compile(r"^[0-3]+$")
BBOX_PATTERN = re.compile(
    rf"^\s*({_FLOAT})\s*,\s*({_FLOAT})\s*,\s*({_FLOAT})\s*,\s*({_FLOAT})\s*$"
)
# Geohash base32 alphabet: digits and lowercase letters except a, i, l, o
GEOHASH_PATTERN = re.compile(r"^[0-9b-hjkmnp-z]+$")


@dataclass(frozen=True)
class DetectedInput:
    """
    Result of format detection.

    Attributes:
        input_format: Encoding the raw text was recognized as
        wkt: WKT to hand to the CRS extractor (the raw text for WKT input)
        crs_forced: True when conversion fixed the CRS to WGS84
    """

    input_format: InputFormat
    wkt: str
    crs_forced: bool = False

    @property
    def notice(self) -> Optional[str]:
        """Informational message for converted inputs."""
        if not self.crs_forced:
            return None
        return (
            f"Converted {self.input_format.value} input to WKT "
            f"in EPSG:{WGS84_EPSG}"
        )


def rectangle_wkt(left: float, top: float, right: float, bottom: float) -> str:
    """
    Build a closed rectangular polygon.

    Corners run top-left, top-right, bottom-right, bottom-left, top-left.

    Args:
        left: Western longitude
        top: Northern latitude
        right: Eastern longitude
        bottom: Southern latitude

    Returns:
        POLYGON WKT
    """
    ring = [(left, top), (right, top), (right, bottom), (left, bottom), (left, top)]
    return _polygon_wkt(ring)


def _polygon_wkt(ring: List[Tuple[float, float]]) -> str:
    coords = ", ".join(f"{x!r} {y!r}" for x, y in ring)
    return f"POLYGON (({coords}))"


def is_h3_cell(text: str) -> bool:
    """Check whether text is a valid H3 cell index."""
    return bool(H3_PATTERN.match(text)) and h3.is_valid_cell(text.lower())


def h3_to_wkt(cell: str) -> str:
    """
    Convert an H3 cell index to its boundary polygon.

    Vertices keep the order returned by the H3 library; the ring is closed
    by repeating the first vertex.
    """
    boundary = h3.cell_to_boundary(cell.lower())
    ring = [(lng, lat) for lat, lng in boundary]
    ring.append(ring[0])
    return _polygon_wkt(ring)


def quadkey_to_wkt(quadkey: str) -> str:
    """Convert a quadkey to the rectangle of its web mercator tile."""
    tile = mercantile.quadkey_to_tile(quadkey)
    bounds = mercantile.bounds(tile)
    return rectangle_wkt(bounds.west, bounds.north, bounds.east, bounds.south)


def bbox_to_wkt(text: str) -> str:
    """
    Convert a "left,top,right,bottom" quad to a rectangle.

    Raises:
        InvalidBoundingBoxError: If the quad does not describe a WGS84 extent
    """
    match = BBOX_PATTERN.match(text)
    if not match:
        raise InvalidBoundingBoxError(text, "expected four comma separated numbers")

    left, top, right, bottom = (float(value) for value in match.groups())
    _validate_bbox(text, left, top, right, bottom)
    return rectangle_wkt(left, top, right, bottom)


def _validate_bbox(text: str, left: float, top: float, right: float, bottom: float) -> None:
    if not all(math.isfinite(v) for v in (left, top, right, bottom)):
        raise InvalidBoundingBoxError(text, "coordinates must be finite numbers")
    for lon in (left, right):
        if not -180.0 <= lon <= 180.0:
            raise InvalidBoundingBoxError(text, f"longitude {lon} out of range [-180, 180]")
    for lat in (top, bottom):
        if not -90.0 <= lat <= 90.0:
            raise InvalidBoundingBoxError(text, f"latitude {lat} out of range [-90, 90]")
    if left >= right:
        raise InvalidBoundingBoxError(text, "left must be smaller than right")
    if bottom >= top:
        raise InvalidBoundingBoxError(text, "bottom must be smaller than top")


def geohash_to_wkt(geohash: str) -> str:
    """Convert a geohash to the rectangle of its cell."""
    lat, lon, lat_err, lon_err = pygeohash.decode_exactly(geohash)
    return rectangle_wkt(lon - lon_err, lat + lat_err, lon + lon_err, lat - lat_err)


def detect_format(raw: str) -> InputFormat:
    """
    Classify a raw geometry string.

    Checks run in a fixed order and the first match wins: H3, quadkey,
    bounding box, geohash, and finally literal WKT. H3 runs before geohash
    because a 15 character hex index also uses only geohash characters.

    Args:
        raw: Raw geometry string

    Returns:
        Detected InputFormat
    """
    text = raw.strip()

    if is_h3_cell(text):
        return InputFormat.H3
    if QUADKEY_PATTERN.match(text):
        return InputFormat.QUADKEY
    if BBOX_PATTERN.match(text):
        return InputFormat.BBOX
    if GEOHASH_PATTERN.match(text):
        return InputFormat.GEOHASH
    return InputFormat.WKT


def detect_and_normalize(raw: str) -> DetectedInput:
    """
    Detect the encoding of a raw string and convert it to WKT.

    Args:
        raw: Raw geometry string

    Returns:
        DetectedInput holding WKT; for anything but literal WKT the CRS is
        forced to WGS84

    Raises:
        InvalidBoundingBoxError: If a bounding box quad is out of range
    """
    input_format = detect_format(raw)

    if input_format == InputFormat.WKT:
        return DetectedInput(input_format=input_format, wkt=raw)

    text = raw.strip()
    if input_format == InputFormat.H3:
        wkt = h3_to_wkt(text)
    elif input_format == InputFormat.QUADKEY:
        wkt = quadkey_to_wkt(text)
    elif input_format == InputFormat.BBOX:
        wkt = bbox_to_wkt(text)
    elif input_format == InputFormat.GEOHASH:
        wkt = geohash_to_wkt(text)
    else:
        raise ValueError(f"Unhandled input format: {input_format}")

    detected = DetectedInput(input_format=input_format, wkt=wkt, crs_forced=True)
    logger.info(detected.notice)
    return detected
