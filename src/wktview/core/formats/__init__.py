"""
Input format detection.

Recognizes H3 cells, quadkeys, bounding boxes and geohashes and converts
them to WGS84 WKT polygons.
"""

from wktview.core.formats.detector import (
    DetectedInput,
    bbox_to_wkt,
    detect_and_normalize,
    detect_format,
    geohash_to_wkt,
    h3_to_wkt,
    is_h3_cell,
    quadkey_to_wkt,
    rectangle_wkt,
)

__all__ = [
    "DetectedInput",
    "bbox_to_wkt",
    "detect_and_normalize",
    "detect_format",
    "geohash_to_wkt",
    "h3_to_wkt",
    "is_h3_cell",
    "quadkey_to_wkt",
    "rectangle_wkt",
]
