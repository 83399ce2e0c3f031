"""
Geometry encoders for GeoJSON, WKT, WKB and EWKB output.
"""

from wktview.core.export.encoders import (
    decode_wkb,
    encode_all,
    encode_ewkb,
    encode_geojson,
    encode_wkb,
    encode_wkt,
    geometry_to_geojson,
)

__all__ = [
    "decode_wkb",
    "encode_all",
    "encode_ewkb",
    "encode_geojson",
    "encode_wkb",
    "encode_wkt",
    "geometry_to_geojson",
]
