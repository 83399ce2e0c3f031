"""
wktview - normalize and transcode geometry strings.

This package parses WKT, EWKT, geo:wktLiteral, H3, quadkey, geohash and
bounding-box inputs, resolves their coordinate reference system, reprojects
them to WGS84 and serializes the result as GeoJSON, WKT, WKB and EWKB.
"""

__version__ = "0.1.0"
