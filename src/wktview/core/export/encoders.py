"""
Geometry encoders.

Serializes shapely geometries to:
- GeoJSON Feature objects (WGS84 coordinates, for map display)
- WKT (canonical re-serialization)
- WKB (little-endian, no CRS tag)
- EWKB (little-endian, SRID embedded)

WKT, WKB and EWKB are produced from the geometry as authored in its
source CRS; GeoJSON is produced from the reprojected geometry.
"""

import logging
from typing import Any, Dict, List, Optional, Tuple

import shapely
from shapely.geometry.base import BaseGeometry

from wktview.models.spatial import EncodedGeometry, GeometryKind

logger = logging.getLogger(__name__)

# Little-endian (NDR) byte order for shapely.to_wkb
LITTLE_ENDIAN = 1


def _position(coord: Tuple[float, ...]) -> List[float]:
    return [float(value) for value in coord]


def _positions(geometry: BaseGeometry) -> List[List[float]]:
    return [_position(coord) for coord in geometry.coords]


def _rings(polygon: BaseGeometry) -> List[List[List[float]]]:
    if polygon.is_empty:
        return []
    rings = [_positions(polygon.exterior)]
    for interior in polygon.interiors:
        rings.append(_positions(interior))
    return rings


def geometry_to_geojson(geometry: BaseGeometry) -> Dict[str, Any]:
    """
    Convert a shapely geometry to a GeoJSON geometry object.

    Args:
        geometry: Geometry of one of the supported kinds

    Returns:
        GeoJSON geometry dictionary

    Raises:
        ValueError: If the geometry kind is not supported
    """
    kind = GeometryKind.of(geometry)

    if kind == GeometryKind.POINT:
        coordinates: Any = [] if geometry.is_empty else _position(geometry.coords[0])
    elif kind == GeometryKind.LINE_STRING:
        coordinates = _positions(geometry)
    elif kind == GeometryKind.POLYGON:
        coordinates = _rings(geometry)
    elif kind == GeometryKind.MULTI_POINT:
        coordinates = [_position(point.coords[0]) for point in geometry.geoms]
    elif kind == GeometryKind.MULTI_LINE_STRING:
        coordinates = [_positions(line) for line in geometry.geoms]
    elif kind == GeometryKind.MULTI_POLYGON:
        coordinates = [_rings(polygon) for polygon in geometry.geoms]
    elif kind == GeometryKind.GEOMETRY_COLLECTION:
        return {
            "type": kind.value,
            "geometries": [geometry_to_geojson(member) for member in geometry.geoms],
        }
    else:
        raise ValueError(f"Unsupported geometry type: {geometry.geom_type}")

    return {"type": kind.value, "coordinates": coordinates}


def encode_geojson(geometry: BaseGeometry) -> Dict[str, Any]:
    """
    Encode a geometry as a GeoJSON Feature with null properties.

    Args:
        geometry: Geometry in WGS84 (lon, lat)

    Returns:
        GeoJSON Feature dictionary
    """
    return {
        "type": "Feature",
        "geometry": geometry_to_geojson(geometry),
        "properties": None,
    }


def encode_wkt(geometry: BaseGeometry) -> str:
    """Encode a geometry as WKT with full precision and trimmed zeros."""
    return shapely.to_wkt(geometry, rounding_precision=-1, trim=True)


def encode_wkb(geometry: BaseGeometry) -> bytes:
    """Encode a geometry as little-endian WKB without a CRS tag."""
    return shapely.to_wkb(geometry, hex=False, byte_order=LITTLE_ENDIAN, include_srid=False)


def encode_ewkb(geometry: BaseGeometry, epsg: int) -> bytes:
    """
    Encode a geometry as little-endian EWKB carrying an SRID.

    Equivalent to encoding "SRID=<epsg>;<wkt>" as PostGIS does. The input
    geometry is not modified.

    Args:
        geometry: Geometry in its source CRS
        epsg: SRID to embed

    Returns:
        EWKB bytes
    """
    tagged = shapely.set_srid(geometry, epsg)
    return shapely.to_wkb(tagged, hex=False, byte_order=LITTLE_ENDIAN, include_srid=True)


def decode_wkb(data: bytes) -> Tuple[BaseGeometry, Optional[int]]:
    """
    Decode WKB or EWKB.

    Args:
        data: WKB or EWKB bytes

    Returns:
        Tuple of (geometry, SRID or None when the data carries none)
    """
    geometry = shapely.from_wkb(data)
    srid = int(shapely.get_srid(geometry))
    return geometry, (srid or None)


def encode_all(
    source_geometry: BaseGeometry,
    projected_geometry: BaseGeometry,
    epsg: int,
) -> EncodedGeometry:
    """
    Produce every output encoding for one geometry.

    Args:
        source_geometry: Geometry as authored, in the source CRS
        projected_geometry: The same geometry reprojected to WGS84
        epsg: Source CRS

    Returns:
        EncodedGeometry
    """
    encoded = EncodedGeometry(
        wkt=encode_wkt(source_geometry),
        geojson=encode_geojson(projected_geometry),
        wkb=encode_wkb(source_geometry),
        ewkb=encode_ewkb(source_geometry, epsg),
    )
    logger.debug(
        f"Encoded {source_geometry.geom_type} (EPSG:{epsg}): "
        f"{len(encoded.wkb)} bytes WKB, {len(encoded.ewkb)} bytes EWKB"
    )
    return encoded
