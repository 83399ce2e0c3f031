"""
Data models for geometry inputs and normalized outputs.

This module defines the unit of work handed to the pipeline, the
closed set of geometry kinds the pipeline understands, and the
immutable result it produces.
"""

from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Dict, Optional, Union

from shapely.geometry.base import BaseGeometry


class InputFormat(str, Enum):
    """Encodings recognized in a raw geometry string."""

    H3 = "h3"
    QUADKEY = "quadkey"
    BBOX = "bbox"
    GEOHASH = "geohash"
    WKT = "wkt"


class GeometryKind(str, Enum):
    """Geometry kinds supported end to end (parser, reprojection, encoders)."""

    POINT = "Point"
    LINE_STRING = "LineString"
    POLYGON = "Polygon"
    MULTI_POINT = "MultiPoint"
    MULTI_LINE_STRING = "MultiLineString"
    MULTI_POLYGON = "MultiPolygon"
    GEOMETRY_COLLECTION = "GeometryCollection"

    @classmethod
    def of(cls, geometry: BaseGeometry) -> "GeometryKind":
        """
        Classify a shapely geometry.

        Args:
            geometry: Shapely geometry

        Returns:
            Matching GeometryKind

        Raises:
            ValueError: If the geometry type is outside the supported set
                (e.g. a bare LinearRing)
        """
        return cls(geometry.geom_type)


class PipelineStage(str, Enum):
    """Stages of a pipeline run, in the order they are reached."""

    START = "start"
    FORMAT_NORMALIZED = "format_normalized"
    CRS_EXTRACTED = "crs_extracted"
    CRS_RESOLVED = "crs_resolved"
    PARSED = "parsed"
    ENCODED = "encoded"


@dataclass(frozen=True)
class SpatialInput:
    """
    Raw request handed to the pipeline.

    Attributes:
        raw_text: Geometry string as typed, shared or persisted
        explicit_crs: CRS chosen outside the geometry text (EPSG code or
            "EPSG:<code>"), None for the default
    """

    raw_text: str
    explicit_crs: Optional[Union[str, int]] = None

    def to_dict(self) -> Dict[str, Any]:
        """Convert to the wkt/epsg pair used by share links."""
        epsg = "" if self.explicit_crs is None else str(self.explicit_crs)
        return {"wkt": self.raw_text, "epsg": epsg}


@dataclass(frozen=True)
class EncodedGeometry:
    """
    Serialized forms of one geometry.

    WKT, WKB and EWKB describe the geometry as authored in its source CRS;
    GeoJSON describes the reprojected WGS84 geometry.
    """

    wkt: str
    geojson: Dict[str, Any]
    wkb: bytes
    ewkb: bytes


@dataclass(frozen=True)
class NormalizedResult:
    """
    Output of a successful pipeline run.

    Attributes:
        epsg: Resolved source CRS of the geometry
        input_format: Encoding detected in the raw text
        source: The original input, unmodified
        wkt: Canonical WKT of the source geometry
        geojson: GeoJSON Feature of the geometry in WGS84
        wkb: WKB of the source geometry
        ewkb: EWKB of the source geometry tagged with epsg
        notice: Informational message raised by format conversion
    """

    epsg: int
    input_format: InputFormat
    source: SpatialInput
    wkt: Optional[str] = None
    geojson: Optional[Dict[str, Any]] = None
    wkb: Optional[bytes] = None
    ewkb: Optional[bytes] = None
    notice: Optional[str] = None
    geometry: Optional[BaseGeometry] = field(default=None, repr=False, compare=False)

    @property
    def is_empty(self) -> bool:
        """True when the input carried a CRS but no geometry text."""
        return self.wkt is None

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary representation with hex-encoded binaries."""
        return {
            "wkt": self.wkt,
            "epsg": self.epsg,
            "geojson": self.geojson,
            "wkb": self.wkb.hex() if self.wkb is not None else None,
            "ewkb": self.ewkb.hex() if self.ewkb is not None else None,
            "input_format": self.input_format.value,
            "notice": self.notice,
            "source": self.source.to_dict(),
        }
