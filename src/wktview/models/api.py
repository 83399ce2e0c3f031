"""
Pydantic models for the HTTP API.
"""

from typing import Any, Dict, Literal, Optional, Union

from pydantic import BaseModel, ConfigDict, Field, field_validator

from wktview.models.crs import ProjectionDefinition
from wktview.models.spatial import InputFormat, NormalizedResult


class NormalizeRequest(BaseModel):
    """
    Geometry string and optional CRS to normalize.

    Attributes:
        wkt: WKT, EWKT, geo:wktLiteral, H3 cell, quadkey, geohash or
            left,top,right,bottom bounding box
        epsg: CRS of the geometry when the text does not embed one
    """

    wkt: str = Field(..., description="Raw geometry string")
    epsg: Optional[Union[int, str]] = Field(
        None,
        description="EPSG code (e.g. 27700 or 'EPSG:27700'); defaults to 4326",
    )

    model_config = ConfigDict(
        json_schema_extra={
            "example": {
                "wkt": "SRID=27700;POINT (530000 180000)",
                "epsg": None,
            }
        }
    )

    @field_validator("epsg")
    @classmethod
    def validate_epsg(cls, v: Optional[Union[int, str]]) -> Optional[Union[int, str]]:
        """Treat a blank EPSG field like a missing one."""
        if isinstance(v, str) and not v.strip():
            return None
        return v


class NormalizeResponse(BaseModel):
    """
    Normalized geometry.

    wkt, wkb and ewkb describe the geometry in its source CRS (epsg);
    geojson holds the WGS84 geometry. Binary encodings are hex strings.
    """

    wkt: Optional[str] = Field(None, description="Canonical WKT in the source CRS")
    epsg: int = Field(..., description="Resolved source CRS")
    geojson: Optional[Dict[str, Any]] = Field(None, description="GeoJSON Feature in EPSG:4326")
    wkb: Optional[str] = Field(None, description="Little-endian WKB, hex encoded")
    ewkb: Optional[str] = Field(None, description="Little-endian EWKB with SRID, hex encoded")
    input_format: InputFormat = Field(..., description="Detected input encoding")
    notice: Optional[str] = Field(None, description="Informational message from format conversion")
    source: Dict[str, str] = Field(..., description="Original wkt/epsg pair, for share links")
    empty: bool = Field(False, description="True when the input held no geometry")

    model_config = ConfigDict(
        json_schema_extra={
            "example": {
                "wkt": "POINT (30 10)",
                "epsg": 4326,
                "geojson": {
                    "type": "Feature",
                    "geometry": {"type": "Point", "coordinates": [30.0, 10.0]},
                    "properties": None,
                },
                "wkb": "01010000000000000000003e400000000000002440",
                "ewkb": "0101000020e6100000000000000000003e400000000000002440",
                "input_format": "wkt",
                "notice": None,
                "source": {"wkt": "POINT (30 10)", "epsg": ""},
                "empty": False,
            }
        }
    )

    @classmethod
    def from_result(cls, result: NormalizedResult) -> "NormalizeResponse":
        """Build the response body for a pipeline result."""
        return cls(**result.to_dict(), empty=result.is_empty)


class CRSLookupResponse(BaseModel):
    """Projection definition of a validated EPSG code."""

    epsg: int = Field(..., description="EPSG code")
    definition: str = Field(..., description="PROJ string or WKT definition")
    source: Literal["seed", "remote"] = Field(..., description="Where the definition came from")
    is_geographic: bool = Field(..., description="True for longitude/latitude systems")

    @classmethod
    def from_definition(cls, definition: ProjectionDefinition) -> "CRSLookupResponse":
        """Build the response body for a resolved definition."""
        return cls(
            epsg=definition.epsg,
            definition=definition.definition,
            source=definition.source,
            is_geographic=definition.is_geographic,
        )
