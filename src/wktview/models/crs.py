"""
Data models for Coordinate Reference System (CRS) resolution.
"""

from dataclasses import dataclass
from typing import Literal

# Canonical geographic CRS of all GeoJSON output
WGS84_EPSG = 4326

MIN_CRS_IDENTIFIER = 1024
MAX_CRS_IDENTIFIER = 32767

DefinitionSource = Literal["seed", "remote"]


@dataclass(frozen=True)
class ProjectionDefinition:
    """
    Resolved transformation definition of one EPSG code.

    Attributes:
        epsg: EPSG code the definition belongs to
        definition: PROJ string (or WKT) exactly as obtained
        source: "seed" for built-in definitions, "remote" for fetched ones
    """

    epsg: int
    definition: str
    source: DefinitionSource = "remote"

    @property
    def is_geographic(self) -> bool:
        """True for angular (longitude/latitude) definitions."""
        text = self.definition
        if "+proj=" in text:
            return "+proj=longlat" in text or "+proj=latlong" in text
        return text.lstrip().upper().startswith(("GEOGCS", "GEOGCRS"))

    @property
    def is_canonical(self) -> bool:
        """True when this is the WGS84 output CRS itself."""
        return self.epsg == WGS84_EPSG

    def __str__(self) -> str:
        """String representation."""
        return f"EPSG:{self.epsg}"
