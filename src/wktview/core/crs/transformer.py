"""
Reprojection of geometries to WGS84.

Transforms every coordinate of a shapely geometry from a resolved
projection definition to EPSG:4326 using pyproj. Output coordinates are
always (longitude, latitude), whatever the axis order of either CRS.
"""

import logging
from functools import lru_cache
from typing import Union

import numpy as np
import shapely
from pyproj import CRS, Transformer
from pyproj.exceptions import CRSError, ProjError
from shapely.geometry.base import BaseGeometry

from wktview.core.errors import ReprojectionError
from wktview.models.crs import WGS84_EPSG, ProjectionDefinition
from wktview.models.spatial import GeometryKind

logger = logging.getLogger(__name__)


@lru_cache(maxsize=128)
def _build_transformer(definition: str) -> Transformer:
    """Create (and memoize) a transformer from a definition to WGS84."""
    source_crs = CRS.from_user_input(definition)
    return Transformer.from_crs(source_crs, CRS.from_epsg(WGS84_EPSG), always_xy=True)


class ProjectionTransformer:
    """
    Reprojects geometries from one source CRS to WGS84.

    The transformer is created lazily; when the source already is WGS84 no
    pyproj call is made at all.
    """

    def __init__(self, source: ProjectionDefinition):
        """
        Initialize transformer.

        Args:
            source: Resolved definition of the geometry's CRS
        """
        self.source = source
        self._transformer: Union[Transformer, None] = None

    @property
    def is_identity(self) -> bool:
        """True when the source CRS already is the output CRS."""
        return self.source.is_canonical

    @property
    def transformer(self) -> Transformer:
        """
        The underlying pyproj transformer.

        Raises:
            ReprojectionError: If pyproj rejects the definition
        """
        if self._transformer is None:
            try:
                self._transformer = _build_transformer(self.source.definition)
            except (CRSError, ProjError) as e:
                raise ReprojectionError(
                    f"Failed to create transformer for {self.source}: {e}",
                    epsg=self.source.epsg,
                ) from e
            logger.debug(f"Created transformer {self.source} -> EPSG:{WGS84_EPSG}")
        return self._transformer

    def transform_batch(self, coords: np.ndarray) -> np.ndarray:
        """
        Transform an (N, 2) or (N, 3) coordinate array.

        Args:
            coords: Array of x, y[, z] rows in the source CRS

        Returns:
            Array of lon, lat[, z] rows

        Raises:
            ReprojectionError: If transformation fails or yields non-finite values
        """
        try:
            if coords.shape[1] == 3:
                xx, yy, zz = self.transformer.transform(coords[:, 0], coords[:, 1], coords[:, 2])
                result = np.column_stack([xx, yy, zz])
            else:
                xx, yy = self.transformer.transform(coords[:, 0], coords[:, 1])
                result = np.column_stack([xx, yy])
        except ProjError as e:
            raise ReprojectionError(
                f"Transformation from {self.source} failed: {e}", epsg=self.source.epsg
            ) from e

        if not np.isfinite(result).all():
            raise ReprojectionError(
                f"Coordinates fall outside the domain of {self.source}",
                epsg=self.source.epsg,
            )
        return result

    def reproject(self, geometry: BaseGeometry) -> BaseGeometry:
        """
        Reproject a geometry to WGS84.

        The input geometry is not modified; a new geometry is returned.

        Args:
            geometry: Geometry in the source CRS

        Returns:
            Geometry in EPSG:4326 with (lon, lat) coordinates

        Raises:
            ReprojectionError: If any coordinate cannot be transformed
        """
        kind = GeometryKind.of(geometry)

        if self.is_identity or geometry.is_empty:
            return geometry

        logger.debug(f"Reprojecting {kind.value} from {self.source} to EPSG:{WGS84_EPSG}")
        return shapely.transform(geometry, self.transform_batch, include_z=geometry.has_z)


def reproject(geometry: BaseGeometry, source: ProjectionDefinition) -> BaseGeometry:
    """
    Reproject a geometry to WGS84 (convenience function).

    Args:
        geometry: Geometry in the source CRS
        source: Resolved definition of the source CRS

    Returns:
        Reprojected geometry

    Raises:
        ReprojectionError: If transformation fails
    """
    return ProjectionTransformer(source).reproject(geometry)
