"""
Normalization pipeline.

Turns a raw geometry string plus an optional CRS into a NormalizedResult:

    START -> FORMAT_NORMALIZED -> CRS_EXTRACTED -> CRS_RESOLVED -> PARSED -> ENCODED

Each stage returns a new PipelineState. A run ends either in a
NormalizedResult or in exactly one PipelineError; intermediate state is
never returned to the caller.
"""

import logging
from dataclasses import dataclass, replace
from typing import Any, Optional

from shapely.geometry.base import BaseGeometry

from wktview.core.config import settings
from wktview.core.crs.extractor import extract_crs, resolve_crs_reference
from wktview.core.crs.identifiers import parse_crs_identifier
from wktview.core.crs.resolver import CRSResolver
from wktview.core.crs.transformer import ProjectionTransformer
from wktview.core.errors import PipelineError
from wktview.core.export.encoders import encode_all
from wktview.core.formats.detector import detect_and_normalize
from wktview.core.parsers.wkt_parser import parse_wkt
from wktview.models.crs import WGS84_EPSG, ProjectionDefinition
from wktview.models.spatial import (
    EncodedGeometry,
    InputFormat,
    NormalizedResult,
    PipelineStage,
    SpatialInput,
)
from wktview.utils.timing import StageTimer, log_async_performance

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class PipelineState:
    """
    Accumulated outputs of the stages completed so far.

    Attributes:
        source: The input being normalized
        stage: Last completed stage
        input_format: Detected encoding of the raw text
        wkt: WKT after format conversion (may carry a CRS prefix)
        crs_forced: True when format conversion fixed the CRS to WGS84
        notice: Informational message from format conversion
        geometry_text: WKT with any CRS prefix removed
        epsg: Effective source CRS
        projection: Resolved definition of epsg
        geometry: Parsed geometry in the source CRS
        projected: Geometry reprojected to WGS84
        encoded: Output encodings
    """

    source: SpatialInput
    stage: PipelineStage = PipelineStage.START
    input_format: Optional[InputFormat] = None
    wkt: Optional[str] = None
    crs_forced: bool = False
    notice: Optional[str] = None
    geometry_text: Optional[str] = None
    epsg: Optional[int] = None
    projection: Optional[ProjectionDefinition] = None
    geometry: Optional[BaseGeometry] = None
    projected: Optional[BaseGeometry] = None
    encoded: Optional[EncodedGeometry] = None

    def advance(self, stage: PipelineStage, **changes: Any) -> "PipelineState":
        """Return a copy marked as having completed stage, with changes applied."""
        return replace(self, stage=stage, **changes)

    def to_result(self) -> NormalizedResult:
        """Build the result of a run that has resolved its CRS."""
        encoded = self.encoded
        return NormalizedResult(
            epsg=self.epsg,
            input_format=self.input_format,
            source=self.source,
            wkt=encoded.wkt if encoded else None,
            geojson=encoded.geojson if encoded else None,
            wkb=encoded.wkb if encoded else None,
            ewkb=encoded.ewkb if encoded else None,
            notice=self.notice,
            geometry=self.projected,
        )


class SpatialPipeline:
    """
    Orchestrates format detection, CRS handling, parsing and encoding.

    Pipelines are stateless apart from the resolver's projection cache and
    may be shared between concurrent requests.
    """

    def __init__(
        self,
        resolver: Optional[CRSResolver] = None,
        default_epsg: Optional[int] = None,
    ) -> None:
        """
        Initialize the pipeline.

        Args:
            resolver: CRS resolver (default: one using the process-wide cache)
            default_epsg: CRS used when the input names none
                (default: settings.default_epsg)
        """
        self.resolver = resolver or CRSResolver()
        self.default_epsg = default_epsg if default_epsg is not None else settings.default_epsg

    async def close(self) -> None:
        """Release the resolver's HTTP client."""
        await self.resolver.close()

    @log_async_performance(log_level=logging.DEBUG)
    async def normalize(self, spatial_input: SpatialInput) -> NormalizedResult:
        """
        Normalize a raw geometry string.

        Args:
            spatial_input: Raw text and optional explicit CRS

        Returns:
            NormalizedResult; empty (no encodings) when the text holds a CRS
            prefix but no geometry

        Raises:
            PipelineError: The classified failure of the first stage that failed
        """
        state = PipelineState(source=spatial_input)

        try:
            state = self._normalize_format(state)
            state = self._extract_crs(state)
            state = await self._resolve_crs(state)

            if not state.geometry_text:
                logger.info(f"Empty geometry text, returning empty result in EPSG:{state.epsg}")
                return state.to_result()

            state = self._parse(state)
            state = self._encode(state)
        except PipelineError as e:
            logger.warning(
                f"Pipeline failed after stage {state.stage.value}: {e}",
                extra={"stage": state.stage.value, "error_code": e.error_code},
            )
            raise

        logger.info(
            f"Normalized {state.input_format.value} input to "
            f"{state.geometry.geom_type} (EPSG:{state.epsg})"
        )
        return state.to_result()

    def _normalize_format(self, state: PipelineState) -> PipelineState:
        with StageTimer(PipelineStage.FORMAT_NORMALIZED.value):
            detected = detect_and_normalize(state.source.raw_text)

        return state.advance(
            PipelineStage.FORMAT_NORMALIZED,
            input_format=detected.input_format,
            wkt=detected.wkt,
            crs_forced=detected.crs_forced,
            notice=detected.notice,
        )

    def _extract_crs(self, state: PipelineState) -> PipelineState:
        with StageTimer(PipelineStage.CRS_EXTRACTED.value):
            extracted = extract_crs(state.wkt)

            # Forced WGS84 > embedded SRID/URI > explicit CRS > default
            if state.crs_forced:
                epsg = WGS84_EPSG
            elif extracted.crs_ref is not None:
                epsg = resolve_crs_reference(extracted.crs_ref)
            else:
                explicit = parse_crs_identifier(state.source.explicit_crs)
                epsg = explicit if explicit is not None else self.default_epsg

        return state.advance(
            PipelineStage.CRS_EXTRACTED,
            geometry_text=extracted.geometry_text,
            epsg=epsg,
        )

    async def _resolve_crs(self, state: PipelineState) -> PipelineState:
        with StageTimer(PipelineStage.CRS_RESOLVED.value):
            projection = await self.resolver.resolve(state.epsg)

        return state.advance(PipelineStage.CRS_RESOLVED, projection=projection)

    def _parse(self, state: PipelineState) -> PipelineState:
        with StageTimer(PipelineStage.PARSED.value):
            geometry = parse_wkt(state.geometry_text)
            projected = ProjectionTransformer(state.projection).reproject(geometry)

        return state.advance(PipelineStage.PARSED, geometry=geometry, projected=projected)

    def _encode(self, state: PipelineState) -> PipelineState:
        with StageTimer(PipelineStage.ENCODED.value):
            encoded = encode_all(state.geometry, state.projected, state.epsg)

        return state.advance(PipelineStage.ENCODED, encoded=encoded)


async def normalize(
    raw_text: str,
    explicit_crs: Optional[Any] = None,
    resolver: Optional[CRSResolver] = None,
) -> NormalizedResult:
    """
    Normalize a raw geometry string (convenience function).

    A resolver created here is closed before returning; a passed-in
    resolver is left open.
    """
    pipeline = SpatialPipeline(resolver=resolver)
    try:
        return await pipeline.normalize(SpatialInput(raw_text=raw_text, explicit_crs=explicit_crs))
    finally:
        if resolver is None:
            await pipeline.close()
