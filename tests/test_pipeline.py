"""
Tests for the normalization pipeline.
"""

import dataclasses
from typing import Optional, Union

import httpx
import pytest
import respx

from wktview.core.crs.resolver import CRSResolver, ProjectionCache
from wktview.core.errors import (
    CrsNotFoundError,
    InvalidBoundingBoxError,
    InvalidCrsRangeError,
    InvalidGeometryTypeError,
    UnexpectedTokenError,
    UnsupportedCrsUriError,
)
from wktview.core.export.encoders import decode_wkb
from wktview.core.pipeline import PipelineState, SpatialPipeline, normalize
from wktview.models.spatial import InputFormat, NormalizedResult, PipelineStage, SpatialInput

SWISS_PROJ4 = (
    "+proj=somerc +lat_0=46.9524055555556 +lon_0=7.43958333333333 +k_0=1 "
    "+x_0=2600000 +y_0=1200000 +ellps=bessel +towgs84=674.374,15.056,405.346,0,0,0,0 "
    "+units=m +no_defs +type=crs"
)


async def run(raw: str, crs: Optional[Union[int, str]] = None) -> NormalizedResult:
    async with CRSResolver(cache=ProjectionCache()) as resolver:
        pipeline = SpatialPipeline(resolver)
        return await pipeline.normalize(SpatialInput(raw_text=raw, explicit_crs=crs))


class TestPipelineState:
    """Tests for the stage accumulator."""

    def test_advance_returns_new_state(self) -> None:
        """Test stages never mutate earlier states."""
        start = PipelineState(source=SpatialInput("POINT (1 2)"))
        advanced = start.advance(PipelineStage.CRS_EXTRACTED, epsg=4326)

        assert start.stage == PipelineStage.START
        assert start.epsg is None
        assert advanced.stage == PipelineStage.CRS_EXTRACTED
        assert advanced.epsg == 4326

    def test_state_is_frozen(self) -> None:
        """Test states are immutable."""
        state = PipelineState(source=SpatialInput("POINT (1 2)"))
        with pytest.raises(dataclasses.FrozenInstanceError):
            state.epsg = 3857


@pytest.mark.asyncio
class TestNormalize:
    """Tests for successful pipeline runs."""

    async def test_plain_wkt(self) -> None:
        """Test WKT without CRS defaults to EPSG:4326."""
        result = await run("POINT (30 10)")

        assert result.epsg == 4326
        assert result.input_format == InputFormat.WKT
        assert result.wkt == "POINT (30 10)"
        assert result.geojson == {
            "type": "Feature",
            "geometry": {"type": "Point", "coordinates": [30, 10]},
            "properties": None,
        }
        assert result.wkb.hex() == "01010000000000000000003e400000000000002440"
        assert result.ewkb.hex() == "0101000020e6100000000000000000003e400000000000002440"
        assert result.notice is None
        assert not result.is_empty

    async def test_source_pair_preserved(self) -> None:
        """Test the original text and CRS are kept for share links."""
        result = await run("  point(30 10) ", "EPSG:4326")

        assert result.source.to_dict() == {"wkt": "  point(30 10) ", "epsg": "EPSG:4326"}
        assert result.to_dict()["source"] == {"wkt": "  point(30 10) ", "epsg": "EPSG:4326"}

    async def test_srid_prefix_reprojects_geojson_only(self) -> None:
        """Test GeoJSON is WGS84 while binary encodings keep source coordinates."""
        result = await run("SRID=3857;POINT (1113194.9079327357 0)")

        assert result.epsg == 3857
        lon, lat = result.geojson["geometry"]["coordinates"]
        assert lon == pytest.approx(10.0, abs=1e-9)
        assert lat == pytest.approx(0.0, abs=1e-9)

        source, srid = decode_wkb(result.ewkb)
        assert srid == 3857
        assert source.x == pytest.approx(1113194.9079327357)
        assert result.wkt.startswith("POINT (1113194.90793")

    async def test_explicit_crs(self) -> None:
        """Test the explicit CRS applies to untagged WKT."""
        result = await run("POINT (452000 5411000)", 32631)

        assert result.epsg == 32631
        lon, lat = result.geojson["geometry"]["coordinates"]
        assert 2.0 < lon < 2.5
        assert 48.5 < lat < 49.0

    async def test_embedded_crs_beats_explicit(self) -> None:
        """Test an SRID prefix overrides the explicit CRS."""
        result = await run("SRID=4326;POINT (30 10)", 3857)
        assert result.epsg == 4326

    async def test_uri_prefix(self) -> None:
        """Test geo:wktLiteral input."""
        result = await run("<http://www.opengis.net/def/crs/OGC/1.3/CRS84> POINT (30 10)", 3857)

        assert result.epsg == 4326
        assert result.wkt == "POINT (30 10)"

    async def test_converted_input_forces_wgs84(self) -> None:
        """Test converted formats ignore the explicit CRS and carry a notice."""
        result = await run("u4pruydqqvj", 27700)

        assert result.epsg == 4326
        assert result.input_format == InputFormat.GEOHASH
        assert result.notice == "Converted geohash input to WKT in EPSG:4326"
        assert result.geojson["geometry"]["type"] == "Polygon"

    async def test_bbox_input(self) -> None:
        """Test a bounding box becomes a rectangle."""
        result = await run("-10,50,10,40")

        assert result.input_format == InputFormat.BBOX
        assert result.geometry.bounds == (-10.0, 40.0, 10.0, 50.0)

    async def test_empty_geometry_text(self) -> None:
        """Test a bare SRID prefix yields an empty result in that CRS."""
        result = await run("SRID=3857;")

        assert result.is_empty
        assert result.epsg == 3857
        assert result.wkt is None
        assert result.geojson is None
        assert result.wkb is None
        assert result.ewkb is None

    async def test_blank_input(self) -> None:
        """Test blank input yields an empty result in the default CRS."""
        result = await run("   ")

        assert result.is_empty
        assert result.epsg == 4326

    async def test_empty_geometry_keyword(self) -> None:
        """Test WKT EMPTY geometries are encoded, not treated as missing."""
        result = await run("POINT EMPTY")

        assert not result.is_empty
        assert result.geojson["geometry"] == {"type": "Point", "coordinates": []}

    async def test_empty_multipolygon_member(self) -> None:
        """Test EMPTY members are dropped before reprojection and encoding."""
        result = await run("SRID=3857;MULTIPOLYGON (EMPTY, ((0 0, 1 0, 1 1, 0 0)))")

        assert result.epsg == 3857
        assert result.wkt == "MULTIPOLYGON (((0 0, 1 0, 1 1, 0 0)))"
        geometry = result.geojson["geometry"]
        assert geometry["type"] == "MultiPolygon"
        assert len(geometry["coordinates"]) == 1

    async def test_empty_multipoint_member(self) -> None:
        """Test a bare EMPTY member of a MULTIPOINT."""
        result = await run("MULTIPOINT (EMPTY, 1 2)")

        assert result.wkt.startswith("MULTIPOINT")
        assert "EMPTY" not in result.wkt
        assert result.geojson["geometry"] == {"type": "MultiPoint", "coordinates": [[1.0, 2.0]]}

    @respx.mock
    async def test_remote_crs(self) -> None:
        """Test a CRS missing from the seed table is fetched."""
        respx.get("https://epsg.io/2056.proj4").mock(
            return_value=httpx.Response(200, text=SWISS_PROJ4)
        )

        result = await run("SRID=2056;POINT (2600000 1200000)")

        lon, lat = result.geojson["geometry"]["coordinates"]
        assert lon == pytest.approx(7.4386, abs=0.01)
        assert lat == pytest.approx(46.9511, abs=0.01)

    async def test_convenience_function(self) -> None:
        """Test normalize() with a caller-owned resolver."""
        async with CRSResolver(cache=ProjectionCache()) as resolver:
            result = await normalize("POINT (1 2)", resolver=resolver)

            assert result.wkt == "POINT (1 2)"
            assert not resolver.client.is_closed


@pytest.mark.asyncio
class TestNormalizeErrors:
    """Tests for classified pipeline failures."""

    @pytest.mark.parametrize(
        "raw,crs,error",
        [
            ("POINT (30 10", None, UnexpectedTokenError),
            ("CIRCLE (1 2)", None, InvalidGeometryTypeError),
            ("SRID=99999;POINT (1 2)", None, InvalidCrsRangeError),
            ("POINT (1 2)", 99999, InvalidCrsRangeError),
            ("POINT (1 2)", "abc", CrsNotFoundError),
            ("<http://example.com/crs> POINT (1 2)", None, UnsupportedCrsUriError),
            ("10,50,-10,40", None, InvalidBoundingBoxError),
        ],
    )
    async def test_error_kinds(self, raw: str, crs, error: type) -> None:
        """Test each failure surfaces as its own error kind."""
        with pytest.raises(error):
            await run(raw, crs)

    @respx.mock
    async def test_unreachable_authority(self) -> None:
        """Test transport errors surface as CrsNotFound."""
        respx.get("https://epsg.io/2056.proj4").mock(side_effect=httpx.ConnectTimeout("timeout"))

        with pytest.raises(CrsNotFoundError):
            await run("POINT (2600000 1200000)", 2056)

    async def test_failure_logs_stage(self, caplog: pytest.LogCaptureFixture) -> None:
        """Test the last completed stage is logged with the error."""
        with caplog.at_level("WARNING", logger="wktview.core.pipeline"):
            with pytest.raises(UnexpectedTokenError):
                await run("POINT (30 10")

        record = next(r for r in caplog.records if r.name == "wktview.core.pipeline")
        assert record.stage == PipelineStage.CRS_RESOLVED.value
        assert record.error_code == "WKT_PARSE_FAILED"
        assert "end of input" in record.getMessage()
