"""
Tests for CRS extraction from WKT prefixes.
"""

import pytest

from wktview.core.crs import extractor
from wktview.core.errors import (
    CrsNotFoundError,
    InvalidCrsRangeError,
    UnsupportedCrsUriError,
)


class TestExtractCrs:
    """Tests for extract_crs."""

    def test_srid_prefix(self) -> None:
        """Test the PostGIS SRID prefix is split off."""
        extracted = extractor.extract_crs("SRID=4326;POINT(30 10)")

        assert extracted.crs_ref == "4326"
        assert extracted.geometry_text == "POINT(30 10)"
        assert extracted.epsg == 4326
        assert extracted.uri is None

    def test_srid_prefix_case_and_spacing(self) -> None:
        """Test the SRID keyword is case-insensitive and tolerates spaces."""
        extracted = extractor.extract_crs("  srid = 27700 ;  POINT (530000 180000)  ")

        assert extracted.crs_ref == "27700"
        assert extracted.geometry_text == "POINT (530000 180000)"

    def test_srid_without_geometry(self) -> None:
        """Test a bare SRID prefix leaves empty geometry text."""
        extracted = extractor.extract_crs("SRID=3857;")

        assert extracted.crs_ref == "3857"
        assert extracted.geometry_text == ""

    def test_epsg_uri_prefix(self) -> None:
        """Test a geo:wktLiteral EPSG URI is resolved to its code."""
        raw = "<http://www.opengis.net/def/crs/EPSG/0/28992> POINT(155000 463000)"
        extracted = extractor.extract_crs(raw)

        assert extracted.crs_ref == "28992"
        assert extracted.geometry_text == "POINT(155000 463000)"
        assert extracted.uri == "<http://www.opengis.net/def/crs/EPSG/0/28992>"

    def test_https_and_versioned_uri(self) -> None:
        """Test https URIs and dotted EPSG versions are accepted."""
        raw = "<https://www.opengis.net/def/crs/EPSG/9.9.1/2154>POINT(700000 6600000)"
        extracted = extractor.extract_crs(raw)

        assert extracted.crs_ref == "2154"
        assert extracted.geometry_text == "POINT(700000 6600000)"

    @pytest.mark.parametrize(
        "uri,epsg",
        [
            ("<http://www.opengis.net/def/crs/OGC/1.3/CRS84>", "4326"),
            ("<http://www.opengis.net/def/crs/OGC/0/CRS83>", "4269"),
            ("<https://www.opengis.net/def/crs/OGC/1.3/CRS27>", "4267"),
        ],
    )
    def test_known_ogc_uris(self, uri: str, epsg: str) -> None:
        """Test OGC CRS URIs map to their EPSG equivalents."""
        assert extractor.extract_crs(f"{uri} POINT(1 2)").crs_ref == epsg

    def test_unsupported_uri(self) -> None:
        """Test a URI outside the EPSG scheme is rejected."""
        with pytest.raises(UnsupportedCrsUriError) as exc_info:
            extractor.extract_crs("<http://example.com/crs/42> POINT(1 2)")

        assert exc_info.value.message == "CRS URI not supported (only OpenGIS EPSG for now)"
        assert exc_info.value.details["uri"] == "<http://example.com/crs/42>"

    def test_srid_checked_before_uri(self) -> None:
        """Test the SRID grammar takes precedence."""
        extracted = extractor.extract_crs("SRID=4326;<not a uri> POINT(1 2)")

        assert extracted.crs_ref == "4326"
        assert extracted.geometry_text == "<not a uri> POINT(1 2)"

    def test_no_prefix(self) -> None:
        """Test plain WKT carries no CRS reference."""
        extracted = extractor.extract_crs("  POINT (30 10) ")

        assert extracted.crs_ref is None
        assert extracted.epsg is None
        assert extracted.geometry_text == "POINT (30 10)"


class TestCleanCrsUri:
    """Tests for clean_crs_uri."""

    def test_strips_brackets_and_scheme(self) -> None:
        """Test brackets, whitespace and https are normalized."""
        cleaned = extractor.clean_crs_uri(" <https://www.opengis.net/def/crs/EPSG/0/4326> ")
        assert cleaned == "http://www.opengis.net/def/crs/EPSG/0/4326"


class TestResolveCrsReference:
    """Tests for resolve_crs_reference."""

    def test_valid_reference(self) -> None:
        """Test a digit reference becomes an EPSG code."""
        assert extractor.resolve_crs_reference("27700") == 27700

    def test_out_of_range_reference(self) -> None:
        """Test references outside 1024-32767 are rejected."""
        with pytest.raises(InvalidCrsRangeError):
            extractor.resolve_crs_reference("99999")

    def test_empty_reference(self) -> None:
        """Test an empty reference is not silently defaulted."""
        with pytest.raises(CrsNotFoundError):
            extractor.resolve_crs_reference("")
