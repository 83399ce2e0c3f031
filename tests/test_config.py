"""
Tests for configuration module.
"""

import pytest
from pydantic import ValidationError

from wktview.core.config import Settings


class TestSettings:
    """Tests for Settings class."""

    def test_default_values(self) -> None:
        """Test that default values are set correctly."""
        settings = Settings()
        assert settings.crs_authority_url == "https://epsg.io"
        assert settings.crs_fetch_format == "proj4"
        assert settings.crs_fetch_timeout == 5.0
        assert settings.default_epsg == 4326
        assert settings.max_input_length == 4000
        assert settings.api_v1_prefix == "/api/v1"
        assert settings.log_file is None

    def test_environment_variables(self, monkeypatch: pytest.MonkeyPatch) -> None:
        """Test WKTVIEW_ prefixed variables override defaults."""
        monkeypatch.setenv("WKTVIEW_CRS_FETCH_FORMAT", "wkt")
        monkeypatch.setenv("WKTVIEW_CRS_FETCH_TIMEOUT", "2.5")
        monkeypatch.setenv("WKTVIEW_MAX_INPUT_LENGTH", "100")

        settings = Settings()
        assert settings.crs_fetch_format == "wkt"
        assert settings.crs_fetch_timeout == 2.5
        assert settings.max_input_length == 100

    def test_invalid_fetch_format(self) -> None:
        """Test only proj4 and wkt definitions can be requested."""
        with pytest.raises(ValidationError):
            Settings(crs_fetch_format="gml")

    def test_cors_origins_list(self) -> None:
        """Test the comma separated origins are split and stripped."""
        settings = Settings(cors_origins="http://a.example, http://b.example")
        assert settings.cors_origins_list == ["http://a.example", "http://b.example"]

    def test_custom_values(self) -> None:
        """Test setting custom configuration values."""
        settings = Settings(
            crs_authority_url="https://crs.internal",
            default_epsg=3857,
            environment="production",
            log_file="/var/log/wktview/wktview.log",
        )

        assert settings.crs_authority_url == "https://crs.internal"
        assert settings.default_epsg == 3857
        assert settings.environment == "production"
        assert settings.log_file == "/var/log/wktview/wktview.log"
