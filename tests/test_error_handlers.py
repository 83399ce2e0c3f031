"""
Tests for FastAPI error handlers.
"""

import logging

import pytest
from fastapi import FastAPI
from fastapi.testclient import TestClient
from pydantic import BaseModel, Field

from wktview.api.error_handlers import register_error_handlers
from wktview.core.errors import (
    ConfigurationError,
    CrsNotFoundError,
    InvalidCrsRangeError,
    UnexpectedTokenError,
    ValidationError,
)


class SampleModel(BaseModel):
    """Model for request validation."""

    wkt: str = Field(..., min_length=3)
    epsg: int = Field(..., gt=0)


@pytest.fixture
def app():
    """Create test FastAPI app with error handlers."""
    test_app = FastAPI()

    @test_app.get("/test/validation-error")
    def raise_validation_error():
        raise ValidationError("Invalid input", field="wkt")

    @test_app.get("/test/parse-error")
    def raise_parse_error():
        raise UnexpectedTokenError(None, 12, "`)`")

    @test_app.get("/test/range-error")
    def raise_range_error():
        raise InvalidCrsRangeError(99999, 1024, 32767)

    @test_app.get("/test/not-found")
    def raise_not_found():
        raise CrsNotFoundError(2056, reason="no definition from CRS authority")

    @test_app.get("/test/config-error")
    def raise_config_error():
        raise ConfigurationError("Config missing", config_key="WKTVIEW_CRS_AUTHORITY_URL")

    @test_app.get("/test/generic-error")
    def raise_generic_error():
        raise RuntimeError("Unexpected error")

    @test_app.post("/test/pydantic-validation")
    def pydantic_validation(data: SampleModel):
        return {"status": "ok"}

    register_error_handlers(test_app)
    return test_app


@pytest.fixture
def client(app):
    """Create test client."""
    return TestClient(app, raise_server_exceptions=False)


class TestWKTViewExceptionHandler:
    """Tests for the WKTViewException handler."""

    def test_validation_error(self, client):
        """Test ValidationError maps to 400."""
        response = client.get("/test/validation-error")

        assert response.status_code == 400
        data = response.json()
        assert data["error_code"] == "VALIDATION_ERROR"
        assert data["message"] == "Invalid input"
        assert data["details"]["field"] == "wkt"
        assert "suggestions" in data

    def test_parse_error(self, client):
        """Test parse errors keep token and position details."""
        response = client.get("/test/parse-error")

        assert response.status_code == 422
        data = response.json()
        assert data["error_code"] == "WKT_PARSE_FAILED"
        assert data["message"] == (
            "WKT parsing failed: Unexpected end of input at position 12 (expected `)`)"
        )
        assert data["details"]["position"] == 12

    def test_range_error(self, client):
        """Test InvalidCrsRangeError maps to 422."""
        response = client.get("/test/range-error")

        assert response.status_code == 422
        assert response.json()["details"] == {"epsg": 99999, "min": 1024, "max": 32767}

    def test_not_found(self, client):
        """Test CrsNotFoundError maps to 404."""
        response = client.get("/test/not-found")

        assert response.status_code == 404
        data = response.json()
        assert data["error_code"] == "CRS_NOT_FOUND"
        assert data["message"] == "EPSG not found"

    def test_config_error(self, client):
        """Test ConfigurationError maps to 500."""
        response = client.get("/test/config-error")

        assert response.status_code == 500
        assert response.json()["details"]["config_key"] == "WKTVIEW_CRS_AUTHORITY_URL"


class TestExceptionLogging:
    """Tests for the log level chosen per status code."""

    HANDLER_LOGGER = "wktview.api.error_handlers"

    def _handler_records(self, caplog):
        return [r for r in caplog.records if r.name == self.HANDLER_LOGGER]

    @pytest.mark.parametrize(
        "endpoint",
        ["/test/validation-error", "/test/parse-error", "/test/not-found"],
    )
    def test_client_errors_logged_at_info(self, client, caplog, endpoint):
        """Test 4xx errors are not reported as server errors."""
        with caplog.at_level(logging.INFO, logger=self.HANDLER_LOGGER):
            client.get(endpoint)

        records = self._handler_records(caplog)
        assert records
        assert all(r.levelno == logging.INFO for r in records)

    def test_server_errors_logged_at_error(self, client, caplog):
        """Test 5xx application errors are logged at ERROR."""
        with caplog.at_level(logging.INFO, logger=self.HANDLER_LOGGER):
            client.get("/test/config-error")

        records = self._handler_records(caplog)
        assert records[-1].levelno == logging.ERROR
        assert records[-1].status_code == 500


class TestPydanticValidationHandler:
    """Tests for request validation errors."""

    def test_missing_field(self, client):
        """Test a missing field is reported per field."""
        response = client.post("/test/pydantic-validation", json={})

        assert response.status_code == 422
        data = response.json()
        assert data["error_code"] == "VALIDATION_ERROR"
        assert {e["field"] for e in data["errors"]} == {"body.wkt", "body.epsg"}

    def test_constraint_violation(self, client):
        """Test constraint violations are reported."""
        response = client.post("/test/pydantic-validation", json={"wkt": "PO", "epsg": -1})

        assert response.status_code == 422
        assert len(response.json()["errors"]) == 2


class TestGenericExceptionHandler:
    """Tests for the catch-all handler."""

    def test_generic_error(self, client):
        """Test unexpected exceptions become INTERNAL_ERROR."""
        response = client.get("/test/generic-error")

        assert response.status_code == 500
        data = response.json()
        assert data["error_code"] == "INTERNAL_ERROR"
        assert data["message"] == "An unexpected error occurred"

    @pytest.mark.parametrize(
        "endpoint",
        ["/test/validation-error", "/test/parse-error", "/test/not-found", "/test/generic-error"],
    )
    def test_response_structure(self, client, endpoint):
        """Test every error body has the required fields."""
        data = client.get(endpoint).json()

        assert "error_code" in data
        assert "message" in data
        assert "timestamp" in data
