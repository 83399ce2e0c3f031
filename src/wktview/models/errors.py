"""
Pydantic models for standardized error responses.
"""

from datetime import datetime, timezone
from typing import Any, Dict, List, Optional

from pydantic import BaseModel, ConfigDict, Field, field_serializer


class ErrorDetail(BaseModel):
    """Field-level problem reported by request validation."""

    field: Optional[str] = Field(None, description="Field name that caused the error")
    message: str = Field(..., description="Error message for this field")
    code: Optional[str] = Field(None, description="Error code for this specific issue")

    model_config = ConfigDict(
        json_schema_extra={
            "example": {
                "field": "body.wkt",
                "message": "Field required",
                "code": "missing",
            }
        }
    )


class ErrorResponse(BaseModel):
    """
    Error body returned by every endpoint.

    Attributes:
        error_code: Machine-readable error identifier (e.g. 'WKT_PARSE_FAILED')
        message: Human-readable error message, suitable for direct display
        details: Additional technical details (token, position, epsg, ...)
        timestamp: When the error occurred (UTC)
        request_id: Request correlation ID for tracing
        suggestions: Actionable suggestions for resolving the error
        errors: Field-level errors (request validation only)
    """

    error_code: str = Field(
        ...,
        description="Machine-readable error code",
        examples=["WKT_PARSE_FAILED", "CRS_NOT_FOUND", "INVALID_CRS_RANGE"],
    )
    message: str = Field(
        ...,
        description="Human-readable error message",
        examples=["WKT parsing failed: Unexpected end of input at position 12 (expected `)`)"],
    )
    details: Optional[Dict[str, Any]] = Field(
        None,
        description="Additional technical details about the error",
    )
    timestamp: datetime = Field(
        default_factory=lambda: datetime.now(timezone.utc),
        description="When the error occurred (UTC)",
    )
    request_id: Optional[str] = Field(
        None,
        description="Request correlation ID for tracing",
    )
    suggestions: Optional[List[str]] = Field(
        None,
        description="Actionable suggestions for resolving the error",
    )
    errors: Optional[List[ErrorDetail]] = Field(
        None,
        description="Detailed field-level errors (for validation)",
    )

    @field_serializer("timestamp")
    def serialize_timestamp(self, timestamp: datetime, _info) -> str:
        """Serialize timestamp to ISO format string."""
        return timestamp.isoformat() + "Z" if timestamp.tzinfo is None else timestamp.isoformat()

    model_config = ConfigDict(
        json_schema_extra={
            "example": {
                "error_code": "WKT_PARSE_FAILED",
                "message": "WKT parsing failed: Unexpected end of input at position 12 (expected `)`)",
                "details": {"token": None, "position": 12, "expected": "`)`"},
                "timestamp": "2026-01-15T15:30:00+00:00",
                "request_id": "550e8400-e29b-41d4-a716-446655440000",
                "suggestions": ["Check that parentheses are balanced"],
            }
        }
    )
