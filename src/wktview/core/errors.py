"""
Exception hierarchy for wktview.

Every failure of the normalization pipeline is a PipelineError subclass
carrying a user-facing message, a machine-readable error code, an HTTP
status code and structured details. Nothing outside this hierarchy is
surfaced by the pipeline.
"""

from typing import Any, Dict, List, Optional


class WKTViewException(Exception):
    """
    Base exception for all wktview-specific errors.

    Attributes:
        error_code: String identifier for the error type
        message: User-friendly error message
        details: Technical details for logging/debugging
        status_code: HTTP status code for API responses
        suggestions: Optional list of resolution suggestions
    """

    def __init__(
        self,
        message: str,
        error_code: str,
        status_code: int = 500,
        details: Optional[Dict[str, Any]] = None,
        suggestions: Optional[List[str]] = None,
    ):
        """
        Initialize WKTViewException.

        Args:
            message: User-friendly error message
            error_code: String identifier for the error type
            status_code: HTTP status code (default: 500)
            details: Technical details for logging
            suggestions: List of suggestions for resolution
        """
        super().__init__(message)
        self.message = message
        self.error_code = error_code
        self.status_code = status_code
        self.details = details or {}
        self.suggestions = suggestions or []

    def to_dict(self) -> Dict[str, Any]:
        """
        Convert exception to dictionary for API responses.

        Returns:
            Dictionary representation of the error
        """
        return {
            "error_code": self.error_code,
            "message": self.message,
            "details": self.details,
            "suggestions": self.suggestions,
        }

    def __str__(self) -> str:
        """String representation of the exception."""
        return f"{self.error_code}: {self.message}"

    def __repr__(self) -> str:
        """Detailed string representation for debugging."""
        return (
            f"{self.__class__.__name__}("
            f"error_code='{self.error_code}', "
            f"message='{self.message}', "
            f"status_code={self.status_code})"
        )


class ValidationError(WKTViewException):
    """
    Raised when request input fails validation before reaching the pipeline.

    Maps to HTTP 400 Bad Request.
    """

    def __init__(
        self,
        message: str,
        field: Optional[str] = None,
        details: Optional[Dict[str, Any]] = None,
        suggestions: Optional[List[str]] = None,
    ):
        error_details = details or {}
        if field:
            error_details["field"] = field

        super().__init__(
            message=message,
            error_code="VALIDATION_ERROR",
            status_code=400,
            details=error_details,
            suggestions=suggestions or ["Check the input format and try again"],
        )


class ConfigurationError(WKTViewException):
    """
    Raised when application configuration is invalid.

    Maps to HTTP 500 Internal Server Error.
    """

    def __init__(
        self,
        message: str,
        config_key: Optional[str] = None,
        details: Optional[Dict[str, Any]] = None,
    ):
        error_details = details or {}
        if config_key:
            error_details["config_key"] = config_key

        super().__init__(
            message=message,
            error_code="CONFIGURATION_ERROR",
            status_code=500,
            details=error_details,
            suggestions=["Check WKTVIEW_* environment variables are set correctly"],
        )


class PipelineError(WKTViewException):
    """
    Base class for every classified failure of the normalization pipeline.

    A pipeline invocation ends either in a NormalizedResult or in exactly
    one PipelineError; no partial result accompanies it.
    """


class UnsupportedCrsUriError(PipelineError):
    """Raised when a geo:wktLiteral CRS URI is neither a known OGC URI nor an EPSG URI."""

    def __init__(self, uri: str):
        self.uri = uri
        super().__init__(
            message="CRS URI not supported (only OpenGIS EPSG for now)",
            error_code="UNSUPPORTED_CRS_URI",
            status_code=422,
            details={"uri": uri},
            suggestions=[
                "Use an EPSG URI such as <http://www.opengis.net/def/crs/EPSG/0/4326>",
                "Or prefix the geometry with SRID=<code>;",
            ],
        )


class InvalidCrsRangeError(PipelineError):
    """Raised when an EPSG code lies outside the supported identifier range."""

    def __init__(self, epsg: int, minimum: int, maximum: int):
        self.epsg = epsg
        super().__init__(
            message=f"EPSG code {epsg} is outside the valid range {minimum}-{maximum}",
            error_code="INVALID_CRS_RANGE",
            status_code=422,
            details={"epsg": epsg, "min": minimum, "max": maximum},
            suggestions=["Check the EPSG code for typos"],
        )


class CrsNotFoundError(PipelineError):
    """
    Raised when no projection definition can be obtained for a CRS.

    Covers unknown codes as well as any transport failure while asking the
    remote authority; callers only learn that the CRS is unavailable.
    """

    def __init__(self, crs: Any, reason: Optional[str] = None):
        self.crs = crs
        details: Dict[str, Any] = {"epsg": crs}
        if reason:
            details["reason"] = reason

        super().__init__(
            message="EPSG not found",
            error_code="CRS_NOT_FOUND",
            status_code=404,
            details=details,
            suggestions=[
                "Verify the EPSG code exists at epsg.io",
                "Try again later if the CRS service is unreachable",
            ],
        )


class WktParseError(PipelineError):
    """
    Raised when WKT text cannot be parsed.

    The message is rendered as "WKT parsing failed: <detail>" where detail
    is the structured description supplied by a subclass.
    """

    def __init__(self, detail: Optional[str] = None, details: Optional[Dict[str, Any]] = None):
        self.detail = detail
        message = "WKT parsing failed"
        if detail:
            message = f"{message}: {detail}"

        super().__init__(
            message=message,
            error_code="WKT_PARSE_FAILED",
            status_code=422,
            details=details,
            suggestions=[
                "Check that parentheses are balanced",
                "Separate coordinates with commas and ordinates with spaces",
            ],
        )


class UnexpectedTokenError(WktParseError):
    """Raised when the WKT parser meets a token it cannot accept at its position."""

    END_OF_INPUT = "end of input"

    def __init__(self, token: Optional[str], position: int, expected: Optional[str] = None):
        self.token = token
        self.position = position
        self.expected = expected

        shown = self.END_OF_INPUT if token is None else f"`{token}`"
        detail = f"Unexpected {shown} at position {position}"
        if expected:
            detail = f"{detail} (expected {expected})"

        super().__init__(
            detail,
            details={"token": token, "position": position, "expected": expected},
        )

    @property
    def at_end_of_input(self) -> bool:
        """True when the parser ran out of text."""
        return self.token is None


class InvalidGeometryTypeError(WktParseError):
    """Raised when the WKT geometry keyword is not one of the supported kinds."""

    def __init__(self, name: str, position: int = 0):
        self.name = name
        self.position = position
        super().__init__(
            f"Invalid geometry type: {name}",
            details={"geometry_type": name, "position": position},
        )


class InvalidBoundingBoxError(PipelineError):
    """Raised when a left,top,right,bottom quad does not describe a valid extent."""

    def __init__(self, bbox: str, reason: str):
        self.bbox = bbox
        self.reason = reason
        super().__init__(
            message=f"Invalid bounding box: {reason}",
            error_code="INVALID_BOUNDING_BOX",
            status_code=422,
            details={"bbox": bbox, "reason": reason},
            suggestions=["Bounding boxes are written as left,top,right,bottom in degrees"],
        )


class ReprojectionError(PipelineError):
    """Raised when coordinates cannot be transformed to WGS84."""

    def __init__(self, message: str, epsg: Optional[int] = None):
        details: Dict[str, Any] = {}
        if epsg is not None:
            details["source_crs"] = f"EPSG:{epsg}"

        super().__init__(
            message=message,
            error_code="REPROJECTION_FAILED",
            status_code=422,
            details=details,
            suggestions=[
                "Check that the coordinates lie inside the CRS area of use",
                "Verify the EPSG code matches the coordinates",
            ],
        )
