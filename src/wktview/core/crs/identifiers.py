"""
EPSG identifier parsing and range validation.
"""

import re
from typing import Optional, Union

from wktview.core.errors import CrsNotFoundError, InvalidCrsRangeError
from wktview.models.crs import MAX_CRS_IDENTIFIER, MIN_CRS_IDENTIFIER

_EPSG_PREFIX = re.compile(r"^EPSG\s*:\s*", re.IGNORECASE)


def parse_crs_identifier(value: Optional[Union[str, int]]) -> Optional[int]:
    """
    Parse a user supplied CRS into an EPSG code.

    Accepts integers, digit strings and "EPSG:<code>" strings. Blank input
    means no CRS was given.

    Args:
        value: Raw CRS value from a form field, URL parameter or share record

    Returns:
        EPSG code, or None when value is blank

    Raises:
        CrsNotFoundError: If value is not a numeric code
    """
    if value is None:
        return None
    if isinstance(value, bool):
        raise CrsNotFoundError(value, reason="not a numeric EPSG code")
    if isinstance(value, int):
        return value

    text = _EPSG_PREFIX.sub("", str(value).strip())
    if not text:
        return None
    if not text.isdigit():
        raise CrsNotFoundError(value, reason="not a numeric EPSG code")
    return int(text)


def validate_crs_range(epsg: int) -> int:
    """
    Ensure an EPSG code lies in the supported range.

    Raises:
        InvalidCrsRangeError: If epsg is below 1024 or above 32767
    """
    if not MIN_CRS_IDENTIFIER <= epsg <= MAX_CRS_IDENTIFIER:
        raise InvalidCrsRangeError(epsg, MIN_CRS_IDENTIFIER, MAX_CRS_IDENTIFIER)
    return epsg
