"""
Geometry text parsers.
"""

from wktview.core.parsers.wkt_parser import (
    GEOMETRY_KEYWORDS,
    Token,
    TokenType,
    WKTParser,
    parse_wkt,
    split_type_keyword,
    tokenize,
)

__all__ = [
    "GEOMETRY_KEYWORDS",
    "Token",
    "TokenType",
    "WKTParser",
    "parse_wkt",
    "split_type_keyword",
    "tokenize",
]
