"""
Strict Well-Known Text (ISO 13249) parser.

Parses WKT into shapely geometries. The parser never repairs its input:
unbalanced parentheses, trailing text, missing or extra ordinates and
unclosed polygon rings are reported as UnexpectedTokenError carrying the
offending token and its character offset; unknown geometry keywords are
reported as InvalidGeometryTypeError.

Supported kinds are Point, LineString, Polygon, MultiPoint,
MultiLineString, MultiPolygon and GeometryCollection, each optionally
tagged Z, M or ZM and optionally EMPTY. Members of multi geometries and
polygon rings may also be EMPTY; such members are left out. Z values are
kept, M values are dropped.
"""

import logging
import math
import re
from dataclasses import dataclass
from enum import Enum
from typing import Callable, Dict, List, Optional, Tuple

from shapely.geometry import (
    GeometryCollection,
    LineString,
    MultiLineString,
    MultiPoint,
    MultiPolygon,
    Point,
    Polygon,
)
from shapely.geometry.base import BaseGeometry

from wktview.core.errors import InvalidGeometryTypeError, UnexpectedTokenError
from wktview.models.spatial import GeometryKind

logger = logging.getLogger(__name__)

Coordinate = Tuple[float, ...]


class TokenType(str, Enum):
    """Lexical token classes of WKT."""

    NUMBER = "number"
    WORD = "word"
    LEFT_PAREN = "("
    RIGHT_PAREN = ")"
    COMMA = ","
    OTHER = "other"
    END = "end"


@dataclass(frozen=True)
class Token:
    """
    A WKT token.

    Attributes:
        type: Token class
        value: Token text (None for end of input)
        position: Character offset of the token in the input
    """

    type: TokenType
    value: Optional[str]
    position: int


TOKEN_PATTERN = re.compile(
    r"""
    (?P<number>[-+]?(?:\d+\.?\d*|\.\d+)(?:[eE][-+]?\d+)?)
    | (?P<word>[A-Za-z_][A-Za-z0-9_]*)
    | (?P<punct>[(),])
    | (?P<other>\S)
    """,
    re.VERBOSE,
)

_PUNCTUATION = {
    "(": TokenType.LEFT_PAREN,
    ")": TokenType.RIGHT_PAREN,
    ",": TokenType.COMMA,
}

GEOMETRY_KEYWORDS: Dict[str, GeometryKind] = {
    "POINT": GeometryKind.POINT,
    "LINESTRING": GeometryKind.LINE_STRING,
    "POLYGON": GeometryKind.POLYGON,
    "MULTIPOINT": GeometryKind.MULTI_POINT,
    "MULTILINESTRING": GeometryKind.MULTI_LINE_STRING,
    "MULTIPOLYGON": GeometryKind.MULTI_POLYGON,
    "GEOMETRYCOLLECTION": GeometryKind.GEOMETRY_COLLECTION,
}

DIMENSION_TAGS = ("ZM", "Z", "M")

EMPTY_GEOMETRIES: Dict[GeometryKind, Callable[[], BaseGeometry]] = {
    GeometryKind.POINT: Point,
    GeometryKind.LINE_STRING: LineString,
    GeometryKind.POLYGON: Polygon,
    GeometryKind.MULTI_POINT: MultiPoint,
    GeometryKind.MULTI_LINE_STRING: MultiLineString,
    GeometryKind.MULTI_POLYGON: MultiPolygon,
    GeometryKind.GEOMETRY_COLLECTION: GeometryCollection,
}


def tokenize(text: str) -> List[Token]:
    """
    Split WKT into tokens.

    Whitespace is skipped. The returned list always ends with an END token
    positioned at the end of the text.
    """
    tokens: List[Token] = []
    for match in TOKEN_PATTERN.finditer(text):
        kind = match.lastgroup
        value = match.group()
        if kind == "number":
            token_type = TokenType.NUMBER
        elif kind == "word":
            token_type = TokenType.WORD
        elif kind == "punct":
            token_type = _PUNCTUATION[value]
        else:
            token_type = TokenType.OTHER
        tokens.append(Token(token_type, value, match.start()))

    tokens.append(Token(TokenType.END, None, len(text)))
    return tokens


@dataclass
class _Dimensions:
    """Ordinate layout shared by all coordinates of one tagged geometry."""

    ordinates: Optional[int] = None
    has_z: bool = False
    has_m: bool = False

    @classmethod
    def from_tag(cls, tag: Optional[str]) -> "_Dimensions":
        if tag == "ZM":
            return cls(ordinates=4, has_z=True, has_m=True)
        if tag == "Z":
            return cls(ordinates=3, has_z=True)
        if tag == "M":
            return cls(ordinates=3, has_m=True)
        return cls()

    def fix(self, count: int) -> None:
        # Untagged WKT: the first coordinate decides (3 = XYZ, 4 = XYZM)
        self.ordinates = count
        self.has_z = count >= 3
        self.has_m = count == 4

    def project(self, values: List[float]) -> Coordinate:
        if self.has_z:
            return (values[0], values[1], values[2])
        return (values[0], values[1])


def split_type_keyword(word: str, position: int = 0) -> Tuple[GeometryKind, Optional[str]]:
    """
    Resolve a geometry keyword, with an optional attached dimension tag.

    "point", "POINT" and "PointZ" are all accepted.

    Returns:
        Tuple of (GeometryKind, dimension tag or None)

    Raises:
        InvalidGeometryTypeError: If the keyword names no supported kind
    """
    upper = word.upper()
    if upper in GEOMETRY_KEYWORDS:
        return GEOMETRY_KEYWORDS[upper], None

    for tag in DIMENSION_TAGS:
        base = upper[: -len(tag)]
        if upper.endswith(tag) and base in GEOMETRY_KEYWORDS:
            return GEOMETRY_KEYWORDS[base], tag

    raise InvalidGeometryTypeError(word, position)


class WKTParser:
    """Recursive-descent parser over the token stream of one WKT string."""

    def __init__(self, text: str):
        """
        Initialize parser.

        Args:
            text: WKT geometry text (without SRID or CRS URI prefix)
        """
        self.text = text
        self.tokens = tokenize(text)
        self.index = 0

    def parse(self) -> BaseGeometry:
        """
        Parse the whole text as one geometry.

        Returns:
            Shapely geometry

        Raises:
            UnexpectedTokenError: On any token-level error, including
                trailing text after the geometry
            InvalidGeometryTypeError: On an unknown geometry keyword
        """
        geometry = self._geometry()

        token = self._peek()
        if token.type != TokenType.END:
            raise self._unexpected(token, "end of input")

        return geometry

    # Token helpers

    def _peek(self) -> Token:
        return self.tokens[self.index]

    def _next(self) -> Token:
        token = self.tokens[self.index]
        if token.type != TokenType.END:
            self.index += 1
        return token

    def _accept(self, token_type: TokenType) -> bool:
        if self._peek().type == token_type:
            self._next()
            return True
        return False

    def _accept_word(self, *words: str) -> Optional[str]:
        token = self._peek()
        if token.type == TokenType.WORD and token.value.upper() in words:
            self._next()
            return token.value.upper()
        return None

    def _expect(self, token_type: TokenType, expected: str) -> Token:
        token = self._peek()
        if token.type != token_type:
            raise self._unexpected(token, expected)
        return self._next()

    @staticmethod
    def _unexpected(token: Token, expected: Optional[str] = None) -> UnexpectedTokenError:
        return UnexpectedTokenError(token.value, token.position, expected)

    # Grammar

    def _geometry(self) -> BaseGeometry:
        token = self._next()
        if token.type != TokenType.WORD:
            raise self._unexpected(token, "geometry type")

        kind, tag = split_type_keyword(token.value, token.position)
        if tag is None:
            tag = self._accept_word(*DIMENSION_TAGS)
        dims = _Dimensions.from_tag(tag)

        if self._accept_word("EMPTY"):
            return EMPTY_GEOMETRIES[kind]()

        if kind == GeometryKind.POINT:
            return self._point(dims)
        elif kind == GeometryKind.LINE_STRING:
            return LineString(self._coordinate_list(dims, minimum=2))
        elif kind == GeometryKind.POLYGON:
            return self._polygon(dims)
        elif kind == GeometryKind.MULTI_POINT:
            return self._multi_point(dims)
        elif kind == GeometryKind.MULTI_LINE_STRING:
            lines = self._sequence(self._or_empty(lambda: self._coordinate_list(dims, minimum=2)))
            return MultiLineString(_present(lines))
        elif kind == GeometryKind.MULTI_POLYGON:
            polygons = self._sequence(self._or_empty(lambda: self._polygon(dims)))
            return MultiPolygon(_present(polygons))
        elif kind == GeometryKind.GEOMETRY_COLLECTION:
            return GeometryCollection(self._sequence(self._geometry))
        raise InvalidGeometryTypeError(token.value, token.position)

    def _sequence(self, item: Callable[[], object]) -> list:
        """Parse "( item {, item} )"."""
        self._expect(TokenType.LEFT_PAREN, "`(` or EMPTY")
        items = [item()]
        while self._accept(TokenType.COMMA):
            items.append(item())
        self._expect(TokenType.RIGHT_PAREN, "`,` or `)`")
        return items

    def _or_empty(self, item: Callable[[], object]) -> Callable[[], object]:
        """Wrap a member parser so that an EMPTY member yields None."""

        def parse() -> object:
            if self._accept_word("EMPTY"):
                return None
            return item()

        return parse

    def _point(self, dims: _Dimensions) -> Point:
        self._expect(TokenType.LEFT_PAREN, "`(` or EMPTY")
        coordinate = self._coordinate(dims)
        self._expect(TokenType.RIGHT_PAREN, "`)`")
        return Point(coordinate)

    def _polygon(self, dims: _Dimensions) -> Polygon:
        rings = self._sequence(
            self._or_empty(lambda: self._coordinate_list(dims, minimum=4, closed=True))
        )
        # An empty exterior ring makes the whole polygon empty
        if rings[0] is None:
            return Polygon()
        return Polygon(rings[0], _present(rings[1:]))

    def _multi_point(self, dims: _Dimensions) -> MultiPoint:
        def member() -> Optional[Coordinate]:
            if self._accept_word("EMPTY"):
                return None
            if self._accept(TokenType.LEFT_PAREN):
                if self._accept_word("EMPTY"):
                    self._expect(TokenType.RIGHT_PAREN, "`)`")
                    return None
                coordinate = self._coordinate(dims)
                self._expect(TokenType.RIGHT_PAREN, "`)`")
                return coordinate
            return self._coordinate(dims)

        return MultiPoint(_present(self._sequence(member)))

    def _coordinate_list(
        self, dims: _Dimensions, minimum: int, closed: bool = False
    ) -> List[Coordinate]:
        self._expect(TokenType.LEFT_PAREN, "`(`")
        coordinates = [self._coordinate(dims)]
        while self._accept(TokenType.COMMA):
            coordinates.append(self._coordinate(dims))

        closing = self._peek()
        if closing.type != TokenType.RIGHT_PAREN:
            raise self._unexpected(closing, "`,` or `)`")
        if len(coordinates) < minimum:
            raise self._unexpected(closing, f"at least {minimum} coordinates")
        if closed and coordinates[0] != coordinates[-1]:
            raise self._unexpected(closing, "closed ring")
        self._next()
        return coordinates

    def _coordinate(self, dims: _Dimensions) -> Coordinate:
        minimum = dims.ordinates or 2
        maximum = dims.ordinates or 4
        values: List[float] = []

        while self._peek().type == TokenType.NUMBER:
            token = self._peek()
            if len(values) == maximum:
                raise self._unexpected(token, f"{maximum} ordinates")
            value = float(token.value)
            if not math.isfinite(value):
                raise self._unexpected(token, "finite number")
            values.append(value)
            self._next()

        if len(values) < minimum:
            raise self._unexpected(self._peek(), "number")

        if dims.ordinates is None:
            dims.fix(len(values))
        return dims.project(values)


def _present(members: list) -> list:
    """Drop EMPTY members; shapely collections cannot hold empty parts."""
    return [
        member
        for member in members
        if member is not None and not (isinstance(member, BaseGeometry) and member.is_empty)
    ]


def parse_wkt(text: str) -> BaseGeometry:
    """
    Parse WKT into a shapely geometry (convenience function).

    Args:
        text: WKT geometry text

    Returns:
        Shapely geometry

    Raises:
        UnexpectedTokenError: On token-level errors
        InvalidGeometryTypeError: On unknown geometry keywords

    Examples:
        >>> parse_wkt("POINT (30 10)").wkt
        'POINT (30 10)'
    """
    geometry = WKTParser(text).parse()
    logger.debug(f"Parsed {geometry.geom_type} from {len(text)} characters of WKT")
    return geometry
