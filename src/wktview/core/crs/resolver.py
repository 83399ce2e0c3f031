"""
EPSG code to projection definition resolution.

Definitions are looked up in a process-wide in-memory cache seeded with
common CRS, and fetched from a remote authority (epsg.io) on a miss.
Fetched definitions stay cached for the lifetime of the process.
"""

import logging
import threading
from typing import Any, Dict, Mapping, Optional, Tuple

import httpx
from pydantic import BaseModel, Field

from wktview.core.config import settings
from wktview.core.crs.identifiers import validate_crs_range
from wktview.core.errors import CrsNotFoundError
from wktview.models.crs import ProjectionDefinition

logger = logging.getLogger(__name__)

SEED_DEFINITIONS: Dict[int, str] = {
    4326: "+proj=longlat +datum=WGS84 +no_defs",
    4258: "+proj=longlat +ellps=GRS80 +towgs84=0,0,0,0,0,0,0 +no_defs",
    4269: "+proj=longlat +datum=NAD83 +no_defs",
    3857: (
        "+proj=merc +a=6378137 +b=6378137 +lat_ts=0 +lon_0=0 +x_0=0 +y_0=0 +k=1 "
        "+units=m +nadgrids=@null +wktext +no_defs"
    ),
    27700: (
        "+proj=tmerc +lat_0=49 +lon_0=-2 +k=0.9996012717 +x_0=400000 +y_0=-100000 "
        "+ellps=airy +towgs84=446.448,-125.157,542.06,0.15,0.247,0.842,-20.489 "
        "+units=m +no_defs"
    ),
    28992: (
        "+proj=sterea +lat_0=52.1561605555556 +lon_0=5.38763888888889 +k=0.9999079 "
        "+x_0=155000 +y_0=463000 +ellps=bessel "
        "+towgs84=565.417,50.3319,465.552,-0.398957,0.343988,-1.8774,4.0725 "
        "+units=m +no_defs"
    ),
    31370: (
        "+proj=lcc +lat_0=90 +lon_0=4.36748666666667 +lat_1=51.1666672333333 "
        "+lat_2=49.8333339 +x_0=150000.013 +y_0=5400088.438 +ellps=intl "
        "+towgs84=-106.8686,52.2978,-103.7239,0.3366,-0.457,1.8422,-1.2747 "
        "+units=m +no_defs"
    ),
    2154: (
        "+proj=lcc +lat_0=46.5 +lon_0=3 +lat_1=49 +lat_2=44 +x_0=700000 +y_0=6600000 "
        "+ellps=GRS80 +towgs84=0,0,0,0,0,0,0 +units=m +no_defs"
    ),
    25832: "+proj=utm +zone=32 +ellps=GRS80 +towgs84=0,0,0,0,0,0,0 +units=m +no_defs",
    32631: "+proj=utm +zone=31 +datum=WGS84 +units=m +no_defs",
}

# Substrings a response body must contain to count as a definition
FORMAT_MARKERS: Dict[str, Tuple[str, ...]] = {
    "proj4": ("+proj",),
    "wkt": ("PROJCS", "GEOGCS"),
}


class CRSResolverConfig(BaseModel):
    """Configuration for the CRS resolver."""

    base_url: str = Field(
        default=settings.crs_authority_url,
        description="Base URL of the EPSG definition service",
    )
    fetch_format: str = Field(
        default=settings.crs_fetch_format,
        description="Definition format to request (proj4 or wkt)",
        pattern="^(proj4|wkt)$",
    )
    timeout: float = Field(
        default=settings.crs_fetch_timeout,
        description="Request timeout in seconds",
        gt=0.0,
        le=60.0,
    )


class ProjectionCache:
    """
    Thread-safe in-memory cache of projection definitions.

    Entries are never evicted. When two resolutions of the same code race,
    the first insert wins and later ones return the stored definition.
    """

    def __init__(self, seed: Optional[Mapping[int, str]] = None) -> None:
        """
        Initialize the cache.

        Args:
            seed: Built-in definitions keyed by EPSG code (default: SEED_DEFINITIONS)
        """
        self._lock = threading.Lock()
        self._entries: Dict[int, ProjectionDefinition] = {}
        self._hits = 0
        self._misses = 0

        for epsg, definition in (SEED_DEFINITIONS if seed is None else seed).items():
            self._entries[epsg] = ProjectionDefinition(
                epsg=epsg, definition=definition, source="seed"
            )

        logger.debug(f"Projection cache initialized with {len(self._entries)} seed entries")

    def get(self, epsg: int) -> Optional[ProjectionDefinition]:
        """Get a cached definition, or None on a miss."""
        with self._lock:
            entry = self._entries.get(epsg)
            if entry is None:
                self._misses += 1
            else:
                self._hits += 1
            return entry

    def put(self, definition: ProjectionDefinition) -> ProjectionDefinition:
        """
        Store a definition unless one is already cached.

        Returns:
            The definition held by the cache after the call
        """
        with self._lock:
            return self._entries.setdefault(definition.epsg, definition)

    def __contains__(self, epsg: object) -> bool:
        with self._lock:
            return epsg in self._entries

    def __len__(self) -> int:
        with self._lock:
            return len(self._entries)

    def get_stats(self) -> Dict[str, Any]:
        """Get cache statistics."""
        with self._lock:
            total_requests = self._hits + self._misses
            hit_rate = (self._hits / total_requests * 100) if total_requests > 0 else 0
            return {
                "backend": "in-memory",
                "entries": len(self._entries),
                "hits": self._hits,
                "misses": self._misses,
                "hit_rate_percent": round(hit_rate, 2),
            }


_default_cache: Optional[ProjectionCache] = None
_default_cache_lock = threading.Lock()


def get_default_cache() -> ProjectionCache:
    """Get the process-wide projection cache, creating it on first use."""
    global _default_cache
    with _default_cache_lock:
        if _default_cache is None:
            _default_cache = ProjectionCache()
        return _default_cache


class CRSResolver:
    """
    Resolves EPSG codes to projection definitions.

    Lookup order is cache (including seed entries), then the remote
    authority. Remote failures of any kind, including timeouts and
    transport errors, surface as CrsNotFoundError. No retries are made.
    """

    def __init__(
        self,
        config: Optional[CRSResolverConfig] = None,
        cache: Optional[ProjectionCache] = None,
        client: Optional[httpx.AsyncClient] = None,
    ) -> None:
        """
        Initialize the resolver.

        Args:
            config: Resolver configuration
            cache: Projection cache (default: the process-wide cache)
            client: HTTP client to use instead of creating one
        """
        self.config = config or CRSResolverConfig()
        self.cache = cache if cache is not None else get_default_cache()
        self.client = client or httpx.AsyncClient(
            timeout=httpx.Timeout(self.config.timeout),
            follow_redirects=True,
        )
        self.markers = FORMAT_MARKERS[self.config.fetch_format]

        logger.info(
            f"CRS resolver initialized with authority: {self.config.base_url} "
            f"({self.config.fetch_format})"
        )

    async def __aenter__(self) -> "CRSResolver":
        """Async context manager entry."""
        return self

    async def __aexit__(self, exc_type: Any, exc_val: Any, exc_tb: Any) -> None:
        """Async context manager exit."""
        await self.close()

    async def close(self) -> None:
        """Close the HTTP client."""
        await self.client.aclose()

    def definition_url(self, epsg: int) -> str:
        """URL of the remote definition of an EPSG code."""
        return f"{self.config.base_url.rstrip('/')}/{epsg}.{self.config.fetch_format}"

    async def resolve(self, epsg: int) -> ProjectionDefinition:
        """
        Resolve an EPSG code to its projection definition.

        Args:
            epsg: EPSG code

        Returns:
            ProjectionDefinition

        Raises:
            InvalidCrsRangeError: If epsg is outside 1024-32767 (checked
                before any lookup)
            CrsNotFoundError: If neither the cache nor the authority has
                a definition
        """
        validate_crs_range(epsg)

        cached = self.cache.get(epsg)
        if cached is not None:
            logger.debug(f"CRS cache hit for EPSG:{epsg} ({cached.source})")
            return cached

        text = await self._fetch_remote(epsg)
        if text is None:
            raise CrsNotFoundError(epsg, reason="no definition from CRS authority")

        definition = self.cache.put(ProjectionDefinition(epsg=epsg, definition=text))
        logger.info(f"Cached remote definition for EPSG:{epsg}")
        return definition

    async def _fetch_remote(self, epsg: int) -> Optional[str]:
        """
        Fetch a definition from the remote authority.

        Returns:
            Definition text, or None if the request failed or the body is
            not a definition
        """
        url = self.definition_url(epsg)

        try:
            logger.debug(f"Fetching CRS definition from {url}")
            response = await self.client.get(url)
        except httpx.HTTPError as e:
            logger.warning(f"CRS lookup for EPSG:{epsg} failed: {type(e).__name__}: {e}")
            return None

        if response.status_code != 200:
            logger.warning(f"CRS lookup for EPSG:{epsg} returned HTTP {response.status_code}")
            return None

        text = response.text.strip()
        if not any(marker in text for marker in self.markers):
            logger.warning(f"CRS lookup for EPSG:{epsg} returned no {self.config.fetch_format} definition")
            return None

        return text
