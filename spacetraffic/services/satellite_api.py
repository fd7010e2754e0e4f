"""Server-side catalog service behind ``GET /api/satellites``.

Serves the cache file while it is fresh; otherwise fetches every group,
merges them and rewrites the cache. There is no stale fallback on this
tier: total failure surfaces as ``CatalogUnavailableError``.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Any, Optional, Sequence

from spacetraffic.services.catalog_aggregator import fetch_catalog
from spacetraffic.services.catalog_cache import ServerCacheFile
from spacetraffic.services.catalog_fetcher import (
    DEFAULT_GROUPS,
    CatalogFetcher,
    SatelliteGroup,
)
from spacetraffic.utils.config import Settings, get_settings
from spacetraffic.utils.time_utils import now_ms

logger = logging.getLogger(__name__)


class CatalogUnavailableError(Exception):
    """Raised when no group could be fetched and no fresh cache exists."""


@dataclass
class CatalogPayload:
    satellites: list[dict[str, Any]]
    cached: bool
    timestamp: int
    age: Optional[int] = None

    @property
    def count(self) -> int:
        return len(self.satellites)


class SatelliteCatalogService:
    """Fresh-cache-or-fetch catalog for the API host."""

    def __init__(
        self,
        fetcher: CatalogFetcher,
        cache_file: ServerCacheFile,
        groups: Sequence[SatelliteGroup] = DEFAULT_GROUPS,
    ):
        self._fetcher = fetcher
        self._cache_file = cache_file
        self._groups = tuple(groups)

    @classmethod
    def from_settings(cls, settings: Optional[Settings] = None) -> SatelliteCatalogService:
        settings = settings or get_settings()
        fetcher = CatalogFetcher(
            base_url=settings.celestrak_url,
            timeout=settings.server_fetch_timeout,
        )
        return cls(fetcher, ServerCacheFile(settings.server_cache_file))

    async def get_catalog(self) -> CatalogPayload:
        """Catalog payload for the HTTP layer.

        Raises:
            CatalogUnavailableError: If every group failed.
        """
        now = now_ms()
        cached = self._cache_file.load(now)
        if cached is not None:
            return CatalogPayload(
                satellites=cached.data,
                cached=True,
                timestamp=cached.timestamp,
                age=cached.age_ms(now),
            )

        logger.info("Fetching fresh satellite data...")
        satellites = await fetch_catalog(self._fetcher, self._groups)
        if not satellites:
            raise CatalogUnavailableError(
                "Failed to fetch satellite data from all sources"
            )

        timestamp = now_ms()
        envelope = self._cache_file.save(satellites, timestamp)
        data = envelope.data if envelope is not None else [s.to_dict() for s in satellites]
        return CatalogPayload(satellites=data, cached=False, timestamp=timestamp)


_service: Optional[SatelliteCatalogService] = None


def get_catalog_service() -> SatelliteCatalogService:
    """Process-wide service, built from settings on first use."""
    global _service
    if _service is None:
        _service = SatelliteCatalogService.from_settings()
    return _service
