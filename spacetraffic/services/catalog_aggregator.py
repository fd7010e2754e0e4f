"""Catalog aggregation over cache tiers and concurrent group fetches.

Tier order for ``CatalogAggregator.load``:

1. fresh entry under the current cache key
2. fresh entry under a legacy key (read-only)
3. concurrent fetch of every group with progressive publish
4. one cache write after all groups settle
5. stale cache when the network produced nothing
6. error with an empty catalog
"""

from __future__ import annotations

import asyncio
import enum
import logging
import re
from typing import Callable, Iterable, Optional, Sequence

from spacetraffic.core.orbital_stats import format_intl_designator
from spacetraffic.core.tle_parser import (
    Category,
    Satellite,
    extract_intl_designator,
    extract_norad_id,
)
from spacetraffic.services.catalog_cache import LocalCatalogCache
from spacetraffic.services.catalog_fetcher import (
    DEFAULT_GROUPS,
    CatalogFetcher,
    SatelliteGroup,
)

logger = logging.getLogger(__name__)

BatchListener = Callable[[list[Satellite]], None]
StatusListener = Callable[["SyncStatus"], None]

_SEPARATORS = re.compile(r"[-\s]")


class SyncStatus(str, enum.Enum):
    SYNCING = "SYNCING"
    ACTIVE = "ACTIVE"
    ACTIVE_CACHED = "ACTIVE (CACHED)"
    OFFLINE_CACHED = "OFFLINE (CACHED)"
    ERROR = "ERROR"

    @property
    def display(self) -> str:
        if self is SyncStatus.SYNCING:
            return "SYNCING..."
        return f"SYSTEM: {self.value}"


def _matches(sat: Satellite, needle: str, compact: str) -> bool:
    if needle in sat.name.lower() or needle in sat.id.lower():
        return True
    norad_id = extract_norad_id(sat.tle2)
    if needle in norad_id or (compact and compact in norad_id):
        return True
    designator = extract_intl_designator(sat.tle1).lower()
    if not designator:
        return False
    if compact and compact in designator:
        return True
    return needle in format_intl_designator(designator).lower()


def dedupe(batch: Iterable[Satellite], seen_ids: set[str]) -> list[Satellite]:
    """Entries of ``batch`` whose id is not yet in ``seen_ids``; marks them seen."""
    unique: list[Satellite] = []
    for sat in batch:
        if sat.id in seen_ids:
            continue
        seen_ids.add(sat.id)
        unique.append(sat)
    return unique


async def fetch_catalog(
    fetcher: CatalogFetcher, groups: Sequence[SatelliteGroup] = DEFAULT_GROUPS
) -> list[Satellite]:
    """Fetch every group concurrently and merge them in group order."""
    results = await asyncio.gather(
        *(fetcher.fetch_group(g.key, g.label) for g in groups),
        return_exceptions=True,
    )

    seen_ids: set[str] = set()
    merged: list[Satellite] = []
    for group, result in zip(groups, results):
        if isinstance(result, BaseException):
            logger.warning("Group %s raised: %s", group.key, result)
            continue
        if result:
            merged.extend(dedupe(result, seen_ids))
    return merged


class CatalogAggregator:
    """Owns the session's satellite list and its sync status.

    Consumers read ``satellites`` (an immutable snapshot) and may subscribe
    to newly published batches and status changes.
    """

    def __init__(
        self,
        fetcher: CatalogFetcher,
        cache: LocalCatalogCache,
        groups: Sequence[SatelliteGroup] = DEFAULT_GROUPS,
    ):
        self._fetcher = fetcher
        self._cache = cache
        self._groups = tuple(groups)

        self._satellites: list[Satellite] = []
        self._seen_ids: set[str] = set()
        self._status = SyncStatus.SYNCING
        self._error: Optional[str] = None
        self._loading = True
        self._source_key: Optional[str] = None

        self._batch_listeners: list[BatchListener] = []
        self._status_listeners: list[StatusListener] = []

    # ------------------------------------------------------------------
    # Observable state
    # ------------------------------------------------------------------

    @property
    def satellites(self) -> tuple[Satellite, ...]:
        return tuple(self._satellites)

    @property
    def status(self) -> SyncStatus:
        return self._status

    @property
    def error(self) -> Optional[str]:
        return self._error

    @property
    def loading(self) -> bool:
        return self._loading

    @property
    def source_key(self) -> Optional[str]:
        """Cache key the current list was restored from, if any."""
        return self._source_key

    def add_batch_listener(self, listener: BatchListener) -> None:
        self._batch_listeners.append(listener)

    def add_status_listener(self, listener: StatusListener) -> None:
        self._status_listeners.append(listener)

    def _set_status(self, status: SyncStatus) -> None:
        self._status = status
        logger.info("%s", status.display)
        for listener in self._status_listeners:
            listener(status)

    def _publish(self, batch: list[Satellite]) -> None:
        if not batch:
            return
        self._satellites.extend(batch)
        for listener in self._batch_listeners:
            listener(list(batch))

    def _reset(self) -> None:
        self._satellites = []
        self._seen_ids = set()
        self._error = None
        self._source_key = None
        self._loading = True

    # ------------------------------------------------------------------
    # Loading
    # ------------------------------------------------------------------

    async def load(self) -> SyncStatus:
        """Run the tier state machine once and return the final status."""
        self._reset()

        fresh = self._cache.find_fresh()
        if fresh is not None:
            key, envelope = fresh
            if key != self._cache.key:
                logger.info("Legacy cache found (%s). Using as failover backup.", key)
            logger.info(
                "Using cached data (%d satellites, age: %dh)",
                len(envelope.data),
                envelope.age_hours(),
            )
            self._source_key = key
            self._publish(envelope.satellites())
            return self._finish(SyncStatus.ACTIVE_CACHED)

        self._set_status(SyncStatus.SYNCING)
        await asyncio.gather(
            *(self._process_group(group) for group in self._groups),
            return_exceptions=True,
        )

        if self._satellites:
            self._cache.write(self._satellites)
            return self._finish(SyncStatus.ACTIVE)

        stale = self._cache.find_stale()
        if stale is not None:
            key, envelope = stale
            logger.warning(
                "All network tiers failed. Falling back to stale cached data (%s).", key
            )
            self._source_key = key
            self._publish(envelope.satellites())
            return self._finish(SyncStatus.OFFLINE_CACHED)

        self._error = "Failed to load satellite data"
        logger.error(self._error)
        return self._finish(SyncStatus.ERROR)

    async def _process_group(self, group: SatelliteGroup) -> None:
        try:
            batch = await self._fetcher.fetch_group(group.key, group.label)
        except Exception:
            logger.exception("Unexpected failure fetching group %s", group.key)
            return
        if batch:
            self._publish(dedupe(batch, self._seen_ids))

    def _finish(self, status: SyncStatus) -> SyncStatus:
        self._loading = False
        self._set_status(status)
        return status

    # ------------------------------------------------------------------
    # Queries
    # ------------------------------------------------------------------

    def search(self, query: str, limit: Optional[int] = None) -> list[Satellite]:
        """Case-insensitive substring match across names and identifiers.

        A query matches a name, a NORAD catalog number, the compact
        international designator (``98067a``) or its expanded form
        (``1998-067a``). Dashes and spaces are ignored when matching the
        NORAD number and the compact designator.
        """
        needle = query.strip().lower()
        if not needle:
            return []
        compact = _SEPARATORS.sub("", needle)
        matches = [sat for sat in self._satellites if _matches(sat, needle, compact)]
        return matches[:limit] if limit is not None else matches

    def find_by_id(self, norad_id: str) -> Optional[Satellite]:
        for sat in self._satellites:
            if sat.id == norad_id:
                return sat
        return None

    def filter_by_category(self, *categories: Category) -> list[Satellite]:
        wanted = set(categories)
        return [sat for sat in self._satellites if sat.category in wanted]
