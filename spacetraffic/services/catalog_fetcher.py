"""Per-group TLE retrieval from Celestrak.

Each group is tried against an ordered list of source URLs (the GP query
form, then the static-file form). Every attempt owns its own timeout; a
timeout, non-2xx status, short body or a body with no valid records moves
on to the next URL. A group where every source fails yields None, which
the aggregator treats as a soft per-group failure.
"""

from __future__ import annotations

import asyncio
import logging
from dataclasses import dataclass
from datetime import date, datetime
from typing import Optional, Union

from spacetraffic.core.tle_parser import Satellite, parse_bulk_tle
from spacetraffic.utils.constants import (
    CELESTRAK_BASE_URL,
    CELESTRAK_FILE_PATH,
    CELESTRAK_GP_PATH,
    CLIENT_FETCH_TIMEOUT,
    GROUP_MAP,
    MIN_BODY_LENGTH,
)
from spacetraffic.utils.downloader import Downloader, DownloadResult, DownloadStatus

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class SatelliteGroup:
    """A Celestrak group and the category label its members default to."""

    key: str
    label: str


DEFAULT_GROUPS: tuple[SatelliteGroup, ...] = tuple(
    SatelliteGroup(key, label) for key, label in GROUP_MAP
)


class CatalogFetcher:
    """Fetches and parses Celestrak TLE groups with URL fallback."""

    def __init__(
        self,
        downloader: Optional[Downloader] = None,
        base_url: str = CELESTRAK_BASE_URL,
        timeout: float = CLIENT_FETCH_TIMEOUT,
    ):
        self._downloader = downloader or Downloader()
        self._base_url = base_url.rstrip("/")
        self._timeout = timeout

    @property
    def timeout(self) -> float:
        return self._timeout

    def group_urls(self, group_key: str) -> list[str]:
        """Source URLs for a group, in the order they are tried."""
        return [
            f"{self._base_url}{CELESTRAK_GP_PATH}?GROUP={group_key}&FORMAT=TLE",
            f"{self._base_url}{CELESTRAK_FILE_PATH.format(group=group_key)}",
        ]

    def history_url(
        self,
        norad_id: Union[int, str],
        start: Union[date, datetime, str],
        stop: Union[date, datetime, str],
    ) -> str:
        return (
            f"{self._base_url}{CELESTRAK_GP_PATH}?CATNR={norad_id}"
            f"&START={_format_query_date(start)}&STOP={_format_query_date(stop)}"
            f"&FORMAT=TLE"
        )

    async def _attempt(self, url: str) -> DownloadResult:
        """One timeout-bounded fetch; the blocking request runs off-loop."""
        try:
            return await asyncio.wait_for(
                asyncio.to_thread(self._downloader.fetch_text, url, self._timeout),
                timeout=self._timeout,
            )
        except asyncio.TimeoutError:
            msg = f"Attempt aborted after {self._timeout}s: {url}"
            logger.debug(msg)
            return DownloadResult(status=DownloadStatus.FAILED, url=url, error=msg)

    async def fetch_group(
        self, group_key: str, category_label: Optional[str] = None
    ) -> Optional[list[Satellite]]:
        """Fetch one group; None when every source fails or is empty."""
        for url in self.group_urls(group_key):
            result = await self._attempt(url)
            if not result.ok:
                logger.debug("Source failed for %s: %s", group_key, result.error)
                continue

            if len(result.text) <= MIN_BODY_LENGTH:
                logger.debug("Body too short for %s from %s", group_key, url)
                continue

            satellites = parse_bulk_tle(result.text, category_label)
            if satellites:
                logger.info("Fetched %d satellites from %s", len(satellites), group_key)
                return satellites

            logger.debug("No valid records for %s from %s", group_key, url)

        logger.warning("All sources failed for group %s", group_key)
        return None

    async def fetch_history(
        self,
        norad_id: Union[int, str],
        start: Union[date, datetime, str],
        stop: Union[date, datetime, str],
    ) -> list[Satellite]:
        """Historical element sets for one object between two dates."""
        url = self.history_url(norad_id, start, stop)
        result = await self._attempt(url)
        if not result.ok or len(result.text) <= MIN_BODY_LENGTH:
            logger.warning("No history for NORAD %s: %s", norad_id, result.error)
            return []
        return parse_bulk_tle(result.text)


def _format_query_date(value: Union[date, datetime, str]) -> str:
    if isinstance(value, datetime):
        return value.date().isoformat()
    if isinstance(value, date):
        return value.isoformat()
    return str(value)
