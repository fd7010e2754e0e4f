"""HTTP text fetcher for Celestrak TLE data.

Wraps a shared ``requests.Session`` and reports every outcome as a
``DownloadResult`` instead of raising, so callers can fall through to the
next source on timeouts, non-2xx answers and empty bodies.
"""

from __future__ import annotations

import logging
import threading
from dataclasses import dataclass
from enum import Enum, auto
from typing import Optional

import requests

from spacetraffic.utils.constants import USER_AGENT

logger = logging.getLogger(__name__)


class DownloadStatus(Enum):
    COMPLETE = auto()
    EMPTY = auto()
    FAILED = auto()


@dataclass
class DownloadResult:
    """Result of a fetch attempt."""
    status: DownloadStatus
    url: str
    text: str = ""
    error: Optional[str] = None
    status_code: Optional[int] = None

    @property
    def ok(self) -> bool:
        return self.status == DownloadStatus.COMPLETE


class Downloader:
    """Thread-safe text fetcher; one attempt per call, no retries."""

    def __init__(self, session: Optional[requests.Session] = None):
        self._lock = threading.Lock()
        self._session = session

    def _get_session(self) -> requests.Session:
        """Lazy-init a requests.Session (reuses TCP connections)."""
        with self._lock:
            if self._session is None:
                self._session = requests.Session()
                self._session.headers.update({"User-Agent": USER_AGENT})
            return self._session

    def fetch_text(self, url: str, timeout: float) -> DownloadResult:
        """GET ``url`` and return its body, bounded by ``timeout`` seconds."""
        logger.debug("Fetching %s", url)
        try:
            session = self._get_session()
            response = session.get(url, timeout=timeout)
            response.raise_for_status()
            text = response.text or ""

            if not text.strip():
                return DownloadResult(
                    status=DownloadStatus.EMPTY,
                    url=url,
                    status_code=response.status_code,
                    error="Empty response body",
                )

            return DownloadResult(
                status=DownloadStatus.COMPLETE,
                url=url,
                text=text,
                status_code=response.status_code,
            )

        except requests.exceptions.Timeout:
            msg = f"Request timed out after {timeout}s: {url}"
            logger.debug(msg)
            return DownloadResult(status=DownloadStatus.FAILED, url=url, error=msg)

        except requests.exceptions.ConnectionError as e:
            msg = f"Connection error fetching {url}: {e}"
            logger.debug(msg)
            return DownloadResult(status=DownloadStatus.FAILED, url=url, error=msg)

        except requests.exceptions.HTTPError as e:
            code = e.response.status_code if e.response is not None else None
            msg = f"HTTP error fetching {url}: {e}"
            logger.debug(msg)
            return DownloadResult(
                status=DownloadStatus.FAILED, url=url, error=msg, status_code=code
            )

        except requests.exceptions.RequestException as e:
            msg = f"Request failed for {url}: {e}"
            logger.warning(msg)
            return DownloadResult(status=DownloadStatus.FAILED, url=url, error=msg)

    def close(self) -> None:
        with self._lock:
            if self._session is not None:
                self._session.close()
                self._session = None
