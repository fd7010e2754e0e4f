"""Environment-driven settings.

On Vercel (``VERCEL`` set) the server tier applies: writable state goes
to ``/tmp`` and fetch attempts get the longer server timeout.
"""

from __future__ import annotations

import os
from dataclasses import dataclass
from functools import lru_cache
from pathlib import Path

from spacetraffic.utils.constants import (
    CELESTRAK_BASE_URL,
    CLIENT_FETCH_TIMEOUT,
    SERVER_CACHE_FILENAME,
    SERVER_FETCH_TIMEOUT,
)

PACKAGE_ROOT = Path(__file__).resolve().parent.parent


@dataclass(frozen=True)
class Settings:
    data_dir: Path
    server_cache_file: Path
    fetch_timeout: float
    server_fetch_timeout: float
    celestrak_url: str
    log_level: str
    serverless: bool

    @property
    def local_store_url(self) -> str:
        return f"sqlite:///{self.data_dir / 'local_storage.db'}"


def load_settings() -> Settings:
    """Read settings from the process environment."""
    serverless = bool(os.environ.get("VERCEL"))

    if serverless:
        default_data_dir = Path("/tmp") / "spacetraffic"
        cache_file = Path("/tmp") / SERVER_CACHE_FILENAME
    else:
        default_data_dir = PACKAGE_ROOT.parent / "data"
        cache_file = default_data_dir / SERVER_CACHE_FILENAME

    data_dir = Path(os.environ.get("SPACETRAFFIC_DATA_DIR", default_data_dir))
    if "SPACETRAFFIC_DATA_DIR" in os.environ:
        cache_file = data_dir / SERVER_CACHE_FILENAME

    default_timeout = SERVER_FETCH_TIMEOUT if serverless else CLIENT_FETCH_TIMEOUT
    fetch_timeout = float(
        os.environ.get("SPACETRAFFIC_FETCH_TIMEOUT", default_timeout)
    )

    return Settings(
        data_dir=data_dir,
        server_cache_file=cache_file,
        fetch_timeout=fetch_timeout,
        server_fetch_timeout=float(
            os.environ.get("SPACETRAFFIC_FETCH_TIMEOUT", SERVER_FETCH_TIMEOUT)
        ),
        celestrak_url=os.environ.get(
            "SPACETRAFFIC_CELESTRAK_URL", CELESTRAK_BASE_URL
        ).rstrip("/"),
        log_level=os.environ.get("SPACETRAFFIC_LOG_LEVEL", "INFO").upper(),
        serverless=serverless,
    )


@lru_cache(maxsize=1)
def get_settings() -> Settings:
    """Process-wide settings, read once."""
    return load_settings()
