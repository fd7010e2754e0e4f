"""Catalog cache envelopes and the stores that hold them.

Two stores share the same ``{data, timestamp}`` envelope shape:

- ``LocalCatalogCache``: a browser-style key/value store (SQLite through
  SQLAlchemy). The current-schema key is the only one ever written; older
  schema keys are consulted read-only, in priority order, as failover.
- ``ServerCacheFile``: a single JSON file on the API host, replaced
  atomically on every write.
"""

from __future__ import annotations

import json
import logging
import os
import tempfile
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Iterable, Optional, Union

from sqlalchemy import select
from sqlalchemy.engine import Engine
from sqlalchemy.exc import SQLAlchemyError

from spacetraffic.core.tle_parser import Satellite, TLEParseError
from spacetraffic.database.database import create_store_engine, init_db
from spacetraffic.database.models import StorageItem
from spacetraffic.utils.constants import (
    CACHE_KEY,
    CLIENT_CACHE_EXPIRY_MS,
    LEGACY_CACHE_KEYS,
    MS_PER_HOUR,
    SERVER_CACHE_EXPIRY_MS,
)
from spacetraffic.utils.time_utils import now_ms

logger = logging.getLogger(__name__)


@dataclass
class CacheEnvelope:
    """Cached catalog rows plus the epoch-ms time they were written."""

    data: list[Any] = field(default_factory=list)
    timestamp: int = 0

    @classmethod
    def from_satellites(
        cls, satellites: Iterable[Satellite], timestamp: Optional[int] = None
    ) -> CacheEnvelope:
        return cls(
            data=[sat.to_dict() for sat in satellites],
            timestamp=now_ms() if timestamp is None else int(timestamp),
        )

    @classmethod
    def from_json(cls, raw: str) -> CacheEnvelope:
        """Parse a stored envelope.

        Raises:
            ValueError: If the text is not an envelope.
        """
        parsed = json.loads(raw)
        if not isinstance(parsed, dict):
            raise ValueError("cache envelope is not an object")
        data = parsed.get("data") or []
        if not isinstance(data, list):
            raise ValueError("cache envelope data is not a list")
        return cls(data=data, timestamp=int(parsed.get("timestamp") or 0))

    def to_json(self) -> str:
        return json.dumps({"data": self.data, "timestamp": self.timestamp})

    def age_ms(self, now: Optional[int] = None) -> int:
        return (now_ms() if now is None else now) - self.timestamp

    def is_fresh(self, expiry_ms: int, now: Optional[int] = None) -> bool:
        return bool(self.data) and self.age_ms(now) < expiry_ms

    def age_hours(self, now: Optional[int] = None) -> int:
        return round(self.age_ms(now) / MS_PER_HOUR)

    def satellites(self) -> list[Satellite]:
        """Restore entities; unreadable rows are skipped."""
        restored: list[Satellite] = []
        for row in self.data:
            try:
                restored.append(Satellite.from_dict(row))
            except TLEParseError as e:
                logger.debug("Skipping cached row: %s", e)
        return restored


class LocalStore:
    """String key/value storage on SQLite, shaped like ``localStorage``."""

    def __init__(self, engine: Union[Engine, str]):
        if isinstance(engine, str):
            engine = create_store_engine(engine)
        self._engine = engine
        self._session_factory = init_db(engine)

    def get_item(self, key: str) -> Optional[str]:
        with self._session_factory() as session:
            item = session.get(StorageItem, key)
            return item.value if item is not None else None

    def set_item(self, key: str, value: str) -> None:
        with self._session_factory() as session:
            item = session.get(StorageItem, key)
            if item is None:
                session.add(StorageItem(key=key, value=value))
            else:
                item.value = value
            session.commit()

    def remove_item(self, key: str) -> None:
        with self._session_factory() as session:
            item = session.get(StorageItem, key)
            if item is not None:
                session.delete(item)
                session.commit()

    def keys(self) -> list[str]:
        with self._session_factory() as session:
            return list(session.scalars(select(StorageItem.key)))


class LocalCatalogCache:
    """Versioned catalog cache over a ``LocalStore``.

    Read order is the current key followed by the legacy keys; writes go to
    the current key only.
    """

    def __init__(
        self,
        store: LocalStore,
        key: str = CACHE_KEY,
        legacy_keys: Iterable[str] = LEGACY_CACHE_KEYS,
        expiry_ms: int = CLIENT_CACHE_EXPIRY_MS,
    ):
        self._store = store
        self.key = key
        self.legacy_keys = tuple(legacy_keys)
        self.expiry_ms = expiry_ms

    @property
    def read_keys(self) -> tuple[str, ...]:
        return (self.key, *self.legacy_keys)

    def read(self, key: str) -> Optional[CacheEnvelope]:
        """Envelope stored under ``key``; None if absent or unreadable."""
        try:
            raw = self._store.get_item(key)
        except SQLAlchemyError as e:
            logger.warning("Cache read failed for %s: %s", key, e)
            return None
        if raw is None:
            return None
        try:
            return CacheEnvelope.from_json(raw)
        except (ValueError, TypeError) as e:
            logger.warning("Ignoring corrupt cache entry %s: %s", key, e)
            return None

    def find_fresh(
        self, now: Optional[int] = None
    ) -> Optional[tuple[str, CacheEnvelope]]:
        """First non-empty envelope younger than the expiry window."""
        for key in self.read_keys:
            envelope = self.read(key)
            if envelope is None or not envelope.data:
                continue
            if envelope.is_fresh(self.expiry_ms, now):
                return key, envelope
            logger.info(
                "Cache %s expired (%dh old)", key, envelope.age_hours(now)
            )
        return None

    def find_stale(self) -> Optional[tuple[str, CacheEnvelope]]:
        """First non-empty envelope regardless of age (last resort)."""
        for key in self.read_keys:
            envelope = self.read(key)
            if envelope is not None and envelope.data:
                return key, envelope
        return None

    def write(
        self, satellites: Iterable[Satellite], timestamp: Optional[int] = None
    ) -> bool:
        """Persist the full catalog under the current key."""
        envelope = CacheEnvelope.from_satellites(satellites, timestamp)
        try:
            self._store.set_item(self.key, envelope.to_json())
        except SQLAlchemyError as e:
            logger.warning("Failed to write cache: %s", e)
            return False
        logger.info("Cached %d satellites under %s", len(envelope.data), self.key)
        return True


class ServerCacheFile:
    """Single-file catalog cache for the API host."""

    def __init__(self, path: Path, expiry_ms: int = SERVER_CACHE_EXPIRY_MS):
        self.path = Path(path)
        self.expiry_ms = expiry_ms

    def load(self, now: Optional[int] = None) -> Optional[CacheEnvelope]:
        """Fresh envelope from disk, or None on miss, expiry or read error."""
        if not self.path.exists():
            return None
        try:
            envelope = CacheEnvelope.from_json(self.path.read_text(encoding="utf-8"))
        except (OSError, ValueError, TypeError) as e:
            logger.warning("Cache read error %s: %s", self.path, e)
            return None

        if envelope.is_fresh(self.expiry_ms, now):
            logger.info(
                "Cache hit - age: %dh, satellites: %d",
                envelope.age_hours(now),
                len(envelope.data),
            )
            return envelope

        logger.info("Cache expired - age: %dh", envelope.age_hours(now))
        return None

    def save(
        self, satellites: Iterable[Satellite], timestamp: Optional[int] = None
    ) -> Optional[CacheEnvelope]:
        """Write the envelope via temp file + rename; None on failure."""
        envelope = CacheEnvelope.from_satellites(satellites, timestamp)
        try:
            self.path.parent.mkdir(parents=True, exist_ok=True)
            fd, tmp_path = tempfile.mkstemp(dir=str(self.path.parent), suffix=".tmp")
            try:
                with os.fdopen(fd, "w", encoding="utf-8") as f:
                    f.write(envelope.to_json())
                os.replace(tmp_path, self.path)
            except OSError:
                try:
                    os.unlink(tmp_path)
                except OSError:
                    pass
                raise
        except OSError as e:
            logger.warning("Cache write error %s: %s", self.path, e)
            return None

        logger.info("Cached %d satellites", len(envelope.data))
        return envelope
