"""TLE (Two-Line Element) validation, classification and parsing.

Every record passes the checksum gate here before it may enter the
catalog. Bulk Celestrak text is read as strict 3-line blocks
(name, line 1, line 2); anything that fails validation is dropped.
"""

from __future__ import annotations

import enum
import logging
from dataclasses import dataclass, field
from datetime import datetime
from typing import Any, Optional

from sgp4.api import Satrec

from spacetraffic.utils.constants import (
    DEBRIS,
    DEBRIS_MARKERS,
    STATION,
    STATION_MARKERS,
)
from spacetraffic.utils.time_utils import tle_epoch_to_datetime

logger = logging.getLogger(__name__)

TLE_LINE_LENGTH = 69


class TLEParseError(Exception):
    """Raised when TLE data cannot be parsed."""

    def __init__(self, message: str, line_number: int = 0, raw_line: str = ""):
        self.line_number = line_number
        self.raw_line = raw_line
        super().__init__(message)


class TLEChecksumError(TLEParseError):
    """Raised when a TLE line fails checksum validation."""


class Category(str, enum.Enum):
    STATION = "STATION"
    PAYLOAD = "PAYLOAD"
    DEBRIS = "DEBRIS"


def compute_checksum(line: str) -> int:
    """Mod-10 sum over the first 68 characters; each '-' counts as 1."""
    checksum = 0
    for ch in line[:68]:
        if "0" <= ch <= "9":
            checksum += int(ch)
        elif ch == "-":
            checksum += 1
    return checksum % 10


def validate_checksum(line: Optional[str]) -> bool:
    """Validate TLE line checksum (last digit)."""
    if not line or len(line) < TLE_LINE_LENGTH:
        return False
    check = line[68]
    if not "0" <= check <= "9":
        return False
    return compute_checksum(line) == int(check)


def classify(name: str, label: Optional[str] = None) -> Category:
    """Infer the category of an object.

    Precedence: STATION (explicit label or station marker in the name),
    then DEBRIS (explicit label or debris marker), else PAYLOAD. A name
    carrying both kinds of marker is a STATION.
    """
    if label == STATION or any(marker in name for marker in STATION_MARKERS):
        return Category.STATION
    if label == DEBRIS or any(marker in name for marker in DEBRIS_MARKERS):
        return Category.DEBRIS
    return Category.PAYLOAD


def extract_norad_id(line2: str) -> str:
    """Catalog number from line 2, columns 3-7."""
    return line2[2:7].strip()


def extract_intl_designator(line1: str) -> str:
    """Compact international designator from line 1, columns 10-17."""
    return line1[9:17].strip()


def tle_epoch(line1: str) -> datetime:
    """Epoch of a TLE from line 1, columns 19-32."""
    try:
        epoch_year = int(line1[18:20].strip())
        epoch_day = float(line1[20:32].strip())
    except (ValueError, IndexError) as e:
        raise TLEParseError(f"Bad epoch field: {e}", 1, line1) from e
    return tle_epoch_to_datetime(epoch_year, epoch_day)


@dataclass(frozen=True)
class Satellite:
    """A catalog entity: one object per NORAD catalog number.

    ``satrec`` is the SGP4 element record built once at ingestion so
    per-frame propagation does not re-parse the TLE. It is never
    serialized.
    """

    name: str
    tle1: str
    tle2: str
    id: str
    category: Category
    is_visible: bool = True
    satrec: Optional[Satrec] = field(default=None, repr=False, compare=False)

    @classmethod
    def from_lines(
        cls, name: str, line1: str, line2: str, label: Optional[str] = None
    ) -> Satellite:
        """Build a validated entity from a 3-line block.

        Raises:
            TLEChecksumError: If either line fails the checksum gate.
            TLEParseError: If the element record cannot be constructed.
        """
        line1 = line1.strip()
        line2 = line2.strip()
        name = name.strip()

        if not validate_checksum(line1):
            raise TLEChecksumError(f"Line 1 checksum failed for {name!r}", 1, line1)
        if not validate_checksum(line2):
            raise TLEChecksumError(f"Line 2 checksum failed for {name!r}", 2, line2)

        try:
            satrec = Satrec.twoline2rv(line1, line2)
        except (ValueError, IndexError) as e:
            raise TLEParseError(f"Failed to parse TLE for {name!r}: {e}") from e

        return cls(
            name=name,
            tle1=line1,
            tle2=line2,
            id=extract_norad_id(line2),
            category=classify(name, label),
            satrec=satrec,
        )

    def to_dict(self) -> dict[str, str]:
        """Serializable form: TLE fields, category and id only."""
        return {
            "name": self.name,
            "tle1": self.tle1,
            "tle2": self.tle2,
            "category": self.category.value,
            "id": self.id,
        }

    @classmethod
    def from_dict(cls, row: Any) -> Satellite:
        """Restore an entity from a cached row.

        Accepts the current dict shape and the older array shape
        ``[name, tle1, tle2, category, id]``.
        """
        if isinstance(row, (list, tuple)):
            if len(row) < 5:
                raise TLEParseError(f"Cached row too short: {row!r}")
            row = {
                "name": row[0],
                "tle1": row[1],
                "tle2": row[2],
                "category": row[3],
                "id": row[4],
            }
        try:
            name = str(row["name"])
            tle1 = str(row["tle1"]).strip()
            tle2 = str(row["tle2"]).strip()
            category = Category(row.get("category") or classify(name).value)
        except (KeyError, TypeError, ValueError) as e:
            raise TLEParseError(f"Malformed cached row: {e}") from e

        try:
            satrec = Satrec.twoline2rv(tle1, tle2)
        except (ValueError, IndexError) as e:
            raise TLEParseError(f"Failed to restore TLE for {name!r}: {e}") from e

        return cls(
            name=name,
            tle1=tle1,
            tle2=tle2,
            id=str(row.get("id") or extract_norad_id(tle2)),
            category=category,
            satrec=satrec,
        )


def parse_satellite(
    name: str, line1: str, line2: str, label: Optional[str] = None
) -> Optional[Satellite]:
    """Lenient form of ``Satellite.from_lines``: None for a bad record."""
    try:
        return Satellite.from_lines(name, line1, line2, label)
    except TLEParseError as e:
        logger.debug("Dropping record %r: %s", name.strip(), e)
        return None


def parse_bulk_tle(text: str, label: Optional[str] = None) -> list[Satellite]:
    """Parse newline-delimited 3-line blocks into validated entities.

    A trailing block with fewer than three lines is discarded. Invalid
    blocks are skipped, never raised.
    """
    lines = text.strip().splitlines()
    satellites: list[Satellite] = []

    for i in range(0, len(lines), 3):
        if i + 2 >= len(lines):
            break
        sat = parse_satellite(lines[i], lines[i + 1], lines[i + 2], label)
        if sat is not None:
            satellites.append(sat)

    dropped = len(lines) // 3 - len(satellites)
    if dropped:
        logger.debug("Dropped %d invalid TLE blocks", dropped)
    return satellites
