"""Time conversion utilities for orbital propagation.

Provides conversions between Python datetime, Julian Date, GMST,
epoch milliseconds and TLE epoch formats. The GMST function here is the
single sidereal-time source for both the frame converter and the Earth
rotation angle, so rendered satellites stay locked to the surface.
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime, timedelta, timezone

from sgp4.api import jday

from spacetraffic.utils.constants import SECONDS_PER_DAY, TWO_PI


@dataclass(frozen=True, slots=True)
class JulianDate:
    """Split Julian Date for SGP4 compatibility.

    SGP4 expects jd (integer part) and fr (fractional part)
    as separate floats for numerical precision.
    """

    jd: float
    fr: float

    @property
    def full(self) -> float:
        return self.jd + self.fr


def ensure_utc(dt: datetime) -> datetime:
    """Treat naive datetimes as UTC."""
    if dt.tzinfo is None:
        return dt.replace(tzinfo=timezone.utc)
    return dt.astimezone(timezone.utc)


def datetime_to_jd(dt: datetime) -> JulianDate:
    """Convert Python datetime (UTC) to split Julian Date."""
    dt = ensure_utc(dt)
    seconds = dt.second + dt.microsecond / 1e6
    jd_val, fr_val = jday(
        dt.year, dt.month, dt.day, dt.hour, dt.minute, seconds
    )
    return JulianDate(jd=jd_val, fr=fr_val)


def datetime_to_gmst(dt: datetime) -> float:
    """Compute Greenwich Mean Sidereal Time in radians.

    Uses the IAU 1982 GMST model for consistency with SGP4 TEME frame.
    """
    jd = datetime_to_jd(dt)
    return _gmst_from_jd(jd.jd, jd.fr)


def _gmst_from_jd(jd_val: float, fr_val: float) -> float:
    """Compute GMST from Julian Date components (radians)."""
    t_ut1 = (jd_val + fr_val - 2451545.0) / 36525.0
    gmst_sec = (
        67310.54841
        + (876600.0 * 3600.0 + 8640184.812866) * t_ut1
        + 0.093104 * t_ut1 ** 2
        - 6.2e-6 * t_ut1 ** 3
    )
    gmst_rad = (gmst_sec % SECONDS_PER_DAY) / SECONDS_PER_DAY * TWO_PI
    return gmst_rad % TWO_PI


def tle_epoch_to_datetime(epoch_year: int, epoch_day: float) -> datetime:
    """Convert TLE epoch (2-digit year + fractional day-of-year) to datetime.

    Year rule: 0-56 -> 2000-2056; 57-99 -> 1957-1999.
    """
    if epoch_year < 57:
        full_year = 2000 + epoch_year
    else:
        full_year = 1900 + epoch_year

    base = datetime(full_year, 1, 1, tzinfo=timezone.utc)
    return base + timedelta(days=epoch_day - 1.0)


def now_ms() -> int:
    """Current wall-clock time as epoch milliseconds."""
    return int(datetime.now(timezone.utc).timestamp() * 1000)


def ms_to_datetime(ms: float) -> datetime:
    return datetime.fromtimestamp(ms / 1000.0, tz=timezone.utc)


def datetime_to_ms(dt: datetime) -> int:
    return int(ensure_utc(dt).timestamp() * 1000)


def generate_time_steps(
    start: datetime, duration_minutes: float, segments: int
) -> list[datetime]:
    """Evenly spaced datetimes covering ``duration_minutes`` from ``start``.

    Returns ``segments + 1`` points so the last one closes the span.
    """
    start = ensure_utc(start)
    step = duration_minutes / max(1, segments)
    return [start + timedelta(minutes=i * step) for i in range(segments + 1)]
