"""Scalar telemetry derived from TLE fields and propagated velocity.

Apogee and perigee come from the mean-motion semi-major axis and the TLE
eccentricity, measured against the spherical mean radius R_EARTH rather
than an oblate model; the displayed figures are calibrated against it.
"""

from __future__ import annotations

import logging
import math
from dataclasses import dataclass
from datetime import datetime
from typing import Any, Optional

import numpy as np

from spacetraffic.core.coordinate_transforms import eci_to_geodetic, format_coords
from spacetraffic.core.propagator import propagate, propagate_satellite
from spacetraffic.core.tle_parser import (
    Satellite,
    extract_intl_designator,
    extract_norad_id,
)
from spacetraffic.utils.constants import (
    DEFAULT_PERIOD_MINUTES,
    MINUTES_PER_DAY,
    MU_EARTH,
    R_EARTH,
    SECONDS_PER_DAY,
    TWO_PI,
)

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class OrbitalStats:
    velocity: float  # km/s
    apogee: float  # km above mean radius
    perigee: float  # km above mean radius
    norad_id: str
    intl_id: str  # compact YYNNNPPP
    period: float  # minutes

    def as_display(self) -> dict[str, str]:
        """UI strings: velocity to 3 places, the rest to 2."""
        return {
            "velocity": f"{self.velocity:.3f}",
            "apogee": f"{self.apogee:.2f}",
            "perigee": f"{self.perigee:.2f}",
            "noradId": self.norad_id,
            "intlId": self.intl_id,
            "period": f"{self.period:.2f}",
        }


def mean_motion(tle2: str) -> float:
    """Mean motion in revolutions per day (line 2, columns 53-63)."""
    return float(tle2[52:63])


def eccentricity(tle2: str) -> float:
    """Eccentricity with its implied leading decimal (line 2, columns 27-33)."""
    # Columns 35-42 hold the argument of perigee, not eccentricity.
    return float("0." + tle2[26:33].strip())


def semi_major_axis(mean_motion_rev_day: float) -> float:
    """a = (mu / n^2)^(1/3) with n converted to rad/s."""
    n = mean_motion_rev_day * TWO_PI / SECONDS_PER_DAY
    return (MU_EARTH / n ** 2) ** (1.0 / 3.0)


def orbital_period(tle2: Optional[str]) -> float:
    """Orbital period in minutes; 100 when mean motion is unusable."""
    if not tle2:
        return DEFAULT_PERIOD_MINUTES
    try:
        n = mean_motion(tle2)
    except ValueError:
        return DEFAULT_PERIOD_MINUTES
    if math.isnan(n) or n == 0:
        return DEFAULT_PERIOD_MINUTES
    return MINUTES_PER_DAY / n


def get_satellite_stats(
    tle1: str, tle2: str, time: datetime
) -> Optional[OrbitalStats]:
    """Velocity, apogee, perigee, identifiers and period; all or nothing.

    Any malformed numeric field yields None for the whole result.
    """
    try:
        state = propagate(tle1, tle2, time)
        velocity = state.speed if state is not None else 0.0

        n = mean_motion(tle2)
        if math.isnan(n) or n <= 0:
            logger.debug("Stats unavailable: mean motion %s", n)
            return None
        a = semi_major_axis(n)
        e = eccentricity(tle2)
        if math.isnan(a) or math.isnan(e):
            raise ValueError("non-numeric orbital elements")

        return OrbitalStats(
            velocity=velocity,
            apogee=a * (1.0 + e) - R_EARTH,
            perigee=a * (1.0 - e) - R_EARTH,
            norad_id=extract_norad_id(tle2),
            intl_id=extract_intl_designator(tle1),
            period=orbital_period(tle2),
        )
    except (ValueError, TypeError, ZeroDivisionError) as e:
        logger.debug("Stats unavailable: %s", e)
        return None


def format_intl_designator(raw_id: Optional[str]) -> str:
    """Expand a compact designator: ``98067A`` -> ``1998-067A``."""
    if not raw_id:
        return "N/A"
    try:
        yy = int(raw_id[:2])
    except ValueError:
        return raw_id
    full_year = 1900 + yy if yy >= 57 else 2000 + yy
    return f"{full_year}-{raw_id[2:]}"


def build_telemetry(sat: Satellite, time: datetime) -> Optional[dict[str, Any]]:
    """Everything the telemetry panel shows for one object at ``time``."""
    state = propagate_satellite(sat, time)
    stats = get_satellite_stats(sat.tle1, sat.tle2, time)
    if state is None or stats is None:
        return None

    geodetic = eci_to_geodetic(state.position, time)
    telemetry: dict[str, Any] = {}
    telemetry.update(format_coords(geodetic))
    telemetry.update(stats.as_display())
    telemetry.update({
        "cosparId": format_intl_designator(stats.intl_id),
        "eci": {
            axis: float(v) for axis, v in zip("xyz", np.asarray(state.position))
        },
        "category": sat.category.value,
        "name": sat.name,
    })
    return telemetry
