"""SGP4-based orbital propagation.

Wraps the sgp4 library. ``OrbitalPropagator`` raises on failure; the
module-level ``propagate`` helpers are the per-frame entry points and
return None instead, so a decayed or malformed object simply drops out of
the frame. Propagation is a pure function of (elements, time).
"""

from __future__ import annotations

import logging
import math
from dataclasses import dataclass
from datetime import datetime
from typing import TYPE_CHECKING, Optional

import numpy as np
from sgp4.api import Satrec

from spacetraffic.utils.constants import DEFAULT_PERIOD_MINUTES, ORBIT_PATH_SEGMENTS
from spacetraffic.utils.time_utils import datetime_to_jd, ensure_utc, generate_time_steps

if TYPE_CHECKING:
    from spacetraffic.core.tle_parser import Satellite

logger = logging.getLogger(__name__)


class PropagationError(Exception):
    """Raised when SGP4 initialisation or propagation fails."""

    def __init__(
        self, message: str, error_code: int = 0, satellite_name: str = ""
    ):
        self.error_code = error_code
        self.satellite_name = satellite_name
        super().__init__(message)

    @staticmethod
    def error_message(code: int) -> str:
        messages = {
            1: "Mean elements: eccentricity >= 1.0 or < -0.001 or a < 0.95",
            2: "Mean motion less than 0.0",
            3: "Perturbed eccentricity < 0.0 or > 1.0",
            4: "Semi-latus rectum < 0.0",
            5: "Epoch elements are sub-orbital",
            6: "Satellite has decayed",
        }
        return messages.get(code, f"Unknown SGP4 error code {code}")


@dataclass(frozen=True)
class StateVector:
    """Position and velocity in the TEME inertial frame."""

    position: np.ndarray  # [x, y, z] km
    velocity: np.ndarray  # [vx, vy, vz] km/s

    @property
    def speed(self) -> float:
        return float(np.linalg.norm(self.velocity))

    @property
    def radius(self) -> float:
        return float(np.linalg.norm(self.position))


class OrbitalPropagator:
    """SGP4 propagation engine for a single element set."""

    def __init__(
        self,
        tle1: str = "",
        tle2: str = "",
        *,
        satrec: Optional[Satrec] = None,
        name: str = "",
    ):
        """Build from two TLE lines, or reuse an existing ``satrec``.

        Raises:
            PropagationError: If the element record cannot be built.
        """
        self._name = name
        if satrec is None:
            try:
                satrec = Satrec.twoline2rv(tle1, tle2)
            except (ValueError, IndexError, TypeError) as e:
                raise PropagationError(
                    f"SGP4 init failed for {name!r}: {e}",
                    satellite_name=name,
                ) from e

        if satrec.error != 0:
            raise PropagationError(
                f"SGP4 init failed for {name!r}: "
                f"{PropagationError.error_message(satrec.error)}",
                error_code=satrec.error,
                satellite_name=name,
            )
        self._satellite = satrec

    @property
    def satellite(self) -> Satrec:
        return self._satellite

    def propagate(self, dt: datetime) -> StateVector:
        """Propagate to a single datetime (before or after epoch)."""
        jd = datetime_to_jd(ensure_utc(dt))
        error, r_tuple, v_tuple = self._satellite.sgp4(jd.jd, jd.fr)

        if error != 0:
            raise PropagationError(
                f"SGP4 propagation failed for {self._name!r}: "
                f"{PropagationError.error_message(error)}",
                error_code=error,
                satellite_name=self._name,
            )
        if any(math.isnan(c) for c in r_tuple):
            raise PropagationError(
                f"SGP4 returned no position for {self._name!r}",
                satellite_name=self._name,
            )

        return StateVector(
            position=np.array(r_tuple, dtype=np.float64),
            velocity=np.array(v_tuple, dtype=np.float64),
        )

    def propagate_many(self, times: list[datetime]) -> list[Optional[StateVector]]:
        """Vectorized propagation; failed points come back as None."""
        if not times:
            return []

        jds = [datetime_to_jd(ensure_utc(t)) for t in times]
        jd_arr = np.array([j.jd for j in jds], dtype=np.float64)
        fr_arr = np.array([j.fr for j in jds], dtype=np.float64)

        errors, positions, velocities = self._satellite.sgp4_array(jd_arr, fr_arr)

        results: list[Optional[StateVector]] = []
        for i in range(len(times)):
            if errors[i] != 0 or np.isnan(positions[i]).any():
                results.append(None)
                continue
            results.append(
                StateVector(
                    position=np.array(positions[i], dtype=np.float64),
                    velocity=np.array(velocities[i], dtype=np.float64),
                )
            )

        n_failed = sum(1 for r in results if r is None)
        if n_failed:
            logger.debug(
                "%d/%d propagation points failed for %r", n_failed, len(times), self._name
            )
        return results


def propagate(tle1: str, tle2: str, time: datetime) -> Optional[StateVector]:
    """Position/velocity of a TLE at ``time``, or None on any failure."""
    try:
        return OrbitalPropagator(tle1, tle2).propagate(time)
    except PropagationError as e:
        logger.debug("Propagation skipped: %s", e)
        return None


def propagate_satellite(sat: Satellite, time: datetime) -> Optional[StateVector]:
    """Per-frame propagation of a catalog entity, reusing its element record."""
    try:
        if sat.satrec is not None:
            propagator = OrbitalPropagator(satrec=sat.satrec, name=sat.name)
        else:
            propagator = OrbitalPropagator(sat.tle1, sat.tle2, name=sat.name)
        return propagator.propagate(time)
    except PropagationError as e:
        logger.debug("Propagation skipped: %s", e)
        return None


def propagate_path(
    tle1: str,
    tle2: str,
    start: datetime,
    period_minutes: float = DEFAULT_PERIOD_MINUTES,
    segments: int = ORBIT_PATH_SEGMENTS,
) -> list[np.ndarray]:
    """Sample one orbital period from ``start`` as ECI positions (km).

    Points where propagation fails are omitted.
    """
    try:
        propagator = OrbitalPropagator(tle1, tle2)
    except PropagationError as e:
        logger.debug("Orbit path skipped: %s", e)
        return []

    times = generate_time_steps(start, period_minutes, segments)
    return [
        state.position
        for state in propagator.propagate_many(times)
        if state is not None
    ]
