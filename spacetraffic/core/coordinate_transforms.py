"""Coordinate frame transformations.

Provides conversions between:
- ECI (TEME) -> ECEF, rotated by Greenwich Mean Sidereal Time
- ECEF -> Geodetic (WGS84 latitude/longitude/height)
- ECI -> render space for the Earth-radius-scaled 3D scene

Angles are in radians unless suffixed with _deg. GMST always comes from
``time_utils.datetime_to_gmst``, the same function that drives the Earth
rotation angle.
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from typing import Optional

import numpy as np

from spacetraffic.utils.constants import (
    ECCENTRICITY_SQ,
    R_EARTH_EQUATORIAL,
    RAD_TO_DEG,
    RENDER_SCALE,
)
from spacetraffic.utils.time_utils import datetime_to_gmst


@dataclass(frozen=True)
class Geodetic:
    latitude: float  # radians
    longitude: float  # radians, [-pi, pi]
    height: float  # km above the WGS84 ellipsoid


# =============================================================================
# ECI -> ECEF
# =============================================================================

def rotate_eci_to_ecef(position_eci: np.ndarray, gmst: float) -> np.ndarray:
    """Rotate ECI (TEME) to ECEF by a given GMST angle.

    Args:
        position_eci: [x, y, z] in km
        gmst: Greenwich Mean Sidereal Time in radians

    Returns:
        [x, y, z] in km (ECEF)
    """
    cos_g = np.cos(gmst)
    sin_g = np.sin(gmst)
    x, y, z = position_eci[0], position_eci[1], position_eci[2]
    return np.array([
        cos_g * x + sin_g * y,
        -sin_g * x + cos_g * y,
        z,
    ])


def eci_to_ecef(position_eci: np.ndarray, time: datetime) -> np.ndarray:
    """Earth-fixed position at ``time`` for an inertial position."""
    return rotate_eci_to_ecef(np.asarray(position_eci, dtype=np.float64), datetime_to_gmst(time))


# =============================================================================
# ECEF -> Geodetic (WGS84)
# =============================================================================

def ecef_to_geodetic(position_ecef: np.ndarray) -> Geodetic:
    """Convert ECEF to geodetic coordinates using Bowring iteration.

    Args:
        position_ecef: [x, y, z] in km

    Returns:
        Geodetic with latitude/longitude in radians and height in km.
    """
    x, y, z = position_ecef[0], position_ecef[1], position_ecef[2]
    a = R_EARTH_EQUATORIAL
    e2 = ECCENTRICITY_SQ

    lon = np.arctan2(y, x)
    p = np.sqrt(x ** 2 + y ** 2)

    # Initial estimate
    lat = np.arctan2(z, p * (1.0 - e2))

    # Bowring iteration (converges in 2-3 iterations)
    for _ in range(5):
        sin_lat = np.sin(lat)
        n = a / np.sqrt(1.0 - e2 * sin_lat ** 2)
        lat_new = np.arctan2(z + e2 * n * sin_lat, p)
        if abs(lat_new - lat) < 1e-12:
            lat = lat_new
            break
        lat = lat_new

    sin_lat = np.sin(lat)
    cos_lat = np.cos(lat)
    n = a / np.sqrt(1.0 - e2 * sin_lat ** 2)

    if abs(cos_lat) > 1e-10:
        alt = p / cos_lat - n
    else:
        alt = abs(z) / abs(sin_lat) - n * (1.0 - e2)

    return Geodetic(latitude=float(lat), longitude=float(lon), height=float(alt))


def eci_to_geodetic(position_eci: np.ndarray, time: datetime) -> Geodetic:
    """Inertial position straight to geodetic at ``time``."""
    return ecef_to_geodetic(eci_to_ecef(position_eci, time))


# =============================================================================
# Display formatting
# =============================================================================

def format_coords(geodetic: Optional[Geodetic]) -> dict[str, str]:
    """Fixed-precision strings for UI text: degrees to 4 places, km to 2.

    A missing position formats as zero strings.
    """
    if geodetic is None:
        return {"lat": "0", "lon": "0", "alt": "0"}
    return {
        "lat": f"{geodetic.latitude * RAD_TO_DEG:.4f}",
        "lon": f"{geodetic.longitude * RAD_TO_DEG:.4f}",
        "alt": f"{geodetic.height:.2f}",
    }


# =============================================================================
# Render space
# =============================================================================

def eci_to_render_coords(
    position_eci: np.ndarray, scale: float = RENDER_SCALE
) -> np.ndarray:
    """Map an ECI position (km) into the Y-up scene frame.

    Earth radius becomes one unit; the inertial Z axis (north) becomes the
    scene Y axis and inertial Y becomes -Z.
    """
    x, y, z = position_eci[0], position_eci[1], position_eci[2]
    return np.array([x * scale, z * scale, -y * scale])


def eci_to_render_coords_batch(
    positions_eci: np.ndarray, scale: float = RENDER_SCALE
) -> np.ndarray:
    """Vectorized ECI to render coordinates.

    Args:
        positions_eci: shape (N, 3) in km

    Returns:
        shape (N, 3) in render units
    """
    positions_eci = np.asarray(positions_eci, dtype=np.float64).reshape(-1, 3)
    result = np.empty_like(positions_eci)
    result[:, 0] = positions_eci[:, 0] * scale
    result[:, 1] = positions_eci[:, 2] * scale
    result[:, 2] = -positions_eci[:, 1] * scale
    return result
