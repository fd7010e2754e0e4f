"""Physical constants and catalog parameters for the traffic model.

All values use km, seconds and milliseconds as noted. The displayed
apogee/perigee/altitude figures are calibrated against the spherical
mean radius R_EARTH, while SGP4 itself runs on WGS-72 internally.
"""

import math

# --- Earth Gravitational Parameters ---
MU_EARTH: float = 398600.4418  # km^3/s^2

# --- Earth Shape ---
R_EARTH: float = 6371.0  # km -- mean radius
R_EARTH_EQUATORIAL: float = 6378.137  # km -- WGS84 semi-major axis
R_EARTH_POLAR: float = 6356.7523142  # km -- WGS84 semi-minor axis
FLATTENING: float = (R_EARTH_EQUATORIAL - R_EARTH_POLAR) / R_EARTH_EQUATORIAL
ECCENTRICITY_SQ: float = FLATTENING * (2.0 - FLATTENING)

# --- Time ---
SECONDS_PER_DAY: float = 86400.0
MINUTES_PER_DAY: float = 1440.0
MS_PER_HOUR: int = 60 * 60 * 1000

# --- Derived Math Constants ---
TWO_PI: float = 2.0 * math.pi
RAD_TO_DEG: float = 180.0 / math.pi

# --- Telemetry defaults ---
DEFAULT_PERIOD_MINUTES: float = 100.0
ORBIT_PATH_SEGMENTS: int = 150

# --- Render space ---
RENDER_SCALE: float = 1.0 / R_EARTH  # Earth radius maps to one render unit

# --- Celestrak API ---
CELESTRAK_BASE_URL: str = "https://celestrak.org"
CELESTRAK_GP_PATH: str = "/NORAD/elements/gp.php"
CELESTRAK_FILE_PATH: str = "/NORAD/elements/{group}.txt"
USER_AGENT: str = "Space-Traffic-Model/1.0"

MIN_BODY_LENGTH: int = 50  # bodies at or below this size are treated as empty

# --- Fetch timeouts (seconds) ---
CLIENT_FETCH_TIMEOUT: float = 5.0
SERVER_FETCH_TIMEOUT: float = 10.0

# --- Cache ---
CACHE_KEY: str = "st-model-sat-data-v7"
LEGACY_CACHE_KEYS: tuple[str, ...] = ("st-model-sat-data-v6", "st-model-sat-data-v5")
CLIENT_CACHE_EXPIRY_MS: int = 24 * MS_PER_HOUR
SERVER_CACHE_EXPIRY_MS: int = 12 * MS_PER_HOUR
SERVER_CACHE_FILENAME: str = "satellite-data-cache.json"

# --- Categories ---
STATION: str = "STATION"
PAYLOAD: str = "PAYLOAD"
DEBRIS: str = "DEBRIS"

STATION_MARKERS: tuple[str, ...] = ("ISS", "CSS", "TIANGONG")
DEBRIS_MARKERS: tuple[str, ...] = ("DEB", "R/B")

# --- Celestrak groups (key, category label), fetched in this order ---
GROUP_MAP: list[tuple[str, str]] = [
    ("stations", STATION),
    ("starlink", PAYLOAD),
    ("oneweb", PAYLOAD),
    ("iridium-NEXT", PAYLOAD),
    ("gps-ops", PAYLOAD),
    ("glo-ops", PAYLOAD),
    ("beidou", PAYLOAD),
    ("galileo", PAYLOAD),
    ("planet", PAYLOAD),
    ("spire", PAYLOAD),
    ("weather", PAYLOAD),
    ("noaa", PAYLOAD),
    ("goes", PAYLOAD),
    ("resource", PAYLOAD),
    ("science", PAYLOAD),
    ("active", PAYLOAD),
    ("cosmos-1408-debris", DEBRIS),
    ("fengyun-1c-debris", DEBRIS),
    ("iridium-33-debris", DEBRIS),
    ("cosmos-2251-debris", DEBRIS),
]

# --- Simulation ---
SPEED_PRESETS: tuple[float, ...] = (1.0, 10.0, 100.0)
MIN_SPEED: float = 1.0
MAX_SPEED: float = 10000.0
