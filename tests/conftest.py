"""Shared fixtures: checksum-valid TLE records and in-memory stores."""

from __future__ import annotations

import pytest

from spacetraffic.core.tle_parser import Satellite
from spacetraffic.services.catalog_cache import LocalCatalogCache, LocalStore


ISS_NAME = "ISS (ZARYA)"
ISS_LINE1 = "1 25544U 98067A   24127.82853009  .00015698  00000+0  27310-3 0  9995"
ISS_LINE2 = "2 25544  51.6393 160.4574 0003580 140.6673 205.7250 15.50957674452123"

CSS_NAME = "CSS (TIANHE)"
CSS_LINE1 = "1 48274U 21035A   24045.50261574  .00021540  00000-0  25163-3 0  9993"
CSS_LINE2 = "2 48274  41.4681 279.1498 0005372 149.8847 345.3740 15.62096269157015"

DEB_NAME = "COSMOS 2251 DEB"
DEB_LINE1 = "1 34427U 93036SX  24127.82853009  .00015698  00000+0  27310-3 0  9996"
DEB_LINE2 = "2 34427  51.6393 160.4574 0003580 140.6673 205.7250 15.50957674452123"

NOAA_NAME = "NOAA 20"
NOAA_LINE1 = "1 43013U 17073A   24127.82853009  .00000023  00000+0  85612-4 0  9990"
NOAA_LINE2 = "2 43013  98.7420 249.5000 0001500  90.0000 270.0000 14.19550000100003"

VANGUARD_NAME = "VANGUARD 1"
VANGUARD_LINE1 = "1 00005U 58002B   00179.78495062  .00000023  00000-0  28098-4 0  4753"
VANGUARD_LINE2 = "2 00005  34.2682 348.7242 1859667 331.7664  19.3264 10.82419157413667"

# Correct layout, wrong check digits on both lines
BAD_CHECKSUM_LINE1 = "1 25544U 98067A   24045.54896019  .00015698  00000+0  27310-3 0  9993"
BAD_CHECKSUM_LINE2 = "2 25544  51.6393 160.4574 0003580 140.6673 205.7250 15.49583488439596"


def block(name: str, line1: str, line2: str) -> str:
    return f"{name}\n{line1}\n{line2}\n"


@pytest.fixture
def iss() -> Satellite:
    return Satellite.from_lines(ISS_NAME, ISS_LINE1, ISS_LINE2)


@pytest.fixture
def css() -> Satellite:
    return Satellite.from_lines(CSS_NAME, CSS_LINE1, CSS_LINE2)


@pytest.fixture
def debris() -> Satellite:
    return Satellite.from_lines(DEB_NAME, DEB_LINE1, DEB_LINE2)


@pytest.fixture
def noaa() -> Satellite:
    return Satellite.from_lines(NOAA_NAME, NOAA_LINE1, NOAA_LINE2, "PAYLOAD")


@pytest.fixture
def memory_store() -> LocalStore:
    return LocalStore("sqlite://")


@pytest.fixture
def local_cache(memory_store: LocalStore) -> LocalCatalogCache:
    return LocalCatalogCache(memory_store)
