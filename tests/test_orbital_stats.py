"""Tests for telemetry scalars and formatting."""

from __future__ import annotations

from unittest.mock import patch

import pytest

from conftest import (
    ISS_LINE1,
    ISS_LINE2,
    NOAA_LINE1,
    NOAA_LINE2,
    VANGUARD_LINE1,
    VANGUARD_LINE2,
)
from spacetraffic.core import orbital_stats
from spacetraffic.core.orbital_stats import (
    build_telemetry,
    eccentricity,
    format_intl_designator,
    get_satellite_stats,
    mean_motion,
    orbital_period,
    semi_major_axis,
)
from spacetraffic.core.tle_parser import tle_epoch
from spacetraffic.utils.constants import R_EARTH

ISS_EPOCH = tle_epoch(ISS_LINE1)


def with_mean_motion(line2: str, field: str) -> str:
    return line2[:52] + field + line2[63:]


class TestElements:
    def test_mean_motion(self):
        assert mean_motion(ISS_LINE2) == pytest.approx(15.50957674)

    def test_eccentricity(self):
        assert eccentricity(ISS_LINE2) == pytest.approx(0.000358)
        assert eccentricity(VANGUARD_LINE2) == pytest.approx(0.1859667)

    def test_semi_major_axis_iss(self):
        assert semi_major_axis(15.50957674) == pytest.approx(6795, abs=10)


class TestPeriod:
    def test_iss(self):
        assert orbital_period(ISS_LINE2) == pytest.approx(1440 / 15.50957674)

    @pytest.mark.parametrize("line2", [None, ""])
    def test_missing_line(self, line2):
        assert orbital_period(line2) == 100

    def test_non_numeric_mean_motion(self):
        assert orbital_period(with_mean_motion(ISS_LINE2, "ABCDEFGHIJK")) == 100

    def test_zero_mean_motion(self):
        assert orbital_period(with_mean_motion(ISS_LINE2, " 0.00000000")) == 100


class TestStats:
    def test_near_circular_orbit(self):
        stats = get_satellite_stats(ISS_LINE1, ISS_LINE2, ISS_EPOCH)
        assert stats is not None
        assert abs(stats.apogee - stats.perigee) < 10
        assert 400 < stats.perigee < 440
        a = semi_major_axis(mean_motion(ISS_LINE2))
        assert (stats.apogee + stats.perigee) / 2 == pytest.approx(a - R_EARTH)

    def test_identifiers_and_velocity(self):
        stats = get_satellite_stats(ISS_LINE1, ISS_LINE2, ISS_EPOCH)
        assert stats.norad_id == "25544"
        assert stats.intl_id == "98067A"
        assert 7.0 < stats.velocity < 8.0
        assert stats.period == pytest.approx(92.85, abs=0.01)

    def test_eccentric_orbit(self):
        stats = get_satellite_stats(
            VANGUARD_LINE1, VANGUARD_LINE2, tle_epoch(VANGUARD_LINE1)
        )
        assert stats.apogee - stats.perigee > 3000
        assert stats.perigee > 500

    def test_sun_synchronous(self):
        stats = get_satellite_stats(NOAA_LINE1, NOAA_LINE2, tle_epoch(NOAA_LINE1))
        assert 780 < stats.perigee < 860

    def test_malformed_mean_motion(self):
        line2 = with_mean_motion(ISS_LINE2, "ABCDEFGHIJK")
        assert get_satellite_stats(ISS_LINE1, line2, ISS_EPOCH) is None

    def test_zero_mean_motion(self):
        line2 = with_mean_motion(ISS_LINE2, " 0.00000000")
        assert get_satellite_stats(ISS_LINE1, line2, ISS_EPOCH) is None

    def test_zero_mean_motion_skips_semi_major_axis(self):
        line2 = with_mean_motion(ISS_LINE2, " 0.00000000")
        with patch.object(orbital_stats, "semi_major_axis") as sma:
            assert get_satellite_stats(ISS_LINE1, line2, ISS_EPOCH) is None
        sma.assert_not_called()

    def test_display_precision(self):
        display = get_satellite_stats(ISS_LINE1, ISS_LINE2, ISS_EPOCH).as_display()
        assert len(display["velocity"].split(".")[1]) == 3
        assert len(display["apogee"].split(".")[1]) == 2
        assert display["noradId"] == "25544"
        assert display["intlId"] == "98067A"


class TestIntlDesignator:
    @pytest.mark.parametrize(
        "raw, expected",
        [
            ("98067A", "1998-067A"),
            ("21035A", "2021-035A"),
            ("57001A", "1957-001A"),
            ("56001A", "2056-001A"),
            ("", "N/A"),
            (None, "N/A"),
        ],
    )
    def test_expansion(self, raw, expected):
        assert format_intl_designator(raw) == expected


class TestTelemetry:
    def test_iss(self, iss):
        telemetry = build_telemetry(iss, ISS_EPOCH)
        assert telemetry["name"] == "ISS (ZARYA)"
        assert telemetry["category"] == "STATION"
        assert telemetry["noradId"] == "25544"
        assert telemetry["cosparId"] == "1998-067A"
        assert 380 < float(telemetry["alt"]) < 450
        assert set(telemetry["eci"]) == {"x", "y", "z"}
