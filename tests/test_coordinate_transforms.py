"""Tests for frame conversions and display formatting."""

from __future__ import annotations

import math
from datetime import datetime, timezone

import numpy as np
import pytest

from conftest import ISS_LINE1, ISS_LINE2
from spacetraffic.core.coordinate_transforms import (
    Geodetic,
    ecef_to_geodetic,
    eci_to_ecef,
    eci_to_geodetic,
    eci_to_render_coords,
    eci_to_render_coords_batch,
    format_coords,
    rotate_eci_to_ecef,
)
from spacetraffic.core.propagator import propagate
from spacetraffic.core.tle_parser import tle_epoch
from spacetraffic.utils.constants import R_EARTH, R_EARTH_EQUATORIAL, R_EARTH_POLAR
from spacetraffic.utils.time_utils import datetime_to_gmst


class TestEciToEcef:
    def test_zero_rotation_is_identity(self):
        pos = np.array([7000.0, -1200.0, 300.0])
        np.testing.assert_allclose(rotate_eci_to_ecef(pos, 0.0), pos)

    def test_quarter_turn(self):
        rotated = rotate_eci_to_ecef(np.array([1.0, 0.0, 0.0]), math.pi / 2)
        np.testing.assert_allclose(rotated, [0.0, -1.0, 0.0], atol=1e-12)

    def test_preserves_norm_and_z(self):
        pos = np.array([4000.0, 5000.0, 2000.0])
        t = datetime(2024, 5, 6, 12, tzinfo=timezone.utc)
        ecef = eci_to_ecef(pos, t)
        assert np.linalg.norm(ecef) == pytest.approx(np.linalg.norm(pos))
        assert ecef[2] == pos[2]

    def test_uses_gmst_of_time(self):
        pos = np.array([7000.0, 0.0, 0.0])
        t = datetime(2024, 1, 1, tzinfo=timezone.utc)
        expected = rotate_eci_to_ecef(pos, datetime_to_gmst(t))
        np.testing.assert_allclose(eci_to_ecef(pos, t), expected)


class TestEcefToGeodetic:
    def test_equator_prime_meridian(self):
        geo = ecef_to_geodetic(np.array([R_EARTH_EQUATORIAL, 0.0, 0.0]))
        assert geo.latitude == pytest.approx(0.0, abs=1e-12)
        assert geo.longitude == pytest.approx(0.0, abs=1e-12)
        assert geo.height == pytest.approx(0.0, abs=1e-6)

    def test_north_pole(self):
        geo = ecef_to_geodetic(np.array([0.0, 0.0, R_EARTH_POLAR + 100.0]))
        assert geo.latitude == pytest.approx(math.pi / 2)
        assert geo.height == pytest.approx(100.0, abs=1e-3)

    def test_east_longitude(self):
        geo = ecef_to_geodetic(np.array([0.0, 7000.0, 0.0]))
        assert geo.longitude == pytest.approx(math.pi / 2)
        assert geo.height == pytest.approx(7000.0 - R_EARTH_EQUATORIAL, abs=1e-6)

    def test_iss_geodetic(self):
        t = tle_epoch(ISS_LINE1)
        state = propagate(ISS_LINE1, ISS_LINE2, t)
        geo = eci_to_geodetic(state.position, t)
        assert 380 < geo.height < 450
        assert abs(math.degrees(geo.latitude)) <= 51.7
        assert -math.pi <= geo.longitude <= math.pi

    def test_composition_rotates_once(self):
        t = datetime(2024, 3, 1, 6, tzinfo=timezone.utc)
        pos = np.array([5000.0, 4000.0, 1000.0])
        direct = eci_to_geodetic(pos, t)
        stepwise = ecef_to_geodetic(eci_to_ecef(pos, t))
        assert direct == stepwise


class TestFormatCoords:
    def test_precision(self):
        text = format_coords(Geodetic(latitude=0.5, longitude=-1.0, height=420.123))
        assert text == {"lat": "28.6479", "lon": "-57.2958", "alt": "420.12"}

    def test_missing_position(self):
        assert format_coords(None) == {"lat": "0", "lon": "0", "alt": "0"}


class TestRenderCoords:
    def test_axis_mapping_and_scale(self):
        pos = np.array([1.0, 2.0, 3.0]) * R_EARTH
        np.testing.assert_allclose(eci_to_render_coords(pos), [1.0, 3.0, -2.0])

    def test_batch_matches_single(self):
        positions = np.array([[7000.0, 100.0, -50.0], [-3000.0, 6000.0, 1500.0]])
        batch = eci_to_render_coords_batch(positions)
        assert batch.shape == (2, 3)
        for row, pos in zip(batch, positions):
            np.testing.assert_allclose(row, eci_to_render_coords(pos))
