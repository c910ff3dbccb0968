import math

import pytest

from wildsphere.core.geo import EARTH_RADIUS_KM, haversine_km, lng_delta_deg, normalize_lng


def test_haversine_one_degree_on_equator():
    # One degree of arc on a sphere of radius R is 2*pi*R / 360.
    expected = 2 * math.pi * EARTH_RADIUS_KM / 360

    # Along the equator and along a meridian the distance is the same.
    assert haversine_km(0, 0, 0, 1) == pytest.approx(expected, rel=1e-9)
    assert haversine_km(0, 0, 1, 0) == pytest.approx(expected, rel=1e-9)


def test_haversine_zero_and_antipodal():
    # Identical points are exactly 0 apart (no rounding noise).
    assert haversine_km(12.5, -33.0, 12.5, -33.0) == 0.0

    # Antipodes are half the circumference apart; `a` may round past 1 here and must be clamped.
    assert haversine_km(0, 0, 0, 180) == pytest.approx(math.pi * EARTH_RADIUS_KM, rel=1e-9)
    assert haversine_km(90, 0, -90, 0) == pytest.approx(math.pi * EARTH_RADIUS_KM, rel=1e-9)


def test_haversine_wraps_across_antimeridian():
    # 179 and -179 are 2 degrees apart, not 358.
    assert haversine_km(0, 179, 0, -179) == pytest.approx(haversine_km(0, -1, 0, 1), rel=1e-12)

    # So a point across the antimeridian can be closer than one on the same side.
    assert haversine_km(0, 179, 0, -179) < haversine_km(0, 179, 0, 170)


def test_haversine_near_pole_ignores_large_longitude_gap():
    # Across the pole: 0.1 deg up + 0.1 deg down.
    d = haversine_km(89.9, 0, 89.9, 180)
    assert d == pytest.approx(math.radians(0.2) * EARTH_RADIUS_KM, rel=1e-6)

    # 180 degrees of longitude near the pole is still shorter than 0.9 degrees of latitude.
    assert d < haversine_km(89.9, 0, 89.0, 0)


@pytest.mark.parametrize(
    "coords",
    [(0, float("nan"), 0, 0), (float("nan"), 0, 0, 0), (0, 0, 0, float("nan"))],
)
def test_haversine_propagates_nan(coords):
    # A NaN coordinate must not be clamped into a plausible 0 km distance.
    assert math.isnan(haversine_km(*coords))


def test_normalize_lng():
    # Out-of-range longitudes wrap into [-180, 180).
    assert normalize_lng(190) == -170
    assert normalize_lng(-190) == 170
    assert normalize_lng(360) == 0
    assert normalize_lng(540) == -180

    # In-range values (including both ends) are left alone.
    assert normalize_lng(180) == 180
    assert normalize_lng(-180) == -180
    assert normalize_lng(12.25) == 12.25


def test_lng_delta_deg():
    # The delta is the shorter way around, so it never exceeds 180.
    assert lng_delta_deg(179, -179) == 2
    assert lng_delta_deg(-10, 10) == 20
    assert lng_delta_deg(0, 180) == 180

    # Inputs outside [-180, 180] are fine too (350 is -10).
    assert lng_delta_deg(350, 10) == 20
