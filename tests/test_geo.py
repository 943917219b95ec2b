"""Tests for haversine distance and destination projection."""
import math
import random

import numpy as np
import pytest

from road_sprint.core.geo import (
    EARTH_RADIUS_M,
    distance_meters,
    distances_meters,
    meters_to_degrees,
    normalize_lng,
    project,
    wrap_lng,
)
from road_sprint.models import GeoPoint


def _random_point(rng):
    return GeoPoint(lat=rng.uniform(-80, 80), lng=rng.uniform(-180, 180))


class TestDistance:
    def test_zero_for_same_point(self):
        rng = random.Random(1)
        for _ in range(50):
            p = _random_point(rng)
            assert distance_meters(p, p) == 0.0

    def test_symmetric(self):
        rng = random.Random(2)
        for _ in range(50):
            a, b = _random_point(rng), _random_point(rng)
            assert distance_meters(a, b) == pytest.approx(distance_meters(b, a))

    def test_one_degree_of_latitude(self):
        d = distance_meters(GeoPoint(lat=0.0, lng=0.0), GeoPoint(lat=1.0, lng=0.0))
        assert d == pytest.approx(EARTH_RADIUS_M * math.pi / 180, rel=1e-9)

    def test_antipodes_do_not_overflow(self):
        d = distance_meters(GeoPoint(lat=0.0, lng=0.0), GeoPoint(lat=0.0, lng=180.0))
        assert d == pytest.approx(math.pi * EARTH_RADIUS_M)

    def test_london_to_paris(self):
        london = GeoPoint(lat=51.5074, lng=-0.1278)
        paris = GeoPoint(lat=48.8566, lng=2.3522)
        assert distance_meters(london, paris) == pytest.approx(343_500, rel=0.01)


class TestVectorisedDistance:
    def test_matches_scalar(self):
        rng = random.Random(3)
        origin = _random_point(rng)
        points = [_random_point(rng) for _ in range(20)]
        expected = [distance_meters(origin, p) for p in points]
        np.testing.assert_allclose(distances_meters(origin, points), expected, rtol=1e-9)

    def test_empty(self):
        assert distances_meters(GeoPoint(lat=0.0, lng=0.0), []).size == 0


class TestProject:
    def test_round_trip_distance(self):
        rng = random.Random(4)
        for _ in range(100):
            origin = _random_point(rng)
            bearing = rng.uniform(0, 360)
            distance = rng.uniform(0, 5000)
            dest = project(origin, bearing, distance)
            assert distance_meters(origin, dest) == pytest.approx(distance, abs=0.5)

    def test_north_increases_latitude(self):
        origin = GeoPoint(lat=10.0, lng=20.0)
        dest = project(origin, 0.0, 1000.0)
        assert dest.lat > origin.lat
        assert dest.lng == pytest.approx(origin.lng)

    def test_east_increases_longitude(self):
        origin = GeoPoint(lat=10.0, lng=20.0)
        dest = project(origin, 90.0, 1000.0)
        assert dest.lng > origin.lng

    def test_zero_distance_returns_origin(self):
        origin = GeoPoint(lat=51.5, lng=-0.12)
        dest = project(origin, 123.0, 0.0)
        assert dest.lat == pytest.approx(origin.lat)
        assert dest.lng == pytest.approx(origin.lng)

    def test_crossing_antimeridian_wraps(self):
        dest = project(GeoPoint(lat=0.0, lng=179.9999), 90.0, 1000.0)
        assert -180.0 < dest.lng < -179.99

    def test_returns_new_instance(self):
        origin = GeoPoint(lat=1.0, lng=1.0)
        assert project(origin, 0.0, 0.0) is not origin


class TestHelpers:
    @pytest.mark.parametrize("lng,expected", [
        (0.0, 0.0), (180.0, 180.0), (-180.0, 180.0), (190.0, -170.0), (-190.0, 170.0), (540.0, 180.0),
    ])
    def test_normalize_lng(self, lng, expected):
        assert normalize_lng(lng) == pytest.approx(expected)

    @pytest.mark.parametrize("lng,expected", [
        (-180.0, -180.0), (180.0, 180.0), (12.5, 12.5), (180.3, -179.7), (-181.0, 179.0), (360.0, 0.0),
    ])
    def test_wrap_lng(self, lng, expected):
        assert wrap_lng(lng) == pytest.approx(expected)

    def test_meters_to_degrees(self):
        lat_delta, lng_delta = meters_to_degrees(111_111.0, 60.0)
        assert lat_delta == pytest.approx(1.0)
        assert lng_delta == pytest.approx(2.0)
