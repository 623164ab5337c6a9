"""Unit tests for geographic helpers."""

import math

import pytest

from storefinder.core.geo import EARTH_RADIUS_KM, LatLng, LatLngBounds, haversine_km


class TestHaversine:
    def test_same_point_is_zero(self):
        point = LatLng(-27.47, 153.02)
        assert haversine_km(point, point) == pytest.approx(0.0, abs=1e-9)

    def test_symmetric(self):
        a = LatLng(51.5074, -0.1278)
        b = LatLng(48.8566, 2.3522)
        assert haversine_km(a, b) == pytest.approx(haversine_km(b, a))

    def test_known_distance(self):
        """London to Paris is roughly 344 km."""
        london = LatLng(51.5074, -0.1278)
        paris = LatLng(48.8566, 2.3522)
        assert haversine_km(london, paris) == pytest.approx(343.5, abs=1.0)

    def test_one_degree_of_latitude(self):
        assert haversine_km(LatLng(0, 0), LatLng(1, 0)) == pytest.approx(111.19, abs=0.01)

    @pytest.mark.parametrize(
        "point",
        [
            LatLng(-86.8616, -161.456),
            LatLng(0.0, 0.0),
            LatLng(45.0, 90.0),
            LatLng(-27.47, 153.02),
        ],
    )
    def test_antipodes_are_half_the_circumference(self, point):
        antipode = LatLng(-point.lat, point.lng - 180.0 if point.lng > 0 else point.lng + 180.0)
        half = math.pi * EARTH_RADIUS_KM
        assert haversine_km(point, antipode) == pytest.approx(half, rel=1e-6)

    def test_antipode_sweep_never_raises(self):
        for i in range(2000):
            lat = -90.0 + 180.0 * i / 1999
            lng = -180.0 + 360.0 * ((i * 37) % 2000) / 2000
            antipode = LatLng(-lat, lng + 180.0 if lng < 0 else lng - 180.0)
            assert 0.0 <= haversine_km(LatLng(lat, lng), antipode) <= math.pi * EARTH_RADIUS_KM + 1e-6


class TestLatLngBounds:
    @pytest.fixture
    def bounds(self):
        return LatLngBounds(LatLng(-28.0, 152.0), LatLng(-27.0, 154.0))

    def test_center(self, bounds):
        assert bounds.center == LatLng(-27.5, 153.0)

    def test_contains_edges_inclusive(self, bounds):
        assert bounds.contains(LatLng(-27.5, 153.0))
        assert bounds.contains(LatLng(-28.0, 152.0))
        assert not bounds.contains(LatLng(-26.9, 153.0))
        assert not bounds.contains(LatLng(-27.5, 154.1))

    def test_bbox_order(self, bounds):
        assert bounds.to_bbox() == (152.0, -28.0, 154.0, -27.0)

    def test_extend(self, bounds):
        grown = bounds.extend(LatLng(-26.0, 151.0))
        assert grown.to_bbox() == (151.0, -28.0, 154.0, -26.0)
        assert bounds.to_bbox() == (152.0, -28.0, 154.0, -27.0)

    def test_from_points(self):
        bounds = LatLngBounds.from_points(
            [LatLng(1.0, 5.0), LatLng(-2.0, 3.0), LatLng(0.5, 7.0)]
        )
        assert bounds.to_bbox() == (3.0, -2.0, 7.0, 1.0)

    def test_from_points_requires_points(self):
        with pytest.raises(ValueError):
            LatLngBounds.from_points([])

    def test_around(self):
        bounds = LatLngBounds.around(LatLng(10.0, 20.0), 0.5)
        assert bounds.to_bbox() == (19.5, 9.5, 20.5, 10.5)
