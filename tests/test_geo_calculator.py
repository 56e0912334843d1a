"""Tests for geodesy helpers."""

import pytest

from dashtrack.geo_calculator import haversine_distance, route_region
from dashtrack.models import Coordinate


def coords(*pairs):
    return [Coordinate(latitude=lat, longitude=lon) for lat, lon in pairs]


class TestHaversine:
    def test_zero_distance(self):
        assert haversine_distance(37.5, 127.0, 37.5, 127.0) == 0.0

    def test_one_degree_of_latitude(self):
        assert haversine_distance(0.0, 0.0, 1.0, 0.0) == pytest.approx(111_195, rel=1e-3)

    def test_symmetric(self):
        forward = haversine_distance(37.5665, 126.9780, 35.1796, 129.0756)
        backward = haversine_distance(35.1796, 129.0756, 37.5665, 126.9780)
        assert forward == pytest.approx(backward)
        # Seoul to Busan
        assert forward == pytest.approx(325_000, rel=0.02)


class TestRouteRegion:
    def test_padded_bounds(self):
        region = route_region(coords((10.0, 20.0), (12.0, 24.0)))
        assert region.center == Coordinate(latitude=11.0, longitude=22.0)
        assert region.latitude_span == pytest.approx(2.4)
        assert region.longitude_span == pytest.approx(4.8)

    def test_single_point_gets_minimum_span(self):
        region = route_region(coords((37.5, 127.0)))
        assert region.center == Coordinate(latitude=37.5, longitude=127.0)
        assert region.latitude_span == pytest.approx(0.01)
        assert region.longitude_span == pytest.approx(0.01)

    def test_spans_capped(self):
        region = route_region(coords((-89.0, -179.0), (89.0, 0.0)))
        assert region.latitude_span == pytest.approx(170.0)

    def test_date_line_crossing_uses_short_span(self):
        region = route_region(coords((0.0, 179.0), (0.0, -179.0)))
        assert region.longitude_span == pytest.approx(2.4)
        assert abs(region.center.longitude) == pytest.approx(180.0)

    def test_out_of_range_coordinates_ignored(self):
        region = route_region(coords((95.0, 0.0), (10.0, 10.0)))
        assert region.center == Coordinate(latitude=10.0, longitude=10.0)

    def test_empty(self):
        assert route_region([]) is None
        assert route_region(coords((91.0, 0.0))) is None
