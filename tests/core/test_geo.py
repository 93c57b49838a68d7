"""Unit tests for geographic regions.

Pure function tests - no mocks needed, fast execution.
"""

import pytest

from src.core.geo import PHILIPPINES_BOUNDS, BoundingBox, calculate_distance


@pytest.fixture
def box():
    return BoundingBox(
        min_latitude=10.0,
        max_latitude=20.0,
        min_longitude=120.0,
        max_longitude=125.0,
    )


class TestBoundingBox:
    """Tests for BoundingBox.contains()."""

    def test_point_inside(self, box):
        assert box.contains(14.19, 120.99) is True

    def test_edges_are_inclusive(self, box):
        assert box.contains(10.0, 120.0) is True
        assert box.contains(20.0, 125.0) is True

    def test_point_outside(self, box):
        assert box.contains(9.99, 121.0) is False
        assert box.contains(15.0, 125.01) is False


class TestPhilippinesBounds:
    """Tests for the default USGS query region."""

    def test_covers_manila(self):
        assert PHILIPPINES_BOUNDS.contains(14.6, 121.0) is True

    def test_covers_mindanao(self):
        assert PHILIPPINES_BOUNDS.contains(8.31, 126.55) is True

    def test_excludes_japan(self):
        assert PHILIPPINES_BOUNDS.contains(35.7, 139.7) is False


class TestCalculateDistance:
    """Tests for calculate_distance()."""

    def test_same_point(self):
        assert calculate_distance(14.19, 120.99, 14.19, 120.99) == 0

    def test_manila_to_cebu(self):
        # Roughly 570 km
        distance = calculate_distance(14.5995, 120.9842, 10.3157, 123.8854)
        assert 550 < distance < 590

    def test_one_degree_of_latitude(self):
        assert calculate_distance(10.0, 120.0, 11.0, 120.0) == pytest.approx(111.2, abs=0.5)
