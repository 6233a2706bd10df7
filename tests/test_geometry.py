"""Tests for geometry helpers."""
import math

import pytest

from signlive.core.geometry import Point3D, bearing, distance


class TestDistance:
    def test_planar(self):
        assert distance(Point3D(0, 0), Point3D(3, 4)) == pytest.approx(5.0)

    def test_uses_z(self):
        assert distance(Point3D(0, 0, 0), Point3D(1, 2, 2)) == pytest.approx(3.0)

    def test_symmetric_and_zero(self):
        a, b = Point3D(0.1, 0.2, 0.3), Point3D(-0.4, 0.5, 0.9)
        assert distance(a, b) == distance(b, a)
        assert distance(a, a) == 0.0


class TestBearing:
    def test_axes(self):
        origin = Point3D(0, 0)
        assert bearing(origin, Point3D(1, 0)) == pytest.approx(0.0)
        assert bearing(origin, Point3D(0, 1)) == pytest.approx(math.pi / 2)
        assert bearing(origin, Point3D(0, -1)) == pytest.approx(-math.pi / 2)

    def test_negative_x_axis_is_plus_pi(self):
        assert bearing(Point3D(0, 0), Point3D(-1, 0)) == math.pi
        assert bearing(Point3D(0, 0), Point3D(-1, -0.0)) == math.pi

    def test_ignores_z(self):
        assert bearing(Point3D(0, 0, 0), Point3D(1, 1, 5)) == pytest.approx(math.pi / 4)


def test_point_z_defaults_to_zero():
    assert Point3D(1.0, 2.0).z == 0.0
