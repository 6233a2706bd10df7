"""
Geometry helpers over 3D landmark points.
"""
import math
from typing import NamedTuple


class Point3D(NamedTuple):
    """A single landmark coordinate. z is 0 when the source is 2D."""
    x: float
    y: float
    z: float = 0.0


def distance(a: Point3D, b: Point3D) -> float:
    """Euclidean distance in 3D."""
    return math.sqrt((a.x - b.x) ** 2 + (a.y - b.y) ** 2 + (a.z - b.z) ** 2)


def bearing(a: Point3D, b: Point3D) -> float:
    """
    Angle of the vector b - a projected onto the x/y plane.

    Returns:
        radians in (-pi, pi]
    """
    angle = math.atan2(b.y - a.y, b.x - a.x)
    if angle == -math.pi:
        return math.pi
    return angle
