"""
Exact geometry kernel for terrain surfaces.

All coordinates are stored as ``fractions.Fraction`` so that orientation
tests, ray intersections and plane lifts never round. This module provides:
- 2D/3D points and vectors
- Facet planes with a horizontal 2D chart
- Rays, segments and the ray/segment intersection
- The orientation predicate
"""

from enum import IntEnum
from fractions import Fraction
from numbers import Integral
from typing import NamedTuple, Optional, Union

import numpy as np

from .errors import GeometryError


def to_exact(value) -> Fraction:
    """
    Convert a coordinate to an exact rational.

    Integers and decimal strings convert without loss; floats convert to
    the exact binary value they hold.

    Args:
        value: int, float, numpy scalar, decimal string or Fraction

    Returns:
        Fraction equal to the input
    """
    if isinstance(value, Fraction):
        return value
    if isinstance(value, (Integral, np.integer)):
        return Fraction(int(value))
    if isinstance(value, str):
        return Fraction(value.strip())
    return Fraction(float(value))


class Orientation(IntEnum):
    """Turn direction of an ordered triple of 2D points."""
    RIGHT_TURN = -1
    COLLINEAR = 0
    LEFT_TURN = 1


class Point2(NamedTuple):
    x: Fraction
    y: Fraction


class Point3(NamedTuple):
    x: Fraction
    y: Fraction
    z: Fraction

    def xy(self) -> Point2:
        """Project onto the horizontal plane."""
        return Point2(self.x, self.y)

    def translated(self, v: "Vector3") -> "Point3":
        return Point3(self.x + v.x, self.y + v.y, self.z + v.z)

    @classmethod
    def from_coords(cls, coords) -> "Point3":
        x, y, z = coords
        return cls(to_exact(x), to_exact(y), to_exact(z))


class Vector2(NamedTuple):
    x: Fraction
    y: Fraction

    @classmethod
    def between(cls, p: Point2, q: Point2) -> "Vector2":
        """Vector from p to q."""
        return cls(q.x - p.x, q.y - p.y)

    def dot(self, other: "Vector2") -> Fraction:
        return self.x * other.x + self.y * other.y

    def cross(self, other: "Vector2") -> Fraction:
        """z-component of the 3D cross product."""
        return self.x * other.y - self.y * other.x

    def squared_length(self) -> Fraction:
        return self.dot(self)

    def is_zero(self) -> bool:
        return self.x == 0 and self.y == 0


class Vector3(NamedTuple):
    x: Fraction
    y: Fraction
    z: Fraction

    @classmethod
    def between(cls, p: Point3, q: Point3) -> "Vector3":
        """Vector from p to q."""
        return cls(q.x - p.x, q.y - p.y, q.z - p.z)

    def xy(self) -> Vector2:
        return Vector2(self.x, self.y)

    def dot(self, other: "Vector3") -> Fraction:
        return self.x * other.x + self.y * other.y + self.z * other.z

    def cross(self, other: "Vector3") -> "Vector3":
        return Vector3(
            self.y * other.z - self.z * other.y,
            self.z * other.x - self.x * other.z,
            self.x * other.y - self.y * other.x,
        )


class Plane3(NamedTuple):
    """Plane ``a*x + b*y + c*z + d = 0``."""
    a: Fraction
    b: Fraction
    c: Fraction
    d: Fraction

    @classmethod
    def through(cls, p: Point3, q: Point3, r: Point3) -> "Plane3":
        """
        Plane through three points.

        The normal is ``(q - p) x (r - p)``, so a counter-clockwise triangle
        seen from above gets an upward normal (c > 0).
        """
        normal = Vector3.between(p, q).cross(Vector3.between(p, r))
        d = -(normal.x * p.x + normal.y * p.y + normal.z * p.z)
        return cls(normal.x, normal.y, normal.z, d)

    def orthogonal_vector(self) -> Vector3:
        return Vector3(self.a, self.b, self.c)

    def has_on(self, p: Point3) -> bool:
        return self.a * p.x + self.b * p.y + self.c * p.z + self.d == 0

    def to_2d(self, p: Point3) -> Point2:
        """Chart coordinates of a point: its horizontal projection."""
        return Point2(p.x, p.y)

    def to_3d(self, p: Point2) -> Point3:
        """Lift chart coordinates back onto the plane."""
        if self.c == 0:
            raise GeometryError(f"cannot lift {p} onto vertical plane {self}")
        z = Fraction(-(self.a * p.x + self.b * p.y + self.d)) / self.c
        return Point3(p.x, p.y, z)


class Ray2(NamedTuple):
    source: Point2
    direction: Vector2

    def point_at(self, t: Fraction) -> Point2:
        return Point2(self.source.x + t * self.direction.x,
                      self.source.y + t * self.direction.y)


class Segment2(NamedTuple):
    source: Point2
    target: Point2


def orientation(p: Point2, q: Point2, r: Point2) -> Orientation:
    """
    Exact orientation of the triple (p, q, r).

    Returns LEFT_TURN when r lies left of the directed line p->q,
    RIGHT_TURN when it lies right, COLLINEAR otherwise.
    """
    det = Vector2.between(p, q).cross(Vector2.between(p, r))
    if det > 0:
        return Orientation.LEFT_TURN
    if det < 0:
        return Orientation.RIGHT_TURN
    return Orientation.COLLINEAR


def intersect_ray_segment(ray: Ray2,
                          segment: Segment2) -> Optional[Union[Point2, Segment2]]:
    """
    Intersect a ray with a closed segment.

    Args:
        ray: Ray with a non-zero direction
        segment: Segment, possibly degenerate

    Returns:
        None when they do not meet, the single common point, or the common
        sub-segment when the segment lies on the ray's supporting line.
    """
    if ray.direction.is_zero():
        raise GeometryError(f"ray {ray} has no direction")

    d = ray.direction
    e = Vector2.between(segment.source, segment.target)
    w = Vector2.between(ray.source, segment.source)

    if e.is_zero():
        # Degenerate segment: a point on the ray or nothing
        if w.cross(d) == 0 and w.dot(d) >= 0:
            return segment.source
        return None

    denom = d.cross(e)
    if denom != 0:
        t = Fraction(w.cross(e)) / denom
        u = Fraction(w.cross(d)) / denom
        if t >= 0 and 0 <= u <= 1:
            return ray.point_at(t)
        return None

    if w.cross(d) != 0:
        return None  # parallel, disjoint lines

    # Collinear: intersect parameter intervals along the ray
    dd = Fraction(d.squared_length())
    t_source = w.dot(d) / dd
    t_target = Vector2.between(ray.source, segment.target).dot(d) / dd
    hi = max(t_source, t_target)
    if hi < 0:
        return None
    lo = max(Fraction(0), min(t_source, t_target))
    if lo == hi:
        return ray.point_at(lo)
    return Segment2(ray.point_at(lo), ray.point_at(hi))
