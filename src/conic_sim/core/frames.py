from __future__ import annotations

import math
from typing import Tuple

Vector3 = Tuple[float, float, float]

ZERO: Vector3 = (0.0, 0.0, 0.0)


def dot(a: Vector3, b: Vector3) -> float:
    return a[0]*b[0] + a[1]*b[1] + a[2]*b[2]


def add(a: Vector3, b: Vector3) -> Vector3:
    return (a[0]+b[0], a[1]+b[1], a[2]+b[2])


def sub(a: Vector3, b: Vector3) -> Vector3:
    return (a[0]-b[0], a[1]-b[1], a[2]-b[2])


def scale(v: Vector3, s: float) -> Vector3:
    return (v[0]*s, v[1]*s, v[2]*s)


def cross(a: Vector3, b: Vector3) -> Vector3:
    return (
        a[1]*b[2] - a[2]*b[1],
        a[2]*b[0] - a[0]*b[2],
        a[0]*b[1] - a[1]*b[0],
    )


def norm(a: Vector3) -> float:
    return math.sqrt(dot(a, a))


def normalize(a: Vector3) -> Vector3:
    """Unit vector along a. The zero vector maps to itself."""
    n = norm(a)
    if n == 0.0:
        return ZERO
    return (a[0]/n, a[1]/n, a[2]/n)


def distance(a: Vector3, b: Vector3) -> float:
    return norm(sub(a, b))


def reference_plane_basis(normal: Vector3) -> Tuple[Vector3, Vector3]:
    """
    In-plane (x, y) axes for a reference plane with the given normal.

    x is the world X axis projected onto the plane (world Z when the normal
    is parallel to X); y = normal x x. For normal (0, 0, 1) this is the
    usual equatorial (X, Y) pair.
    """
    n = normalize(normal)
    x = sub((1.0, 0.0, 0.0), scale(n, n[0]))
    if norm(x) < 1e-9:
        x = sub((0.0, 0.0, 1.0), scale(n, n[2]))
    x = normalize(x)
    y = cross(n, x)
    return x, y
