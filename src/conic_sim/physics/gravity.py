# Two-body gravity and Kepler's equation

from __future__ import annotations

import math

from conic_sim.core.frames import Vector3, norm, scale
from conic_sim.physics.newton import newton_solve


def wrap_to_2pi(angle_rad: float) -> float:
    """Wrap angle to [0, 2π)."""
    two_pi = 2.0 * math.pi
    return angle_rad % two_pi


def wrap_to_pi(angle_rad: float) -> float:
    """Wrap angle to (-π, π]."""
    a = wrap_to_2pi(angle_rad)
    if a > math.pi:
        a -= 2.0 * math.pi
    return a


def gravitational_acceleration(mu: float, rel_position: Vector3) -> Vector3:
    """
    a = -mu * r_hat / |r|^2 for a point at rel_position from the primary.
    """
    r = norm(rel_position)
    return scale(rel_position, -mu / (r ** 3))


def solve_keplers_equation(M_rad: float, e: float) -> float:
    """
    Solve Kepler's equation for elliptic orbits:
        M = E - e sin(E)
    using Newton-Raphson from E0 = π.

    Args:
        M_rad: Mean anomaly (rad)
        e: eccentricity (0 <= e < 1)

    Returns:
        E_rad: Eccentric anomaly (rad), in [0, 2π)
    """
    if not (0.0 <= e < 1.0):
        raise ValueError("Elliptic Kepler solver requires 0 <= e < 1.")

    M = wrap_to_2pi(M_rad)
    E = newton_solve(
        lambda E: E - e * math.sin(E) - M,
        lambda E: 1.0 - e * math.cos(E),
        math.pi,
    )
    return wrap_to_2pi(E)


def solve_hyperbolic_keplers_equation(M_rad: float, e: float) -> float:
    """
    Solve the hyperbolic Kepler equation:
        M = e sinh(H) - H

    The equation is odd in H, so it is solved for |M| and the sign restored.
    The guess is π, or asinh(|M|/e) once that is larger, which keeps the
    first Newton step from overflowing sinh for large mean anomalies.
    """
    if e <= 1.0:
        raise ValueError("Hyperbolic Kepler solver requires e > 1.")

    M = abs(M_rad)
    H0 = max(math.pi, math.asinh(M / e))
    H = newton_solve(
        lambda H: e * math.sinh(H) - H - M,
        lambda H: e * math.cosh(H) - 1.0,
        H0,
    )
    return math.copysign(H, M_rad)
