"""
Two-body conic derived from an instantaneous state vector.

An OrbitConic is built once per gravitational regime and never mutated.
Angle-taking queries (radius_at, direction_at, position_at, velocity_at)
take an OFFSET theta from the derivation instant; the absolute true anomaly
is initial_true_anomaly + theta. The *_at_anomaly helpers take absolute
anomalies and the *_at_time helpers take simulated time.
"""

from __future__ import annotations

import logging
import math
from dataclasses import dataclass
from typing import Any, Dict, Optional

from conic_sim.core.constants import (
    GRAVITATIONAL_CONSTANT,
    ECCENTRICITY_EPSILON,
    DEGENERATE_EPSILON,
    PARABOLIC_TOLERANCE,
)
from conic_sim.core.frames import (
    Vector3,
    add,
    cross,
    dot,
    norm,
    normalize,
    reference_plane_basis,
    scale,
)
from conic_sim.physics import gravity
from conic_sim.physics.gravity import (
    solve_keplers_equation,
    solve_hyperbolic_keplers_equation,
    wrap_to_2pi,
    wrap_to_pi,
)

logger = logging.getLogger(__name__)


def _acos_ratio(num: float, den: float) -> float:
    """acos(num/den) clamped to the domain; 0 when den is degenerate."""
    if den < DEGENERATE_EPSILON:
        return 0.0
    return math.acos(max(-1.0, min(1.0, num / den)))


def _signed_anomaly(direction: Vector3, e_vec: Vector3, h_vec: Vector3) -> float:
    nu = _acos_ratio(dot(normalize(direction), normalize(e_vec)), 1.0)
    if dot(cross(e_vec, direction), h_vec) < 0.0:
        nu = -nu
    return nu


@dataclass(frozen=True)
class OrbitConic:
    """
    Keplerian conic of a body about a primary.

    Units follow the caller (SI by default for the gravitational constant).
        primary_mass: mass of the gravitating primary
        reference_position: position relative to the primary at derivation
        inclination: [0, π] rad from the reference-plane normal
        ascending_node_longitude, periapsis_argument: [0, 2π) rad
        initial_true_anomaly: (-π, π] rad at derivation
        period: None unless elliptical
        epoch: simulated time of derivation
    """
    primary_mass: float
    gravitational_constant: float
    reference_position: Vector3
    reference_normal: Vector3
    angular_momentum_vector: Vector3
    angular_momentum: float
    inclination: float
    node_vector: Vector3
    ascending_node_longitude: float
    eccentricity_vector: Vector3
    eccentricity: float
    periapsis_argument: float
    initial_true_anomaly: float
    period: Optional[float]
    epoch: float = 0.0

    @classmethod
    def from_initial(
        cls,
        position: Vector3,
        velocity: Vector3,
        primary_mass: float,
        reference_normal: Vector3,
        gravitational_constant: float = GRAVITATIONAL_CONSTANT,
        epoch: float = 0.0,
    ) -> "OrbitConic":
        """
        Derive the conic from position/velocity relative to the primary.

        Zero angular momentum is not supported (radial trajectories);
        near-zero node or eccentricity vectors fall back to 0 angles.
        """
        normal = normalize(reference_normal)

        h_vec = cross(position, velocity)
        h = norm(h_vec)

        inc = _acos_ratio(dot(h_vec, normal), h)

        # Node longitude measured in the reference plane
        n_vec = cross(normal, h_vec)
        n = norm(n_vec)
        plane_x, plane_y = reference_plane_basis(normal)
        raan = _acos_ratio(dot(n_vec, plane_x), n)
        if n >= DEGENERATE_EPSILON and dot(n_vec, plane_y) < 0.0:
            raan = 2.0 * math.pi - raan

        mu = gravitational_constant * primary_mass
        e_vec = add(scale(cross(velocity, h_vec), 1.0 / mu), scale(normalize(position), -1.0))
        e = norm(e_vec)
        circular = e < ECCENTRICITY_EPSILON

        argp = 0.0
        if not circular and n >= DEGENERATE_EPSILON:
            argp = _acos_ratio(dot(n_vec, e_vec), n * e)
            if dot(e_vec, normal) < 0.0:
                argp = 2.0 * math.pi - argp

        nu0 = 0.0 if circular else _signed_anomaly(position, e_vec, h_vec)

        period = None
        if e < 1.0 - PARABOLIC_TOLERANCE:
            a = h * h / (mu * (1.0 - e * e))
            period = 2.0 * math.pi / math.sqrt(mu) * a ** 1.5

        conic = cls(
            primary_mass=primary_mass,
            gravitational_constant=gravitational_constant,
            reference_position=position,
            reference_normal=normal,
            angular_momentum_vector=h_vec,
            angular_momentum=h,
            inclination=inc,
            node_vector=n_vec,
            ascending_node_longitude=wrap_to_2pi(raan),
            eccentricity_vector=e_vec,
            eccentricity=e,
            periapsis_argument=wrap_to_2pi(argp),
            initial_true_anomaly=nu0,
            period=period,
            epoch=epoch,
        )
        logger.debug(
            "Derived conic at t=%.3f: mu=%.6g h=%.6g e=%.6f i=%.4f rad",
            epoch, mu, h, e, inc,
        )
        return conic

    # Derived elements

    @property
    def mu(self) -> float:
        return self.gravitational_constant * self.primary_mass

    @property
    def is_circular(self) -> bool:
        return self.eccentricity < ECCENTRICITY_EPSILON

    @property
    def is_elliptical(self) -> bool:
        return self.eccentricity < 1.0 - PARABOLIC_TOLERANCE

    @property
    def _branch_eccentricity(self) -> float:
        # Near-parabolic conics are evaluated on the hyperbolic branch
        if self.is_elliptical:
            return self.eccentricity
        return max(self.eccentricity, 1.0 + PARABOLIC_TOLERANCE)

    @property
    def semi_latus_rectum(self) -> float:
        return self.angular_momentum ** 2 / self.mu

    @property
    def semi_major_axis(self) -> float:
        """Positive for ellipses, negative for hyperbolae."""
        e = self._branch_eccentricity
        return self.semi_latus_rectum / (1.0 - e * e)

    @property
    def specific_energy(self) -> float:
        return -self.mu / (2.0 * self.semi_major_axis)

    @property
    def periapsis_radius(self) -> float:
        return self.semi_latus_rectum / (1.0 + self.eccentricity)

    @property
    def apoapsis_radius(self) -> Optional[float]:
        if not self.is_elliptical:
            return None
        return self.semi_latus_rectum / (1.0 - self.eccentricity)

    @property
    def asymptote_anomaly(self) -> Optional[float]:
        """Limit on |ν| for hyperbolic conics."""
        if self.is_elliptical:
            return None
        return math.acos(-1.0 / self._branch_eccentricity)

    # Geometry along the conic

    def radius_at(self, theta: float) -> float:
        nu = self.initial_true_anomaly + theta
        return self.semi_latus_rectum / (1.0 + self.eccentricity * math.cos(nu))

    def direction_at(self, theta: float) -> Vector3:
        z_hat = normalize(self.reference_position)
        x_hat = normalize(cross(self.angular_momentum_vector, self.reference_position))
        return add(scale(x_hat, math.sin(theta)), scale(z_hat, math.cos(theta)))

    def position_at(self, theta: float) -> Vector3:
        return scale(self.direction_at(theta), self.radius_at(theta))

    def velocity_at(self, theta: float) -> Vector3:
        """Perifocal velocity: mu/h * (-sin ν P + (e + cos ν) Q)."""
        nu = self.initial_true_anomaly + theta
        p_hat = self.direction_at(-self.initial_true_anomaly)
        q_hat = normalize(cross(self.angular_momentum_vector, p_hat))
        v_pqw = add(
            scale(p_hat, -math.sin(nu)),
            scale(q_hat, self.eccentricity + math.cos(nu)),
        )
        return scale(v_pqw, self.mu / self.angular_momentum)

    def radius_at_anomaly(self, nu: float) -> float:
        return self.radius_at(nu - self.initial_true_anomaly)

    def position_at_anomaly(self, nu: float) -> Vector3:
        return self.position_at(nu - self.initial_true_anomaly)

    def velocity_at_anomaly(self, nu: float) -> Vector3:
        return self.velocity_at(nu - self.initial_true_anomaly)

    def gravitational_acceleration(self, relative_position: Vector3) -> Vector3:
        return gravity.gravitational_acceleration(self.mu, relative_position)

    # Anomaly <-> time

    def time_since_periapsis(self, nu: float) -> float:
        """
        Time from periapsis passage to true anomaly nu (closed form).

        Elliptical results lie in (-T/2, T/2]. Hyperbolic nu must lie inside
        the asymptotes.
        """
        e = self._branch_eccentricity
        h = self.angular_momentum
        mu = self.mu
        half_tan = math.tan(wrap_to_pi(nu) / 2.0)

        if self.is_elliptical:
            E = 2.0 * math.atan(math.sqrt((1.0 - e) / (1.0 + e)) * half_tan)
            M = E - e * math.sin(E)
            return M * h ** 3 / (mu ** 2 * (1.0 - e * e) ** 1.5)

        root_p = math.sqrt(e + 1.0)
        root_m = math.sqrt(e - 1.0) * half_tan
        F = math.log((root_p + root_m) / (root_p - root_m))
        M = e * math.sinh(F) - F
        return M * h ** 3 / (mu ** 2 * (e * e - 1.0) ** 1.5)

    def true_anomaly_at_time(self, t: float) -> float:
        """
        True anomaly in (-π, π] at time t since periapsis passage.
        Solves Kepler's equation (elliptical or hyperbolic).
        """
        e = self._branch_eccentricity

        if self.is_elliptical:
            M = 2.0 * math.pi * t / self.period
            E = solve_keplers_equation(M, e)
            nu = 2.0 * math.atan2(
                math.sqrt(1.0 + e) * math.sin(E / 2.0),
                math.sqrt(1.0 - e) * math.cos(E / 2.0),
            )
            return wrap_to_pi(nu)

        h = self.angular_momentum
        M = self.mu ** 2 / h ** 3 * (e * e - 1.0) ** 1.5 * t
        H = solve_hyperbolic_keplers_equation(M, e)
        return 2.0 * math.atan(math.sqrt((e + 1.0) / (e - 1.0)) * math.tanh(H / 2.0))

    def true_anomaly_at_position(self, position: Vector3) -> float:
        """Signed true anomaly of a point on (or near) the conic; 0 if circular."""
        if self.is_circular:
            return 0.0
        return _signed_anomaly(position, self.eccentricity_vector, self.angular_momentum_vector)

    def anomaly_at_time(self, t_sim: float) -> float:
        """Absolute true anomaly at simulated time t_sim."""
        t_peri = self.time_since_periapsis(self.initial_true_anomaly) + (t_sim - self.epoch)
        return self.true_anomaly_at_time(t_peri)

    def offset_at_time(self, t_sim: float) -> float:
        return self.anomaly_at_time(t_sim) - self.initial_true_anomaly

    def position_at_time(self, t_sim: float) -> Vector3:
        return self.position_at(self.offset_at_time(t_sim))

    def velocity_at_time(self, t_sim: float) -> Vector3:
        return self.velocity_at(self.offset_at_time(t_sim))

    def describe(self, position: Optional[Vector3] = None) -> Dict[str, Any]:
        """
        Elements in display units for info overlays.

        With a live position (relative to this conic's primary) the current
        true anomaly "nu_deg" and time since periapsis "t" are added.
        """
        info = {
            "h": self.angular_momentum,
            "i_deg": math.degrees(self.inclination),
            "e": self.eccentricity,
            "raan_deg": math.degrees(self.ascending_node_longitude),
            "argp_deg": math.degrees(self.periapsis_argument),
            "nu0_deg": math.degrees(self.initial_true_anomaly),
            "a": self.semi_major_axis,
            "period": self.period,
        }
        if position is not None:
            nu = self.true_anomaly_at_position(position)
            info["nu_deg"] = math.degrees(nu)
            info["t"] = self.time_since_periapsis(nu)
        return info


def derive_conic(
    position: Vector3,
    velocity: Vector3,
    primary_mass: float,
    reference_normal: Vector3,
    gravitational_constant: float = GRAVITATIONAL_CONSTANT,
    epoch: float = 0.0,
) -> OrbitConic:
    return OrbitConic.from_initial(
        position, velocity, primary_mass, reference_normal,
        gravitational_constant=gravitational_constant, epoch=epoch,
    )
