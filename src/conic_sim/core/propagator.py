"""
Patched-conic propagation of simulated bodies.

Each tick a body is integrated with semi-implicit Euler under the gravity of
its current primary, then checked for sphere-of-influence crossings. A
crossing re-derives the body's conic about the new primary.

Limitation: a TransitionRecord holds the secondary's conic as it was at
capture. If that secondary is later mirrored by apply_bounds, bodies it
had already captured keep following (and exit-testing against) the old
conic until they leave its SOI.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Optional, Sequence, Tuple

from conic_sim.core.frames import Vector3, ZERO, add, distance, norm, scale, sub
from conic_sim.objects.body import Primary, SecondarySnapshot, SimulatedBody
from conic_sim.objects.regime import Captured, Free, Regime, TransitionRecord
from conic_sim.physics.orbit import OrbitConic

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class TransitionEvent:
    """An SOI crossing detected during a tick."""
    body_id: str
    kind: str  # "enter" or "exit"
    primary_id: str
    t_s: float


def primary_state(regime: Regime, t_s: float) -> Tuple[Vector3, Vector3]:
    """Position/velocity of the body's current primary in the top-level frame."""
    if isinstance(regime, Captured):
        rec = regime.transition
        return rec.primary_position_at(t_s), rec.primary_velocity_at(t_s)
    return ZERO, ZERO


def derive_free_conic(position: Vector3, velocity: Vector3, primary: Primary, t_s: float) -> OrbitConic:
    return primary.derive(position, velocity, primary.mass, t_s)


def derive_captured_conic(
    position: Vector3,
    velocity: Vector3,
    secondary: SecondarySnapshot,
    primary: Primary,
    t_s: float,
) -> Tuple[OrbitConic, TransitionRecord]:
    """
    Conic of a body relative to a secondary, plus the transition record.
    position/velocity are in the top-level frame.
    """
    rel_pos = sub(position, secondary.position_at_time(t_s))
    rel_vel = sub(velocity, secondary.velocity_at_time(t_s))
    conic = primary.derive(rel_pos, rel_vel, secondary.mass, t_s)
    record = TransitionRecord(
        primary_id=secondary.body_id,
        primary_conic=secondary.conic,
        primary_mass=secondary.mass,
        soi_radius=secondary.soi_radius,
        entry_time=t_s,
    )
    return conic, record


def acceleration(body: SimulatedBody, position: Vector3, t_s: float) -> Vector3:
    """
    Gravitational acceleration of a body at position (top-level frame).

    Captured bodies feel their secondary's pull on the relative position
    plus the secondary's own acceleration, so the relative motion follows
    the captured conic.
    """
    regime = body.regime
    if isinstance(regime, Captured):
        rec = regime.transition
        center = rec.primary_position_at(t_s)
        pull = body.conic.gravitational_acceleration(sub(position, center))
        frame = rec.primary_conic.gravitational_acceleration(center)
        return add(pull, frame)
    return body.conic.gravitational_acceleration(position)


def integrate(body: SimulatedBody, dt: float, t_s: float) -> None:
    """
    Semi-implicit Euler: position first, then velocity from the new position.
    t_s is the simulated time at the end of the step.
    """
    body.position = add(body.position, scale(body.velocity, dt))
    body.velocity = add(body.velocity, scale(acceleration(body, body.position, t_s), dt))


def rederive(body: SimulatedBody, primary: Primary, t_s: float) -> None:
    """Rebuild the body's conic from its live state, keeping its regime."""
    regime = body.regime
    if isinstance(regime, Captured):
        rec = regime.transition
        center, center_vel = primary_state(regime, t_s)
        body.conic = primary.derive(
            sub(body.position, center), sub(body.velocity, center_vel), rec.primary_mass, t_s,
        )
    else:
        body.conic = derive_free_conic(body.position, body.velocity, primary, t_s)


def check_transitions(
    body: SimulatedBody,
    t_s: float,
    secondaries: Sequence[SecondarySnapshot],
    primary: Primary,
) -> Optional[TransitionEvent]:
    """
    Apply at most one SOI transition to the body at time t_s.

    Captured bodies may only exit; free bodies may only enter. Secondaries
    are read from the per-tick snapshot, never from live bodies.
    """
    regime = body.regime

    if isinstance(regime, Captured):
        rec = regime.transition
        if distance(body.position, rec.primary_position_at(t_s)) > rec.soi_radius:
            body.conic = derive_free_conic(body.position, body.velocity, primary, t_s)
            body.regime = Free()
            logger.info("Body %s left SOI of %s at t=%.3f", body.body_id, rec.primary_id, t_s)
            return TransitionEvent(body.body_id, "exit", rec.primary_id, t_s)
        return None

    for secondary in secondaries:
        if secondary.body_id == body.body_id:
            continue
        if distance(body.position, secondary.position_at_time(t_s)) < secondary.soi_radius:
            conic, record = derive_captured_conic(body.position, body.velocity, secondary, primary, t_s)
            body.conic = conic
            body.regime = Captured(record)
            logger.info("Body %s entered SOI of %s at t=%.3f", body.body_id, secondary.body_id, t_s)
            return TransitionEvent(body.body_id, "enter", secondary.body_id, t_s)
    return None


def apply_bounds(body: SimulatedBody, primary: Primary, t_s: float) -> bool:
    """
    Mirror a body that strayed beyond the primary's bounds radius back across
    the primary. Returns True if the body was mirrored.

    Position is negated on the mirror axis and velocity on the other two
    axes, so the radial rate r·v changes sign and the body heads back in.
    """
    if norm(body.position) <= primary.bounds_radius:
        return False

    axis = primary.mirror_axis
    pos = list(body.position)
    vel = [-v for v in body.velocity]
    pos[axis] = -pos[axis]
    vel[axis] = body.velocity[axis]
    body.position = (pos[0], pos[1], pos[2])
    body.velocity = (vel[0], vel[1], vel[2])
    rederive(body, primary, t_s)
    logger.warning("Body %s out of bounds at t=%.3f; mirrored on axis %d", body.body_id, t_s, axis)
    return True


def step(
    body: SimulatedBody,
    dt: float,
    t_s: float,
    secondaries: Sequence[SecondarySnapshot],
    primary: Primary,
) -> Optional[TransitionEvent]:
    """
    Advance one body by dt to simulated time t_s: integrate, check SOI
    crossings, then apply the out-of-bounds mirror.
    """
    integrate(body, dt, t_s)
    event = check_transitions(body, t_s, secondaries, primary)
    apply_bounds(body, primary, t_s)
    return event
