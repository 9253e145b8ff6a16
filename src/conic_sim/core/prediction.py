"""
Trajectory preview across SOI boundaries.

The current conic is walked forward in fixed true-anomaly increments. The
first predicted SOI crossing truncates the segment and queues the next
conic (about the new primary) on a worklist, up to max_segments.
"""

from __future__ import annotations

import logging
import math
from dataclasses import dataclass
from typing import List, Optional, Sequence, Tuple

from conic_sim.core.constants import PREDICTION_STEPS, PREDICTION_MAX_SEGMENTS
from conic_sim.core.frames import Vector3, add, distance, norm
from conic_sim.core.propagator import derive_captured_conic, derive_free_conic
from conic_sim.objects.body import Primary, SecondarySnapshot
from conic_sim.objects.regime import Captured, Free, Regime, TransitionRecord
from conic_sim.physics.orbit import OrbitConic

logger = logging.getLogger(__name__)

# Stop this far short of a hyperbola's asymptote
_ASYMPTOTE_MARGIN = 1e-3


@dataclass(frozen=True)
class PathSegment:
    """One conic arc of a predicted path, in the top-level frame."""
    conic: OrbitConic
    transition: Optional[TransitionRecord]
    start_offset: float
    end_offset: float
    start_time: float
    end_time: float
    depth: int
    points: Tuple[Vector3, ...]

    @property
    def validity_range(self) -> Tuple[float, float]:
        return (self.start_offset, self.end_offset)

    @property
    def prominence(self) -> float:
        return 0.5 ** self.depth


_Pending = Tuple[OrbitConic, Regime, float, int]


def _walk_segment(
    conic: OrbitConic,
    regime: Regime,
    secondaries: Sequence[SecondarySnapshot],
    primary: Primary,
    start_time: float,
    depth: int,
    steps: int,
    max_radius: float,
) -> Tuple[PathSegment, Optional[_Pending]]:
    transition = regime.transition if isinstance(regime, Captured) else None
    nu0 = conic.initial_true_anomaly

    start_nu = conic.anomaly_at_time(start_time)
    start_offset = start_nu - nu0
    start_peri = conic.time_since_periapsis(start_nu)
    limit = conic.asymptote_anomaly
    d_theta = 2.0 * math.pi / steps

    points: List[Vector3] = []
    end_offset, end_time = start_offset, start_time
    handoff: Optional[_Pending] = None
    prev_dt = 0.0

    for i in range(steps + 1):
        offset = start_offset + i * d_theta
        nu = nu0 + offset
        if limit is not None and nu >= limit - _ASYMPTOTE_MARGIN:
            break

        dt = conic.time_since_periapsis(nu) - start_peri
        if conic.is_elliptical:
            while dt < prev_dt:
                dt += conic.period
        prev_dt = dt
        t = start_time + dt

        rel = conic.position_at(offset)
        if transition is not None:
            pos = add(transition.primary_position_at(t), rel)
        else:
            pos = rel
        if norm(pos) > max_radius:
            break

        points.append(pos)
        end_offset, end_time = offset, t
        if i == 0:
            continue

        if transition is not None:
            if norm(rel) > transition.soi_radius:
                vel = add(conic.velocity_at(offset), transition.primary_velocity_at(t))
                handoff = (derive_free_conic(pos, vel, primary, t), Free(), t, depth + 1)
                break
        else:
            for secondary in secondaries:
                if distance(pos, secondary.position_at_time(t)) < secondary.soi_radius:
                    new_conic, record = derive_captured_conic(
                        pos, conic.velocity_at(offset), secondary, primary, t,
                    )
                    handoff = (new_conic, Captured(record), t, depth + 1)
                    break
            if handoff is not None:
                break

    segment = PathSegment(
        conic=conic,
        transition=transition,
        start_offset=start_offset,
        end_offset=end_offset,
        start_time=start_time,
        end_time=end_time,
        depth=depth,
        points=tuple(points),
    )
    return segment, handoff


def predict_path(
    conic: OrbitConic,
    regime: Regime,
    secondaries: Sequence[SecondarySnapshot],
    primary: Primary,
    start_time: float = 0.0,
    steps: int = PREDICTION_STEPS,
    max_segments: int = PREDICTION_MAX_SEGMENTS,
    max_radius: Optional[float] = None,
) -> List[PathSegment]:
    """
    Predict the path of a body from start_time, split at SOI crossings.

    Args:
        conic: the body's current conic
        regime: Free() or Captured(record) matching the conic
        secondaries: snapshot of bodies whose SOIs may be entered
        primary: top-level primary (mass and reference plane for re-derived conics)
        start_time: simulated time to start the walk from
        steps: true-anomaly samples per full revolution
        max_segments: cap on the number of conic segments returned
        max_radius: stop a segment beyond this distance (default: primary bounds)

    Returns:
        Ordered list of PathSegment, depth 0 first.
    """
    if steps <= 0:
        raise ValueError("steps must be positive.")
    if max_segments <= 0:
        raise ValueError("max_segments must be positive.")
    if max_radius is None:
        max_radius = primary.bounds_radius

    segments: List[PathSegment] = []
    worklist: List[_Pending] = [(conic, regime, start_time, 0)]

    while worklist and len(segments) < max_segments:
        seg_conic, seg_regime, seg_t, depth = worklist.pop()
        segment, handoff = _walk_segment(
            seg_conic, seg_regime, secondaries, primary, seg_t, depth, steps, max_radius,
        )
        segments.append(segment)
        if handoff is not None:
            worklist.append(handoff)

    logger.debug("Predicted %d path segment(s) from t=%.3f", len(segments), start_time)
    return segments
