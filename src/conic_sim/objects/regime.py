from __future__ import annotations

from dataclasses import dataclass
from typing import Union

from conic_sim.core.frames import Vector3
from conic_sim.physics.orbit import OrbitConic


@dataclass(frozen=True)
class TransitionRecord:
    """
    Bookkeeping for a body captured by a secondary's sphere of influence.

    primary_conic is the secondary's own conic about the top-level primary,
    so the secondary (and anything orbiting it) can be placed in the
    top-level primary's frame at any simulated time.
    """
    primary_id: str
    primary_conic: OrbitConic
    primary_mass: float
    soi_radius: float
    entry_time: float

    def primary_position_at(self, t_s: float) -> Vector3:
        return self.primary_conic.position_at_time(t_s)

    def primary_velocity_at(self, t_s: float) -> Vector3:
        return self.primary_conic.velocity_at_time(t_s)


@dataclass(frozen=True)
class Free:
    """Orbiting the top-level primary."""


@dataclass(frozen=True)
class Captured:
    """Orbiting a secondary body inside its sphere of influence."""
    transition: TransitionRecord

    @property
    def primary_id(self) -> str:
        return self.transition.primary_id

    @property
    def entry_time(self) -> float:
        return self.transition.entry_time


Regime = Union[Free, Captured]
