from __future__ import annotations

import math
from dataclasses import dataclass, field
from typing import Optional

from conic_sim.core.constants import (
    GRAVITATIONAL_CONSTANT,
    DEFAULT_BOUNDS_RADIUS,
)
from conic_sim.core.frames import Vector3, norm
from conic_sim.objects.regime import Captured, Free, Regime, TransitionRecord
from conic_sim.physics.orbit import OrbitConic


@dataclass(frozen=True)
class Primary:
    """
    The top-level gravitating body, fixed at the origin.

    bounds_radius: distance beyond which bodies are mirrored back
    mirror_axis: position/velocity axis negated by the mirror (0=x, 1=y, 2=z)
    """
    primary_id: str
    mass: float
    reference_normal: Vector3 = (0.0, 0.0, 1.0)
    bounds_radius: float = DEFAULT_BOUNDS_RADIUS
    mirror_axis: int = 0
    gravitational_constant: float = GRAVITATIONAL_CONSTANT

    def __post_init__(self):
        if not self.primary_id.strip():
            raise ValueError("Primary ID cannot be empty or whitespace.")
        if not (self.mass > 0.0 and math.isfinite(self.mass)):
            raise ValueError(f"Primary mass must be positive and finite. Got: {self.mass}")
        if norm(self.reference_normal) == 0.0:
            raise ValueError("Reference normal cannot be the zero vector.")
        if not self.bounds_radius > 0.0:
            raise ValueError(f"Bounds radius must be positive. Got: {self.bounds_radius}")
        if self.mirror_axis not in (0, 1, 2):
            raise ValueError(f"Mirror axis must be 0, 1 or 2. Got: {self.mirror_axis}")
        if not self.gravitational_constant > 0.0:
            raise ValueError(f"Gravitational constant must be positive. Got: {self.gravitational_constant}")

    @property
    def mu(self) -> float:
        return self.gravitational_constant * self.mass

    def derive(self, position: Vector3, velocity: Vector3, mass: float, epoch: float) -> OrbitConic:
        """Conic about a body of the given mass, in this primary's reference plane."""
        return OrbitConic.from_initial(
            position, velocity, mass, self.reference_normal,
            gravitational_constant=self.gravitational_constant,
            epoch=epoch,
        )


@dataclass(frozen=True)
class SecondarySnapshot:
    """Read-only view of a secondary body taken once per tick."""
    body_id: str
    conic: OrbitConic
    mass: float
    soi_radius: float

    def position_at_time(self, t_s: float) -> Vector3:
        return self.conic.position_at_time(t_s)

    def velocity_at_time(self, t_s: float) -> Vector3:
        return self.conic.velocity_at_time(t_s)


@dataclass
class SimulatedBody:
    """
    A body advanced every tick by the propagator.

    position/velocity are always in the top-level primary's fixed frame.
    mass and soi_radius are set only for bodies that can capture others.
    """
    body_id: str
    name: str
    position: Vector3
    velocity: Vector3
    conic: OrbitConic
    regime: Regime = field(default_factory=Free)
    mass: Optional[float] = None
    soi_radius: Optional[float] = None

    def __post_init__(self):
        if not self.body_id.strip():
            raise ValueError("Body ID cannot be empty or whitespace.")
        if not self.name.strip():
            raise ValueError("Body name cannot be empty or whitespace.")
        if self.mass is not None and not self.mass > 0.0:
            raise ValueError(f"Body mass must be positive. Got: {self.mass}")
        if self.soi_radius is not None and not self.soi_radius > 0.0:
            raise ValueError(f"SOI radius must be positive. Got: {self.soi_radius}")

    @classmethod
    def launch(
        cls,
        body_id: str,
        name: str,
        position: Vector3,
        velocity: Vector3,
        primary: Primary,
        mass: Optional[float] = None,
        soi_radius: Optional[float] = None,
        epoch: float = 0.0,
    ) -> "SimulatedBody":
        """Create a Free body with its conic about the top-level primary."""
        conic = primary.derive(position, velocity, primary.mass, epoch)
        return cls(
            body_id=body_id,
            name=name,
            position=position,
            velocity=velocity,
            conic=conic,
            mass=mass,
            soi_radius=soi_radius,
        )

    @property
    def transition(self) -> Optional[TransitionRecord]:
        if isinstance(self.regime, Captured):
            return self.regime.transition
        return None

    @property
    def is_captured(self) -> bool:
        return isinstance(self.regime, Captured)

    def snapshot(self) -> SecondarySnapshot:
        if self.mass is None or self.soi_radius is None:
            raise ValueError(f"Body {self.body_id} has no mass/SOI radius and cannot be a secondary.")
        return SecondarySnapshot(self.body_id, self.conic, self.mass, self.soi_radius)
