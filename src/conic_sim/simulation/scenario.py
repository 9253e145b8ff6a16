from __future__ import annotations

from dataclasses import dataclass, field
from typing import Dict, List, Tuple

from conic_sim.objects.body import Primary, SecondarySnapshot, SimulatedBody

@dataclass
class Scenario:
    """
    Container for all bodies in a simulation run.
    Keep this pure: just data + lookup, no stepping logic.
    Moons can capture satellites; satellites capture nothing.
    """
    name: str
    primary: Primary
    moons: Dict[str, SimulatedBody] = field(default_factory=dict)
    satellites: Dict[str, SimulatedBody] = field(default_factory=dict)

    def _check_unique(self, body_id: str) -> None:
        if body_id in self.moons or body_id in self.satellites:
            raise ValueError(f"Duplicate body ID: {body_id}")

    def add_moon(self, moon: SimulatedBody) -> None:
        self._check_unique(moon.body_id)
        if moon.mass is None or moon.soi_radius is None:
            raise ValueError(f"Moon {moon.body_id} needs a mass and an SOI radius.")
        self.moons[moon.body_id] = moon

    def add_satellite(self, sat: SimulatedBody) -> None:
        self._check_unique(sat.body_id)
        self.satellites[sat.body_id] = sat

    def moon_list(self) -> List[SimulatedBody]:
        return list(self.moons.values())

    def satellite_list(self) -> List[SimulatedBody]:
        return list(self.satellites.values())

    def body_list(self) -> List[SimulatedBody]:
        return self.moon_list() + self.satellite_list()

    def secondary_snapshots(self) -> Tuple[SecondarySnapshot, ...]:
        return tuple(moon.snapshot() for moon in self.moon_list())
