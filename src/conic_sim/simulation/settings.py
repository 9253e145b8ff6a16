"""
Initial conditions loaded from plain JSON.

    {
      "name": "Moon capture",
      "primary": {"id": "planet", "mass": 3.1e11, "reference_normal": [0, 1, 0],
                  "bounds_radius": 20.0, "mirror_axis": 0},
      "moons": [{"id": "moon-0", "name": "Moon", "position": [...], "velocity": [...],
                 "mass": 3.1e10, "soi_radius": 1.0}, ...],
      "satellites": [{"id": "sat-0", "name": "Probe", "position": [...], "velocity": [...]}, ...]
    }

"gravitational_constant" is optional on the primary.
"""

from __future__ import annotations

import json
import math
from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional

from conic_sim.core.constants import (
    GRAVITATIONAL_CONSTANT,
    DEFAULT_BOUNDS_RADIUS,
    DEFAULT_SOI_RADIUS,
)
from conic_sim.core.frames import Vector3
from conic_sim.objects.body import Primary, SimulatedBody
from conic_sim.simulation.scenario import Scenario


def _vector(value: Any, field_name: str) -> Vector3:
    if not isinstance(value, (list, tuple)) or len(value) != 3:
        raise ValueError(f"{field_name} must be a list of 3 numbers. Got: {value!r}")
    try:
        x, y, z = (float(c) for c in value)
    except (TypeError, ValueError):
        raise ValueError(f"{field_name} must be a list of 3 numbers. Got: {value!r}") from None
    if not all(math.isfinite(c) for c in (x, y, z)):
        raise ValueError(f"{field_name} must be finite. Got: {value!r}")
    return (x, y, z)


@dataclass(frozen=True)
class BodySettings:
    body_id: str
    name: str
    position: Vector3
    velocity: Vector3
    mass: Optional[float] = None
    soi_radius: Optional[float] = None

    def __post_init__(self):
        if not self.body_id.strip():
            raise ValueError("Body ID cannot be empty or whitespace.")
        if self.mass is not None and not self.mass > 0.0:
            raise ValueError(f"Mass of {self.body_id} must be positive. Got: {self.mass}")
        if self.soi_radius is not None and not self.soi_radius > 0.0:
            raise ValueError(f"SOI radius of {self.body_id} must be positive. Got: {self.soi_radius}")


@dataclass(frozen=True)
class Settings:
    name: str
    primary: Primary
    moons: List[BodySettings] = field(default_factory=list)
    satellites: List[BodySettings] = field(default_factory=list)


def _body_from_dict(data: Dict[str, Any], kind: str, index: int) -> BodySettings:
    where = f"{kind}[{index}]"
    if "id" not in data:
        raise ValueError(f"{where}.id is required.")
    body_id = str(data["id"])
    mass = data.get("mass")
    soi = data.get("soi_radius")
    if kind == "moons":
        if mass is None:
            raise ValueError(f"{where}.mass is required for moons.")
        soi = DEFAULT_SOI_RADIUS if soi is None else soi
    return BodySettings(
        body_id=body_id,
        name=str(data.get("name", body_id)),
        position=_vector(data.get("position"), f"{where}.position"),
        velocity=_vector(data.get("velocity"), f"{where}.velocity"),
        mass=None if mass is None else float(mass),
        soi_radius=None if soi is None else float(soi),
    )


def settings_from_dict(data: Dict[str, Any]) -> Settings:
    if "primary" not in data:
        raise ValueError("primary is required.")
    p = data["primary"]
    if "mass" not in p:
        raise ValueError("primary.mass is required.")

    primary = Primary(
        primary_id=str(p.get("id", "primary")),
        mass=float(p["mass"]),
        reference_normal=_vector(p.get("reference_normal", [0.0, 0.0, 1.0]), "primary.reference_normal"),
        bounds_radius=float(p.get("bounds_radius", DEFAULT_BOUNDS_RADIUS)),
        mirror_axis=int(p.get("mirror_axis", 0)),
        gravitational_constant=float(p.get("gravitational_constant", GRAVITATIONAL_CONSTANT)),
    )

    return Settings(
        name=str(data.get("name", "Scenario")),
        primary=primary,
        moons=[_body_from_dict(m, "moons", i) for i, m in enumerate(data.get("moons", []))],
        satellites=[_body_from_dict(s, "satellites", i) for i, s in enumerate(data.get("satellites", []))],
    )


def load_settings(path: str) -> Settings:
    with open(path, "r", encoding="utf-8") as f:
        return settings_from_dict(json.load(f))


def build_scenario(settings: Settings) -> Scenario:
    """Instantiate every body with its initial conic about the primary."""
    scenario = Scenario(name=settings.name, primary=settings.primary)
    for m in settings.moons:
        scenario.add_moon(SimulatedBody.launch(
            m.body_id, m.name, m.position, m.velocity, settings.primary,
            mass=m.mass, soi_radius=m.soi_radius,
        ))
    for s in settings.satellites:
        scenario.add_satellite(SimulatedBody.launch(
            s.body_id, s.name, s.position, s.velocity, settings.primary,
            mass=s.mass, soi_radius=s.soi_radius,
        ))
    return scenario


def load_scenario(path: str) -> Scenario:
    return build_scenario(load_settings(path))
