from __future__ import annotations

from dataclasses import asdict, dataclass, field
from typing import Any, Dict, List, Protocol, Tuple

from conic_sim.core.frames import Vector3
from conic_sim.core.propagator import TransitionEvent
from conic_sim.simulation.scenario import Scenario


class System(Protocol):
    """
    Plugin interface for simulation systems.
    Each system runs per tick and can write to the log.
    """
    name: str

    def on_step(self, t_s: float, dt_s: float, scenario: Scenario, log: "SimulationLog") -> None:
        ...


@dataclass
class SimulationLog:
    """
    Stores outputs from a simulation run.
    Keep it simple and serializable.
    """
    # Positions: body_id -> list of (t, r)
    body_positions: Dict[str, List[Tuple[float, Vector3]]] = field(default_factory=dict)

    # SOI transitions as plain dicts
    events: List[Dict[str, Any]] = field(default_factory=list)

    def record_position(self, body_id: str, t_s: float, r: Vector3) -> None:
        self.body_positions.setdefault(body_id, []).append((t_s, r))

    def record_event(self, event: TransitionEvent) -> None:
        self.events.append(asdict(event))


@dataclass
class Engine:
    """
    Fixed-step simulation engine.
    Deterministic replay: given same scenario + dt + start/end => same output.
    """
    dt_s: float
    systems: List[System] = field(default_factory=list)

    def advance(self, scenario: Scenario, t_s: float, dt_s: float, log: SimulationLog) -> None:
        """
        One tick of length dt_s ending at simulated time t_s.
        External drivers with variable wall-clock steps call this directly.
        """
        if dt_s <= 0:
            raise ValueError("dt_s must be positive.")
        for sys in self.systems:
            sys.on_step(t_s, dt_s, scenario, log)

    def run(self, scenario: Scenario, t_start_s: float, t_end_s: float) -> SimulationLog:
        if self.dt_s <= 0:
            raise ValueError("dt_s must be positive.")
        if t_end_s < t_start_s:
            raise ValueError("t_end_s must be >= t_start_s.")

        log = SimulationLog()
        t = t_start_s

        # Tick loop: systems see the time at the end of each tick
        while t + self.dt_s <= t_end_s + 1e-9:
            t += self.dt_s
            self.advance(scenario, t, self.dt_s, log)

        return log
