from __future__ import annotations

from dataclasses import dataclass

from conic_sim.core.propagator import apply_bounds, check_transitions, integrate
from conic_sim.simulation.scenario import Scenario
from conic_sim.simulation.engine import SimulationLog


@dataclass
class PropagationSystem:
    """
    Advances every body one tick.

    Secondaries are snapshotted before anything moves, and every body is
    integrated before any SOI check, so results do not depend on body order.
    """
    name: str = "propagation"

    def on_step(self, t_s: float, dt_s: float, scenario: Scenario, log: SimulationLog) -> None:
        snapshot = scenario.secondary_snapshots()
        bodies = scenario.body_list()

        for body in bodies:
            integrate(body, dt_s, t_s)

        for sat in scenario.satellite_list():
            event = check_transitions(sat, t_s, snapshot, scenario.primary)
            if event is not None:
                log.record_event(event)

        for body in bodies:
            apply_bounds(body, scenario.primary, t_s)
