from __future__ import annotations

from dataclasses import dataclass

from conic_sim.simulation.scenario import Scenario
from conic_sim.simulation.engine import SimulationLog


@dataclass
class StateRecorderSystem:
    name: str = "state_recorder"

    def on_step(self, t_s: float, dt_s: float, scenario: Scenario, log: SimulationLog) -> None:
        for body in scenario.body_list():
            log.record_position(body.body_id, t_s, body.position)
