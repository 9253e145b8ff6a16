from __future__ import annotations

import json
from pathlib import Path
from typing import Any, Dict

from conic_sim.simulation.engine import SimulationLog


def log_to_dict(log: SimulationLog) -> Dict[str, Any]:
    """
    Minimal playback data:
      {
        "body_positions": {
          "sat-0": [{"t":0.0,"r":[x,y,z]}, ...],
          ...
        },
        "events": [{"body_id":"sat-0","kind":"enter","primary_id":"moon-0","t_s":1.5}, ...]
      }
    """
    data: Dict[str, Any] = {"body_positions": {}, "events": list(log.events)}

    for body_id, samples in log.body_positions.items():
        data["body_positions"][body_id] = [{"t": t, "r": [r[0], r[1], r[2]]} for (t, r) in samples]

    return data


def export_log_to_json(log: SimulationLog, out_path: str = "out/simlog.json") -> str:
    Path(out_path).parent.mkdir(parents=True, exist_ok=True)
    with open(out_path, "w", encoding="utf-8") as f:
        json.dump(log_to_dict(log), f)

    return out_path
