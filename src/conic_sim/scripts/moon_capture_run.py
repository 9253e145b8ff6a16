import logging
from pathlib import Path

from conic_sim.core.prediction import predict_path
from conic_sim.simulation.settings import load_scenario
from conic_sim.simulation.engine import Engine
from conic_sim.simulation.systems.propagation_system import PropagationSystem
from conic_sim.simulation.systems.state_recorder import StateRecorderSystem
from conic_sim.visualization.export_log import export_log_to_json
from conic_sim.visualization.plotly_viewer import render_static_scene, render_predicted_paths

logging.basicConfig(level=logging.INFO, format="%(levelname)s %(name)s: %(message)s")

scenario = load_scenario(str(Path(__file__).with_name("moon_capture.json")))

# Preview before anything moves
snapshot = scenario.secondary_snapshots()
paths = [
    predict_path(sat.conic, sat.regime, snapshot, scenario.primary, start_time=0.0)
    for sat in scenario.satellite_list()
]
labels = [sat.body_id for sat in scenario.satellite_list()]

engine = Engine(dt_s=0.01, systems=[PropagationSystem(), StateRecorderSystem()])
log = engine.run(scenario, t_start_s=0.0, t_end_s=60.0)

print("Transitions:")
for event in log.events:
    print(" -", event)

print("Wrote:")
print(" -", render_predicted_paths(paths, labels, out_html="out/moon_capture_paths.html"))
print(" -", render_static_scene(log, out_html="out/moon_capture_scene.html"))
print(" -", export_log_to_json(log, out_path="out/moon_capture_log.json"))
