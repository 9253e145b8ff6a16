"""
Tests for log export and plotly figures.
"""
import json

import pytest

from conic_sim.core.prediction import predict_path
from conic_sim.core.propagator import TransitionEvent
from conic_sim.objects.body import Primary, SimulatedBody
from conic_sim.objects.regime import Free
from conic_sim.simulation.engine import SimulationLog
from conic_sim.visualization.export_log import export_log_to_json, log_to_dict
from conic_sim.visualization.plotly_viewer import (
    path_figure,
    render_predicted_paths,
    render_static_scene,
    track_figure,
)


@pytest.fixture
def log():
    log = SimulationLog()
    log.record_position("sat", 0.1, (1.0, 2.0, 3.0))
    log.record_position("sat", 0.2, (1.5, 2.5, 3.5))
    log.record_position("moon", 0.1, (10.0, 0.0, 0.0))
    log.record_event(TransitionEvent("sat", "enter", "moon", 0.2))
    return log


@pytest.fixture
def capture_path():
    primary = Primary(primary_id="planet", mass=1000.0, gravitational_constant=1.0)
    moon = SimulatedBody.launch(
        "moon", "Moon", (10.0, 0.0, 0.0), (0.0, 10.0, 0.0), primary,
        mass=10.0, soi_radius=3.0,
    )
    sat = SimulatedBody.launch("sat", "Probe", (8.0, 0.0, 0.0), (0.0, (1000.0 / 8.0) ** 0.5, 0.0), primary)
    return predict_path(sat.conic, Free(), (moon.snapshot(),), primary)


class TestExportLog:
    def test_log_to_dict(self, log):
        data = log_to_dict(log)
        assert data["body_positions"]["sat"] == [
            {"t": 0.1, "r": [1.0, 2.0, 3.0]},
            {"t": 0.2, "r": [1.5, 2.5, 3.5]},
        ]
        assert data["events"][0]["kind"] == "enter"

    def test_export_writes_json(self, log, tmp_path):
        out = tmp_path / "nested" / "simlog.json"
        written = export_log_to_json(log, str(out))

        assert written == str(out)
        data = json.loads(out.read_text(encoding="utf-8"))
        assert set(data["body_positions"]) == {"sat", "moon"}
        assert data["events"] == [
            {"body_id": "sat", "kind": "enter", "primary_id": "moon", "t_s": 0.2}
        ]


class TestPlotlyViewer:
    def test_track_figure_traces(self, log):
        fig = track_figure(log)
        # primary surface + (track, marker) per body
        assert len(fig.data) == 1 + 2 * 2
        assert fig.data[0].type == "surface"

    def test_track_figure_without_primary(self, log):
        fig = track_figure(log, primary_radius=0.0)
        assert len(fig.data) == 4

    def test_path_figure_opacity_follows_depth(self, capture_path):
        fig = path_figure(capture_path, "sat")
        assert len(fig.data) == len(capture_path) == 2
        assert fig.data[0].opacity == 1.0
        assert fig.data[1].opacity == 0.5
        assert "moon" in fig.data[1].name

    def test_render_static_scene(self, log, tmp_path):
        out = render_static_scene(log, str(tmp_path / "scene.html"))
        assert (tmp_path / "scene.html").exists()
        assert out.endswith("scene.html")

    def test_render_predicted_paths(self, capture_path, tmp_path):
        out = tmp_path / "paths.html"
        render_predicted_paths([capture_path], ["sat"], str(out))
        assert out.exists()

    def test_render_predicted_paths_label_mismatch(self, capture_path, tmp_path):
        with pytest.raises(ValueError, match="same length"):
            render_predicted_paths([capture_path], [], str(tmp_path / "x.html"))
