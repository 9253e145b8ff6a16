from __future__ import annotations

import math
from pathlib import Path
from typing import List, Sequence

import plotly.graph_objects as go

from conic_sim.core.prediction import PathSegment
from conic_sim.simulation.engine import SimulationLog


def _primary_mesh(radius: float, n_lat: int = 20, n_lon: int = 40):
    # Sphere mesh (parametric) for the top-level primary
    lats = [(-math.pi / 2) + i * (math.pi / (n_lat - 1)) for i in range(n_lat)]
    lons = [(-math.pi) + j * (2 * math.pi / (n_lon - 1)) for j in range(n_lon)]

    x = [[radius * math.cos(lat) * math.cos(lon) for lon in lons] for lat in lats]
    y = [[radius * math.cos(lat) * math.sin(lon) for lon in lons] for lat in lats]
    z = [[radius * math.sin(lat) for _lon in lons] for lat in lats]
    return x, y, z


def _layout(fig: go.Figure, title: str) -> None:
    fig.update_layout(
        title=title,
        scene=dict(xaxis_title="X", yaxis_title="Y", zaxis_title="Z", aspectmode="data"),
        margin=dict(l=0, r=0, t=40, b=0),
        legend=dict(orientation="h"),
    )


def track_figure(log: SimulationLog, primary_radius: float = 0.5) -> go.Figure:
    """
    Static 3D scene:
      - primary sphere
      - recorded track for each body
      - last position marker for each body
    """
    fig = go.Figure()

    if primary_radius > 0:
        px, py, pz = _primary_mesh(primary_radius)
        fig.add_trace(go.Surface(x=px, y=py, z=pz, showscale=False, opacity=0.35, name="Primary"))

    for body_id, samples in log.body_positions.items():
        xs = [r[0] for (_t, r) in samples]
        ys = [r[1] for (_t, r) in samples]
        zs = [r[2] for (_t, r) in samples]

        fig.add_trace(go.Scatter3d(x=xs, y=ys, z=zs, mode="lines", name=f"{body_id} track"))
        fig.add_trace(go.Scatter3d(
            x=[xs[-1]], y=[ys[-1]], z=[zs[-1]],
            mode="markers",
            name=f"{body_id} now",
            marker=dict(size=5),
        ))

    _layout(fig, "Patched-Conic Playback")
    return fig


def path_figure(segments: Sequence[PathSegment], label: str = "path") -> go.Figure:
    """Predicted path, one trace per conic segment; opacity follows prominence."""
    fig = go.Figure()
    for idx, seg in enumerate(segments):
        primary = seg.transition.primary_id if seg.transition is not None else "primary"
        fig.add_trace(go.Scatter3d(
            x=[p[0] for p in seg.points],
            y=[p[1] for p in seg.points],
            z=[p[2] for p in seg.points],
            mode="lines",
            opacity=seg.prominence,
            name=f"{label} #{idx} ({primary})",
        ))
    _layout(fig, f"Predicted Path: {label}")
    return fig


def _write(fig: go.Figure, out_html: str) -> str:
    Path(out_html).parent.mkdir(parents=True, exist_ok=True)
    fig.write_html(out_html, auto_open=False)
    return out_html


def render_static_scene(log: SimulationLog, out_html: str = "out/scene.html", primary_radius: float = 0.5) -> str:
    return _write(track_figure(log, primary_radius), out_html)


def render_predicted_paths(paths: List[List[PathSegment]], labels: List[str], out_html: str = "out/paths.html") -> str:
    if len(paths) != len(labels):
        raise ValueError("paths and labels must have the same length.")
    fig = go.Figure()
    for segments, label in zip(paths, labels):
        for trace in path_figure(segments, label).data:
            fig.add_trace(trace)
    _layout(fig, "Predicted Paths")
    return _write(fig, out_html)
