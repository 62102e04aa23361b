from __future__ import annotations

import math
from pathlib import Path

import plotly.graph_objects as go
from plotly.subplots import make_subplots

from sat_attitude.core.constants import R_EARTH_KM
from sat_attitude.simulation.engine import SimulationLog


def _earth_mesh(radius_km: float = R_EARTH_KM, n_lat: int = 30, n_lon: int = 60):
    # Parametric sphere
    lats = [(-math.pi / 2) + i * (math.pi / (n_lat - 1)) for i in range(n_lat)]
    lons = [(-math.pi) + j * (2 * math.pi / (n_lon - 1)) for j in range(n_lon)]

    x = [[radius_km * math.cos(lat) * math.cos(lon) for lon in lons] for lat in lats]
    y = [[radius_km * math.cos(lat) * math.sin(lon) for lon in lons] for lat in lats]
    z = [[radius_km * math.sin(lat) for _lon in lons] for lat in lats]
    return x, y, z


def render_orbit_track(
    log: SimulationLog,
    out_html: str = "results/orbit_track.html",
    show_earth: bool = True,
) -> str:
    """
    Renders the inertial orbit track over an Earth sphere, with a marker at the
    first sample. Needs a log recorded with a StateRecorderSystem.
    """
    samples = log.sat_positions_eci_km
    if not samples:
        raise ValueError("Log has no recorded positions; run the engine with record_states=True.")

    xs = [r[0] for (_t, r) in samples]
    ys = [r[1] for (_t, r) in samples]
    zs = [r[2] for (_t, r) in samples]

    fig = go.Figure()

    if show_earth:
        ex, ey, ez = _earth_mesh()
        fig.add_trace(go.Surface(x=ex, y=ey, z=ez, showscale=False, opacity=0.35, name="Earth"))

    fig.add_trace(go.Scatter3d(x=xs, y=ys, z=zs, mode="lines", name="track"))
    fig.add_trace(go.Scatter3d(
        x=[xs[0]], y=[ys[0]], z=[zs[0]],
        mode="markers",
        name=f"start {samples[0][0]}",
        marker=dict(size=5),
    ))

    fig.update_layout(
        title="Orbit track (inertial frame)",
        scene=dict(
            xaxis_title="X (km)",
            yaxis_title="Y (km)",
            zaxis_title="Z (km)",
            aspectmode="data",
        ),
        margin=dict(l=0, r=0, t=40, b=0),
        legend=dict(orientation="h"),
    )

    Path(out_html).parent.mkdir(parents=True, exist_ok=True)
    fig.write_html(out_html, auto_open=False)
    return out_html


def render_angle_timeline(
    log: SimulationLog,
    out_html: str = "results/angle_timeline.html",
) -> str:
    """
    Sun/Earth elevation (top) and azimuth (bottom) against time, with the
    ground-station access windows shaded.
    """
    if not log.sun_angles:
        raise ValueError("Log has no angle samples to plot.")

    sun_t = [s.epoch.to_datetime() for s in log.sun_angles]
    earth_t = [s.epoch.to_datetime() for s in log.earth_angles]

    fig = make_subplots(rows=2, cols=1, shared_xaxes=True, subplot_titles=("Elevation", "Azimuth"))

    fig.add_trace(go.Scatter(x=sun_t, y=[s.elevation_deg for s in log.sun_angles], name="Sun elevation"), row=1, col=1)
    fig.add_trace(go.Scatter(x=earth_t, y=[s.elevation_deg for s in log.earth_angles], name="Earth elevation"), row=1, col=1)
    fig.add_trace(go.Scatter(x=sun_t, y=[s.subsolar_deg for s in log.sun_angles], name="Subsolar angle", line=dict(dash="dot")), row=1, col=1)
    fig.add_trace(go.Scatter(x=sun_t, y=[s.azimuth_deg for s in log.sun_angles], name="Sun azimuth", mode="markers", marker=dict(size=3)), row=2, col=1)
    fig.add_trace(go.Scatter(x=earth_t, y=[s.azimuth_deg for s in log.earth_angles], name="Earth azimuth", mode="markers", marker=dict(size=3)), row=2, col=1)

    for window in log.access_windows:
        fig.add_vrect(
            x0=window.start.to_datetime(),
            x1=window.stop.to_datetime(),
            fillcolor="green",
            opacity=0.2,
            line_width=0,
        )

    fig.update_yaxes(title_text="deg", row=1, col=1)
    fig.update_yaxes(title_text="deg", range=[0, 360], row=2, col=1)
    fig.update_layout(
        title=f"Attitude angles ({len(log.access_windows)} access windows shaded)",
        margin=dict(l=40, r=10, t=60, b=40),
        legend=dict(orientation="h"),
    )

    Path(out_html).parent.mkdir(parents=True, exist_ok=True)
    fig.write_html(out_html, auto_open=False)
    return out_html
