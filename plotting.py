from __future__ import annotations

import math
from typing import List, Optional, Sequence

import numpy as np
import plotly.graph_objects as go

from chart_projector import Axis, ChartSeries, SelectionState, format_value, tooltip_lines
from material_dataset import MaterialDataset

MARKER_SIZE = 12
HOVER_TEMPLATE = "<b>%{fullData.name}</b><br>%{customdata[0]}<br>%{customdata[1]}<extra></extra>"


def nice_ticks(lo: float, hi: float, target: int = 6) -> List[float]:
    """Evenly spaced 1/2/5 x 10^k tick positions covering [lo, hi]."""
    if not (math.isfinite(lo) and math.isfinite(hi)):
        return []
    if hi < lo:
        lo, hi = hi, lo
    if lo == hi:
        pad = abs(lo) * 0.1 or 1.0
        lo, hi = lo - pad, hi + pad
    raw = (hi - lo) / max(target - 1, 1)
    mag = 10 ** math.floor(math.log10(raw))
    step = next(m * mag for m in (1, 2, 5, 10) if m * mag >= raw)
    start = math.floor(lo / step) * step
    stop = math.ceil(hi / step) * step
    count = int(round((stop - start) / step)) + 1
    return [float(v) for v in np.linspace(start, stop, count)]


def tick_labels(ticks: Sequence[float]) -> List[str]:
    return [format_value(t) for t in ticks]


def _axis_layout(title: str, values: Sequence[float]) -> dict:
    layout = dict(title=title, type="linear", zeroline=False)
    ticks = nice_ticks(min(values), max(values)) if values else []
    if ticks:
        layout.update(
            tickmode="array",
            tickvals=ticks,
            ticktext=tick_labels(ticks),
            range=[ticks[0], ticks[-1]],
        )
    return layout


def build_scatter_figure(
    series: Sequence[ChartSeries],
    dataset: MaterialDataset,
    selection: SelectionState,
    height: Optional[int] = 600,
) -> go.Figure:
    """Scatter plot with one single-point trace per material.

    Series whose point is not numeric on both axes are left out; the caller
    decides how to report them.
    """
    plotted = [s for s in series if s.plottable]
    fig = go.Figure()
    for s in plotted:
        fig.add_trace(
            go.Scatter(
                x=[s.x],
                y=[s.y],
                mode="markers",
                name=s.label,
                marker=dict(color=s.color, size=MARKER_SIZE, line=dict(color=s.color, width=1)),
                customdata=[tooltip_lines(s, dataset, selection)],
                hovertemplate=HOVER_TEMPLATE,
            )
        )

    fig.update_layout(
        xaxis=_axis_layout(dataset.axis_title(selection.axis(Axis.X)), [s.x for s in plotted]),
        yaxis=_axis_layout(dataset.axis_title(selection.axis(Axis.Y)), [s.y for s in plotted]),
        showlegend=False,
        hovermode="closest",
        height=height,
        margin=dict(l=60, r=20, t=30, b=60),
    )
    return fig
