"""Trace and layout descriptors handed to the rendering backend.

Every surface carries two traces: the primary trace (all points, colored by
category, each tagged with ``{"i": row_index, "r": label}``) and an overlay
trace that is empty until a row is highlighted.
"""

from __future__ import annotations

import math
from typing import Any, Dict, Hashable, List, Optional, Sequence

from .models import (
    DisplayBounds,
    HighlightStyle,
    MarkerStyle,
    Point,
    PlotLayout,
    TernaryAxes,
    TernaryPoint,
)
from .rendering import Layout, Trace

PRIMARY_TRACE = 0
OVERLAY_TRACE = 1

SCATTER_TYPE = "scattergl"
TERNARY_TYPE = "scatterternary"


def _num(value: float) -> Optional[float]:
    # plotly treats null as a gap; NaN does not survive JSON
    return value if math.isfinite(value) else None


def point_metadata(labels: Sequence[Hashable]) -> List[Dict[str, Any]]:
    return [{"i": i, "r": label} for i, label in enumerate(labels)]


def _marker(style: MarkerStyle, colors: Sequence[str]) -> Dict[str, Any]:
    return {"size": style.size, "color": list(colors), "cliponaxis": style.clip_on_axis}


def _overlay_marker(style: HighlightStyle) -> Dict[str, Any]:
    return {
        "size": style.size,
        "color": style.color,
        "line": {"width": style.line_width, "color": style.line_color},
        "cliponaxis": False,
    }


def scatter_traces(
    points: Sequence[Point],
    labels: Sequence[Hashable],
    colors: Sequence[str],
    marker: MarkerStyle = MarkerStyle(),
    highlight: HighlightStyle = HighlightStyle(),
) -> List[Trace]:
    """Primary + overlay traces for a cartesian plot."""
    primary = {
        "type": SCATTER_TYPE,
        "mode": "markers",
        "x": [_num(p.x) for p in points],
        "y": [_num(p.y) for p in points],
        "customdata": point_metadata(labels),
        "marker": _marker(marker, colors),
        "hovertemplate": marker.hover_template,
    }
    overlay = {
        "type": SCATTER_TYPE,
        "mode": "markers",
        "x": [],
        "y": [],
        "marker": _overlay_marker(highlight),
        "hoverinfo": "none",
    }
    return [primary, overlay]


def ternary_traces(
    points: Sequence[TernaryPoint],
    labels: Sequence[Hashable],
    colors: Sequence[str],
    marker: MarkerStyle = MarkerStyle(),
    highlight: HighlightStyle = HighlightStyle(),
) -> List[Trace]:
    """Primary + overlay traces for a ternary plot."""
    primary = {
        "type": TERNARY_TYPE,
        "mode": "markers",
        "a": [_num(p.a) for p in points],
        "b": [_num(p.b) for p in points],
        "c": [_num(p.c) for p in points],
        "customdata": point_metadata(labels),
        "marker": {"size": marker.size, "color": list(colors)},
        "hovertemplate": marker.hover_template,
    }
    overlay = {
        "type": TERNARY_TYPE,
        "mode": "markers",
        "a": [],
        "b": [],
        "c": [],
        "marker": _overlay_marker(highlight),
        "hoverinfo": "none",
    }
    return [primary, overlay]


def _margin(values) -> Dict[str, int]:
    left, right, top, bottom = values
    return {"l": left, "r": right, "t": top, "b": bottom}


def _base_layout(title: str, layout: PlotLayout) -> Layout:
    out: Layout = {
        "height": layout.height,
        "showlegend": False,
        "title": title,
        "hovermode": "closest",
        "hoverlabel": {"align": "left", "namelength": -1},
    }
    if layout.width is not None:
        out["width"] = layout.width
        out["autosize"] = False
    else:
        out["autosize"] = True
    return out


def scatter_layout(
    title: str, bounds: DisplayBounds, layout: PlotLayout = PlotLayout()
) -> Layout:
    """Cartesian layout with axes pinned to ``bounds``."""
    out = _base_layout(title, layout)
    out["margin"] = _margin(layout.margin)
    out["xaxis"] = {
        "visible": layout.show_axes,
        "range": list(bounds.x_range),
        "fixedrange": True,
        "autorange": False,
    }
    out["yaxis"] = {
        "visible": layout.show_axes,
        "range": list(bounds.y_range),
        "fixedrange": True,
        "autorange": False,
    }
    return out


def ternary_layout(
    title: str, axes: TernaryAxes = TernaryAxes(), layout: PlotLayout = PlotLayout()
) -> Layout:
    out = _base_layout(title, layout)
    out["margin"] = _margin(layout.ternary_margin)
    out["ternary"] = {
        "sum": axes.total,
        "aaxis": {"title": axes.a_title},
        "baxis": {"title": axes.b_title},
        "caxis": {"title": axes.c_title},
    }
    return out


def plot_config(layout: PlotLayout = PlotLayout()) -> Dict[str, Any]:
    return {"displayModeBar": layout.display_mode_bar}


def overlay_update(point: Any) -> Dict[str, List[List[Optional[float]]]]:
    """Restyle payload placing the overlay on ``point``.

    ``None`` or an invalid point produces the empty overlay.
    """
    if isinstance(point, TernaryPoint):
        if not point.is_valid:
            return empty_overlay_update(ternary=True)
        return {"a": [[point.a]], "b": [[point.b]], "c": [[point.c]]}
    if point is None or not point.is_valid:
        return empty_overlay_update(ternary=False)
    return {"x": [[point.x]], "y": [[point.y]]}


def empty_overlay_update(ternary: bool = False) -> Dict[str, List[List[float]]]:
    if ternary:
        return {"a": [[]], "b": [[]], "c": [[]]}
    return {"x": [[]], "y": [[]]}
